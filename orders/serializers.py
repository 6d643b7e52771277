"""
Serializers for orders.
"""
from rest_framework import serializers

from accounts.serializers import UserContactSerializer
from .models import Order


class CartItemSerializer(serializers.Serializer):
    """One cart line in an order creation request."""
    article_id = serializers.CharField(
        max_length=100,
        error_messages={'required': 'Each cart item must include an article_id'}
    )
    warehouse_id = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1)
    name = serializers.CharField(max_length=300, required=False, allow_blank=True)


class OrderCreateSerializer(serializers.Serializer):
    """
    Serializer for creating orders via POST /orders/

    Request format:
    {
        "cart_items": [
            {"article_id": "ABC1", "warehouse_id": 1, "quantity": 2}
        ],
        "total_price": "€160.00",
        "original_total_price": 160,
        "delivery_id": null,
        "customer_info": {"city": "Warszawa"}
    }
    """
    cart_items = CartItemSerializer(many=True)
    total_price = serializers.CharField(
        max_length=64,
        error_messages={
            'required': 'A formatted total_price string is required',
            'blank': 'A formatted total_price string is required',
        }
    )
    original_total_price = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True
    )
    delivery_id = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    customer_info = serializers.DictField(required=False)

    def validate_cart_items(self, value):
        if not value:
            raise serializers.ValidationError('Cart is empty')
        return value


class PriceRequestSerializer(serializers.Serializer):
    """
    Serializer for price requests via POST /orders/ with is_price_request.

    Request format:
    {
        "is_price_request": true,
        "item_id": 12,
        "warehouse_id": 3,
        "quantity": 10,
        "comment": "Need a quote for 10 units"
    }
    """
    item_id = serializers.IntegerField(min_value=1)
    warehouse_id = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1, default=1)
    comment = serializers.CharField(required=False, allow_blank=True, default='')


class OrderSerializer(serializers.ModelSerializer):
    """Order with its line-item snapshot."""
    item_count = serializers.IntegerField(read_only=True)
    is_price_request = serializers.BooleanField(read_only=True)

    class Meta:
        model = Order
        fields = [
            'id', 'status', 'total_price', 'original_total_price',
            'line_items', 'item_count', 'is_price_request',
            'delivery_id', 'comment', 'customer_info',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields


class OrderDetailSerializer(OrderSerializer):
    """Order plus a summary of its most recent payment."""
    payment = serializers.SerializerMethodField()

    class Meta(OrderSerializer.Meta):
        fields = OrderSerializer.Meta.fields + ['payment']
        read_only_fields = fields

    def get_payment(self, obj):
        payment = obj.payments.order_by('-created_at', '-id').first()
        if payment is None:
            return None
        return {
            'id': payment.id,
            'status': payment.status,
            'amount': payment.amount,
            'currency': payment.currency,
            'session_id': payment.session_id,
            'payment_method': payment.payment_method or None,
            'created_at': payment.created_at,
        }


class AdminOrderSerializer(OrderDetailSerializer):
    """Back-office view of an order including the customer's contact info."""
    user = UserContactSerializer(read_only=True)

    class Meta(OrderDetailSerializer.Meta):
        fields = OrderDetailSerializer.Meta.fields + ['user']
        read_only_fields = fields


class OrderStatusUpdateSerializer(serializers.Serializer):
    """Serializer for back-office status changes."""
    status = serializers.ChoiceField(choices=Order.Status.choices)
    delivery_id = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)


class OrderActionSerializer(serializers.Serializer):
    """Customer action on an order; only cancel is supported."""
    action = serializers.ChoiceField(choices=['cancel'])


class RecentOrderSerializer(serializers.ModelSerializer):
    """Dashboard row for the latest orders."""
    customer_name = serializers.CharField(source='user.display_name', read_only=True)
    total_price_formatted = serializers.CharField(source='total_price', read_only=True)

    class Meta:
        model = Order
        fields = ['id', 'customer_name', 'total_price_formatted', 'original_total_price', 'status', 'created_at']
        read_only_fields = fields
