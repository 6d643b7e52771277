"""
Serializers for payments.
"""
from rest_framework import serializers

from .models import Payment


class PaymentSerializer(serializers.ModelSerializer):
    """Back-office view of a payment."""
    order_id = serializers.IntegerField(read_only=True)
    order_status = serializers.CharField(source='order.status', read_only=True)
    amount_display = serializers.CharField(read_only=True)

    class Meta:
        model = Payment
        fields = [
            'id', 'order_id', 'order_status', 'session_id', 'transaction_id',
            'amount', 'amount_display', 'currency', 'status', 'payment_method',
            'p24_email', 'description', 'error_code', 'error_message',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields


class PaymentInitiateSerializer(serializers.Serializer):
    order_id = serializers.IntegerField(min_value=1)


class RefundSerializer(serializers.Serializer):
    """
    Request format:
    {"payment_id": 5, "reason": "Damaged on arrival"}
    or
    {"order_id": 12}
    """
    payment_id = serializers.IntegerField(min_value=1, required=False)
    order_id = serializers.IntegerField(min_value=1, required=False)
    reason = serializers.CharField(required=False, allow_blank=True, max_length=255)

    def validate(self, attrs):
        if not attrs.get('payment_id') and not attrs.get('order_id'):
            raise serializers.ValidationError('Either payment_id or order_id is required')
        return attrs
