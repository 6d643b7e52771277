"""
Order API Views.

Implements:
- GET /orders/ - List the current user's orders
- POST /orders/ - Create order (or price request) with atomic stock handling
- GET /orders/{id}/ - Order detail with latest payment
- PATCH /orders/{id}/ - Customer cancel
- /admin/orders/... - Back-office list, detail, status changes and stats
"""
import logging

from django.db import models
from django.db.models import Avg, Count, Sum
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import error_response, server_error_response
from core.permissions import IsStaffRole
from core.rate_limiting import rate_limit
from .models import Order
from .serializers import (
    AdminOrderSerializer,
    OrderActionSerializer,
    OrderCreateSerializer,
    OrderDetailSerializer,
    OrderSerializer,
    OrderStatusUpdateSerializer,
    PriceRequestSerializer,
    RecentOrderSerializer,
)
from .services import (
    cancel_order,
    create_order,
    create_price_request,
    update_order_status,
    InsufficientStockError,
    InvalidOrderActionError,
    ItemNotFoundError,
    OfferUnavailableError,
    OrderStatusError,
    OrderValidationError,
)

logger = logging.getLogger(__name__)

REVENUE_STATUSES = [Order.Status.PROCESSING, Order.Status.DELIVERY, Order.Status.COMPLETED]


def _filter_by_status(queryset, request):
    status_filter = request.query_params.get('status', '').upper()
    if status_filter in Order.Status.values:
        queryset = queryset.filter(status=status_filter)
    return queryset


def _as_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ('1', 'true', 'yes')
    return bool(value)


# =============================================================================
# Customer endpoints
# =============================================================================

class OrderListCreateView(generics.ListCreateAPIView):
    """
    GET: List the authenticated user's orders
    POST: Create a new order, or a price request when is_price_request is true

    Query Parameters (GET):
        - status: Filter by status

    Request Body (POST):
    {
        "cart_items": [{"article_id": "ABC1", "warehouse_id": 1, "quantity": 2}],
        "total_price": "€160.00"
    }
    """
    serializer_class = OrderSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        queryset = Order.objects.filter(user=self.request.user)
        return _filter_by_status(queryset, self.request).order_by('-created_at')

    @rate_limit(max_requests=10, window_seconds=60)
    def post(self, request, *args, **kwargs):
        return self.create(request, *args, **kwargs)

    def create(self, request, *args, **kwargs):
        """
        Create order or price request.

        Returns:
            - 201: Order created
            - 400: Validation error or insufficient stock
            - 404: Item or warehouse offer not found
        """
        if _as_bool(request.data.get('is_price_request', False)):
            return self._create_price_request(request)

        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            order = create_order(
                user=request.user,
                cart_items=data['cart_items'],
                total_price=data['total_price'],
                original_total_price=data.get('original_total_price'),
                delivery_id=data.get('delivery_id'),
                customer_info=data.get('customer_info'),
            )
        except OrderValidationError as e:
            logger.warning(f"Order validation failed: {e}")
            return error_response(status.HTTP_400_BAD_REQUEST, str(e))
        except ItemNotFoundError as e:
            return error_response(status.HTTP_404_NOT_FOUND, str(e), article_id=e.article_id)
        except InsufficientStockError as e:
            return error_response(
                status.HTTP_400_BAD_REQUEST,
                str(e),
                article_id=e.article_id,
                requested=e.requested,
                available=e.available,
            )
        except Exception as e:
            logger.exception(f"Unexpected error creating order: {e}")
            return server_error_response(e)

        return Response(
            {
                'message': 'Order created successfully',
                'order_id': order.id,
                'order': OrderSerializer(order).data,
            },
            status=status.HTTP_201_CREATED
        )

    def _create_price_request(self, request):
        serializer = PriceRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            order = create_price_request(
                user=request.user,
                item_id=data['item_id'],
                warehouse_id=data['warehouse_id'],
                quantity=data['quantity'],
                comment=data.get('comment'),
            )
        except OrderValidationError as e:
            return error_response(status.HTTP_400_BAD_REQUEST, str(e))
        except ItemNotFoundError:
            return error_response(status.HTTP_404_NOT_FOUND, 'Item not found')
        except OfferUnavailableError as e:
            return error_response(status.HTTP_404_NOT_FOUND, str(e))
        except Exception as e:
            logger.exception(f"Unexpected error creating price request: {e}")
            return server_error_response(e)

        return Response(
            {
                'message': 'Price request submitted successfully',
                'order_id': order.id,
                'order': OrderSerializer(order).data,
            },
            status=status.HTTP_201_CREATED
        )


class OrderDetailView(generics.RetrieveAPIView):
    """
    GET: Retrieve one of the user's orders with its latest payment.
    PATCH: {"action": "cancel"} cancels a NEW order.
    """
    serializer_class = OrderDetailSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        return Order.objects.filter(user=self.request.user)

    def patch(self, request, pk):
        serializer = OrderActionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            order = cancel_order(pk, request.user)
        except Order.DoesNotExist:
            return error_response(status.HTTP_404_NOT_FOUND, 'Order not found')
        except InvalidOrderActionError as e:
            return error_response(status.HTTP_400_BAD_REQUEST, str(e))
        except Exception as e:
            logger.exception(f"Unexpected error cancelling order #{pk}: {e}")
            return server_error_response(e)

        return Response(OrderDetailSerializer(order).data)


# =============================================================================
# Back-office endpoints
# =============================================================================

class AdminOrderListView(generics.ListAPIView):
    """
    GET: List all orders.

    Query Parameters:
        - status: Filter by status
        - user_id: Filter by customer
    """
    serializer_class = AdminOrderSerializer
    permission_classes = [IsStaffRole]

    def get_queryset(self):
        queryset = Order.objects.select_related('user')

        user_id = self.request.query_params.get('user_id')
        if user_id and user_id.isdigit():
            queryset = queryset.filter(user_id=user_id)

        return _filter_by_status(queryset, self.request).order_by('-created_at')


class AdminOrderDetailView(generics.RetrieveAPIView):
    """
    GET: Order detail with customer contact info.
    PATCH: {"status": "DELIVERY", "delivery_id": "DPD-123"} changes the status.
    """
    serializer_class = AdminOrderSerializer
    permission_classes = [IsStaffRole]
    queryset = Order.objects.select_related('user')

    def patch(self, request, pk):
        serializer = OrderStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = self.get_object()

        try:
            order = update_order_status(
                order,
                serializer.validated_data['status'],
                serializer.validated_data.get('delivery_id'),
            )
        except OrderStatusError as e:
            logger.warning(f"Status change for order #{order.id} rejected: {e}")
            return error_response(status.HTTP_400_BAD_REQUEST, str(e))

        logger.info(f"Order #{order.id} updated by {request.user.username}")
        return Response(AdminOrderSerializer(order).data)


class AdminOrderStatsView(APIView):
    """
    GET: Order statistics for the dashboard.

    Query Parameters:
        - user_id: Restrict stats to one customer (optional)
    """
    permission_classes = [IsStaffRole]

    def get(self, request):
        queryset = Order.objects.all()

        user_id = request.query_params.get('user_id')
        if user_id and user_id.isdigit():
            queryset = queryset.filter(user_id=user_id)

        revenue_filter = models.Q(status__in=REVENUE_STATUSES)
        stats = queryset.aggregate(
            total_orders=Count('id'),
            total_revenue=Sum('original_total_price', filter=revenue_filter),
            avg_order_value=Avg('original_total_price', filter=revenue_filter),
        )
        counts = dict(
            queryset.order_by().values_list('status').annotate(count=Count('id'))
        )
        stats['by_status'] = {value: counts.get(value, 0) for value in Order.Status.values}

        # Handle None values
        stats['total_revenue'] = str(stats['total_revenue'] or '0.00')
        stats['avg_order_value'] = str(round(stats['avg_order_value'] or 0, 2))

        return Response(stats)


class AdminRecentOrdersView(generics.ListAPIView):
    """
    GET: The five most recent orders for the dashboard.
    """
    serializer_class = RecentOrderSerializer
    permission_classes = [IsStaffRole]
    pagination_class = None
    recent_count = 5

    def get_queryset(self):
        return Order.objects.select_related('user').order_by('-created_at', '-id')[:self.recent_count]
