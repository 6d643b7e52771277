"""
Payment API Views.

Implements:
- POST /payments/initiate/ - Start a Przelewy24 payment for an order
- POST /payments/callback/ - Provider notification (no auth)
- GET /payments/callback/ - Customer return acknowledgment
- POST /payments/refund-callback/ - Provider refund notification (no auth)
- GET /admin/payments/ - Payment list (back-office)
- POST /admin/payments/refund/ - Refund a completed payment
"""
import logging

from rest_framework import generics, status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import error_response, server_error_response
from core.permissions import IsStaffRole
from core.rate_limiting import RateLimitMixin
from orders.models import Order
from .models import Payment
from .przelewy24 import Przelewy24Error
from .serializers import PaymentInitiateSerializer, PaymentSerializer, RefundSerializer
from .services import handle_notification, initiate_payment, refund_payment, PaymentError

logger = logging.getLogger(__name__)


def payment_error_response(exc: PaymentError):
    if exc.status_code >= 500:
        logger.error(f"Payment error: {exc.message}")
    else:
        logger.warning(f"Payment request rejected: {exc.message}")
    return error_response(exc.status_code, exc.message)


def provider_error_response(exc: Przelewy24Error):
    return error_response(
        status.HTTP_502_BAD_GATEWAY,
        exc.message,
        provider_status=exc.status_code,
    )


class PaymentInitiateView(RateLimitMixin, APIView):
    """
    POST: Register a payment for one of the user's orders.

    Request Body:
    {"order_id": 12}
    """
    permission_classes = [IsAuthenticated]
    rate_limit_max_requests = 5
    rate_limit_window_seconds = 60

    def post(self, request):
        serializer = PaymentInitiateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            payment = initiate_payment(serializer.validated_data['order_id'], request.user)
        except Order.DoesNotExist:
            return error_response(status.HTTP_404_NOT_FOUND, 'Order not found')
        except PaymentError as e:
            return payment_error_response(e)
        except Przelewy24Error as e:
            return provider_error_response(e)
        except Exception as e:
            logger.exception(f"Unexpected error initiating payment: {e}")
            return server_error_response(e)

        return Response(
            {
                'payment_id': payment.id,
                'session_id': payment.session_id,
                'payment_url': payment.metadata.get('payment_url'),
                'token': payment.metadata.get('token'),
            },
            status=status.HTTP_201_CREATED
        )


class PaymentCallbackView(APIView):
    """
    POST: Payment status notification from Przelewy24.
    GET: Customer redirected back from the payment page.
    """
    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request):
        try:
            payment = handle_notification(request.data)
        except PaymentError as e:
            return payment_error_response(e)
        except Przelewy24Error as e:
            return provider_error_response(e)
        except Exception as e:
            logger.exception(f"Unexpected error handling payment notification: {e}")
            return server_error_response(e)

        return Response({'message': 'Payment processed successfully', 'payment_id': payment.id})

    def get(self, request):
        logger.info(f"Customer returned from payment gateway: {request.query_params.dict()}")
        return Response({'message': 'Payment return received'})


class RefundCallbackView(APIView):
    """POST: Refund status notification from Przelewy24; acknowledged and logged."""
    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request):
        data = request.data if isinstance(request.data, dict) else {}
        logger.info(
            f"Received refund notification: session {data.get('sessionId')}, "
            f"status {data.get('status')}"
        )
        return Response({'message': 'Refund notification received'})


class AdminPaymentListView(generics.ListAPIView):
    """
    GET: List payments.

    Query Parameters:
        - status: Filter by payment status
        - order_id: Filter by order
    """
    serializer_class = PaymentSerializer
    permission_classes = [IsStaffRole]

    def get_queryset(self):
        queryset = Payment.objects.select_related('order')

        status_filter = self.request.query_params.get('status', '').upper()
        if status_filter in Payment.Status.values:
            queryset = queryset.filter(status=status_filter)

        order_id = self.request.query_params.get('order_id')
        if order_id and order_id.isdigit():
            queryset = queryset.filter(order_id=order_id)

        return queryset.order_by('-created_at')


class AdminPaymentRefundView(APIView):
    """
    POST: Refund a completed payment.

    Request Body:
    {"payment_id": 5, "reason": "Damaged on arrival"}
    """
    permission_classes = [IsStaffRole]

    def post(self, request):
        serializer = RefundSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            payment = refund_payment(
                payment_id=data.get('payment_id'),
                order_id=data.get('order_id'),
                reason=data.get('reason'),
            )
        except PaymentError as e:
            return payment_error_response(e)
        except Przelewy24Error as e:
            return provider_error_response(e)
        except Exception as e:
            logger.exception(f"Unexpected error refunding payment: {e}")
            return server_error_response(e)

        logger.info(f"Refund of payment {payment.id} requested by {request.user.username}")
        return Response({
            'message': 'Refund initiated successfully',
            'payment': PaymentSerializer(payment).data,
        })
