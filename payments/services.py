"""
Payment Service Layer - Przelewy24 payment lifecycle.

1. initiate_payment: register the transaction, store an INITIATED payment,
   move the order to WAITING_FOR_PAYMENT
2. handle_notification: check the signature and amount, verify with the
   provider, then complete the payment and move the order to PROCESSING
3. refund_payment: refund a completed payment, mark payment REFUNDED and
   order REFUND
"""
import logging
import time
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Optional

from django.conf import settings
from django.db import transaction
from django.urls import reverse
from django.utils import timezone

from catalog.currency import convert_from_base
from orders.models import Order
from .models import Payment
from .przelewy24 import PaymentNotification, Przelewy24Client, Przelewy24Error

logger = logging.getLogger(__name__)

PAYMENT_CURRENCY = 'PLN'
PAYABLE_STATUSES = [Order.Status.NEW, Order.Status.WAITING_FOR_PAYMENT]
NOTIFICATION_REQUIRED_FIELDS = ('sessionId', 'amount', 'merchantId', 'sign')


class PaymentError(Exception):
    """Raised when a payment operation cannot proceed."""
    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def get_client() -> Przelewy24Client:
    try:
        return Przelewy24Client()
    except ValueError as e:
        logger.error(f"Przelewy24 client unavailable: {e}")
        raise PaymentError(str(e), status_code=500)


def amount_in_grosze(order: Order) -> int:
    """Order base-currency total converted to PLN, in minor units."""
    pln_total = convert_from_base(order.original_total_price, PAYMENT_CURRENCY)
    return int((pln_total * 100).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def new_session_id(order: Order) -> str:
    return f"{order.id}_{int(time.time() * 1000)}"


def _absolute_url(path: str) -> str:
    return f"{settings.APP_BASE_URL.rstrip('/')}{path}"


def initiate_payment(order_id: int, user) -> Payment:
    """
    Start a Przelewy24 payment for one of the user's orders.

    Raises:
        Order.DoesNotExist: If the order does not exist or belongs to someone else
        PaymentError: If the order cannot be paid or credentials are missing
        Przelewy24Error: If the provider rejects the registration
    """
    order = Order.objects.get(pk=order_id, user=user)

    if order.status in (Order.Status.PROCESSING, Order.Status.COMPLETED):
        raise PaymentError('Order is already being processed or completed')
    if order.status not in PAYABLE_STATUSES:
        raise PaymentError(f"Orders with status {order.status} cannot be paid")

    client = get_client()

    amount = amount_in_grosze(order)
    if amount <= 0:
        raise PaymentError('Order total must be greater than zero')

    session_id = new_session_id(order)
    description = f"Order #{order.id}"
    return_url = _absolute_url(f"/payment/return?order_id={order.id}")
    status_url = _absolute_url(reverse('payments:payment-callback'))

    logger.info(
        f"Initiating payment for order #{order.id}: session {session_id}, "
        f"amount {amount} {PAYMENT_CURRENCY}, sandbox {client.sandbox}"
    )

    registered = client.register_transaction(
        session_id=session_id,
        amount=amount,
        description=description,
        email=user.email,
        client_name=user.display_name,
        url_return=return_url,
        url_status=status_url,
        currency=PAYMENT_CURRENCY,
    )

    with transaction.atomic():
        payment = Payment.objects.create(
            order=order,
            session_id=session_id,
            merchant_id=str(client.merchant_id),
            pos_id=str(client.pos_id),
            amount=amount,
            currency=PAYMENT_CURRENCY,
            status=Payment.Status.INITIATED,
            p24_email=user.email,
            p24_order_id=str(order.id),
            description=description,
            return_url=return_url,
            status_url=status_url,
            metadata={
                'token': registered.token,
                'payment_url': registered.payment_url,
                'p24_response': registered.response_data,
            },
        )
        order.status = Order.Status.WAITING_FOR_PAYMENT
        order.save(update_fields=['status', 'updated_at'])

    logger.info(f"Payment {payment.id} initiated for order #{order.id}")
    return payment


def handle_notification(payload: Dict) -> Payment:
    """
    Process a payment status notification from Przelewy24.

    Raises:
        PaymentError: If fields are missing, the signature or amount is wrong,
            or the payment is unknown
        Przelewy24Error: If verification is rejected; the payment is marked FAILED
    """
    if not isinstance(payload, dict) or any(not payload.get(field) for field in NOTIFICATION_REQUIRED_FIELDS):
        raise PaymentError('Missing required fields in callback')

    logger.info(
        f"Received payment notification: session {payload.get('sessionId')}, "
        f"amount {payload.get('amount')}, provider order {payload.get('orderId')}"
    )

    client = get_client()
    notification = PaymentNotification.from_payload(payload)

    if not client.is_valid_notification(notification):
        logger.error(f"Invalid signature in payment notification for session {notification.session_id}")
        raise PaymentError('Invalid signature')

    try:
        payment = Payment.objects.select_related('order').get(session_id=notification.session_id)
    except Payment.DoesNotExist:
        logger.error(f"Payment not found for session {notification.session_id}")
        raise PaymentError('Payment not found')

    if payment.status == Payment.Status.COMPLETED:
        logger.info(f"Payment {payment.id} already completed, ignoring duplicate notification")
        return payment

    if int(notification.amount) != payment.amount or notification.currency != payment.currency:
        logger.error(
            f"Amount mismatch for payment {payment.id}: notified {notification.amount} "
            f"{notification.currency}, expected {payment.amount} {payment.currency}"
        )
        raise PaymentError('Amount mismatch')

    callback_data = {key: value for key, value in payload.items() if key != 'sign'}

    try:
        verify_data = client.verify_transaction(
            session_id=notification.session_id,
            order_id=notification.order_id,
            amount=notification.amount,
            currency=notification.currency,
        )
    except Przelewy24Error as e:
        payment.status = Payment.Status.FAILED
        payment.error_code = e.code
        payment.error_message = e.message or 'Transaction verification failed'
        payment.metadata = {
            **payment.metadata,
            'verify_response': e.response_data,
            'callback_data': callback_data,
        }
        payment.save(update_fields=['status', 'error_code', 'error_message', 'metadata', 'updated_at'])
        logger.error(f"Verification failed for payment {payment.id}: {e.message}")
        raise

    with transaction.atomic():
        payment.status = Payment.Status.COMPLETED
        payment.transaction_id = str(notification.order_id)
        payment.payment_method = notification.statement or ''
        payment.metadata = {
            **payment.metadata,
            'method_id': notification.method_id,
            'verify_response': verify_data,
            'callback_data': callback_data,
        }
        payment.save(update_fields=['status', 'transaction_id', 'payment_method', 'metadata', 'updated_at'])

        order = payment.order
        order.status = Order.Status.PROCESSING
        order.save(update_fields=['status', 'updated_at'])

    logger.info(f"Payment {payment.id} completed, order #{order.id} is now PROCESSING")
    return payment


def _find_refundable_payment(payment_id: Optional[int], order_id: Optional[int]) -> Payment:
    payments = Payment.objects.select_related('order')
    if payment_id:
        payment = payments.filter(pk=payment_id).first()
    else:
        order_payments = payments.filter(order_id=order_id).order_by('-created_at', '-id')
        payment = order_payments.filter(status=Payment.Status.COMPLETED).first() or order_payments.first()

    if payment is None:
        raise PaymentError('Payment not found', status_code=404)
    return payment


def refund_payment(payment_id: Optional[int] = None, order_id: Optional[int] = None,
                   reason: Optional[str] = None) -> Payment:
    """
    Refund a completed payment in full.

    Raises:
        PaymentError: If the payment is missing or not refundable
        Przelewy24Error: If the provider rejects the refund
    """
    if not payment_id and not order_id:
        raise PaymentError('Either payment_id or order_id is required')

    payment = _find_refundable_payment(payment_id, order_id)

    if payment.status == Payment.Status.REFUNDED:
        raise PaymentError('Payment has already been refunded')
    if not payment.is_refundable:
        raise PaymentError('Only completed payments can be refunded')
    if not payment.transaction_id:
        raise PaymentError('Transaction ID missing for payment', status_code=500)

    client = get_client()
    order = payment.order
    description = reason or f"Refund for order {order.id}"

    logger.info(f"Refunding payment {payment.id}: {payment.amount_display}, sandbox {client.sandbox}")

    result = client.refund(
        session_id=payment.session_id,
        order_id=int(payment.transaction_id),
        amount=payment.amount,
        description=description,
        url_status=_absolute_url(reverse('payments:refund-callback')),
    )

    with transaction.atomic():
        payment.status = Payment.Status.REFUNDED
        payment.metadata = {
            **payment.metadata,
            'refund_request_id': result['request_id'],
            'refund_response': result['response'],
            'refund_reason': reason,
            'refunded_at': timezone.now().isoformat(),
        }
        payment.save(update_fields=['status', 'metadata', 'updated_at'])

        order.status = Order.Status.REFUND
        order.save(update_fields=['status', 'updated_at'])

    logger.info(f"Payment {payment.id} refunded, order #{order.id} marked REFUND")
    return payment
