"""
Tests for Przelewy24 payments.

The provider API is mocked at Przelewy24Client._request, so signatures,
payload building and state transitions run for real.

Test Cases:
1. Signature helpers
2. Payment initiation (amount in grosze, order moves to WAITING_FOR_PAYMENT)
3. Notification handling (signature, amount, verification)
4. Refunds
"""
import hashlib
from decimal import Decimal
from unittest.mock import patch

from django.test import TestCase, override_settings
from rest_framework.test import APITestCase

from accounts.models import User
from catalog.models import CurrencyExchange
from orders.models import Order
from payments.models import Payment
from payments.przelewy24 import (
    PaymentNotification,
    Przelewy24Client,
    Przelewy24Error,
    compute_sign,
    notification_sign,
    registration_sign,
    verification_sign,
)

P24_SETTINGS = {
    'P24_MERCHANT_ID': '123456',
    'P24_POS_ID': '123456',
    'P24_API_KEY': 'api-key',
    'P24_CRC': 'crc-key',
    'P24_SANDBOX': True,
    'APP_BASE_URL': 'https://shop.example.com',
    'RATE_LIMIT_ENABLED': False,
}


class SignatureTestCase(TestCase):

    def test_registration_sign_is_sha384_of_compact_json(self):
        expected = hashlib.sha384(
            b'{"sessionId":"5_1700000000000","merchantId":123456,"amount":68800,"currency":"PLN","crc":"crc-key"}'
        ).hexdigest()

        self.assertEqual(registration_sign('5_1700000000000', 123456, 68800, 'PLN', 'crc-key'), expected)

    def test_key_order_matters(self):
        self.assertNotEqual(
            compute_sign({'a': 1, 'b': 2}),
            compute_sign({'b': 2, 'a': 1}),
        )

    def test_non_ascii_is_not_escaped(self):
        expected = hashlib.sha384('{"crc":"zażółć"}'.encode('utf-8')).hexdigest()
        self.assertEqual(compute_sign({'crc': 'zażółć'}), expected)

    @override_settings(**P24_SETTINGS)
    def test_notification_signature_check(self):
        client = Przelewy24Client()
        payload = {
            'merchantId': 123456,
            'sessionId': '5_1700000000000',
            'amount': 68800,
            'currency': 'PLN',
            'orderId': 987,
            'sign': '',
        }
        valid = PaymentNotification.from_payload(payload)
        valid.sign = notification_sign(valid, 'crc-key')

        tampered = PaymentNotification.from_payload({**payload, 'amount': 1, 'sign': valid.sign})
        non_ascii = PaymentNotification.from_payload({**payload, 'sign': 'zażółć'})

        self.assertTrue(client.is_valid_notification(valid))
        self.assertFalse(client.is_valid_notification(tampered))
        self.assertFalse(client.is_valid_notification(non_ascii))


class PaymentFixtureMixin:

    def create_payment_fixtures(self):
        self.user = User.objects.create_user('customer', email='customer@example.com', password='pass')
        self.employee = User.objects.create_user('employee', password='pass', role=User.Role.EMPLOYEE)
        CurrencyExchange.objects.create(from_currency='EUR', to_currency='PLN', rate=Decimal('4.30'))
        self.order = Order.objects.create(
            user=self.user,
            total_price='688,00 zł',
            original_total_price=Decimal('160.00'),
        )

    def create_payment(self, payment_status=Payment.Status.INITIATED, **fields):
        values = {
            'order': self.order,
            'session_id': f'{self.order.id}_1700000000000',
            'merchant_id': '123456',
            'pos_id': '123456',
            'amount': 68800,
            'currency': 'PLN',
            'status': payment_status,
        }
        values.update(fields)
        return Payment.objects.create(**values)


@override_settings(**P24_SETTINGS)
class PaymentInitiateTestCase(PaymentFixtureMixin, APITestCase):

    def setUp(self):
        self.create_payment_fixtures()
        self.client.force_authenticate(self.user)

    @patch.object(Przelewy24Client, '_request', return_value={'data': {'token': 'TOKEN123'}})
    def test_initiate_registers_transaction(self, mock_request):
        """
        Given: A NEW order worth 160 EUR and a rate of 4.30 PLN per EUR
        When: The owner initiates a payment
        Then: 68800 grosze are registered and the order waits for payment
        """
        response = self.client.post('/api/payments/initiate/', {'order_id': self.order.id}, format='json')

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['payment_url'], 'https://sandbox.przelewy24.pl/trnRequest/TOKEN123')

        payment = Payment.objects.get()
        self.assertEqual(payment.status, Payment.Status.INITIATED)
        self.assertEqual(payment.amount, 68800)
        self.assertEqual(payment.currency, 'PLN')
        self.assertTrue(payment.session_id.startswith(f'{self.order.id}_'))
        self.assertEqual(payment.status_url, 'https://shop.example.com/api/payments/callback/')

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.Status.WAITING_FOR_PAYMENT)

        method, endpoint = mock_request.call_args.args
        body = mock_request.call_args.kwargs['json_data']
        self.assertEqual((method, endpoint), ('POST', '/transaction/register'))
        self.assertEqual(body['amount'], 68800)
        self.assertEqual(body['email'], 'customer@example.com')
        self.assertEqual(
            body['sign'],
            registration_sign(payment.session_id, 123456, 68800, 'PLN', 'crc-key'),
        )

    @patch.object(Przelewy24Client, '_request')
    def test_processing_order_rejected(self, mock_request):
        Order.objects.filter(pk=self.order.pk).update(status=Order.Status.PROCESSING)

        response = self.client.post('/api/payments/initiate/', {'order_id': self.order.id}, format='json')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['detail'], 'Order is already being processed or completed')
        mock_request.assert_not_called()

    def test_other_users_order_not_found(self):
        other = User.objects.create_user('other', password='pass')
        self.client.force_authenticate(other)

        response = self.client.post('/api/payments/initiate/', {'order_id': self.order.id}, format='json')

        self.assertEqual(response.status_code, 404)

    @override_settings(P24_API_KEY='')
    def test_missing_credentials(self):
        response = self.client.post('/api/payments/initiate/', {'order_id': self.order.id}, format='json')

        self.assertEqual(response.status_code, 500)
        self.assertEqual(Payment.objects.count(), 0)

    @patch.object(Przelewy24Client, '_request')
    def test_provider_rejection(self, mock_request):
        mock_request.side_effect = Przelewy24Error('Incorrect sign', 400, {'error': 'Incorrect sign', 'code': 400})

        response = self.client.post('/api/payments/initiate/', {'order_id': self.order.id}, format='json')

        self.assertEqual(response.status_code, 502)
        self.assertEqual(Payment.objects.count(), 0)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.Status.NEW)


@override_settings(**P24_SETTINGS)
class PaymentNotificationTestCase(PaymentFixtureMixin, APITestCase):

    def setUp(self):
        self.create_payment_fixtures()
        self.payment = self.create_payment()
        Order.objects.filter(pk=self.order.pk).update(status=Order.Status.WAITING_FOR_PAYMENT)

    def notification(self, **overrides):
        payload = {
            'merchantId': 123456,
            'posId': 123456,
            'sessionId': self.payment.session_id,
            'amount': 68800,
            'originAmount': 68800,
            'currency': 'PLN',
            'orderId': 987654,
            'methodId': 154,
            'statement': 'BLIK',
        }
        payload.update(overrides)
        payload['sign'] = notification_sign(PaymentNotification.from_payload({**payload, 'sign': ''}), 'crc-key')
        return payload

    @patch.object(Przelewy24Client, '_request', return_value={'data': {'status': 'success'}})
    def test_verified_notification_completes_payment(self, mock_request):
        response = self.client.post('/api/payments/callback/', self.notification(), format='json')

        self.assertEqual(response.status_code, 200)
        self.payment.refresh_from_db()
        self.order.refresh_from_db()
        self.assertEqual(self.payment.status, Payment.Status.COMPLETED)
        self.assertEqual(self.payment.transaction_id, '987654')
        self.assertEqual(self.payment.payment_method, 'BLIK')
        self.assertEqual(self.order.status, Order.Status.PROCESSING)

        method, endpoint = mock_request.call_args.args
        body = mock_request.call_args.kwargs['json_data']
        self.assertEqual((method, endpoint), ('PUT', '/transaction/verify'))
        self.assertEqual(
            body['sign'],
            verification_sign(self.payment.session_id, 987654, 68800, 'PLN', 'crc-key'),
        )

    @patch.object(Przelewy24Client, '_request')
    def test_invalid_signature_rejected(self, mock_request):
        payload = self.notification()
        payload['sign'] = 'forged'

        response = self.client.post('/api/payments/callback/', payload, format='json')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['detail'], 'Invalid signature')
        mock_request.assert_not_called()
        self.payment.refresh_from_db()
        self.assertEqual(self.payment.status, Payment.Status.INITIATED)

    def test_missing_fields_rejected(self):
        response = self.client.post('/api/payments/callback/', {'sessionId': 'x'}, format='json')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['detail'], 'Missing required fields in callback')

    @patch.object(Przelewy24Client, '_request')
    def test_amount_mismatch_rejected(self, mock_request):
        response = self.client.post(
            '/api/payments/callback/',
            self.notification(amount=100, originAmount=100),
            format='json',
        )

        self.assertEqual(response.status_code, 400)
        mock_request.assert_not_called()

    @patch.object(Przelewy24Client, '_request')
    def test_failed_verification_marks_payment_failed(self, mock_request):
        mock_request.side_effect = Przelewy24Error(
            'Transaction not found', 400, {'error': 'Transaction not found', 'code': 'ERR51'}
        )

        response = self.client.post('/api/payments/callback/', self.notification(), format='json')

        self.assertEqual(response.status_code, 502)
        self.payment.refresh_from_db()
        self.assertEqual(self.payment.status, Payment.Status.FAILED)
        self.assertEqual(self.payment.error_code, 'ERR51')
        self.assertEqual(self.payment.error_message, 'Transaction not found')
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.Status.WAITING_FOR_PAYMENT)

    @patch.object(Przelewy24Client, '_request')
    def test_duplicate_notification_is_ignored(self, mock_request):
        Payment.objects.filter(pk=self.payment.pk).update(status=Payment.Status.COMPLETED)

        response = self.client.post('/api/payments/callback/', self.notification(), format='json')

        self.assertEqual(response.status_code, 200)
        mock_request.assert_not_called()

    def test_customer_return(self):
        response = self.client.get('/api/payments/callback/', {'order_id': self.order.id})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['message'], 'Payment return received')


@override_settings(**P24_SETTINGS)
class PaymentRefundTestCase(PaymentFixtureMixin, APITestCase):

    def setUp(self):
        self.create_payment_fixtures()
        self.payment = self.create_payment(Payment.Status.COMPLETED, transaction_id='987654')
        Order.objects.filter(pk=self.order.pk).update(status=Order.Status.PROCESSING)

    def test_customer_forbidden(self):
        self.client.force_authenticate(self.user)

        response = self.client.post('/api/admin/payments/refund/', {'payment_id': self.payment.id}, format='json')

        self.assertEqual(response.status_code, 403)

    @patch.object(Przelewy24Client, '_request', return_value={'data': [{'status': True}]})
    def test_refund_completed_payment(self, mock_request):
        self.client.force_authenticate(self.employee)

        response = self.client.post(
            '/api/admin/payments/refund/',
            {'order_id': self.order.id, 'reason': 'Damaged'},
            format='json',
        )

        self.assertEqual(response.status_code, 200)
        self.payment.refresh_from_db()
        self.order.refresh_from_db()
        self.assertEqual(self.payment.status, Payment.Status.REFUNDED)
        self.assertEqual(self.payment.metadata['refund_reason'], 'Damaged')
        self.assertEqual(self.order.status, Order.Status.REFUND)

        method, endpoint = mock_request.call_args.args
        refund = mock_request.call_args.kwargs['json_data']['refunds'][0]
        self.assertEqual((method, endpoint), ('POST', '/transaction/refund'))
        self.assertEqual(refund['orderId'], 987654)
        self.assertEqual(refund['amount'], 68800)

    @patch.object(Przelewy24Client, '_request')
    def test_only_completed_payments_refundable(self, mock_request):
        Payment.objects.filter(pk=self.payment.pk).update(status=Payment.Status.INITIATED)
        self.client.force_authenticate(self.employee)

        response = self.client.post('/api/admin/payments/refund/', {'payment_id': self.payment.id}, format='json')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['detail'], 'Only completed payments can be refunded')
        mock_request.assert_not_called()

    def test_already_refunded(self):
        Payment.objects.filter(pk=self.payment.pk).update(status=Payment.Status.REFUNDED)
        self.client.force_authenticate(self.employee)

        response = self.client.post('/api/admin/payments/refund/', {'payment_id': self.payment.id}, format='json')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['detail'], 'Payment has already been refunded')

    def test_payment_or_order_required(self):
        self.client.force_authenticate(self.employee)

        response = self.client.post('/api/admin/payments/refund/', {'reason': 'x'}, format='json')

        self.assertEqual(response.status_code, 400)

    def test_unknown_payment(self):
        self.client.force_authenticate(self.employee)

        response = self.client.post('/api/admin/payments/refund/', {'payment_id': 99999}, format='json')

        self.assertEqual(response.status_code, 404)

    def test_admin_payment_list(self):
        self.create_payment(Payment.Status.FAILED, session_id='other-session')
        self.client.force_authenticate(self.employee)

        response = self.client.get('/api/admin/payments/', {'status': 'completed'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual([p['id'] for p in response.data['results']], [self.payment.id])
        self.assertEqual(response.data['results'][0]['amount_display'], '688.00 PLN')

    def test_order_detail_shows_latest_payment(self):
        self.client.force_authenticate(self.user)

        response = self.client.get(f'/api/orders/{self.order.id}/')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['payment']['status'], Payment.Status.COMPLETED)
        self.assertEqual(response.data['payment']['amount'], 68800)
