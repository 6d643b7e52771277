"""
Przelewy24 REST API client.

Provides methods for:
- Registering a transaction (returns a token for the payment page)
- Verifying a transaction after the provider's notification
- Requesting a refund
- Computing and checking SHA-384 signatures
"""
import hashlib
import hmac
import json
import logging
import uuid
from dataclasses import dataclass
from typing import Dict, Optional

import httpx
from django.conf import settings

logger = logging.getLogger(__name__)

SANDBOX_URL = "https://sandbox.przelewy24.pl"
PRODUCTION_URL = "https://secure.przelewy24.pl"


@dataclass
class RegisteredTransaction:
    """Result of registering a transaction."""

    token: str
    payment_url: str
    response_data: dict


@dataclass
class PaymentNotification:
    """Payment status notification posted by Przelewy24."""

    merchant_id: int
    pos_id: int
    session_id: str
    amount: int  # in grosze
    origin_amount: int
    currency: str
    order_id: int
    method_id: Optional[int]
    statement: str
    sign: str

    @classmethod
    def from_payload(cls, data: Dict) -> 'PaymentNotification':
        return cls(
            merchant_id=data['merchantId'],
            pos_id=data.get('posId'),
            session_id=data['sessionId'],
            amount=data['amount'],
            origin_amount=data.get('originAmount', data['amount']),
            currency=data.get('currency', 'PLN'),
            order_id=data.get('orderId'),
            method_id=data.get('methodId'),
            statement=data.get('statement', ''),
            sign=data['sign'],
        )


class Przelewy24Error(Exception):
    """Base exception for Przelewy24 API errors."""

    def __init__(
        self, message: str, status_code: int = None, response_data: dict = None
    ):
        self.message = message
        self.status_code = status_code
        self.response_data = response_data or {}
        super().__init__(message)

    @property
    def code(self) -> str:
        code = self.response_data.get('code')
        return '' if code is None else str(code)


def compute_sign(fields: Dict) -> str:
    """
    SHA-384 hex digest of the fields serialized as compact JSON.

    Key order is significant and must follow the provider's documentation.
    """
    payload = json.dumps(fields, separators=(',', ':'), ensure_ascii=False)
    return hashlib.sha384(payload.encode('utf-8')).hexdigest()


def registration_sign(session_id: str, merchant_id: int, amount: int, currency: str, crc: str) -> str:
    return compute_sign({
        'sessionId': session_id,
        'merchantId': merchant_id,
        'amount': amount,
        'currency': currency,
        'crc': crc,
    })


def notification_sign(notification: PaymentNotification, crc: str) -> str:
    return compute_sign({
        'sessionId': notification.session_id,
        'orderId': notification.order_id,
        'amount': notification.amount,
        'originAmount': notification.origin_amount,
        'currency': notification.currency,
        'crc': crc,
    })


def verification_sign(session_id: str, order_id: int, amount: int, currency: str, crc: str) -> str:
    return compute_sign({
        'sessionId': session_id,
        'orderId': order_id,
        'amount': amount,
        'currency': currency,
        'crc': crc,
    })


class Przelewy24Client:
    """Synchronous client for the Przelewy24 transaction API."""

    def __init__(
        self,
        merchant_id: str = None,
        pos_id: str = None,
        api_key: str = None,
        crc: str = None,
        sandbox: bool = None,
        timeout: float = None,
    ):
        self.merchant_id = merchant_id or settings.P24_MERCHANT_ID
        self.pos_id = pos_id or settings.P24_POS_ID
        self.api_key = api_key or settings.P24_API_KEY
        self.crc = crc or settings.P24_CRC
        if not (self.merchant_id and self.pos_id and self.api_key and self.crc):
            raise ValueError("Przelewy24 credentials not configured")

        self.sandbox = settings.P24_SANDBOX if sandbox is None else sandbox
        self.base_url = SANDBOX_URL if self.sandbox else PRODUCTION_URL
        self.timeout = timeout or settings.P24_TIMEOUT_SECONDS

    @property
    def merchant_id_int(self) -> int:
        return int(self.merchant_id)

    @property
    def pos_id_int(self) -> int:
        return int(self.pos_id)

    def _request(self, method: str, endpoint: str, json_data: dict = None) -> dict:
        """Make a request to the Przelewy24 API."""
        url = f"{self.base_url}/api/v1{endpoint}"

        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.request(
                    method=method,
                    url=url,
                    auth=(str(self.pos_id), self.api_key),
                    json=json_data,
                )
        except httpx.HTTPError as e:
            logger.error(f"Przelewy24 request to {endpoint} failed: {e}")
            raise Przelewy24Error(f"Przelewy24 request failed: {e}")

        try:
            data = response.json()
        except ValueError:
            data = {'error': response.text}

        if not response.is_success:
            logger.error(f"Przelewy24 API error: {response.status_code} - {data}")
            raise Przelewy24Error(
                message=str(data.get('error') or 'Unknown Przelewy24 error'),
                status_code=response.status_code,
                response_data=data,
            )

        return data

    def payment_url(self, token: str) -> str:
        return f"{self.base_url}/trnRequest/{token}"

    # =========================================================================
    # Transaction Methods
    # =========================================================================

    def register_transaction(
        self,
        session_id: str,
        amount: int,
        description: str,
        email: str,
        url_return: str,
        url_status: str,
        currency: str = 'PLN',
        client_name: str = '',
        country: str = 'PL',
        language: str = 'pl',
    ) -> RegisteredTransaction:
        """
        Register a transaction and get the payment page token.

        Args:
            session_id: Unique session identifier
            amount: Amount in grosze
            description: Shown to the customer on the payment page
            email: Customer email
            url_return: Where the customer lands after paying
            url_status: Where Przelewy24 posts the notification

        Raises:
            Przelewy24Error: If the registration is rejected
        """
        data = self._request(
            "POST",
            "/transaction/register",
            json_data={
                'merchantId': self.merchant_id_int,
                'posId': self.pos_id_int,
                'sessionId': session_id,
                'amount': amount,
                'currency': currency,
                'description': description,
                'email': email,
                'client': client_name or email,
                'country': country,
                'language': language,
                'urlReturn': url_return,
                'urlStatus': url_status,
                'sign': registration_sign(session_id, self.merchant_id_int, amount, currency, self.crc),
            },
        )

        token = (data.get('data') or {}).get('token')
        if not token:
            raise Przelewy24Error(
                message="Przelewy24 registration returned no token",
                response_data=data,
            )
        return RegisteredTransaction(token=token, payment_url=self.payment_url(token), response_data=data)

    def is_valid_notification(self, notification: PaymentNotification) -> bool:
        expected = notification_sign(notification, self.crc)
        return hmac.compare_digest(str(notification.sign).encode(), expected.encode())

    def verify_transaction(self, session_id: str, order_id: int, amount: int, currency: str = 'PLN') -> dict:
        """
        Confirm a notified transaction; the payment is only final once verified.

        Raises:
            Przelewy24Error: If verification is rejected
        """
        return self._request(
            "PUT",
            "/transaction/verify",
            json_data={
                'merchantId': self.merchant_id_int,
                'posId': self.pos_id_int,
                'sessionId': session_id,
                'amount': amount,
                'currency': currency,
                'orderId': order_id,
                'sign': verification_sign(session_id, order_id, amount, currency, self.crc),
            },
        )

    def refund(self, session_id: str, order_id: int, amount: int, description: str, url_status: str) -> dict:
        """
        Request a full refund of a verified transaction.

        Returns the provider response, including the generated request id.
        """
        request_id = str(uuid.uuid4())
        data = self._request(
            "POST",
            "/transaction/refund",
            json_data={
                'requestId': request_id,
                'refunds': [{
                    'orderId': order_id,
                    'sessionId': session_id,
                    'amount': amount,
                    'description': description,
                }],
                'urlStatus': url_status,
            },
        )
        return {'request_id': request_id, 'response': data}
