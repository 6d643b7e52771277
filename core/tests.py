"""
Tests for rate limiting and the API error envelope.
"""
from unittest.mock import MagicMock, patch

import redis
from django.test import SimpleTestCase, override_settings
from rest_framework import exceptions
from rest_framework.test import APITestCase

from core.exceptions import api_exception_handler, error_response


def mock_redis(count, ttl=60):
    client = MagicMock()
    client.pipeline.return_value.execute.return_value = [count, ttl]
    return client


@override_settings(RATE_LIMIT_ENABLED=True)
class RateLimitTestCase(APITestCase):
    """Autocomplete allows 20 requests per minute."""

    url = '/api/search/autocomplete/'

    @patch('core.rate_limiting.get_redis_client')
    def test_under_limit_sets_headers(self, mock_client):
        client = mock_redis(1, -1)
        mock_client.return_value = client

        response = self.client.get(self.url, {'q': 'dri'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['X-RateLimit-Limit'], '20')
        self.assertEqual(response['X-RateLimit-Remaining'], '19')
        client.expire.assert_called_once()

    @patch('core.rate_limiting.get_redis_client')
    def test_over_limit_returns_429(self, mock_client):
        mock_client.return_value = mock_redis(21, 42)

        response = self.client.get(self.url, {'q': 'dri'})

        self.assertEqual(response.status_code, 429)
        self.assertEqual(response['Retry-After'], '42')
        self.assertEqual(response.data['error'], 'Rate limit exceeded')

    @patch('core.rate_limiting.get_redis_client')
    def test_redis_failure_lets_request_through(self, mock_client):
        client = MagicMock()
        client.pipeline.return_value.execute.side_effect = redis.ConnectionError('down')
        mock_client.return_value = client

        response = self.client.get(self.url, {'q': 'dri'})

        self.assertEqual(response.status_code, 200)

    @patch('core.rate_limiting.get_redis_client')
    def test_keyed_by_client_ip(self, mock_client):
        client = mock_redis(1)
        mock_client.return_value = client

        self.client.get(self.url, {'q': 'dri'}, HTTP_X_FORWARDED_FOR='203.0.113.7, 10.0.0.1')

        key = client.pipeline.return_value.incr.call_args.args[0]
        self.assertEqual(key, 'rate_limit:SearchAutocompleteView.get:ip:203.0.113.7')

    @override_settings(RATE_LIMIT_ENABLED=False)
    @patch('core.rate_limiting.get_redis_client')
    def test_disabled(self, mock_client):
        response = self.client.get(self.url, {'q': 'dri'})

        self.assertEqual(response.status_code, 200)
        mock_client.assert_not_called()

    @patch('core.rate_limiting.get_redis_client')
    def test_mixin_limits_payment_initiation(self, mock_client):
        from accounts.models import User

        mock_client.return_value = mock_redis(6, 30)
        self.client.force_authenticate(User.objects.create_user('payer', password='pass'))

        response = self.client.post('/api/payments/initiate/', {'order_id': 1}, format='json')

        self.assertEqual(response.status_code, 429)
        self.assertEqual(response['Retry-After'], '30')


class ErrorEnvelopeTestCase(SimpleTestCase):

    def test_error_response_shape(self):
        response = error_response(404, 'Item ABC1 not found', article_id='ABC1')

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data, {'error': 'Not Found', 'detail': 'Item ABC1 not found', 'article_id': 'ABC1'})

    def test_validation_errors_keep_field_detail(self):
        exc = exceptions.ValidationError({'quantity': ['Ensure this value is greater than or equal to 1.']})

        response = api_exception_handler(exc, {'view': None})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['error'], 'Validation Error')
        self.assertIn('quantity', response.data['detail'])

    def test_not_found(self):
        response = api_exception_handler(exceptions.NotFound(), {'view': None})

        self.assertEqual(response.data['error'], 'Not Found')

    def test_unhandled_exception_passes_through(self):
        self.assertIsNone(api_exception_handler(RuntimeError('boom'), {'view': None}))
