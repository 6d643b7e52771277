"""
Redis-based rate limiting for API endpoints.

Fixed window counter per (view, client). Authenticated requests are keyed by
user id, anonymous ones by client IP. When Redis is unreachable the request
is let through and the error is logged.
"""
import logging
from functools import wraps
from typing import Optional

import redis
from django.conf import settings
from rest_framework import status
from rest_framework.response import Response

logger = logging.getLogger(__name__)

_redis_client: Optional[redis.Redis] = None


def get_redis_client() -> redis.Redis:
    """Lazily create the shared Redis client."""
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.Redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
    return _redis_client


def rate_limiting_enabled() -> bool:
    return getattr(settings, 'RATE_LIMIT_ENABLED', True)


def get_client_ip(request) -> str:
    """Extract client IP address from request."""
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        return x_forwarded_for.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR', 'unknown')


def get_client_key(request) -> str:
    user = getattr(request, 'user', None)
    if user is not None and user.is_authenticated:
        return f"user:{user.pk}"
    return f"ip:{get_client_ip(request)}"


def _limit_exceeded_response(max_requests: int, window_seconds: int, ttl: int) -> Response:
    return Response(
        {
            'error': 'Rate limit exceeded',
            'detail': f'Maximum {max_requests} requests per {window_seconds} seconds allowed.',
            'retry_after': ttl,
        },
        status=status.HTTP_429_TOO_MANY_REQUESTS,
        headers={
            'X-RateLimit-Limit': str(max_requests),
            'X-RateLimit-Remaining': '0',
            'X-RateLimit-Reset': str(ttl),
            'Retry-After': str(ttl),
        },
    )


def _check(scope: str, request, max_requests: int, window_seconds: int):
    """
    Count the request and report the window state.

    Returns a tuple of (current_count, ttl).
    """
    client = get_redis_client()
    key = f"rate_limit:{scope}:{get_client_key(request)}"

    pipe = client.pipeline()
    pipe.incr(key)
    pipe.ttl(key)
    current_count, ttl = pipe.execute()

    # Set expiry on the first request of the window
    if current_count == 1 or ttl < 0:
        client.expire(key, window_seconds)
        ttl = window_seconds

    return current_count, ttl


def _with_headers(response, max_requests: int, current_count: int, ttl: int):
    response['X-RateLimit-Limit'] = str(max_requests)
    response['X-RateLimit-Remaining'] = str(max(0, max_requests - current_count))
    response['X-RateLimit-Reset'] = str(ttl)
    return response


def rate_limit(max_requests: int = 20, window_seconds: int = 60, scope: Optional[str] = None):
    """
    Rate limiting decorator for DRF view methods.

    Usage:
        @rate_limit(10, 60)  # 10 requests per minute
        def post(self, request):
            ...
    """
    def decorator(view_func):
        @wraps(view_func)
        def wrapper(self, request, *args, **kwargs):
            if not rate_limiting_enabled():
                return view_func(self, request, *args, **kwargs)

            limit_scope = scope or f"{self.__class__.__name__}.{view_func.__name__}"
            try:
                current_count, ttl = _check(limit_scope, request, max_requests, window_seconds)
            except redis.RedisError as e:
                logger.error(f"Redis error in rate limiting: {e}")
                return view_func(self, request, *args, **kwargs)

            if current_count > max_requests:
                logger.warning(f"Rate limit exceeded for {limit_scope} by {get_client_key(request)}")
                return _limit_exceeded_response(max_requests, window_seconds, ttl)

            response = view_func(self, request, *args, **kwargs)
            return _with_headers(response, max_requests, current_count, ttl)

        return wrapper
    return decorator


class RateLimitMixin:
    """
    Mixin for class-based views; limits every method of the view.

    Usage:
        class MyView(RateLimitMixin, APIView):
            rate_limit_max_requests = 20
            rate_limit_window_seconds = 60
    """
    rate_limit_max_requests = 20
    rate_limit_window_seconds = 60

    def dispatch(self, request, *args, **kwargs):
        if not rate_limiting_enabled():
            return super().dispatch(request, *args, **kwargs)

        try:
            current_count, ttl = _check(
                self.__class__.__name__,
                request,
                self.rate_limit_max_requests,
                self.rate_limit_window_seconds,
            )
        except redis.RedisError as e:
            logger.error(f"Redis error in rate limiting: {e}")
            return super().dispatch(request, *args, **kwargs)

        if current_count > self.rate_limit_max_requests:
            response = _limit_exceeded_response(
                self.rate_limit_max_requests, self.rate_limit_window_seconds, ttl
            )
            # Not routed through APIView.finalize_response, so render here
            response.accepted_renderer = self.get_renderers()[0]
            response.accepted_media_type = response.accepted_renderer.media_type
            response.renderer_context = {'view': self, 'request': request}
            return response

        response = super().dispatch(request, *args, **kwargs)
        return _with_headers(response, self.rate_limit_max_requests, current_count, ttl)
