"""
Redis-based rate limiting for API endpoints.
Implements a fixed window counter per client and endpoint.
"""
import logging
from functools import wraps

import redis
from django.conf import settings
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response

logger = logging.getLogger(__name__)

_redis_client = None
_redis_checked = False


def get_redis_client():
    """
    Return a connected Redis client, or None when rate limiting is disabled
    or Redis cannot be reached. The connection is attempted once per process.
    """
    global _redis_client, _redis_checked
    if not getattr(settings, 'RATE_LIMIT_ENABLED', True):
        return None
    if _redis_checked:
        return _redis_client

    _redis_checked = True
    try:
        client = redis.Redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=5
        )
        client.ping()
        _redis_client = client
    except (redis.ConnectionError, redis.TimeoutError) as e:
        logger.warning(f"Redis connection failed: {e}. Rate limiting will be disabled.")
        _redis_client = None
    return _redis_client


def get_client_ip(request):
    """Extract client IP address from request."""
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR', 'unknown')
    return ip


def get_client_key(request):
    """Authenticated users are limited per account, anonymous ones per IP."""
    user = getattr(request, 'user', None)
    if user is not None and user.is_authenticated:
        return f"user:{user.pk}"
    return f"ip:{get_client_ip(request)}"


def _limit_exceeded_response(max_requests, window_seconds, ttl):
    return Response(
        {
            'error': 'Rate limit exceeded',
            'detail': f'Maximum {max_requests} requests per {window_seconds} seconds allowed.',
            'retry_after': ttl
        },
        status=status.HTTP_429_TOO_MANY_REQUESTS,
        headers={
            'X-RateLimit-Limit': str(max_requests),
            'X-RateLimit-Remaining': '0',
            'X-RateLimit-Reset': str(ttl),
            'Retry-After': str(ttl)
        }
    )


def _count_request(client, key, window_seconds):
    current_count = client.incr(key)
    if current_count == 1:
        client.expire(key, window_seconds)
    return current_count, client.ttl(key)


def _add_headers(response, max_requests, current_count, ttl):
    response['X-RateLimit-Limit'] = str(max_requests)
    response['X-RateLimit-Remaining'] = str(max(0, max_requests - current_count))
    response['X-RateLimit-Reset'] = str(ttl)
    return response


def rate_limit(max_requests: int = 20, window_seconds: int = 60):
    """
    Redis-based rate limiting decorator for DRF view methods.

    Usage:
        @rate_limit(20, 60)  # 20 requests per minute
        def get(self, request):
            ...
    """
    def decorator(view_func):
        @wraps(view_func)
        def wrapper(self, request, *args, **kwargs):
            client = get_redis_client()
            if client is None:
                return view_func(self, request, *args, **kwargs)

            try:
                key = f"rate_limit:{view_func.__name__}:{get_client_key(request)}"
                current_count, ttl = _count_request(client, key, window_seconds)
            except redis.RedisError as e:
                logger.error(f"Redis error in rate limiting: {e}")
                # Fail open
                return view_func(self, request, *args, **kwargs)

            if current_count > max_requests:
                return _limit_exceeded_response(max_requests, window_seconds, ttl)

            response = view_func(self, request, *args, **kwargs)
            return _add_headers(response, max_requests, current_count, ttl)

        return wrapper
    return decorator


class RateLimitExceeded(APIException):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_code = 'rate_limit_exceeded'

    def __init__(self, max_requests, window_seconds, ttl):
        super().__init__({
            'error': 'Rate limit exceeded',
            'detail': f'Maximum {max_requests} requests per {window_seconds} seconds allowed.',
        })
        # DRF's exception handler turns this into Retry-After
        self.wait = ttl


class RateLimitMixin:
    """
    Mixin class for DRF class-based views to add rate limiting.

    Counts after authentication, so signed-in users are limited per account
    whichever authentication class identified them.

    Usage:
        class ReceiveView(RateLimitMixin, APIView):
            rate_limit_max_requests = 20
            rate_limit_window_seconds = 60
    """
    rate_limit_max_requests = 20
    rate_limit_window_seconds = 60

    def initial(self, request, *args, **kwargs):
        super().initial(request, *args, **kwargs)
        self.rate_limit_state = None

        client = get_redis_client()
        if client is None:
            return

        try:
            key = f"rate_limit:{self.__class__.__name__}:{get_client_key(request)}"
            self.rate_limit_state = _count_request(client, key, self.rate_limit_window_seconds)
        except redis.RedisError as e:
            logger.error(f"Redis error in rate limiting: {e}")
            return

        current_count, ttl = self.rate_limit_state
        if current_count > self.rate_limit_max_requests:
            raise RateLimitExceeded(
                self.rate_limit_max_requests, self.rate_limit_window_seconds, ttl
            )

    def finalize_response(self, request, response, *args, **kwargs):
        response = super().finalize_response(request, response, *args, **kwargs)
        state = getattr(self, 'rate_limit_state', None)
        if state is not None:
            _add_headers(response, self.rate_limit_max_requests, *state)
        return response
