"""
Tests for actor context, role permissions, error responses and rate limiting.
"""
from unittest.mock import MagicMock, patch

import redis
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from django.test import RequestFactory, SimpleTestCase, TestCase, override_settings
from rest_framework import status
from rest_framework.response import Response
from rest_framework.test import APIRequestFactory, force_authenticate
from rest_framework.views import APIView

from core import rate_limiting
from core.context import ActorContext
from core.exceptions import (
    ActionNotPermittedError,
    GatewayError,
    InvalidTransitionError,
    OrderValidationError,
    ReceiptValidationError,
    error_response,
)
from core.models import Profile
from core.rate_limiting import RateLimitMixin, get_client_key, rate_limit

User = get_user_model()


class ActorContextTestCase(TestCase):

    def test_role_from_profile(self):
        user = User.objects.create_user('manager', password='pass1234')
        Profile.objects.create(user=user, role=Profile.Role.MANAGER)

        actor = ActorContext.for_user(user)

        self.assertEqual(actor.role, Profile.Role.MANAGER)
        self.assertTrue(actor.is_admin_or_manager)
        self.assertFalse(actor.is_admin)
        self.assertEqual(actor.user_id, user.pk)

    def test_user_without_profile_is_staff(self):
        user = User.objects.create_user('newbie', password='pass1234')
        actor = ActorContext.for_user(user)

        self.assertEqual(actor.role, Profile.Role.STAFF)
        with self.assertRaises(ActionNotPermittedError):
            actor.require_admin_or_manager('approve purchase orders')

    def test_superuser_is_admin(self):
        user = User.objects.create_superuser('root', 'root@example.com', 'pass1234')
        actor = ActorContext.for_user(user)

        self.assertTrue(actor.is_admin)
        actor.require_admin('delete products')

    def test_anonymous_rejected(self):
        with self.assertRaises(ActionNotPermittedError):
            ActorContext.for_user(AnonymousUser())

    def test_system_context(self):
        actor = ActorContext.system()
        self.assertIsNone(actor.user_id)
        self.assertTrue(actor.is_admin)


class ErrorResponseTestCase(SimpleTestCase):

    def test_status_codes(self):
        cases = [
            (OrderValidationError('Supplier is required'), 400, 'Validation Error'),
            (InvalidTransitionError('pending', 'shipped'), 409, 'Invalid Transition'),
            (ReceiptValidationError(7, 5, 2), 400, 'Validation Error'),
            (ActionNotPermittedError('Only admins may delete products'), 403, 'Permission Denied'),
            (GatewayError('database unavailable'), 503, 'Storage Unavailable'),
        ]
        for exc, code, label in cases:
            response = error_response(exc)
            self.assertEqual(response.status_code, code)
            self.assertEqual(response.data, {'error': label, 'detail': str(exc)})

    def test_transition_message(self):
        exc = InvalidTransitionError('pending', 'shipped')
        self.assertEqual(str(exc), "Cannot move purchase order from 'pending' to 'shipped'")
        self.assertIsInstance(exc, OrderValidationError)


class RateLimitTestCase(SimpleTestCase):
    """Rate limiting with a mocked Redis client."""

    class LimitedView(APIView):
        authentication_classes = []
        permission_classes = []

        @rate_limit(max_requests=2, window_seconds=60)
        def get(self, request):
            return Response({'ok': True})

    class LimitedMixinView(RateLimitMixin, APIView):
        authentication_classes = []
        permission_classes = []
        rate_limit_max_requests = 1

        def post(self, request):
            return Response({'ok': True})

    def setUp(self):
        self.factory = RequestFactory()
        self.counts = {}

        client = MagicMock()
        client.incr.side_effect = self._incr
        client.ttl.return_value = 42
        patcher = patch.object(rate_limiting, 'get_redis_client', return_value=client)
        patcher.start()
        self.addCleanup(patcher.stop)
        self.client_mock = client

    def _incr(self, key):
        self.counts[key] = self.counts.get(key, 0) + 1
        return self.counts[key]

    def test_decorator_blocks_after_limit(self):
        view = self.LimitedView.as_view()

        for _ in range(2):
            response = view(self.factory.get('/'))
            self.assertEqual(response.status_code, status.HTTP_200_OK)
        response = view(self.factory.get('/'))

        self.assertEqual(response.status_code, status.HTTP_429_TOO_MANY_REQUESTS)
        self.assertEqual(response['Retry-After'], '42')

    def test_mixin_blocks_after_limit(self):
        view = self.LimitedMixinView.as_view()

        response = view(self.factory.post('/'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['X-RateLimit-Remaining'], '0')

        response = view(self.factory.post('/'))
        self.assertEqual(response.status_code, status.HTTP_429_TOO_MANY_REQUESTS)
        self.assertEqual(response['Retry-After'], '42')
        self.assertEqual(response.data['error'], 'Rate limit exceeded')

    def test_mixin_keys_authenticated_user(self):
        """The mixin counts after authentication, so the account is the key."""
        view = self.LimitedMixinView.as_view()
        request = APIRequestFactory().post('/')
        force_authenticate(request, user=User(pk=7, username='receiver'))

        response = view(request)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(list(self.counts), ['rate_limit:LimitedMixinView:user:7'])

    def test_redis_error_fails_open(self):
        self.client_mock.incr.side_effect = redis.ConnectionError('gone')
        view = self.LimitedView.as_view()

        for _ in range(5):
            self.assertEqual(view(self.factory.get('/')).status_code, status.HTTP_200_OK)

    def test_client_key(self):
        request = self.factory.get('/', HTTP_X_FORWARDED_FOR='10.0.0.1, 10.0.0.2')
        request.user = AnonymousUser()
        self.assertEqual(get_client_key(request), 'ip:10.0.0.1')


@override_settings(RATE_LIMIT_ENABLED=False)
class RateLimitDisabledTestCase(SimpleTestCase):

    def test_disabled_returns_no_client(self):
        self.assertIsNone(rate_limiting.get_redis_client())
