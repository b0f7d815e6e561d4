"""
Tests for notification delivery and the read/unread API.
"""
from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APITestCase

from core.context import ActorContext
from core.exceptions import ResourceNotFoundError
from core.models import Profile
from notifications import services
from notifications.models import Notification

User = get_user_model()


class NotificationServiceTestCase(TestCase):

    def setUp(self):
        self.alice = User.objects.create_user('alice', password='pass1234')
        self.bob = User.objects.create_user('bob', password='pass1234')
        self.alice_ctx = ActorContext.for_user(self.alice)

    def test_emit_creates_unread(self):
        notification = services.emit_notification(
            self.alice, Notification.Type.SYSTEM, 'Welcome', 'Hello', reference_id=12,
            reference_type='product'
        )
        self.assertFalse(notification.read)
        self.assertEqual(notification.reference_id, '12')

    def test_emit_to_users_once_each(self):
        sent = services.emit_to_users(
            [self.alice, self.bob, self.alice, None],
            Notification.Type.SYSTEM, 'Maintenance', 'Tonight at 22:00'
        )
        self.assertEqual(len(sent), 2)

    def test_managers_and_admins(self):
        Profile.objects.create(user=self.alice, role=Profile.Role.MANAGER)
        Profile.objects.create(user=self.bob, role=Profile.Role.STAFF)
        root = User.objects.create_superuser('root', 'root@example.com', 'pass1234')
        inactive = User.objects.create_user('gone', password='pass1234', is_active=False)
        Profile.objects.create(user=inactive, role=Profile.Role.ADMIN)

        self.assertEqual(list(services.managers_and_admins()), [self.alice, root])

    def test_mark_as_read_and_count(self):
        first = services.emit_notification(self.alice, Notification.Type.SYSTEM, 'A', 'a')
        services.emit_notification(self.alice, Notification.Type.SYSTEM, 'B', 'b')
        self.assertEqual(services.unread_count(self.alice_ctx), 2)

        services.mark_as_read(self.alice_ctx, first.id)

        self.assertEqual(services.unread_count(self.alice_ctx), 1)

    def test_cannot_read_someone_elses(self):
        theirs = services.emit_notification(self.bob, Notification.Type.SYSTEM, 'B', 'b')

        with self.assertRaises(ResourceNotFoundError):
            services.mark_as_read(self.alice_ctx, theirs.id)

        theirs.refresh_from_db()
        self.assertFalse(theirs.read)

    def test_mark_all_as_read(self):
        services.emit_notification(self.alice, Notification.Type.SYSTEM, 'A', 'a')
        services.emit_notification(self.alice, Notification.Type.SYSTEM, 'B', 'b')
        services.emit_notification(self.bob, Notification.Type.SYSTEM, 'C', 'c')

        self.assertEqual(services.mark_all_as_read(self.alice_ctx), 2)
        self.assertEqual(Notification.objects.filter(read=False).count(), 1)


class NotificationAPITestCase(APITestCase):

    def setUp(self):
        self.alice = User.objects.create_user('alice', password='pass1234')
        self.bob = User.objects.create_user('bob', password='pass1234')
        self.mine = services.emit_notification(
            self.alice, Notification.Type.LOW_STOCK, 'Low Stock: Stapler', 'Only 2 left'
        )
        self.read = services.emit_notification(
            self.alice, Notification.Type.SYSTEM, 'Old', 'Already seen'
        )
        Notification.objects.filter(id=self.read.id).update(read=True)
        services.emit_notification(self.bob, Notification.Type.SYSTEM, 'Bob', 'Not for alice')
        self.client.force_authenticate(self.alice)

    def test_list_only_own(self):
        response = self.client.get('/api/notifications/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 2)

    def test_list_unread(self):
        response = self.client.get('/api/notifications/', {'unread': 'true'})

        ids = [row['id'] for row in response.data['results']]
        self.assertEqual(ids, [self.mine.id])

    def test_unread_count(self):
        response = self.client.get('/api/notifications/unread-count/')
        self.assertEqual(response.data, {'unread': 1})

    def test_mark_read(self):
        response = self.client.post(f'/api/notifications/{self.mine.id}/read/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['read'])

    def test_mark_read_missing(self):
        response = self.client.post('/api/notifications/99999/read/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_mark_all_read(self):
        response = self.client.post('/api/notifications/read-all/')

        self.assertEqual(response.data, {'updated': 1})
        self.assertEqual(
            Notification.objects.filter(user=self.alice, read=False).count(), 0
        )
