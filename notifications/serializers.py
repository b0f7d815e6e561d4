"""
Serializers for notifications.
"""
from rest_framework import serializers
from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    """Read-only representation of a notification."""

    class Meta:
        model = Notification
        fields = [
            'id', 'type', 'title', 'message',
            'reference_id', 'reference_type', 'read', 'created_at'
        ]
        read_only_fields = fields
