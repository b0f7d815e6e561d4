"""
Notification Service Layer - emitting and reading user notifications.
"""
import logging
from typing import Iterable, List, Optional

from django.contrib.auth import get_user_model
from django.db.models import Q

from core.exceptions import ResourceNotFoundError
from core.models import Profile
from .models import Notification

logger = logging.getLogger(__name__)


def emit_notification(
    user,
    type: str,
    title: str,
    message: str,
    reference_id: Optional[object] = None,
    reference_type: Optional[str] = None,
) -> Notification:
    """Create one unread notification for a user."""
    notification = Notification.objects.create(
        user=user,
        type=type,
        title=title,
        message=message,
        reference_id=str(reference_id) if reference_id is not None else None,
        reference_type=reference_type,
    )
    logger.debug(f"Notification #{notification.id} ({type}) sent to user {user.pk}")
    return notification


def emit_to_users(users: Iterable, type: str, title: str, message: str,
                  reference_id=None, reference_type=None) -> List[Notification]:
    """Send the same notification to every user, once each."""
    sent = []
    seen = set()
    for user in users:
        if user is None or user.pk in seen:
            continue
        seen.add(user.pk)
        sent.append(emit_notification(user, type, title, message, reference_id, reference_type))
    return sent


def managers_and_admins():
    """Active users who receive inventory and purchasing alerts."""
    return get_user_model().objects.filter(is_active=True).filter(
        Q(is_superuser=True) |
        Q(profile__role__in=[Profile.Role.ADMIN, Profile.Role.MANAGER])
    ).distinct().order_by('pk')


def notifications_for(actor):
    return Notification.objects.filter(user_id=actor.user_id).order_by('-created_at', '-id')


def unread_count(actor) -> int:
    return Notification.objects.filter(user_id=actor.user_id, read=False).count()


def mark_as_read(actor, notification_id: int) -> Notification:
    """
    Flag one of the actor's notifications as read.

    Raises:
        ResourceNotFoundError: If the notification doesn't exist or isn't theirs
    """
    try:
        notification = Notification.objects.get(id=notification_id, user_id=actor.user_id)
    except Notification.DoesNotExist:
        raise ResourceNotFoundError(f"Notification {notification_id} not found")

    if not notification.read:
        notification.read = True
        notification.save(update_fields=['read'])
    return notification


def mark_all_as_read(actor) -> int:
    """Flag every unread notification of the actor as read; returns the count."""
    updated = Notification.objects.filter(user_id=actor.user_id, read=False).update(read=True)
    logger.info(f"Marked {updated} notifications read for user {actor.user_id}")
    return updated
