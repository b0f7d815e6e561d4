"""
DRF permission classes built on the actor's application role.
"""
from rest_framework import permissions

from .context import ActorContext
from .exceptions import ActionNotPermittedError


def _actor(request):
    try:
        return ActorContext.from_request(request)
    except ActionNotPermittedError:
        return None


class IsAdminOrManagerForWrites(permissions.BasePermission):
    """Anyone signed in may read; only admins and managers may write."""
    message = 'Only admins and managers may modify this resource.'

    def has_permission(self, request, view):
        actor = _actor(request)
        if actor is None:
            return False
        if request.method in permissions.SAFE_METHODS:
            return True
        return actor.is_admin_or_manager


class AdminForDeletes(IsAdminOrManagerForWrites):
    """Like IsAdminOrManagerForWrites, but deletions need an admin."""

    def has_permission(self, request, view):
        if request.method == 'DELETE':
            actor = _actor(request)
            if actor is None or not actor.is_admin:
                self.message = 'Only admins may delete this resource.'
                return False
            return True
        return super().has_permission(request, view)
