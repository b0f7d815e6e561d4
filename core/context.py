"""
Actor context passed explicitly into every service operation.

Services never look up the current user themselves; views build an
ActorContext from the request and hand it down.
"""
from dataclasses import dataclass
from typing import Optional

from .exceptions import ActionNotPermittedError
from .models import Profile

Role = Profile.Role


@dataclass(frozen=True)
class ActorContext:
    """The user performing an operation and the role they act under."""
    user: Optional[object]
    role: str = Role.STAFF

    @classmethod
    def for_user(cls, user) -> 'ActorContext':
        if user is None or not user.is_authenticated:
            raise ActionNotPermittedError("Authentication required")
        if user.is_superuser:
            return cls(user=user, role=Role.ADMIN)
        profile = Profile.objects.filter(user=user).only('role').first()
        return cls(user=user, role=profile.role if profile else Role.STAFF)

    @classmethod
    def from_request(cls, request) -> 'ActorContext':
        return cls.for_user(request.user)

    @classmethod
    def system(cls) -> 'ActorContext':
        """Context for scheduled jobs and management commands."""
        return cls(user=None, role=Role.ADMIN)

    @property
    def user_id(self) -> Optional[int]:
        return self.user.pk if self.user is not None else None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_admin_or_manager(self) -> bool:
        return self.role in (Role.ADMIN, Role.MANAGER)

    def require_admin(self, action: str) -> None:
        if not self.is_admin:
            raise ActionNotPermittedError(f"Only admins may {action}")

    def require_admin_or_manager(self, action: str) -> None:
        if not self.is_admin_or_manager:
            raise ActionNotPermittedError(f"Only admins and managers may {action}")
