"""
Core Models - actor roles used to gate inventory and purchasing actions.
"""
from django.conf import settings
from django.db import models


class Profile(models.Model):
    """
    Per-user profile carrying the application role.

    Roles:
        - ADMIN: full access, including deletions
        - MANAGER: catalogue edits and purchase order management
        - STAFF: read access and receiving shipments
    """

    class Role(models.TextChoices):
        ADMIN = 'admin', 'Admin'
        MANAGER = 'manager', 'Manager'
        STAFF = 'staff', 'Staff'

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='profile',
        help_text="Account this profile belongs to"
    )
    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.STAFF,
        db_index=True,
        help_text="Application role"
    )
    phone = models.CharField(max_length=50, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Profile'
        verbose_name_plural = 'Profiles'
        ordering = ['user__username']

    def __str__(self):
        return f"{self.user.get_username()} ({self.role})"
