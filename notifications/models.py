"""
Notification Models - per-user messages raised by inventory and purchasing events.
"""
from django.conf import settings
from django.db import models


class Notification(models.Model):
    """
    A message delivered to one user.

    Only the read flag changes after creation.
    """

    class Type(models.TextChoices):
        LOW_STOCK = 'low_stock', 'Low Stock'
        ORDER_CREATED = 'order_created', 'Order Created'
        ORDER_APPROVED = 'order_approved', 'Order Approved'
        ORDER_SHIPPED = 'order_shipped', 'Order Shipped'
        ORDER_RECEIVED = 'order_received', 'Order Received'
        ORDER_CANCELLED = 'order_cancelled', 'Order Cancelled'
        SYSTEM = 'system', 'System'

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='notifications',
        help_text="Recipient"
    )
    type = models.CharField(
        max_length=30,
        choices=Type.choices,
        default=Type.SYSTEM,
        db_index=True
    )
    title = models.CharField(max_length=200)
    message = models.TextField()
    reference_id = models.CharField(
        max_length=64,
        null=True,
        blank=True,
        help_text="Identifier of the order or product that triggered this"
    )
    reference_type = models.CharField(
        max_length=50,
        null=True,
        blank=True,
        help_text="Kind of record reference_id points to"
    )
    read = models.BooleanField(default=False, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        verbose_name = 'Notification'
        verbose_name_plural = 'Notifications'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['user', 'read'], name='notification_user_read_idx'),
        ]

    def __str__(self):
        return f"{self.type} for {self.user_id}: {self.title}"
