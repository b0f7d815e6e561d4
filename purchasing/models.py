"""
Purchasing Models - PurchaseOrder and PurchaseOrderItem with status tracking.

Order Status Flow:
    PENDING -> APPROVED -> SHIPPED -> RECEIVED
    PENDING -> CANCELLED
"""
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from inventory.models import Product, Supplier


class PurchaseOrder(models.Model):
    """
    Procurement request placed with a supplier.

    Status:
        - PENDING: Created, awaiting approval
        - APPROVED: Approved, awaiting shipment
        - SHIPPED: Supplier has shipped, awaiting receipt
        - RECEIVED: Goods received and added to stock (terminal)
        - CANCELLED: Cancelled before approval (terminal)
    """

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        APPROVED = 'approved', 'Approved'
        SHIPPED = 'shipped', 'Shipped'
        RECEIVED = 'received', 'Received'
        CANCELLED = 'cancelled', 'Cancelled'

    order_number = models.CharField(
        max_length=32,
        unique=True,
        db_index=True,
        help_text="Human-readable order number"
    )
    supplier = models.ForeignKey(
        Supplier,
        on_delete=models.PROTECT,
        related_name='purchase_orders',
        help_text="Supplier the order is placed with"
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
        help_text="Current order status"
    )
    total_amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text="Sum of quantity x unit cost over all items"
    )
    order_date = models.DateTimeField(default=timezone.now)
    expected_date = models.DateField(null=True, blank=True)
    received_date = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True, default='')
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='purchase_orders_created'
    )
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Purchase Order'
        verbose_name_plural = 'Purchase Orders'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['supplier', 'status'], name='po_supplier_status_idx'),
            models.Index(fields=['status', 'created_at'], name='po_status_created_idx'),
        ]

    def __str__(self):
        return f"{self.order_number} - {self.supplier.name} ({self.status})"

    @property
    def is_terminal(self) -> bool:
        return self.status in (self.Status.RECEIVED, self.Status.CANCELLED)

    @property
    def item_count(self) -> int:
        return self.items.count()


class PurchaseOrderItem(models.Model):
    """
    One product line on a purchase order.

    Only received_quantity changes after creation, and only at receipt.
    """
    order = models.ForeignKey(
        PurchaseOrder,
        on_delete=models.CASCADE,
        related_name='items',
        help_text="Parent order"
    )
    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name='purchase_order_items',
        help_text="Ordered product"
    )
    quantity = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
        help_text="Quantity ordered"
    )
    unit_cost = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0'))],
        help_text="Cost per unit as ordered"
    )
    received_quantity = models.PositiveIntegerField(
        default=0,
        help_text="Quantity actually received"
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = 'Purchase Order Item'
        verbose_name_plural = 'Purchase Order Items'
        ordering = ['id']
        constraints = [
            models.UniqueConstraint(
                fields=['order', 'product'],
                name='unique_order_product'
            )
        ]

    def __str__(self):
        return f"{self.quantity}x {self.product.sku} @ {self.unit_cost}"

    @property
    def subtotal(self) -> Decimal:
        return self.quantity * self.unit_cost


class OrderSequence(models.Model):
    """Per-year counter backing purchase order numbers."""
    year = models.PositiveIntegerField(unique=True)
    last_number = models.PositiveIntegerField(default=0)

    class Meta:
        verbose_name = 'Order Sequence'
        verbose_name_plural = 'Order Sequences'

    def __str__(self):
        return f"{self.year}: {self.last_number}"
