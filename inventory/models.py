"""
Inventory Models - Core data entities for the inventory management system.

Models:
    - Category: Product categorization (optionally nested)
    - Supplier: Vendors purchase orders are placed with
    - Product: Stocked items with on-hand quantity and reorder level
    - ProductHistory: Append-only audit trail of product field changes
    - Customer: Buyers tracked for sales reporting
"""
from decimal import Decimal

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from .stock import StockStatus, stock_status, suggested_reorder_quantity


class Category(models.Model):
    """
    Product category for organizing products.
    """
    name = models.CharField(
        max_length=100,
        unique=True,
        db_index=True,
        help_text="Unique category name"
    )
    description = models.TextField(
        blank=True,
        default='',
        help_text="Optional category description"
    )
    parent = models.ForeignKey(
        'self',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='children',
        help_text="Parent category, if nested"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Category'
        verbose_name_plural = 'Categories'
        ordering = ['name']

    def __str__(self):
        return self.name


class Supplier(models.Model):
    """
    Supplier entity purchase orders are placed with.

    lead_time is informational only; nothing schedules against it.
    """
    name = models.CharField(
        max_length=200,
        db_index=True,
        help_text="Supplier name"
    )
    contact_person = models.CharField(max_length=200, blank=True, default='')
    email = models.EmailField(blank=True, default='')
    phone = models.CharField(max_length=50, blank=True, default='')
    address = models.TextField(blank=True, default='')
    rating = models.DecimalField(
        max_digits=2,
        decimal_places=1,
        default=Decimal('0.0'),
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('5'))],
        help_text="Supplier rating from 0 to 5"
    )
    lead_time = models.PositiveIntegerField(
        default=0,
        help_text="Typical fulfilment time in days"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Supplier'
        verbose_name_plural = 'Suppliers'
        ordering = ['name']

    def __str__(self):
        return self.name


class Product(models.Model):
    """
    Product entity with on-hand stock.

    quantity only changes through product updates or purchase order receipts.
    """
    sku = models.CharField(
        max_length=64,
        unique=True,
        db_index=True,
        help_text="Stock-keeping unit, unique per product"
    )
    name = models.CharField(
        max_length=200,
        db_index=True,
        help_text="Product name for display and search"
    )
    description = models.TextField(blank=True, default='')
    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='products',
        help_text="Product category"
    )
    supplier = models.ForeignKey(
        Supplier,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='products',
        help_text="Default supplier"
    )
    quantity = models.PositiveIntegerField(
        default=0,
        help_text="Units currently on hand"
    )
    reorder_level = models.PositiveIntegerField(
        default=0,
        help_text="Stock at or below this level counts as low"
    )
    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0'))],
        help_text="Selling price per unit"
    )
    cost = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0'))],
        help_text="Purchase cost per unit"
    )
    location = models.CharField(max_length=200, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Product'
        verbose_name_plural = 'Products'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['category', 'quantity'], name='product_category_qty_idx'),
            models.Index(fields=['supplier', 'quantity'], name='product_supplier_qty_idx'),
        ]

    def __str__(self):
        return f"{self.sku} - {self.name}"

    @property
    def stock_status(self) -> StockStatus:
        return stock_status(self.quantity, self.reorder_level)

    @property
    def is_low_stock(self) -> bool:
        return self.quantity <= self.reorder_level

    @property
    def suggested_reorder_quantity(self) -> int:
        return suggested_reorder_quantity(self.quantity, self.reorder_level)

    @property
    def stock_value(self) -> Decimal:
        return self.quantity * self.cost


class ProductHistory(models.Model):
    """
    Audit record of one tracked field changing on a product.

    Rows are only ever inserted.
    """
    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name='history',
        help_text="Product that changed"
    )
    field_name = models.CharField(max_length=50, db_index=True)
    old_value = models.TextField(null=True, blank=True)
    new_value = models.TextField(null=True, blank=True)
    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='product_changes',
        help_text="User who made the change"
    )
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        verbose_name = 'Product History'
        verbose_name_plural = 'Product History'
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"{self.product.sku}.{self.field_name}: {self.old_value} -> {self.new_value}"


class Customer(models.Model):
    """
    Customer entity with running sales totals.
    """

    class Status(models.TextChoices):
        ACTIVE = 'active', 'Active'
        INACTIVE = 'inactive', 'Inactive'

    name = models.CharField(max_length=200, db_index=True)
    email = models.EmailField(blank=True, default='')
    phone = models.CharField(max_length=50, blank=True, default='')
    address = models.TextField(blank=True, default='')
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.ACTIVE,
        db_index=True
    )
    total_orders = models.PositiveIntegerField(default=0)
    total_spent = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal('0.00')
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Customer'
        verbose_name_plural = 'Customers'
        ordering = ['name']

    def __str__(self):
        return self.name

    @property
    def is_active(self) -> bool:
        return self.status == self.Status.ACTIVE
