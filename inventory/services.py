"""
Inventory Service Layer - product changes with audit trail, customer status
and dashboard aggregates.

Product updates record one ProductHistory row per tracked field whose value
actually changed, stamped with the acting user.
"""
import logging
from decimal import Decimal
from typing import Dict, List

from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import Count, DecimalField, ExpressionWrapper, F, Q, Sum, Value
from django.db.models.functions import Coalesce

from core.context import ActorContext
from core.exceptions import (
    GatewayError,
    InventoryValidationError,
    ResourceNotFoundError,
)
from .models import Category, Customer, Product, ProductHistory, Supplier
from .stock import StockStatus, stock_status

logger = logging.getLogger(__name__)

TRACKED_FIELDS = ['quantity', 'price', 'cost', 'reorder_level', 'supplier_id', 'category_id']

EDITABLE_FIELDS = {
    'sku', 'name', 'description', 'quantity', 'reorder_level',
    'price', 'cost', 'location', 'category_id', 'supplier_id',
}

STOCK_VALUE = ExpressionWrapper(
    F('quantity') * F('cost'),
    output_field=DecimalField(max_digits=18, decimal_places=2)
)

LOW_STOCK = Q(quantity__lte=F('reorder_level'))


def _normalize_changes(changes: Dict) -> Dict:
    """Accept related objects or ids for category/supplier."""
    normalized = {}
    for field, value in changes.items():
        if field in ('category', 'supplier'):
            field = f"{field}_id"
            value = value.pk if value is not None else None
        if field not in EDITABLE_FIELDS:
            raise InventoryValidationError(f"Field '{field}' cannot be changed")
        normalized[field] = value
    return normalized


def _history_value(value):
    return None if value is None else str(value)


def record_product_change(product_id: int, field_name: str, old_value, new_value,
                          actor: ActorContext) -> ProductHistory:
    return ProductHistory.objects.create(
        product_id=product_id,
        field_name=field_name,
        old_value=_history_value(old_value),
        new_value=_history_value(new_value),
        changed_by=actor.user,
    )


def get_product(product_id: int) -> Product:
    try:
        return Product.objects.select_related('category', 'supplier').get(id=product_id)
    except Product.DoesNotExist:
        raise ResourceNotFoundError(f"Product {product_id} not found")


def create_product(actor: ActorContext, data: Dict) -> Product:
    actor.require_admin_or_manager('create products')
    fields = _normalize_changes(data)
    try:
        product = Product.objects.create(**fields)
    except IntegrityError as e:
        raise InventoryValidationError(f"Product could not be created: {e}") from e
    except DatabaseError as e:
        raise GatewayError(f"Product could not be created: {e}") from e

    logger.info(f"Created product {product.sku} (#{product.id})")
    if stock_status(product.quantity, product.reorder_level) != StockStatus.IN_STOCK:
        queue_low_stock_alert(product.id)
    return product


def update_product(actor: ActorContext, product_id: int, changes: Dict) -> Product:
    """
    Apply changes to a product and audit tracked fields.

    Args:
        actor: Acting user context
        product_id: Product to change
        changes: Field -> new value; 'category'/'supplier' may be instances

    Returns:
        The refreshed product

    Raises:
        ActionNotPermittedError: If the actor is staff
        ResourceNotFoundError: If the product doesn't exist
        InventoryValidationError: If a field is not editable or a unique value clashes
        GatewayError: If the database fails
    """
    actor.require_admin_or_manager('edit products')
    fields = _normalize_changes(changes)

    try:
        with transaction.atomic():
            try:
                product = Product.objects.select_for_update().get(id=product_id)
            except Product.DoesNotExist:
                raise ResourceNotFoundError(f"Product {product_id} not found")

            before = {field: getattr(product, field) for field in TRACKED_FIELDS}
            status_before = stock_status(product.quantity, product.reorder_level)

            for field, value in fields.items():
                setattr(product, field, value)
            product.save()
            product.refresh_from_db()

            changed = []
            for field in TRACKED_FIELDS:
                if field not in fields:
                    continue
                after = getattr(product, field)
                if after != before[field]:
                    record_product_change(product.id, field, before[field], after, actor)
                    changed.append(field)
    except IntegrityError as e:
        raise InventoryValidationError(f"Product {product_id} could not be updated: {e}") from e
    except DatabaseError as e:
        raise GatewayError(f"Product {product_id} could not be updated: {e}") from e

    if changed:
        logger.info(f"Product {product.sku}: audited changes to {', '.join(changed)}")

    status_after = stock_status(product.quantity, product.reorder_level)
    if status_before == StockStatus.IN_STOCK and status_after != StockStatus.IN_STOCK:
        queue_low_stock_alert(product.id)

    return product


def delete_product(actor: ActorContext, product_id: int) -> None:
    actor.require_admin('delete products')
    product = get_product(product_id)
    if product.purchase_order_items.exists():
        raise InventoryValidationError(
            f"Product {product.sku} appears on purchase orders and cannot be deleted"
        )
    product.delete()
    logger.info(f"Deleted product {product.sku} (#{product_id})")


def product_history(product_id: int):
    get_product(product_id)
    return ProductHistory.objects.filter(product_id=product_id).select_related('changed_by')


def queue_low_stock_alert(product_id: int) -> None:
    """Send a low-stock alert once the current transaction commits."""
    def _send():
        try:
            from .tasks import notify_low_stock
            notify_low_stock.delay(product_id)
        except Exception as e:
            # Alerts must never fail the stock change itself
            logger.error(f"Failed to queue low stock alert for product {product_id}: {e}")

    transaction.on_commit(_send)


def toggle_customer_status(actor: ActorContext, customer_id: int) -> Customer:
    actor.require_admin_or_manager('change customer status')
    try:
        customer = Customer.objects.get(id=customer_id)
    except Customer.DoesNotExist:
        raise ResourceNotFoundError(f"Customer {customer_id} not found")

    customer.status = (
        Customer.Status.INACTIVE if customer.is_active else Customer.Status.ACTIVE
    )
    customer.save(update_fields=['status', 'updated_at'])
    logger.info(f"Customer #{customer.id} is now {customer.status}")
    return customer


def dashboard_stats() -> Dict:
    """Headline figures for the dashboard."""
    from purchasing.models import PurchaseOrder

    products = Product.objects.aggregate(
        total_products=Count('id'),
        low_stock_items=Count('id', filter=LOW_STOCK),
        total_value=Coalesce(Sum(STOCK_VALUE), Value(Decimal('0.00')),
                             output_field=DecimalField(max_digits=18, decimal_places=2)),
    )
    return {
        'total_products': products['total_products'],
        'low_stock_items': products['low_stock_items'],
        'total_categories': Category.objects.count(),
        'total_suppliers': Supplier.objects.count(),
        'total_value': products['total_value'],
        'pending_orders': PurchaseOrder.objects.filter(
            status=PurchaseOrder.Status.PENDING
        ).count(),
    }


def low_stock_products():
    return Product.objects.select_related('category', 'supplier').filter(LOW_STOCK)


def categories_with_totals():
    """Categories annotated with product_count and total_value (quantity x cost)."""
    return Category.objects.annotate(
        product_count=Count('products', distinct=True),
        total_value=Coalesce(
            Sum(ExpressionWrapper(
                F('products__quantity') * F('products__cost'),
                output_field=DecimalField(max_digits=18, decimal_places=2)
            )),
            Value(Decimal('0.00')),
            output_field=DecimalField(max_digits=18, decimal_places=2)
        ),
    )


def category_distribution() -> List[Dict]:
    """Product count and stock value per category."""
    rows = categories_with_totals().order_by('name')
    return [
        {
            'id': category.id,
            'name': category.name,
            'product_count': category.product_count,
            'total_value': category.total_value,
        }
        for category in rows
    ]
