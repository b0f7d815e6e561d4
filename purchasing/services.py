"""
Purchasing Service Layer - purchase order lifecycle and stock reconciliation.

Create:
1. Validate supplier and items (at least one, no duplicate products)
2. Compute total = sum(quantity x unit_cost) in Decimal
3. Write header and items in one transaction
4. Queue an order_created notification after commit

Receive:
1. Lock the order; it must be SHIPPED
2. Validate 0 <= received_quantity <= ordered quantity for every item
3. Lock products, add received quantities with F() increments
4. Mark RECEIVED with received_date, queue order_received notification
"""
import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional

from django.db import DatabaseError, transaction
from django.db.models import Count, F, Q, Sum
from django.utils import timezone

from core.context import ActorContext
from core.exceptions import (
    GatewayError,
    InvalidTransitionError,
    OrderValidationError,
    ReceiptValidationError,
    ResourceNotFoundError,
)
from inventory.models import Product, Supplier
from inventory.services import queue_low_stock_alert, record_product_change
from .lifecycle import RECEIPT_ONLY, Status, check_transition
from .models import PurchaseOrder, PurchaseOrderItem
from .numbering import next_order_number

logger = logging.getLogger(__name__)

# Matches PositiveIntegerField on PurchaseOrderItem.quantity
MAX_ITEM_QUANTITY = 2147483647
# total_amount is DecimalField(max_digits=14, decimal_places=2)
MAX_TOTAL_AMOUNT = Decimal('999999999999.99')
# unit_cost is DecimalField(max_digits=12, decimal_places=2)
MAX_UNIT_COST = Decimal('9999999999.99')


def validate_order_items(items: List[Dict]) -> List[Dict]:
    """
    Validate order items structure.

    Args:
        items: List of dicts with 'product_id', 'quantity' and 'unit_cost'

    Returns:
        Normalized items with int quantities and Decimal unit costs

    Raises:
        OrderValidationError: If validation fails
    """
    if not items:
        raise OrderValidationError("Order must contain at least one item")

    normalized = []
    seen_products = set()
    for idx, item in enumerate(items):
        for key in ('product_id', 'quantity', 'unit_cost'):
            if key not in item:
                raise OrderValidationError(f"Item {idx}: missing '{key}'")

        product_id = item['product_id']
        quantity = item['quantity']

        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise OrderValidationError(f"Item {idx}: quantity must be a positive integer")
        if quantity > MAX_ITEM_QUANTITY:
            raise OrderValidationError(
                f"Item {idx}: quantity must not exceed {MAX_ITEM_QUANTITY}"
            )

        try:
            unit_cost = Decimal(str(item['unit_cost']))
        except (InvalidOperation, ValueError):
            raise OrderValidationError(f"Item {idx}: unit_cost must be a number")
        if not unit_cost.is_finite() or unit_cost < 0:
            raise OrderValidationError(f"Item {idx}: unit_cost must not be negative")
        # Stored with two decimal places; finer costs would drift from the total
        if unit_cost.as_tuple().exponent < -2:
            raise OrderValidationError(
                f"Item {idx}: unit_cost must have at most 2 decimal places"
            )
        if unit_cost > MAX_UNIT_COST:
            raise OrderValidationError(f"Item {idx}: unit_cost is too large")

        if product_id in seen_products:
            raise OrderValidationError(f"Item {idx}: duplicate product_id {product_id}")
        seen_products.add(product_id)

        normalized.append({
            'product_id': product_id,
            'quantity': quantity,
            'unit_cost': unit_cost,
        })
    return normalized


def calculate_total(items: List[Dict]) -> Decimal:
    """Exact sum of quantity x unit_cost; no rounding."""
    return sum(
        (item['quantity'] * Decimal(item['unit_cost']) for item in items),
        Decimal('0')
    )


def queue_order_notification(order_id: int, status: str) -> None:
    """Notify about a status change once the current transaction commits."""
    def _send():
        try:
            from .tasks import notify_order_event
            notify_order_event.delay(order_id, str(status))
        except Exception as e:
            # Notification delivery never fails the order operation
            logger.error(f"Failed to queue {status} notification for order #{order_id}: {e}")

    transaction.on_commit(_send)


def create_purchase_order(
    actor: ActorContext,
    supplier_id: Optional[int],
    items: List[Dict],
    expected_date: Optional[date] = None,
    notes: str = '',
) -> PurchaseOrder:
    """
    Create a pending purchase order with its line items.

    Raises:
        ActionNotPermittedError: If the actor is not an admin or manager
        OrderValidationError: If supplier or items are missing or invalid
        ResourceNotFoundError: If the supplier or a product doesn't exist
        GatewayError: If the database fails; nothing is left behind
    """
    actor.require_admin_or_manager('create purchase orders')

    if not supplier_id:
        raise OrderValidationError("Supplier is required")
    items = validate_order_items(items)

    try:
        supplier = Supplier.objects.get(id=supplier_id)
    except Supplier.DoesNotExist:
        raise ResourceNotFoundError(f"Supplier {supplier_id} not found")

    product_ids = [item['product_id'] for item in items]
    found = set(Product.objects.filter(id__in=product_ids).values_list('id', flat=True))
    missing = [pid for pid in product_ids if pid not in found]
    if missing:
        raise ResourceNotFoundError(f"Products not found: {missing}")

    total_amount = calculate_total(items)
    if total_amount > MAX_TOTAL_AMOUNT:
        raise OrderValidationError(
            f"Order total {total_amount} exceeds the maximum of {MAX_TOTAL_AMOUNT}"
        )

    try:
        with transaction.atomic():
            order = PurchaseOrder.objects.create(
                order_number=next_order_number(),
                supplier=supplier,
                status=Status.PENDING,
                total_amount=total_amount,
                order_date=timezone.now(),
                expected_date=expected_date,
                notes=notes or '',
                created_by=actor.user,
            )
            PurchaseOrderItem.objects.bulk_create([
                PurchaseOrderItem(
                    order=order,
                    product_id=item['product_id'],
                    quantity=item['quantity'],
                    unit_cost=item['unit_cost'],
                )
                for item in items
            ])
            queue_order_notification(order.id, Status.PENDING)
    except DatabaseError as e:
        logger.error(f"Purchase order for supplier {supplier_id} failed: {e}")
        raise GatewayError(f"Purchase order could not be saved: {e}") from e

    logger.info(
        f"Created purchase order {order.order_number}: {len(items)} items, "
        f"total {total_amount}"
    )
    return order


def get_purchase_order(order_id: int) -> PurchaseOrder:
    try:
        return PurchaseOrder.objects.select_related('supplier', 'created_by').prefetch_related(
            'items__product'
        ).get(id=order_id)
    except PurchaseOrder.DoesNotExist:
        raise ResourceNotFoundError(f"Purchase order {order_id} not found")


def transition_purchase_order(actor: ActorContext, order_id: int, new_status: str) -> PurchaseOrder:
    """
    Move an order to the next status (approve, ship or cancel).

    Only status changes; receiving goes through receive_purchase_order.

    Raises:
        ActionNotPermittedError: If the actor is not an admin or manager
        ResourceNotFoundError: If the order doesn't exist
        InvalidTransitionError: If new_status is not a legal successor
        GatewayError: If the database fails
    """
    actor.require_admin_or_manager('change purchase order status')

    try:
        with transaction.atomic():
            try:
                order = PurchaseOrder.objects.select_for_update().get(id=order_id)
            except PurchaseOrder.DoesNotExist:
                raise ResourceNotFoundError(f"Purchase order {order_id} not found")

            # Receiving also reconciles stock, so it never goes through here
            if new_status in RECEIPT_ONLY:
                raise InvalidTransitionError(order.status, new_status)
            check_transition(order.status, new_status)

            previous = order.status
            order.status = new_status
            order.save(update_fields=['status', 'updated_at'])
            queue_order_notification(order.id, new_status)
    except DatabaseError as e:
        raise GatewayError(f"Purchase order {order_id} could not be updated: {e}") from e

    logger.info(f"Purchase order {order.order_number}: {previous} -> {new_status}")
    return order


def approve_purchase_order(actor: ActorContext, order_id: int) -> PurchaseOrder:
    return transition_purchase_order(actor, order_id, Status.APPROVED)


def ship_purchase_order(actor: ActorContext, order_id: int) -> PurchaseOrder:
    return transition_purchase_order(actor, order_id, Status.SHIPPED)


def cancel_purchase_order(actor: ActorContext, order_id: int) -> PurchaseOrder:
    return transition_purchase_order(actor, order_id, Status.CANCELLED)


def _receipt_quantities(items: List[PurchaseOrderItem],
                        received_items: Optional[List[Dict]]) -> Dict[int, int]:
    """
    Resolve the received quantity of every item.

    Items not mentioned default to their ordered quantity.
    """
    by_id = {item.id: item for item in items}
    quantities = {item.id: item.quantity for item in items}

    seen = set()
    for entry in received_items or []:
        item_id = entry.get('item_id')
        received = entry.get('received_quantity')
        if item_id not in by_id:
            raise ResourceNotFoundError(f"Item {item_id} is not part of this order")
        if item_id in seen:
            raise OrderValidationError(f"Item {item_id} listed more than once")
        seen.add(item_id)

        ordered = by_id[item_id].quantity
        if isinstance(received, bool) or not isinstance(received, int) or not 0 <= received <= ordered:
            raise ReceiptValidationError(item_id, received, ordered)
        quantities[item_id] = received

    return quantities


def receive_purchase_order(actor: ActorContext, order_id: int,
                           received_items: Optional[List[Dict]] = None) -> PurchaseOrder:
    """
    Receive a shipped order and add the received quantities to stock.

    The whole receipt is one transaction. A second receive of the same order
    fails because the order is no longer SHIPPED.

    Args:
        actor: Acting user context (any role may receive)
        order_id: Order being received
        received_items: Optional list of {'item_id', 'received_quantity'}

    Returns:
        The received order

    Raises:
        ResourceNotFoundError: If the order or a listed item doesn't exist
        InvalidTransitionError: If the order is not SHIPPED
        ReceiptValidationError: If a received quantity is out of range
        GatewayError: If the database fails; no stock is changed
    """
    received_product_ids = []

    try:
        with transaction.atomic():
            try:
                order = PurchaseOrder.objects.select_for_update().get(id=order_id)
            except PurchaseOrder.DoesNotExist:
                raise ResourceNotFoundError(f"Purchase order {order_id} not found")

            check_transition(order.status, Status.RECEIVED)

            items = list(order.items.select_for_update().order_by('id'))
            quantities = _receipt_quantities(items, received_items)

            # Lock in id order so concurrent receipts can't deadlock
            product_ids = sorted({item.product_id for item in items})
            products = {
                p.id: p for p in
                Product.objects.select_for_update().filter(id__in=product_ids).order_by('id')
            }

            now = timezone.now()
            for item in items:
                received = quantities[item.id]
                item.received_quantity = received
                item.save(update_fields=['received_quantity'])

                if received == 0:
                    continue

                Product.objects.filter(id=item.product_id).update(
                    quantity=F('quantity') + received,
                    updated_at=now
                )
                product = products[item.product_id]
                old_quantity = product.quantity
                product.quantity = old_quantity + received
                record_product_change(product.id, 'quantity', old_quantity, product.quantity, actor)
                received_product_ids.append(product.id)

                logger.debug(
                    f"Order {order.order_number}: received {received} of {product.sku}, "
                    f"stock now {product.quantity}"
                )

            order.status = Status.RECEIVED
            order.received_date = now
            order.save(update_fields=['status', 'received_date', 'updated_at'])
            queue_order_notification(order.id, Status.RECEIVED)

            # Receipts raise stock, but a partial one can leave a product low
            for product_id in received_product_ids:
                product = products[product_id]
                if product.is_low_stock:
                    queue_low_stock_alert(product_id)
    except DatabaseError as e:
        logger.error(f"Receiving purchase order #{order_id} failed: {e}")
        raise GatewayError(f"Purchase order {order_id} could not be received: {e}") from e

    logger.info(
        f"Purchase order {order.order_number} received: "
        f"{sum(quantities.values())} units across {len(items)} items"
    )
    return order


def purchase_order_stats(supplier_id: Optional[int] = None) -> Dict:
    """Counts per status plus value of received and open orders."""
    queryset = PurchaseOrder.objects.all()
    if supplier_id:
        queryset = queryset.filter(supplier_id=supplier_id)

    open_statuses = [Status.PENDING, Status.APPROVED, Status.SHIPPED]
    stats = queryset.aggregate(
        total_orders=Count('id'),
        pending_orders=Count('id', filter=Q(status=Status.PENDING)),
        approved_orders=Count('id', filter=Q(status=Status.APPROVED)),
        shipped_orders=Count('id', filter=Q(status=Status.SHIPPED)),
        received_orders=Count('id', filter=Q(status=Status.RECEIVED)),
        cancelled_orders=Count('id', filter=Q(status=Status.CANCELLED)),
        received_value=Sum('total_amount', filter=Q(status=Status.RECEIVED)),
        open_value=Sum('total_amount', filter=Q(status__in=open_statuses)),
    )
    stats['received_value'] = stats['received_value'] or Decimal('0.00')
    stats['open_value'] = stats['open_value'] or Decimal('0.00')
    return stats
