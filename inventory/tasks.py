"""
Celery tasks for stock alerts.

Tasks:
    - notify_low_stock: Alert admins and managers about one product
    - scan_low_stock: Periodic sweep alerting on every low-stock product
"""
import logging
from datetime import timedelta

from celery import shared_task
from django.utils import timezone

logger = logging.getLogger(__name__)

ALERT_COOLDOWN = timedelta(hours=24)


def _low_stock_message(product) -> str:
    return (
        f"{product.name} ({product.sku}) has {product.quantity} units left; "
        f"reorder level is {product.reorder_level}. "
        f"Suggested reorder: {product.suggested_reorder_quantity} units."
    )


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    autoretry_for=(Exception,),
    retry_backoff=True
)
def notify_low_stock(self, product_id: int):
    """
    Send a low_stock notification for a product to admins and managers.

    Skipped if the product has recovered since the alert was queued.
    """
    from inventory.models import Product
    from inventory.stock import StockStatus
    from notifications.models import Notification
    from notifications.services import emit_to_users, managers_and_admins

    try:
        product = Product.objects.get(id=product_id)
    except Product.DoesNotExist:
        logger.error(f"Product #{product_id} not found for low stock alert")
        return {'status': 'error', 'message': f'Product {product_id} not found'}

    status = product.stock_status
    if status == StockStatus.IN_STOCK:
        logger.info(f"Product {product.sku} is back in stock, skipping alert")
        return {'status': 'skipped', 'message': f'Product {product_id} is in stock'}

    sent = emit_to_users(
        managers_and_admins(),
        Notification.Type.LOW_STOCK,
        f"{status.label}: {product.name}",
        _low_stock_message(product),
        reference_id=product.id,
        reference_type='product',
    )
    logger.info(f"Low stock alert for {product.sku} sent to {len(sent)} users")
    return {'status': 'success', 'product_id': product.id, 'recipients': len(sent)}


@shared_task
def scan_low_stock():
    """
    Periodic sweep over all low-stock products.

    Products already alerted within the cooldown window are skipped so the
    scan doesn't flood inboxes.
    """
    from inventory.services import low_stock_products
    from notifications.models import Notification

    since = timezone.now() - ALERT_COOLDOWN
    recently_alerted = set(
        Notification.objects.filter(
            type=Notification.Type.LOW_STOCK,
            reference_type='product',
            created_at__gte=since,
        ).values_list('reference_id', flat=True)
    )

    queued = 0
    for product in low_stock_products():
        if str(product.id) in recently_alerted:
            continue
        notify_low_stock.delay(product.id)
        queued += 1

    if queued:
        logger.warning(f"Low stock scan queued {queued} alerts")
    return {'queued': queued}
