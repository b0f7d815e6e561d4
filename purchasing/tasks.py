"""
Celery tasks for purchase order processing.

Tasks:
    - notify_order_event: Notify managers, admins and the creator about a status change
    - generate_daily_purchasing_report: Yesterday's purchasing figures (Celery Beat)
"""
import logging
from datetime import timedelta

from celery import shared_task
from django.db.models import Count, Q, Sum
from django.utils import timezone

logger = logging.getLogger(__name__)


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    autoretry_for=(Exception,),
    retry_backoff=True
)
def notify_order_event(self, order_id: int, status: str):
    """
    Async task triggered after a purchase order changes status.

    The event is delivered even when the order has moved on since it was
    queued; each status change is announced once it happened.

    Args:
        order_id: ID of the purchase order
        status: Status the order entered

    Returns:
        Dict with delivery details
    """
    from notifications.services import emit_to_users, managers_and_admins
    from purchasing.lifecycle import status_event
    from purchasing.models import PurchaseOrder

    try:
        order = PurchaseOrder.objects.select_related('supplier', 'created_by').get(id=order_id)
    except PurchaseOrder.DoesNotExist:
        logger.error(f"Purchase order #{order_id} not found for notification")
        return {'status': 'error', 'message': f'Purchase order {order_id} not found'}

    event = status_event(status)
    recipients = list(managers_and_admins())
    if order.created_by is not None:
        recipients.append(order.created_by)

    message = (
        f"Purchase order {order.order_number} from {order.supplier.name} "
        f"{event.verb}. Total: ${order.total_amount}"
    )
    sent = emit_to_users(
        recipients,
        event.notification_type,
        event.title,
        message,
        reference_id=order.id,
        reference_type='purchase_order',
    )

    logger.info(f"[CELERY] {event.title}: {order.order_number} -> {len(sent)} recipients")
    return {
        'status': 'success',
        'order_id': order.id,
        'recipients': len(sent),
    }


@shared_task
def generate_daily_purchasing_report():
    """
    Generate yesterday's purchasing statistics.

    Scheduled via Celery Beat for daily execution.
    """
    from purchasing.models import PurchaseOrder

    Status = PurchaseOrder.Status
    yesterday = timezone.now().date() - timedelta(days=1)

    stats = PurchaseOrder.objects.filter(created_at__date=yesterday).aggregate(
        total_orders=Count('id'),
        cancelled_orders=Count('id', filter=Q(status=Status.CANCELLED)),
        ordered_value=Sum('total_amount', filter=~Q(status=Status.CANCELLED)),
    )
    stats['received_orders'] = PurchaseOrder.objects.filter(
        received_date__date=yesterday
    ).count()

    report = f"""
    ===============================================
    DAILY PURCHASING REPORT - {yesterday}
    ===============================================
    Orders Placed: {stats['total_orders']}
    Cancelled: {stats['cancelled_orders']}
    Orders Received: {stats['received_orders']}
    Ordered Value: ${stats['ordered_value'] or 0}
    ===============================================
    """

    logger.info(report)

    stats['ordered_value'] = str(stats['ordered_value'] or '0.00')
    stats['date'] = str(yesterday)
    return stats
