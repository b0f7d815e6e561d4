"""
Purchase order state machine.

    pending --approve--> approved --ship--> shipped --receive--> received
    pending --cancel---> cancelled

received and cancelled are terminal. Every status has an entry in
STATUS_EVENTS; a missing entry raises ImproperlyConfigured at import.
"""
from dataclasses import dataclass

from django.core.exceptions import ImproperlyConfigured

from core.exceptions import InvalidTransitionError
from notifications.models import Notification
from .models import PurchaseOrder

Status = PurchaseOrder.Status

ALLOWED_TRANSITIONS = {
    Status.PENDING: frozenset({Status.APPROVED, Status.CANCELLED}),
    Status.APPROVED: frozenset({Status.SHIPPED}),
    Status.SHIPPED: frozenset({Status.RECEIVED}),
    Status.RECEIVED: frozenset(),
    Status.CANCELLED: frozenset(),
}

# Moving to RECEIVED also reconciles stock, so it has its own operation.
RECEIPT_ONLY = frozenset({Status.RECEIVED})


@dataclass(frozen=True)
class StatusEvent:
    label: str
    notification_type: str
    title: str
    verb: str


STATUS_EVENTS = {
    Status.PENDING: StatusEvent(
        'Pending', Notification.Type.ORDER_CREATED, 'Purchase order created', 'was created'
    ),
    Status.APPROVED: StatusEvent(
        'Approved', Notification.Type.ORDER_APPROVED, 'Purchase order approved', 'was approved'
    ),
    Status.SHIPPED: StatusEvent(
        'Shipped', Notification.Type.ORDER_SHIPPED, 'Purchase order shipped', 'has shipped'
    ),
    Status.RECEIVED: StatusEvent(
        'Received', Notification.Type.ORDER_RECEIVED, 'Purchase order received', 'was received'
    ),
    Status.CANCELLED: StatusEvent(
        'Cancelled', Notification.Type.ORDER_CANCELLED, 'Purchase order cancelled', 'was cancelled'
    ),
}

for _table in (ALLOWED_TRANSITIONS, STATUS_EVENTS):
    if set(_table) != set(Status):
        raise ImproperlyConfigured(
            f"Purchase order status table is missing {set(Status) - set(_table)}"
        )


def can_transition(current: str, target: str) -> bool:
    return Status(target) in ALLOWED_TRANSITIONS[Status(current)]


def check_transition(current: str, target: str) -> None:
    """
    Raises:
        InvalidTransitionError: If target is not a legal successor of current
    """
    if target not in Status.values or not can_transition(current, target):
        raise InvalidTransitionError(current, target)


def status_event(status: str) -> StatusEvent:
    return STATUS_EVENTS[Status(status)]
