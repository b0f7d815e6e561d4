"""
Service-layer error taxonomy.

Every error raised by a service function derives from ServiceError and
carries the label and HTTP status the API answers with.
"""
import logging

from rest_framework import status
from rest_framework.response import Response

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base class for errors surfaced to the caller of a service operation."""
    error = 'Server Error'
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class InventoryValidationError(ServiceError):
    """Raised when request data for an operation is missing or invalid."""
    error = 'Validation Error'
    status_code = status.HTTP_400_BAD_REQUEST


class OrderValidationError(InventoryValidationError):
    """Raised when a purchase order request is missing or invalid."""


class InvalidTransitionError(OrderValidationError):
    """Raised when a purchase order cannot move from its current status."""
    error = 'Invalid Transition'
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(
            f"Cannot move purchase order from '{current}' to '{requested}'"
        )


class ReceiptValidationError(OrderValidationError):
    """Raised when a received quantity is outside [0, ordered quantity]."""

    def __init__(self, item_id: int, received: int, ordered: int):
        self.item_id = item_id
        self.received = received
        self.ordered = ordered
        super().__init__(
            f"Item {item_id}: received quantity {received} must be "
            f"between 0 and ordered quantity {ordered}"
        )


class ResourceNotFoundError(ServiceError):
    """Raised when a referenced record does not exist."""
    error = 'Not Found'
    status_code = status.HTTP_404_NOT_FOUND


class ActionNotPermittedError(ServiceError):
    """Raised when the acting user's role does not allow the operation."""
    error = 'Permission Denied'
    status_code = status.HTTP_403_FORBIDDEN


class GatewayError(ServiceError):
    """Raised when the database fails during an operation."""
    error = 'Storage Unavailable'
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


def error_response(exc: ServiceError) -> Response:
    """Build the API response for a service error."""
    if exc.status_code >= 500:
        logger.error(f"{exc.__class__.__name__}: {exc}")
    else:
        logger.warning(f"{exc.__class__.__name__}: {exc}")
    return Response(
        {'error': exc.error, 'detail': str(exc)},
        status=exc.status_code
    )
