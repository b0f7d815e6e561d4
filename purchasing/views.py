"""
Purchase Order API Views.

Implements:
- GET /purchase-orders/ - List orders with optimized queries
- POST /purchase-orders/ - Create order with atomic transaction
- GET /purchase-orders/{id}/ - Order detail with items
- POST /purchase-orders/{id}/approve|ship|cancel/ - Status transitions
- POST /purchase-orders/{id}/receive/ - Receive goods into stock
- GET /purchase-orders/stats/ - Counts and values per status
"""
import logging

from rest_framework import generics, status
from rest_framework.response import Response
from rest_framework.views import APIView

from core.context import ActorContext
from core.exceptions import ServiceError, error_response
from core.rate_limiting import RateLimitMixin
from . import services
from .models import PurchaseOrder
from .serializers import (
    PurchaseOrderCreateSerializer,
    PurchaseOrderListSerializer,
    PurchaseOrderReceiveSerializer,
    PurchaseOrderSerializer,
)

logger = logging.getLogger(__name__)


class PurchaseOrderListCreateView(generics.ListCreateAPIView):
    """
    GET: List purchase orders, newest first
    POST: Create a pending purchase order (admins and managers)

    Query Parameters (GET):
        - supplier_id: Filter by supplier
        - status: pending, approved, shipped, received or cancelled
    """

    def get_serializer_class(self):
        if self.request.method == 'POST':
            return PurchaseOrderCreateSerializer
        return PurchaseOrderListSerializer

    def get_queryset(self):
        queryset = PurchaseOrder.objects.select_related('supplier').prefetch_related('items')

        supplier_id = self.request.query_params.get('supplier_id')
        if supplier_id:
            queryset = queryset.filter(supplier_id=supplier_id)

        status_filter = self.request.query_params.get('status', '').lower()
        if status_filter in PurchaseOrder.Status.values:
            queryset = queryset.filter(status=status_filter)

        return queryset.order_by('-created_at', '-id')

    def create(self, request, *args, **kwargs):
        """
        Returns:
            - 201: Order created as pending
            - 400: Validation error
            - 403: Not an admin or manager
            - 404: Supplier or products not found
        """
        serializer = PurchaseOrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            order = services.create_purchase_order(
                ActorContext.from_request(request),
                supplier_id=data['supplier_id'],
                items=data['items'],
                expected_date=data.get('expected_date'),
                notes=data.get('notes', ''),
            )
        except ServiceError as e:
            return error_response(e)
        except Exception as e:
            logger.exception(f"Unexpected error creating purchase order: {e}")
            return Response(
                {'error': 'Server Error', 'detail': 'An unexpected error occurred'},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        order = services.get_purchase_order(order.id)
        return Response(PurchaseOrderSerializer(order).data, status=status.HTTP_201_CREATED)


class PurchaseOrderDetailView(generics.RetrieveAPIView):
    """
    GET: Retrieve a purchase order with all items.
    """
    serializer_class = PurchaseOrderSerializer

    def get_queryset(self):
        return PurchaseOrder.objects.select_related('supplier', 'created_by').prefetch_related(
            'items__product'
        )


class PurchaseOrderTransitionView(APIView):
    """Base for the approve, ship and cancel endpoints."""
    transition = None

    def post(self, request, pk):
        try:
            order = self.transition(ActorContext.from_request(request), pk)
        except ServiceError as e:
            return error_response(e)
        order = services.get_purchase_order(order.id)
        return Response(PurchaseOrderSerializer(order).data)


class PurchaseOrderApproveView(PurchaseOrderTransitionView):
    """POST: pending -> approved"""
    transition = staticmethod(services.approve_purchase_order)


class PurchaseOrderShipView(PurchaseOrderTransitionView):
    """POST: approved -> shipped"""
    transition = staticmethod(services.ship_purchase_order)


class PurchaseOrderCancelView(PurchaseOrderTransitionView):
    """POST: pending -> cancelled"""
    transition = staticmethod(services.cancel_purchase_order)


class PurchaseOrderReceiveView(RateLimitMixin, APIView):
    """
    POST: Receive a shipped order and add the goods to stock.

    Request Body (optional):
    {
        "items": [
            {"item_id": 7, "received_quantity": 5}
        ]
    }

    Rate limited to 20 requests per minute.
    """
    rate_limit_max_requests = 20
    rate_limit_window_seconds = 60

    def post(self, request, pk):
        serializer = PurchaseOrderReceiveSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            order = services.receive_purchase_order(
                ActorContext.from_request(request),
                pk,
                serializer.validated_data.get('items'),
            )
        except ServiceError as e:
            return error_response(e)
        except Exception as e:
            logger.exception(f"Unexpected error receiving purchase order #{pk}: {e}")
            return Response(
                {'error': 'Server Error', 'detail': 'An unexpected error occurred'},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        order = services.get_purchase_order(order.id)
        return Response(PurchaseOrderSerializer(order).data)


class PurchaseOrderStatsView(APIView):
    """
    GET: Purchase order statistics for a supplier or overall.

    Query Parameters:
        - supplier_id: Filter stats by supplier (optional)
    """

    def get(self, request):
        stats = services.purchase_order_stats(request.query_params.get('supplier_id'))
        stats['received_value'] = str(stats['received_value'])
        stats['open_value'] = str(stats['open_value'])
        return Response(stats)
