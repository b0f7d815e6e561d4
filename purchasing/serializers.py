"""
Serializers for purchasing models.
"""
from rest_framework import serializers

from inventory.serializers import ProductMinimalSerializer, SupplierMinimalSerializer
from .models import PurchaseOrder, PurchaseOrderItem


class PurchaseOrderItemSerializer(serializers.ModelSerializer):
    """Line item with product details."""
    product = ProductMinimalSerializer(read_only=True)
    subtotal = serializers.DecimalField(
        max_digits=14,
        decimal_places=2,
        read_only=True
    )

    class Meta:
        model = PurchaseOrderItem
        fields = ['id', 'product', 'quantity', 'unit_cost', 'received_quantity', 'subtotal']


class PurchaseOrderItemCreateSerializer(serializers.Serializer):
    """One item in a purchase order creation request."""
    product_id = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1, max_value=2147483647)
    unit_cost = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)


class PurchaseOrderSerializer(serializers.ModelSerializer):
    """
    Full purchase order with supplier and items.
    Expects select_related('supplier') and prefetch_related('items__product').
    """
    supplier = SupplierMinimalSerializer(read_only=True)
    items = PurchaseOrderItemSerializer(many=True, read_only=True)
    created_by = serializers.SerializerMethodField()
    is_terminal = serializers.BooleanField(read_only=True)

    class Meta:
        model = PurchaseOrder
        fields = [
            'id', 'order_number', 'supplier', 'status', 'total_amount',
            'order_date', 'expected_date', 'received_date', 'notes',
            'created_by', 'items', 'is_terminal',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields

    def get_created_by(self, obj):
        user = obj.created_by
        if user is None:
            return None
        return {'id': user.id, 'name': user.get_full_name() or user.get_username()}


class PurchaseOrderListSerializer(serializers.ModelSerializer):
    """
    Compact listing row.
    Uses select_related for supplier data.
    """
    supplier_name = serializers.CharField(source='supplier.name', read_only=True)
    item_count = serializers.SerializerMethodField()

    class Meta:
        model = PurchaseOrder
        fields = [
            'id', 'order_number', 'supplier_name', 'status',
            'total_amount', 'item_count', 'order_date', 'expected_date', 'created_at'
        ]

    def get_item_count(self, obj):
        if hasattr(obj, '_prefetched_objects_cache') and 'items' in obj._prefetched_objects_cache:
            return len(obj.items.all())
        return obj.items.count()


class PurchaseOrderCreateSerializer(serializers.Serializer):
    """
    Request format for POST /purchase-orders/

    {
        "supplier_id": 1,
        "expected_date": "2026-11-01",
        "notes": "Quarterly restock",
        "items": [
            {"product_id": 1, "quantity": 10, "unit_cost": "2.50"},
            {"product_id": 3, "quantity": 4, "unit_cost": "4.00"}
        ]
    }
    """
    supplier_id = serializers.IntegerField(min_value=1)
    expected_date = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default='')
    items = PurchaseOrderItemCreateSerializer(many=True)

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError("At least one item is required")

        product_ids = [item['product_id'] for item in value]
        if len(product_ids) != len(set(product_ids)):
            raise serializers.ValidationError("Duplicate products in order items")

        return value


class ReceiptItemSerializer(serializers.Serializer):
    item_id = serializers.IntegerField(min_value=1)
    received_quantity = serializers.IntegerField(min_value=0)


class PurchaseOrderReceiveSerializer(serializers.Serializer):
    """
    Request format for POST /purchase-orders/{id}/receive/

    Items left out are received in full; an empty body receives everything.
    """
    items = ReceiptItemSerializer(many=True, required=False)
