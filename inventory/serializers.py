"""
Serializers for inventory models.
Provides data validation and JSON conversion for API endpoints.
"""
from decimal import Decimal

from rest_framework import serializers
from .models import Category, Customer, Product, ProductHistory, Supplier


class CategorySerializer(serializers.ModelSerializer):
    """Serializer for Category model with derived totals."""
    parent_id = serializers.PrimaryKeyRelatedField(
        queryset=Category.objects.all(),
        source='parent',
        allow_null=True,
        required=False
    )
    product_count = serializers.SerializerMethodField()
    total_value = serializers.SerializerMethodField()

    class Meta:
        model = Category
        fields = [
            'id', 'name', 'description', 'parent_id',
            'product_count', 'total_value', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def get_product_count(self, obj):
        """Use the annotated count when the view provided one."""
        if hasattr(obj, 'product_count'):
            return obj.product_count
        return obj.products.count()

    def get_total_value(self, obj):
        value = getattr(obj, 'total_value', None)
        if value is None:
            value = sum((p.stock_value for p in obj.products.all()), Decimal('0.00'))
        return str(Decimal(value).quantize(Decimal('0.01')))

    def validate_parent_id(self, value):
        if value is not None and self.instance is not None and value.pk == self.instance.pk:
            raise serializers.ValidationError("A category cannot be its own parent")
        return value


class CategoryMinimalSerializer(serializers.ModelSerializer):
    """Minimal serializer for nested category representation."""
    class Meta:
        model = Category
        fields = ['id', 'name']


class SupplierSerializer(serializers.ModelSerializer):
    """Serializer for Supplier model."""
    product_count = serializers.SerializerMethodField()

    class Meta:
        model = Supplier
        fields = [
            'id', 'name', 'contact_person', 'email', 'phone', 'address',
            'rating', 'lead_time', 'product_count', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def get_product_count(self, obj):
        if hasattr(obj, 'product_count'):
            return obj.product_count
        return obj.products.count()


class SupplierMinimalSerializer(serializers.ModelSerializer):
    """Minimal serializer for nested supplier representation."""
    class Meta:
        model = Supplier
        fields = ['id', 'name', 'lead_time']


class ProductSerializer(serializers.ModelSerializer):
    """Serializer for Product model with nested category and supplier."""
    category = CategoryMinimalSerializer(read_only=True)
    supplier = SupplierMinimalSerializer(read_only=True)
    category_id = serializers.PrimaryKeyRelatedField(
        queryset=Category.objects.all(),
        source='category',
        write_only=True,
        allow_null=True,
        required=False
    )
    supplier_id = serializers.PrimaryKeyRelatedField(
        queryset=Supplier.objects.all(),
        source='supplier',
        write_only=True,
        allow_null=True,
        required=False
    )
    stock_status = serializers.SerializerMethodField()
    is_low_stock = serializers.BooleanField(read_only=True)
    suggested_reorder_quantity = serializers.IntegerField(read_only=True)

    class Meta:
        model = Product
        fields = [
            'id', 'sku', 'name', 'description',
            'category', 'category_id', 'supplier', 'supplier_id',
            'quantity', 'reorder_level', 'price', 'cost', 'location',
            'stock_status', 'is_low_stock', 'suggested_reorder_quantity',
            'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def get_stock_status(self, obj):
        return obj.stock_status.value


class ProductMinimalSerializer(serializers.ModelSerializer):
    """Minimal serializer for autocomplete and nested representations."""
    class Meta:
        model = Product
        fields = ['id', 'sku', 'name', 'quantity', 'cost']


class ProductHistorySerializer(serializers.ModelSerializer):
    """Serializer for product audit entries."""
    changed_by = serializers.SerializerMethodField()

    class Meta:
        model = ProductHistory
        fields = ['id', 'field_name', 'old_value', 'new_value', 'changed_by', 'created_at']

    def get_changed_by(self, obj):
        if obj.changed_by is None:
            return None
        return {
            'id': obj.changed_by.pk,
            'name': obj.changed_by.get_full_name() or obj.changed_by.get_username(),
        }


class CustomerSerializer(serializers.ModelSerializer):
    """Serializer for Customer model; totals are maintained by the system."""

    class Meta:
        model = Customer
        fields = [
            'id', 'name', 'email', 'phone', 'address', 'status',
            'total_orders', 'total_spent', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'total_orders', 'total_spent', 'created_at', 'updated_at']
