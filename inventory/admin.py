"""
Django Admin configuration for inventory models.
"""
from django.contrib import admin
from .models import Category, Customer, Product, ProductHistory, Supplier


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'parent', 'product_count', 'created_at']
    search_fields = ['name']
    ordering = ['name']
    raw_id_fields = ['parent']

    def product_count(self, obj):
        return obj.products.count()
    product_count.short_description = 'Products'


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'contact_person', 'rating', 'lead_time', 'created_at']
    search_fields = ['name', 'contact_person', 'email']
    ordering = ['name']


class ProductHistoryInline(admin.TabularInline):
    model = ProductHistory
    extra = 0
    readonly_fields = ['field_name', 'old_value', 'new_value', 'changed_by', 'created_at']
    can_delete = False


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['id', 'sku', 'name', 'quantity', 'reorder_level', 'is_low_stock', 'category', 'supplier']
    list_filter = ['category', 'supplier', 'created_at']
    search_fields = ['sku', 'name', 'description']
    ordering = ['sku']
    raw_id_fields = ['category', 'supplier']
    inlines = [ProductHistoryInline]

    def is_low_stock(self, obj):
        return obj.is_low_stock
    is_low_stock.boolean = True
    is_low_stock.short_description = 'Low Stock'


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'email', 'status', 'total_orders', 'total_spent']
    list_filter = ['status']
    search_fields = ['name', 'email']
    ordering = ['name']
