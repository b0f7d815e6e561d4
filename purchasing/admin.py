"""
Django Admin configuration for purchasing models.

Status and received quantities change only through the service layer,
so they are read-only here.
"""
from django.contrib import admin
from .models import OrderSequence, PurchaseOrder, PurchaseOrderItem


class PurchaseOrderItemInline(admin.TabularInline):
    model = PurchaseOrderItem
    extra = 0
    readonly_fields = ['product', 'quantity', 'unit_cost', 'received_quantity', 'subtotal']
    can_delete = False

    def subtotal(self, obj):
        return f"${obj.subtotal}"
    subtotal.short_description = 'Subtotal'


@admin.register(PurchaseOrder)
class PurchaseOrderAdmin(admin.ModelAdmin):
    list_display = ['order_number', 'supplier', 'status', 'total_amount', 'item_count', 'order_date']
    list_filter = ['status', 'supplier', 'order_date']
    search_fields = ['order_number', 'supplier__name']
    ordering = ['-created_at']
    readonly_fields = [
        'order_number', 'status', 'total_amount', 'received_date',
        'created_by', 'created_at', 'updated_at'
    ]
    inlines = [PurchaseOrderItemInline]

    def item_count(self, obj):
        return obj.items.count()
    item_count.short_description = 'Items'


@admin.register(OrderSequence)
class OrderSequenceAdmin(admin.ModelAdmin):
    list_display = ['year', 'last_number']
    ordering = ['-year']
