"""
Purchasing — Django Admin Configuration

Orders are browsed here; status and quantities change only through the
service layer, so the admin is read-only for both.

@file purchasing/admin.py
"""

from django.contrib import admin

from .models import PurchaseItem, PurchaseOrder


class PurchaseItemInline(admin.TabularInline):
    model = PurchaseItem
    extra = 0
    can_delete = False
    readonly_fields = ('product', 'quantity', 'received_quantity', 'unit_price', 'total')

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(PurchaseOrder)
class PurchaseOrderAdmin(admin.ModelAdmin):
    list_display = ('id', 'supplier', 'user', 'order_date', 'status', 'total_amount', 'actual_delivery')
    list_filter = ('status', 'order_date')
    search_fields = ('id', 'supplier__company_name')
    list_select_related = ('supplier', 'user')
    readonly_fields = (
        'id', 'supplier', 'user', 'order_date', 'status', 'total_amount',
        'actual_delivery', 'created_at', 'updated_at', 'created_by', 'updated_by',
    )
    date_hierarchy = 'order_date'
    inlines = [PurchaseItemInline]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
