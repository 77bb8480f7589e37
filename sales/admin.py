"""
Sales — Django Admin Configuration

@file sales/admin.py
"""

from django.contrib import admin

from .models import Sale, SaleItem


class SaleItemInline(admin.TabularInline):
    model = SaleItem
    extra = 0
    can_delete = False
    readonly_fields = ('product', 'quantity', 'returned_quantity', 'unit_price', 'discount', 'total')

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = ('id', 'customer', 'user', 'sale_date', 'status', 'payment_method', 'total_amount')
    list_filter = ('status', 'payment_method', 'sale_date')
    search_fields = ('id', 'customer__name', 'notes')
    list_select_related = ('customer', 'user')
    readonly_fields = (
        'id', 'customer', 'user', 'sale_date', 'status', 'payment_method',
        'discount', 'total_amount', 'created_at', 'updated_at', 'created_by', 'updated_by',
    )
    date_hierarchy = 'sale_date'
    inlines = [SaleItemInline]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
