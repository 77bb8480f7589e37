"""
Stock — Django Admin Configuration

The ledger is insert-only: no add, change or delete from the admin.

@file stock/admin.py
"""

from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from .models import StockMovement


@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    list_display = (
        'created_at', 'product', 'movement_type', 'quantity',
        'reference_type', 'reference', 'created_by',
    )
    list_filter = ('movement_type', 'reference_type', 'created_at')
    search_fields = ('product__sku', 'product__name', 'reference')
    readonly_fields = (
        'id', 'product', 'movement_type', 'quantity',
        'reference', 'reference_type', 'notes', 'created_by', 'created_at',
    )
    list_select_related = ('product', 'created_by')
    list_per_page = 50
    date_hierarchy = 'created_at'

    fieldsets = (
        (_('Movement'), {'fields': ('id', 'product', 'movement_type', 'quantity', 'notes')}),
        (_('Reference'), {'fields': ('reference_type', 'reference')}),
        (_('Audit'), {'fields': ('created_by', 'created_at')}),
    )

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
