"""
Inventory — Django Admin Configuration

current_stock is read-only here; corrections go through a stock
adjustment so the ledger records them.

@file inventory/admin.py
"""

from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from .models import Category, PriceHistory, Product


class PriceHistoryInline(admin.TabularInline):
    model = PriceHistory
    extra = 0
    can_delete = False
    readonly_fields = ('purchase_price', 'selling_price', 'effective_date', 'notes', 'changed_by')

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ('name', 'description')
    search_fields = ('name',)


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = (
        'sku', 'name', 'category', 'supplier', 'selling_price',
        'current_stock', 'minimum_stock', 'is_active',
    )
    list_filter = ('is_active', 'category')
    search_fields = ('sku', 'name', 'barcode')
    list_select_related = ('category', 'supplier')
    readonly_fields = ('id', 'current_stock', 'created_at', 'updated_at', 'created_by', 'updated_by')
    inlines = [PriceHistoryInline]

    fieldsets = (
        (None, {'fields': ('id', 'sku', 'name', 'description', 'category', 'supplier')}),
        (_('Pricing'), {'fields': ('purchase_price', 'selling_price')}),
        (_('Stock'), {'fields': ('current_stock', 'minimum_stock', 'unit', 'location', 'barcode')}),
        (_('Status'), {'fields': ('is_active',)}),
        (_('Audit'), {
            'fields': ('created_at', 'updated_at', 'created_by', 'updated_by'),
            'classes': ('collapse',),
        }),
    )
