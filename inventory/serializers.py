"""
Inventory — Serializers

Read serializers expose current_stock; write serializers never accept
it. Opening stock is passed once, at creation, as initial_stock.

@file inventory/serializers.py
"""

from rest_framework import serializers

from core.constants import MONEY_DECIMAL_PLACES, MONEY_MAX_DIGITS

from .models import Category, PriceHistory, Product


class CategorySerializer(serializers.ModelSerializer):
    product_count = serializers.IntegerField(read_only=True, default=None)

    class Meta:
        model = Category
        fields = ['id', 'name', 'description', 'product_count', 'created_at', 'updated_at']
        read_only_fields = ['id', 'product_count', 'created_at', 'updated_at']


class ProductReadSerializer(serializers.ModelSerializer):
    category_name = serializers.CharField(source='category.name', read_only=True)
    supplier_name = serializers.CharField(source='supplier.company_name', read_only=True, default=None)
    is_low_stock = serializers.BooleanField(read_only=True)
    stock_value = serializers.DecimalField(
        max_digits=14, decimal_places=MONEY_DECIMAL_PLACES, read_only=True,
    )

    class Meta:
        model = Product
        fields = [
            'id', 'sku', 'name', 'description',
            'category', 'category_name', 'supplier', 'supplier_name',
            'purchase_price', 'selling_price',
            'current_stock', 'minimum_stock', 'is_low_stock', 'stock_value',
            'unit', 'location', 'barcode', 'is_active',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields


class ProductWriteSerializer(serializers.Serializer):
    sku = serializers.CharField(max_length=50)
    name = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True)
    category_id = serializers.UUIDField()
    supplier_id = serializers.UUIDField(required=False, allow_null=True)
    purchase_price = serializers.DecimalField(
        max_digits=MONEY_MAX_DIGITS, decimal_places=MONEY_DECIMAL_PLACES, min_value=0,
    )
    selling_price = serializers.DecimalField(
        max_digits=MONEY_MAX_DIGITS, decimal_places=MONEY_DECIMAL_PLACES, min_value=0,
    )
    minimum_stock = serializers.IntegerField(min_value=0, required=False)
    unit = serializers.CharField(max_length=10, required=False)
    location = serializers.CharField(max_length=100, required=False, allow_blank=True)
    barcode = serializers.CharField(max_length=64, required=False, allow_blank=True)
    initial_stock = serializers.IntegerField(min_value=0, required=False, default=0)


class ProductUpdateSerializer(ProductWriteSerializer):
    """PATCH/PUT: same fields minus opening stock."""
    initial_stock = None


class PriceHistorySerializer(serializers.ModelSerializer):
    changed_by_name = serializers.CharField(source='changed_by.name', read_only=True, default=None)

    class Meta:
        model = PriceHistory
        fields = [
            'id', 'purchase_price', 'selling_price', 'effective_date',
            'notes', 'changed_by', 'changed_by_name',
        ]
        read_only_fields = fields
