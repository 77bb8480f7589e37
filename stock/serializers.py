"""
Stock — Serializers

@file stock/serializers.py
"""

from rest_framework import serializers

from .models import StockMovement


class StockMovementSerializer(serializers.ModelSerializer):
    product_sku = serializers.CharField(source='product.sku', read_only=True)
    product_name = serializers.CharField(source='product.name', read_only=True)
    movement_type_display = serializers.CharField(source='get_movement_type_display', read_only=True)
    signed_quantity = serializers.IntegerField(read_only=True)
    created_by_name = serializers.CharField(source='created_by.name', read_only=True, default=None)

    class Meta:
        model = StockMovement
        fields = [
            'id', 'product', 'product_sku', 'product_name',
            'movement_type', 'movement_type_display', 'quantity', 'signed_quantity',
            'reference', 'reference_type', 'notes',
            'created_by', 'created_by_name', 'created_at',
        ]
        read_only_fields = fields


class StockAdjustmentSerializer(serializers.Serializer):
    quantity = serializers.IntegerField()
    notes = serializers.CharField(max_length=500)

    def validate_quantity(self, value):
        if value == 0:
            raise serializers.ValidationError('Adjustment quantity cannot be zero.')
        return value


class StockLossSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1)
    notes = serializers.CharField(max_length=500)
