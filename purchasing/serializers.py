"""
Purchasing — Serializers

Read serializers are flat ModelSerializers; write serializers describe
the service input shape only. Business checks (active supplier, stock
bounds) live in purchasing.services.

@file purchasing/serializers.py
"""

from rest_framework import serializers

from core.constants import MAX_LINE_QUANTITY, MIN_UNIT_PRICE, MONEY_DECIMAL_PLACES, MONEY_MAX_DIGITS

from .models import PurchaseItem, PurchaseOrder


class PurchaseItemReadSerializer(serializers.ModelSerializer):
    product_sku = serializers.CharField(source='product.sku', read_only=True)
    product_name = serializers.CharField(source='product.name', read_only=True)
    remaining_quantity = serializers.IntegerField(read_only=True)

    class Meta:
        model = PurchaseItem
        fields = [
            'id', 'product', 'product_sku', 'product_name',
            'quantity', 'received_quantity', 'remaining_quantity',
            'unit_price', 'total',
        ]
        read_only_fields = fields


class PurchaseOrderListSerializer(serializers.ModelSerializer):
    supplier_name = serializers.CharField(source='supplier.company_name', read_only=True)
    user_name = serializers.CharField(source='user.name', read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)

    class Meta:
        model = PurchaseOrder
        fields = [
            'id', 'supplier', 'supplier_name', 'user', 'user_name',
            'order_date', 'expected_delivery', 'actual_delivery',
            'status', 'status_display', 'total_amount',
        ]
        read_only_fields = fields


class PurchaseOrderReadSerializer(PurchaseOrderListSerializer):
    items = PurchaseItemReadSerializer(many=True, read_only=True)

    class Meta(PurchaseOrderListSerializer.Meta):
        fields = PurchaseOrderListSerializer.Meta.fields + [
            'notes', 'items', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class PurchaseItemWriteSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1, max_value=MAX_LINE_QUANTITY)
    unit_price = serializers.DecimalField(
        max_digits=MONEY_MAX_DIGITS, decimal_places=MONEY_DECIMAL_PLACES,
        min_value=MIN_UNIT_PRICE, required=False,
    )


class PurchaseOrderWriteSerializer(serializers.Serializer):
    supplier_id = serializers.UUIDField()
    expected_delivery = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default='')
    items = PurchaseItemWriteSerializer(many=True)

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError('At least one item is required.')
        return value


class PurchaseOrderAdvanceSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=PurchaseOrder.StatusChoices.choices)


class ReceiveLineSerializer(serializers.Serializer):
    item_id = serializers.UUIDField()
    quantity = serializers.IntegerField()


class PurchaseOrderReceiveSerializer(serializers.Serializer):
    items = ReceiveLineSerializer(many=True)
    notes = serializers.CharField(required=False, allow_blank=True, default='')

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError('At least one item is required.')
        return value


class PurchaseOrderCancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default='')
