"""
Sales — Serializers

@file sales/serializers.py
"""

from rest_framework import serializers

from core.constants import MAX_LINE_QUANTITY, MIN_UNIT_PRICE, MONEY_DECIMAL_PLACES, MONEY_MAX_DIGITS

from .models import Sale, SaleItem


class SaleItemReadSerializer(serializers.ModelSerializer):
    product_sku = serializers.CharField(source='product.sku', read_only=True)
    product_name = serializers.CharField(source='product.name', read_only=True)
    returnable_quantity = serializers.IntegerField(read_only=True)

    class Meta:
        model = SaleItem
        fields = [
            'id', 'product', 'product_sku', 'product_name',
            'quantity', 'returned_quantity', 'returnable_quantity',
            'unit_price', 'discount', 'total',
        ]
        read_only_fields = fields


class SaleListSerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source='customer.name', read_only=True, default=None)
    user_name = serializers.CharField(source='user.name', read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    payment_method_display = serializers.CharField(source='get_payment_method_display', read_only=True)

    class Meta:
        model = Sale
        fields = [
            'id', 'customer', 'customer_name', 'user', 'user_name',
            'sale_date', 'status', 'status_display',
            'payment_method', 'payment_method_display',
            'discount', 'total_amount',
        ]
        read_only_fields = fields


class SaleReadSerializer(SaleListSerializer):
    items = SaleItemReadSerializer(many=True, read_only=True)

    class Meta(SaleListSerializer.Meta):
        fields = SaleListSerializer.Meta.fields + ['notes', 'items', 'created_at', 'updated_at']
        read_only_fields = fields


class SaleItemWriteSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1, max_value=MAX_LINE_QUANTITY)
    unit_price = serializers.DecimalField(
        max_digits=MONEY_MAX_DIGITS, decimal_places=MONEY_DECIMAL_PLACES,
        min_value=MIN_UNIT_PRICE, required=False,
    )
    discount = serializers.DecimalField(
        max_digits=MONEY_MAX_DIGITS, decimal_places=MONEY_DECIMAL_PLACES,
        min_value=0, required=False, default=0,
    )


class SaleWriteSerializer(serializers.Serializer):
    customer_id = serializers.UUIDField(required=False, allow_null=True)
    payment_method = serializers.ChoiceField(
        choices=Sale.PaymentMethodChoices.choices,
        default=Sale.PaymentMethodChoices.CASH,
    )
    discount = serializers.DecimalField(
        max_digits=MONEY_MAX_DIGITS, decimal_places=MONEY_DECIMAL_PLACES,
        min_value=0, required=False, default=0,
    )
    notes = serializers.CharField(required=False, allow_blank=True, default='')
    items = SaleItemWriteSerializer(many=True)

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError('At least one item is required.')
        return value


class SaleAdvanceSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Sale.StatusChoices.choices)


class SaleCancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default='')


class ReturnLineSerializer(serializers.Serializer):
    sale_item_id = serializers.UUIDField()
    quantity = serializers.IntegerField()
    reason = serializers.CharField(required=False, allow_blank=True, default='')


class SaleReturnSerializer(serializers.Serializer):
    items = ReturnLineSerializer(many=True)
    notes = serializers.CharField(required=False, allow_blank=True, default='')

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError('At least one item is required.')
        return value
