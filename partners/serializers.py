"""
Partners — Serializers

@file partners/serializers.py
"""

from rest_framework import serializers

from .models import Customer, Supplier

CONTACT_FIELDS = ['email', 'phone', 'address', 'city', 'state', 'postal_code', 'tax_id']


class SupplierSerializer(serializers.ModelSerializer):
    class Meta:
        model = Supplier
        fields = [
            'id', 'company_name', 'contact_name', *CONTACT_FIELDS,
            'is_active', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'is_active', 'created_at', 'updated_at']


class CustomerSerializer(serializers.ModelSerializer):
    customer_type_display = serializers.CharField(source='get_customer_type_display', read_only=True)

    class Meta:
        model = Customer
        fields = [
            'id', 'name', 'customer_type', 'customer_type_display', *CONTACT_FIELDS,
            'is_active', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'is_active', 'created_at', 'updated_at']
