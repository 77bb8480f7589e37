"""
Partners — Django Admin Configuration

@file partners/admin.py
"""

from django.contrib import admin

from .models import Customer, Supplier


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ('company_name', 'contact_name', 'email', 'phone', 'city', 'is_active')
    list_filter = ('is_active', 'state')
    search_fields = ('company_name', 'contact_name', 'email', 'tax_id')
    readonly_fields = ('id', 'created_at', 'updated_at', 'created_by', 'updated_by')


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ('name', 'customer_type', 'email', 'phone', 'city', 'is_active')
    list_filter = ('is_active', 'customer_type')
    search_fields = ('name', 'email', 'phone', 'tax_id')
    readonly_fields = ('id', 'created_at', 'updated_at', 'created_by', 'updated_by')
