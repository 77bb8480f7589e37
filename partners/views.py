"""
Partners — Views

Customer and supplier master data. DELETE deactivates; the related
listings (a supplier's products and purchase orders, a customer's
sales) are read-only actions.

@file partners/views.py
"""

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from inventory.models import Product
from inventory.serializers import ProductReadSerializer
from purchasing.models import PurchaseOrder
from purchasing.serializers import PurchaseOrderListSerializer
from sales.models import Sale
from sales.serializers import SaleListSerializer
from users.permissions import IsActiveUser, IsManagerOrReadOnly

from .models import Customer, Supplier
from .serializers import CustomerSerializer, SupplierSerializer
from .services import CustomerService, SupplierService


class SupplierViewSet(viewsets.ModelViewSet):
    permission_classes = [IsActiveUser, IsManagerOrReadOnly]
    serializer_class = SupplierSerializer
    filterset_fields = ['is_active', 'city', 'state']
    search_fields = ['company_name', 'contact_name', 'email', 'tax_id']
    ordering_fields = ['company_name', 'created_at']
    ordering = ['company_name']

    def get_queryset(self):
        return Supplier.objects.all()

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        supplier = SupplierService.create_supplier(actor=request.user, **serializer.validated_data)
        return Response(self.get_serializer(supplier).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=kwargs.get('partial', False))
        serializer.is_valid(raise_exception=True)
        supplier = SupplierService.update_supplier(
            supplier_id=instance.pk, actor=request.user, **serializer.validated_data,
        )
        return Response(self.get_serializer(supplier).data)

    def perform_destroy(self, instance):
        SupplierService.deactivate_supplier(supplier_id=instance.pk, actor=self.request.user)

    @action(detail=True, methods=['get'], url_path='products')
    def products(self, request, pk=None):
        supplier = self.get_object()
        qs = Product.objects.filter(supplier=supplier).select_related('category', 'supplier')
        page = self.paginate_queryset(qs)
        ser = ProductReadSerializer(page, many=True)
        return self.get_paginated_response(ser.data)

    @action(detail=True, methods=['get'], url_path='orders')
    def orders(self, request, pk=None):
        supplier = self.get_object()
        qs = PurchaseOrder.objects.filter(supplier=supplier).select_related('supplier', 'user')
        page = self.paginate_queryset(qs)
        ser = PurchaseOrderListSerializer(page, many=True)
        return self.get_paginated_response(ser.data)


class CustomerViewSet(viewsets.ModelViewSet):
    permission_classes = [IsActiveUser]
    serializer_class = CustomerSerializer
    filterset_fields = ['is_active', 'customer_type', 'city']
    search_fields = ['name', 'email', 'phone', 'tax_id']
    ordering_fields = ['name', 'created_at']
    ordering = ['name']

    def get_queryset(self):
        return Customer.objects.all()

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        customer = CustomerService.create_customer(actor=request.user, **serializer.validated_data)
        return Response(self.get_serializer(customer).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=kwargs.get('partial', False))
        serializer.is_valid(raise_exception=True)
        customer = CustomerService.update_customer(
            customer_id=instance.pk, actor=request.user, **serializer.validated_data,
        )
        return Response(self.get_serializer(customer).data)

    def perform_destroy(self, instance):
        CustomerService.deactivate_customer(customer_id=instance.pk, actor=self.request.user)

    @action(detail=True, methods=['get'], url_path='sales')
    def sales(self, request, pk=None):
        customer = self.get_object()
        qs = Sale.objects.filter(customer=customer).select_related('customer', 'user')
        page = self.paginate_queryset(qs)
        ser = SaleListSerializer(page, many=True)
        return self.get_paginated_response(ser.data)
