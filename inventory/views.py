"""
Inventory — Views

Categories and products. Stock on a product changes only through the
adjust-stock and record-loss actions (or through purchasing and sales);
product writes never touch current_stock.

@file inventory/views.py
"""

from django.db.models import Count
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from stock.models import StockMovement
from stock.serializers import StockAdjustmentSerializer, StockLossSerializer, StockMovementSerializer
from stock.services import StockService
from users.permissions import IsActiveUser, IsManager, IsManagerOrReadOnly

from .models import Category, Product
from .serializers import (
    CategorySerializer,
    PriceHistorySerializer,
    ProductReadSerializer,
    ProductUpdateSerializer,
    ProductWriteSerializer,
)
from .services import CategoryService, ProductService


class CategoryViewSet(viewsets.ModelViewSet):
    permission_classes = [IsActiveUser, IsManagerOrReadOnly]
    serializer_class = CategorySerializer
    search_fields = ['name']
    ordering = ['name']

    def get_queryset(self):
        return Category.objects.annotate(product_count=Count('products'))

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        category = CategoryService.create_category(actor=request.user, **serializer.validated_data)
        return Response(self.get_serializer(category).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=kwargs.get('partial', False))
        serializer.is_valid(raise_exception=True)
        category = CategoryService.update_category(
            category_id=instance.pk, actor=request.user, **serializer.validated_data,
        )
        return Response(self.get_serializer(category).data)

    def perform_destroy(self, instance):
        CategoryService.delete_category(category_id=instance.pk, actor=self.request.user)


class ProductViewSet(viewsets.ModelViewSet):
    """
    Product catalogue. DELETE deactivates. Extra routes: low-stock,
    price-history, movements, adjust-stock, record-loss.
    """

    permission_classes = [IsActiveUser, IsManagerOrReadOnly]
    filterset_fields = ['category', 'supplier', 'is_active', 'unit']
    search_fields = ['sku', 'name', 'description', 'barcode']
    ordering_fields = ['name', 'sku', 'current_stock', 'selling_price', 'created_at']
    ordering = ['name']

    def get_queryset(self):
        return Product.objects.select_related('category', 'supplier')

    def get_serializer_class(self):
        if self.action in ('create',):
            return ProductWriteSerializer
        if self.action in ('update', 'partial_update'):
            return ProductUpdateSerializer
        return ProductReadSerializer

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        product = ProductService.create_product(actor=request.user, **serializer.validated_data)
        return Response(ProductReadSerializer(product).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        instance = self.get_object()
        serializer = self.get_serializer(data=request.data, partial=kwargs.get('partial', False))
        serializer.is_valid(raise_exception=True)
        product = ProductService.update_product(
            product_id=instance.pk, actor=request.user, **serializer.validated_data,
        )
        return Response(ProductReadSerializer(product).data)

    def perform_destroy(self, instance):
        ProductService.deactivate_product(product_id=instance.pk, actor=self.request.user)

    @action(detail=False, methods=['get'], url_path='low-stock')
    def low_stock(self, request):
        page = self.paginate_queryset(ProductService.low_stock())
        return self.get_paginated_response(ProductReadSerializer(page, many=True).data)

    @action(detail=True, methods=['get'], url_path='price-history')
    def price_history(self, request, pk=None):
        product = self.get_object()
        return Response(PriceHistorySerializer(product.price_history.all(), many=True).data)

    @action(detail=True, methods=['get'], url_path='movements')
    def movements(self, request, pk=None):
        product = self.get_object()
        qs = StockMovement.objects.filter(product=product).select_related('product', 'created_by')
        page = self.paginate_queryset(qs)
        return self.get_paginated_response(StockMovementSerializer(page, many=True).data)

    @action(
        detail=True,
        methods=['post'],
        url_path='adjust-stock',
        permission_classes=[IsActiveUser, IsManager],
    )
    def adjust_stock(self, request, pk=None):
        ser = StockAdjustmentSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        movement = StockService.adjust_stock(
            product_id=self.get_object().pk,
            quantity=ser.validated_data['quantity'],
            notes=ser.validated_data['notes'],
            actor=request.user,
        )
        return Response(StockMovementSerializer(movement).data, status=status.HTTP_201_CREATED)

    @action(
        detail=True,
        methods=['post'],
        url_path='record-loss',
        permission_classes=[IsActiveUser, IsManager],
    )
    def record_loss(self, request, pk=None):
        ser = StockLossSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        movement = StockService.record_loss(
            product_id=self.get_object().pk,
            quantity=ser.validated_data['quantity'],
            notes=ser.validated_data['notes'],
            actor=request.user,
        )
        return Response(StockMovementSerializer(movement).data, status=status.HTTP_201_CREATED)
