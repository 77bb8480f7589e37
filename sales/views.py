"""
Sales — Views

Sales are created, read and moved through their workflow here; there is
no update or delete. Returns post against an existing sale.

@file sales/views.py
"""

from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from stock.models import StockMovement
from stock.serializers import StockMovementSerializer
from users.permissions import IsActiveUser, IsManager

from .models import Sale
from .serializers import (
    SaleAdvanceSerializer,
    SaleCancelSerializer,
    SaleListSerializer,
    SaleReadSerializer,
    SaleReturnSerializer,
    SaleWriteSerializer,
)
from .services import SaleReturnService, SaleService


class SaleViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    viewsets.GenericViewSet,
):
    permission_classes = [IsActiveUser]
    filterset_fields = {
        'status': ['exact', 'in'],
        'customer': ['exact'],
        'user': ['exact'],
        'payment_method': ['exact'],
        'sale_date': ['date__gte', 'date__lte'],
    }
    search_fields = ['customer__name', 'notes']
    ordering_fields = ['sale_date', 'total_amount', 'status']
    ordering = ['-sale_date']

    def get_queryset(self):
        qs = Sale.objects.select_related('customer', 'user')
        if self.action != 'list':
            qs = qs.prefetch_related('items__product')
        return qs

    def get_serializer_class(self):
        return {
            'list': SaleListSerializer,
            'create': SaleWriteSerializer,
            'advance': SaleAdvanceSerializer,
            'cancel': SaleCancelSerializer,
            'process_return': SaleReturnSerializer,
        }.get(self.action, SaleReadSerializer)

    def _read(self, sale):
        sale = self.get_queryset().get(pk=sale.pk)
        return SaleReadSerializer(sale, context={'request': self.request}).data

    def create(self, request, *args, **kwargs):
        ser = self.get_serializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data
        sale = SaleService.create_sale(
            customer_id=data.get('customer_id'),
            items=data['items'],
            payment_method=data['payment_method'],
            discount=data['discount'],
            notes=data['notes'],
            actor=request.user,
        )
        return Response(self._read(sale), status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'], url_path='advance')
    def advance(self, request, pk=None):
        ser = self.get_serializer(data=request.data)
        ser.is_valid(raise_exception=True)
        sale = SaleService.advance_status(
            sale_id=pk,
            new_status=ser.validated_data['status'],
            actor=request.user,
        )
        return Response(self._read(sale))

    @action(
        detail=True,
        methods=['post'],
        url_path='cancel',
        permission_classes=[IsActiveUser, IsManager],
    )
    def cancel(self, request, pk=None):
        ser = self.get_serializer(data=request.data)
        ser.is_valid(raise_exception=True)
        sale = SaleService.cancel_sale(
            sale_id=pk,
            reason=ser.validated_data['reason'],
            actor=request.user,
        )
        return Response(self._read(sale))

    @action(detail=True, methods=['post'], url_path='return')
    def process_return(self, request, pk=None):
        ser = self.get_serializer(data=request.data)
        ser.is_valid(raise_exception=True)
        sale = SaleReturnService.process_return(
            sale_id=pk,
            items=ser.validated_data['items'],
            notes=ser.validated_data['notes'],
            actor=request.user,
        )
        return Response(self._read(sale))

    @action(detail=True, methods=['get'], url_path='movements')
    def movements(self, request, pk=None):
        sale = self.get_object()
        movements = StockMovement.objects.filter(
            reference_type='Sale',
            reference=str(sale.pk),
        ).select_related('product', 'created_by').order_by('-created_at')
        return Response(StockMovementSerializer(movements, many=True).data)
