"""
Purchasing — Views

Purchase orders: list, create, retrieve. Workflow actions: advance,
receive, cancel. Orders are never edited or deleted once placed.

@file purchasing/views.py
"""

from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from stock.models import StockMovement
from stock.serializers import StockMovementSerializer
from users.permissions import IsActiveUser, IsManager

from .models import PurchaseOrder
from .serializers import (
    PurchaseOrderAdvanceSerializer,
    PurchaseOrderCancelSerializer,
    PurchaseOrderListSerializer,
    PurchaseOrderReadSerializer,
    PurchaseOrderReceiveSerializer,
    PurchaseOrderWriteSerializer,
)
from .services import PurchaseOrderService


class PurchaseOrderViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    viewsets.GenericViewSet,
):
    """
    Any active user may place and receive orders; approving, ordering and
    cancelling need ADMIN or MANAGER.
    """

    permission_classes = [IsActiveUser]
    filterset_fields = {
        'status': ['exact', 'in'],
        'supplier': ['exact'],
        'user': ['exact'],
        'order_date': ['date__gte', 'date__lte'],
    }
    search_fields = ['supplier__company_name', 'notes']
    ordering_fields = ['order_date', 'total_amount', 'status']
    ordering = ['-order_date']

    def get_queryset(self):
        qs = PurchaseOrder.objects.select_related('supplier', 'user')
        if self.action != 'list':
            qs = qs.prefetch_related('items__product')
        return qs

    def get_serializer_class(self):
        if self.action == 'list':
            return PurchaseOrderListSerializer
        if self.action == 'create':
            return PurchaseOrderWriteSerializer
        if self.action == 'advance':
            return PurchaseOrderAdvanceSerializer
        if self.action == 'receive':
            return PurchaseOrderReceiveSerializer
        if self.action == 'cancel':
            return PurchaseOrderCancelSerializer
        return PurchaseOrderReadSerializer

    def _read(self, order):
        order = self.get_queryset().get(pk=order.pk)
        return PurchaseOrderReadSerializer(order, context={'request': self.request}).data

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = PurchaseOrderService.create_order(
            supplier_id=serializer.validated_data['supplier_id'],
            items=serializer.validated_data['items'],
            expected_delivery=serializer.validated_data.get('expected_delivery'),
            notes=serializer.validated_data['notes'],
            actor=request.user,
        )
        return Response(self._read(order), status=status.HTTP_201_CREATED)

    @action(
        detail=True,
        methods=['post'],
        url_path='advance',
        permission_classes=[IsActiveUser, IsManager],
    )
    def advance(self, request, pk=None):
        ser = self.get_serializer(data=request.data)
        ser.is_valid(raise_exception=True)
        order = PurchaseOrderService.advance_status(
            order_id=pk,
            new_status=ser.validated_data['status'],
            actor=request.user,
        )
        return Response(self._read(order), status=status.HTTP_200_OK)

    @action(detail=True, methods=['post'], url_path='receive')
    def receive(self, request, pk=None):
        ser = self.get_serializer(data=request.data)
        ser.is_valid(raise_exception=True)
        order = PurchaseOrderService.receive_order(
            order_id=pk,
            items=ser.validated_data['items'],
            notes=ser.validated_data['notes'],
            actor=request.user,
        )
        return Response(self._read(order), status=status.HTTP_200_OK)

    @action(
        detail=True,
        methods=['post'],
        url_path='cancel',
        permission_classes=[IsActiveUser, IsManager],
    )
    def cancel(self, request, pk=None):
        ser = self.get_serializer(data=request.data)
        ser.is_valid(raise_exception=True)
        order = PurchaseOrderService.cancel_order(
            order_id=pk,
            reason=ser.validated_data['reason'],
            actor=request.user,
        )
        return Response(self._read(order), status=status.HTTP_200_OK)

    @action(detail=True, methods=['get'], url_path='movements')
    def movements(self, request, pk=None):
        order = self.get_object()
        movements = StockMovement.objects.filter(
            reference_type='PurchaseOrder',
            reference=str(order.pk),
        ).select_related('product', 'created_by').order_by('-created_at')
        return Response(StockMovementSerializer(movements, many=True).data)
