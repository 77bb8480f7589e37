"""
Stock — Views

Read-only access to the ledger. Movements are created as a side effect
of receipts, sales, returns and product adjustments, never directly.

@file stock/views.py
"""

from rest_framework import viewsets

from users.permissions import IsActiveUser

from .models import StockMovement
from .serializers import StockMovementSerializer


class StockMovementViewSet(viewsets.ReadOnlyModelViewSet):
    permission_classes = [IsActiveUser]
    serializer_class = StockMovementSerializer
    filterset_fields = {
        'product': ['exact'],
        'movement_type': ['exact', 'in'],
        'reference': ['exact'],
        'reference_type': ['exact'],
        'created_at': ['date__gte', 'date__lte'],
    }
    search_fields = ['product__sku', 'product__name', 'reference', 'notes']
    ordering_fields = ['created_at', 'quantity']
    ordering = ['-created_at']

    def get_queryset(self):
        return StockMovement.objects.select_related('product', 'created_by')
