"""
Reports — Views

Read-only aggregates for managers. Query parameters are validated by
the serializers in this app; the numbers come from ReportService.

@file reports/views.py
"""

from rest_framework.response import Response
from rest_framework.views import APIView

from users.models import User
from users.permissions import HasRole, IsActiveUser

from .serializers import DateRangeSerializer, MovementReportSerializer
from .services import ReportService


class ReportView(APIView):
    permission_classes = [IsActiveUser, HasRole]
    required_roles = [User.RoleChoices.ADMIN, User.RoleChoices.MANAGER]


class SalesReportView(ReportView):

    def get(self, request):
        params = DateRangeSerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        return Response(ReportService.sales_summary(**params.validated_data))


class InventoryReportView(ReportView):

    def get(self, request):
        return Response(ReportService.inventory_summary())


class MovementReportView(ReportView):

    def get(self, request):
        params = MovementReportSerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        data = params.validated_data
        return Response(ReportService.movement_summary(
            start_date=data.get('start_date'),
            end_date=data.get('end_date'),
            product_id=data.get('product'),
            movement_type=data.get('movement_type'),
        ))
