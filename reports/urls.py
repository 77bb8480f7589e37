"""
Reports — URL Configuration

@file reports/urls.py
"""

from django.urls import path

from .views import InventoryReportView, MovementReportView, SalesReportView

app_name = 'reports'

urlpatterns = [
    path('sales/', SalesReportView.as_view(), name='sales'),
    path('inventory/', InventoryReportView.as_view(), name='inventory'),
    path('movements/', MovementReportView.as_view(), name='movements'),
]
