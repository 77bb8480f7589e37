"""
Purchasing — URL Configuration

@file purchasing/urls.py
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import PurchaseOrderViewSet

app_name = 'purchasing'

router = DefaultRouter()
router.register('orders', PurchaseOrderViewSet, basename='order')

urlpatterns = [
    path('', include(router.urls)),
]
