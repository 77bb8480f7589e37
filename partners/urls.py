"""
Partners — URL Configuration

@file partners/urls.py
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import CustomerViewSet, SupplierViewSet

app_name = 'partners'

router = DefaultRouter()
router.register('customers', CustomerViewSet, basename='customer')
router.register('suppliers', SupplierViewSet, basename='supplier')

urlpatterns = [
    path('', include(router.urls)),
]
