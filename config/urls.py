"""
VoltStock — Root URL Configuration

All API endpoints are namespaced under /api/v1/.

@file config/urls.py
"""

from django.contrib import admin
from django.urls import include, path
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.reverse import reverse

admin.site.site_header = 'VoltStock Administration'
admin.site.site_title = 'VoltStock'
admin.site.index_title = 'Orders, stock & sales'


@api_view(['GET'])
@permission_classes([AllowAny])
def api_root(request, format=None):
    """VoltStock API v1 — endpoint directory."""

    def url(name):
        return reverse(f'api-v1:{name}', request=request, format=format)

    return Response({
        'auth': {
            'login': url('auth:login'),
            'refresh': url('auth:token-refresh'),
            'logout': url('auth:logout'),
            'me': url('auth:me'),
        },
        'users': url('users:user-list'),
        'partners': {
            'customers': url('partners:customer-list'),
            'suppliers': url('partners:supplier-list'),
        },
        'inventory': {
            'categories': url('inventory:category-list'),
            'products': url('inventory:product-list'),
        },
        'stock': {
            'movements': url('stock:movement-list'),
        },
        'purchasing': {
            'orders': url('purchasing:order-list'),
        },
        'sales': url('sales:sale-list'),
        'reports': {
            'sales': url('reports:sales'),
            'inventory': url('reports:inventory'),
            'movements': url('reports:movements'),
        },
    })


api_v1_patterns = [
    path('', api_root, name='api-root'),
    path('auth/', include('users.urls', namespace='auth')),
    path('users/', include('users.urls_users', namespace='users')),
    path('partners/', include('partners.urls', namespace='partners')),
    path('inventory/', include('inventory.urls', namespace='inventory')),
    path('stock/', include('stock.urls', namespace='stock')),
    path('purchasing/', include('purchasing.urls', namespace='purchasing')),
    path('sales/', include('sales.urls', namespace='sales')),
    path('reports/', include('reports.urls', namespace='reports')),
]

urlpatterns = [
    path('admin/', admin.site.urls),

    # DRF session auth (powers the "Log in" button on the browsable API)
    path('api/auth/', include('rest_framework.urls', namespace='rest_framework')),

    path('api/v1/', include((api_v1_patterns, 'api-v1'))),
]
