"""
Stock — API Tests

@file stock/tests/test_views.py
"""

import pytest
from django.urls import reverse

from sales.services import SaleService
from stock.models import StockMovement
from tests.factories import ProductFactory


pytestmark = pytest.mark.django_db


class TestStockMovementAPI:
    def test_list_requires_auth(self, api_client):
        assert api_client.get(reverse('api-v1:stock:movement-list')).status_code == 401

    def test_filter_by_type_and_reference(self, authenticated_client, user):
        product = ProductFactory(stock=10)
        sale = SaleService.create_sale(items=[{'product_id': product.pk, 'quantity': 2}], actor=user)

        resp = authenticated_client.get(
            reverse('api-v1:stock:movement-list'),
            {'movement_type': 'SALE', 'reference': str(sale.pk)},
        )
        assert resp.status_code == 200
        assert resp.data['count'] == 1
        row = resp.data['results'][0]
        assert row['signed_quantity'] == -2
        assert row['reference_type'] == 'Sale'

    def test_read_only(self, admin_client):
        product = ProductFactory()
        resp = admin_client.post(
            reverse('api-v1:stock:movement-list'),
            {'product': str(product.pk), 'movement_type': 'PURCHASE', 'quantity': 5},
            format='json',
        )
        assert resp.status_code == 405
        assert not StockMovement.objects.filter(product=product).exists()
