"""
Reports — API Tests

@file reports/tests/test_views.py
"""

import pytest
from django.urls import reverse

from tests.factories import ProductFactory


pytestmark = pytest.mark.django_db


class TestReportAPI:
    @pytest.mark.parametrize('name', ['sales', 'inventory', 'movements'])
    def test_employee_forbidden(self, authenticated_client, name):
        assert authenticated_client.get(reverse(f'api-v1:reports:{name}')).status_code == 403

    @pytest.mark.parametrize('name', ['sales', 'inventory', 'movements'])
    def test_manager_allowed(self, manager_client, name):
        ProductFactory(stock=3)
        resp = manager_client.get(reverse(f'api-v1:reports:{name}'))
        assert resp.status_code == 200
        assert resp.json()['success'] is True

    def test_bad_date_range(self, manager_client):
        resp = manager_client.get(
            reverse('api-v1:reports:sales'), {'start_date': '2026-10-10', 'end_date': '2026-10-01'},
        )
        assert resp.status_code == 400
        assert resp.json()['code'] == 'VALIDATION_ERROR'

    def test_movement_filters(self, manager_client):
        product = ProductFactory(stock=3)
        ProductFactory(stock=8)
        resp = manager_client.get(
            reverse('api-v1:reports:movements'), {'product': str(product.pk), 'movement_type': 'ADJUSTMENT'},
        )
        assert resp.status_code == 200
        assert resp.data['movement_count'] == 1
        assert resp.data['by_type'][0]['total_quantity'] == 3
