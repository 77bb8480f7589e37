"""
Partners — API Tests

@file partners/tests/test_views.py
"""

import pytest
from django.urls import reverse

from partners.models import Supplier
from sales.services import SaleService
from tests.factories import (
    CustomerFactory,
    ProductFactory,
    PurchaseOrderFactory,
    SupplierFactory,
)


pytestmark = pytest.mark.django_db


class TestSupplierAPI:
    def test_list_requires_auth(self, api_client):
        resp = api_client.get(reverse('api-v1:partners:supplier-list'))
        assert resp.status_code == 401

    def test_employee_can_read(self, authenticated_client):
        SupplierFactory.create_batch(2)
        resp = authenticated_client.get(reverse('api-v1:partners:supplier-list'))
        assert resp.status_code == 200
        assert len(resp.data['results']) == 2

    def test_employee_cannot_create(self, authenticated_client):
        resp = authenticated_client.post(
            reverse('api-v1:partners:supplier-list'), {'company_name': 'X'}, format='json',
        )
        assert resp.status_code == 403

    def test_manager_creates(self, manager_client):
        resp = manager_client.post(
            reverse('api-v1:partners:supplier-list'),
            {'company_name': 'Eletro Norte', 'tax_id': 'EN-1', 'city': 'Belém'},
            format='json',
        )
        assert resp.status_code == 201
        assert resp.data['company_name'] == 'Eletro Norte'

    def test_delete_deactivates(self, manager_client):
        supplier = SupplierFactory()
        resp = manager_client.delete(reverse('api-v1:partners:supplier-detail', kwargs={'pk': supplier.pk}))
        assert resp.status_code == 204
        assert Supplier.objects.get(pk=supplier.pk).is_active is False

    def test_delete_blocked_returns_business_error(self, manager_client):
        supplier = SupplierFactory()
        PurchaseOrderFactory(supplier=supplier)
        resp = manager_client.delete(reverse('api-v1:partners:supplier-detail', kwargs={'pk': supplier.pk}))
        assert resp.status_code == 400
        assert resp.json()['code'] == 'BUSINESS_RULE_VIOLATION'

    def test_products_and_orders(self, authenticated_client):
        supplier = SupplierFactory()
        ProductFactory(supplier=supplier)
        PurchaseOrderFactory(supplier=supplier)
        PurchaseOrderFactory()

        resp = authenticated_client.get(reverse('api-v1:partners:supplier-products', kwargs={'pk': supplier.pk}))
        assert resp.status_code == 200
        assert resp.data['count'] == 1

        resp = authenticated_client.get(reverse('api-v1:partners:supplier-orders', kwargs={'pk': supplier.pk}))
        assert resp.status_code == 200
        assert resp.data['count'] == 1


class TestCustomerAPI:
    def test_search(self, authenticated_client):
        CustomerFactory(name='Construtora Alfa')
        CustomerFactory(name='Maria Lima')
        resp = authenticated_client.get(reverse('api-v1:partners:customer-list'), {'search': 'Alfa'})
        assert resp.status_code == 200
        assert [c['name'] for c in resp.data['results']] == ['Construtora Alfa']

    def test_employee_creates_customer(self, authenticated_client):
        resp = authenticated_client.post(
            reverse('api-v1:partners:customer-list'),
            {'name': 'João Silva', 'phone': '+55 11 91234-5678'},
            format='json',
        )
        assert resp.status_code == 201

    def test_customer_sales(self, authenticated_client, user):
        customer = CustomerFactory()
        product = ProductFactory(stock=5)
        SaleService.create_sale(
            customer_id=customer.pk, items=[{'product_id': product.pk, 'quantity': 1}], actor=user,
        )
        resp = authenticated_client.get(reverse('api-v1:partners:customer-sales', kwargs={'pk': customer.pk}))
        assert resp.status_code == 200
        assert resp.data['count'] == 1
        assert resp.data['results'][0]['customer_name'] == customer.name
