"""
Reports — Aggregation Tests

@file reports/tests/test_services.py
"""

from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from reports.services import ReportService
from sales.models import Sale
from sales.services import SaleReturnService, SaleService
from stock.services import StockService
from tests.factories import CategoryFactory, ProductFactory, UserFactory


pytestmark = pytest.mark.django_db

Status = Sale.StatusChoices


def _completed_sale(lines, payment_method='CASH'):
    sale = SaleService.create_sale(
        items=[{'product_id': p.pk, 'quantity': q} for p, q in lines],
        payment_method=payment_method,
        actor=UserFactory(),
    )
    Sale.objects.filter(pk=sale.pk).update(status=Status.COMPLETED)
    return sale


class TestSalesSummary:
    def test_only_completed_sales_count(self):
        cable = ProductFactory(stock=50, selling_price=Decimal('10.00'))
        plug = ProductFactory(stock=50, selling_price=Decimal('2.00'))
        _completed_sale([(cable, 3), (plug, 5)], payment_method='PIX')
        _completed_sale([(plug, 1)])
        SaleService.create_sale(items=[{'product_id': cable.pk, 'quantity': 9}], actor=UserFactory())

        report = ReportService.sales_summary()
        assert report['sales_count'] == 2
        assert report['revenue'] == Decimal('42.00')
        assert len(report['by_day']) == 1
        assert report['by_day'][0]['count'] == 2
        methods = {row['payment_method']: row['revenue'] for row in report['by_payment_method']}
        assert methods == {'CASH': Decimal('2.00'), 'PIX': Decimal('40.00')}
        top = report['top_products']
        assert [row['sku'] for row in top] == [plug.sku, cable.sku]
        assert top[0]['quantity'] == 6

    def test_returned_units_are_not_counted_as_sold(self):
        product = ProductFactory(stock=10)
        sale = _completed_sale([(product, 4)])
        SaleReturnService.process_return(
            sale_id=sale.pk,
            items=[{'sale_item_id': sale.items.get().pk, 'quantity': 1}],
            actor=UserFactory(),
        )
        report = ReportService.sales_summary()
        assert report['top_products'][0]['quantity'] == 3

    def test_date_range_excludes_other_days(self):
        product = ProductFactory(stock=10)
        sale = _completed_sale([(product, 1)])
        Sale.objects.filter(pk=sale.pk).update(sale_date=timezone.now() - timedelta(days=10))
        today = timezone.localdate()
        report = ReportService.sales_summary(start_date=today - timedelta(days=1), end_date=today)
        assert report['sales_count'] == 0
        assert report['top_products'] == []


class TestInventorySummary:
    def test_valuation_and_low_stock(self):
        cables = CategoryFactory(name='Cables')
        ProductFactory(category=cables, purchase_price=Decimal('2.00'), stock=10, minimum_stock=5)
        ProductFactory(category=cables, purchase_price=Decimal('1.50'), stock=2, minimum_stock=5)
        ProductFactory(category=cables, purchase_price=Decimal('9.99'), stock=100, is_active=False)
        CategoryFactory(name='Tools')

        report = ReportService.inventory_summary()
        assert report['product_count'] == 2
        assert report['total_units'] == 12
        assert report['stock_value'] == Decimal('23.00')
        assert report['low_stock_count'] == 1
        by_name = {row['name']: row for row in report['by_category']}
        assert by_name['Cables']['product_count'] == 2
        assert by_name['Cables']['stock_value'] == Decimal('23.00')
        assert by_name['Tools']['product_count'] == 0


class TestMovementSummary:
    def test_counts_per_type(self):
        product = ProductFactory(stock=10)
        ProductFactory(stock=3)
        StockService.record_loss(product_id=product.pk, quantity=2, notes='Broken')
        SaleService.create_sale(items=[{'product_id': product.pk, 'quantity': 1}], actor=UserFactory())

        report = ReportService.movement_summary(product_id=product.pk)
        by_type = {row['movement_type']: row for row in report['by_type']}
        assert report['movement_count'] == 3
        assert by_type['ADJUSTMENT']['total_quantity'] == 10
        assert by_type['LOSS']['total_quantity'] == 2
        assert by_type['SALE']['count'] == 1

        report = ReportService.movement_summary(movement_type='ADJUSTMENT')
        assert report['by_type'] == [{'movement_type': 'ADJUSTMENT', 'count': 2, 'total_quantity': 13}]
