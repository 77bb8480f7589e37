"""
Sales — Service Tests

Stock leaves on create and comes back on cancel or return; returns are
tracked per line across requests.

@file sales/tests/test_services.py
"""

from decimal import Decimal

import pytest

from core.constants import MAX_LINE_QUANTITY
from core.exceptions import (
    BusinessRuleViolation,
    InsufficientStockError,
    InvalidInputError,
    InvalidStateTransition,
    QuantityViolation,
    ResourceNotFoundError,
)
from sales.models import Sale, SaleItem
from sales.services import SaleReturnService, SaleService
from stock.models import StockMovement
from stock.services import StockService
from tests.factories import CustomerFactory, ProductFactory, SaleItemFactory, UserFactory


pytestmark = pytest.mark.django_db

Status = Sale.StatusChoices


def _sell(*lines, **kwargs):
    kwargs.setdefault('actor', UserFactory())
    return SaleService.create_sale(
        items=[{'product_id': product.pk, 'quantity': qty} for product, qty in lines],
        **kwargs,
    )


def _items_by_product(sale):
    return {item.product_id: item for item in sale.items.all()}


def _return(sale, *lines, notes='', actor=None):
    return SaleReturnService.process_return(
        sale_id=sale.pk,
        items=[{'sale_item_id': item.pk, 'quantity': qty, 'reason': 'Defective'} for item, qty in lines],
        actor=actor or UserFactory(),
        notes=notes,
    )


def _stock(product):
    product.refresh_from_db()
    return product.current_stock


class TestCreateSale:
    def test_create_decrements_stock(self):
        a = ProductFactory(stock=10, selling_price=Decimal('12.00'))
        b = ProductFactory(stock=5, selling_price=Decimal('3.50'))
        customer = CustomerFactory()
        sale = _sell((a, 3), (b, 2), customer_id=customer.pk, payment_method='PIX')

        assert sale.status == Status.PENDING
        assert sale.customer == customer
        assert sale.total_amount == Decimal('43.00')
        assert _stock(a) == 7
        assert _stock(b) == 3
        movements = StockMovement.objects.filter(reference=str(sale.pk), movement_type='SALE')
        assert movements.count() == 2
        assert StockService.verify_ledger() == []

    def test_discounts(self):
        product = ProductFactory(stock=10)
        sale = SaleService.create_sale(
            items=[{
                'product_id': product.pk, 'quantity': 2,
                'unit_price': Decimal('100.00'), 'discount': Decimal('10.00'),
            }],
            discount=Decimal('5.50'),
            actor=UserFactory(),
        )
        assert sale.total_amount == Decimal('184.50')
        item = sale.items.get()
        assert item.total == Decimal('190.00')

    def test_walk_in_sale_without_customer(self):
        sale = _sell((ProductFactory(stock=1), 1))
        assert sale.customer is None

    def test_insufficient_stock_rolls_back_everything(self):
        a = ProductFactory(stock=10)
        b = ProductFactory(stock=1)
        with pytest.raises(InsufficientStockError):
            _sell((a, 3), (b, 2))
        assert _stock(a) == 10
        assert _stock(b) == 1
        assert not Sale.objects.exists()
        assert not StockMovement.objects.filter(movement_type='SALE').exists()

    def test_empty_items(self):
        with pytest.raises(InvalidInputError):
            SaleService.create_sale(items=[], actor=UserFactory())

    @pytest.mark.parametrize('price', [Decimal('0'), Decimal('-1')])
    def test_non_positive_price(self, price):
        product = ProductFactory(stock=5)
        with pytest.raises(InvalidInputError):
            SaleService.create_sale(
                items=[{'product_id': product.pk, 'quantity': 1, 'unit_price': price}],
                actor=UserFactory(),
            )
        assert _stock(product) == 5
        assert not Sale.objects.exists()

    def test_quantity_above_line_limit(self):
        product = ProductFactory(stock=5)
        with pytest.raises(InvalidInputError):
            _sell((product, MAX_LINE_QUANTITY + 1))
        assert _stock(product) == 5

    def test_total_too_large(self):
        product = ProductFactory(stock=MAX_LINE_QUANTITY, selling_price=Decimal('99999999.99'))
        with pytest.raises(InvalidInputError):
            _sell((product, MAX_LINE_QUANTITY), discount=Decimal('99999999.99'))
        assert not Sale.objects.exists()

    def test_discount_larger_than_sale(self):
        with pytest.raises(InvalidInputError):
            _sell((ProductFactory(stock=5, selling_price=Decimal('1.00')), 1), discount=Decimal('2.00'))

    def test_inactive_customer(self):
        with pytest.raises(BusinessRuleViolation):
            _sell((ProductFactory(stock=5), 1), customer_id=CustomerFactory(is_active=False).pk)

    def test_inactive_product(self):
        with pytest.raises(BusinessRuleViolation):
            _sell((ProductFactory(stock=5, is_active=False), 1))


class TestAdvanceStatus:
    def test_full_chain(self):
        sale = _sell((ProductFactory(stock=5), 1))
        for status in (Status.PROCESSING, Status.SHIPPED, Status.DELIVERED, Status.COMPLETED):
            SaleService.advance_status(sale_id=sale.pk, new_status=status)
        sale.refresh_from_db()
        assert sale.status == Status.COMPLETED

    def test_skip_is_rejected(self):
        sale = _sell((ProductFactory(stock=5), 1))
        with pytest.raises(InvalidStateTransition):
            SaleService.advance_status(sale_id=sale.pk, new_status=Status.DELIVERED)

    def test_completed_is_terminal(self):
        sale = _sell((ProductFactory(stock=5), 1))
        Sale.objects.filter(pk=sale.pk).update(status=Status.COMPLETED)
        with pytest.raises(InvalidStateTransition):
            SaleService.advance_status(sale_id=sale.pk, new_status=Status.PENDING)

    def test_cancel_request_restores_stock(self):
        product = ProductFactory(stock=5)
        sale = _sell((product, 2))
        SaleService.advance_status(sale_id=sale.pk, new_status=Status.CANCELLED)
        sale.refresh_from_db()
        assert sale.status == Status.CANCELLED
        assert _stock(product) == 5


class TestCancelSale:
    @pytest.mark.parametrize('status', [Status.PENDING, Status.PROCESSING, Status.SHIPPED])
    def test_cancel_restores_stock(self, status):
        product = ProductFactory(stock=5)
        sale = _sell((product, 4))
        Sale.objects.filter(pk=sale.pk).update(status=status)

        SaleService.cancel_sale(sale_id=sale.pk, reason='Customer gave up')
        sale.refresh_from_db()
        assert sale.status == Status.CANCELLED
        assert 'Customer gave up' in sale.notes
        assert _stock(product) == 5
        restore = StockMovement.objects.get(reference=str(sale.pk), movement_type='RETURN')
        assert restore.quantity == 4
        assert restore.notes == 'sale cancelled'
        assert sale.items.get().returned_quantity == 4

    def test_cancel_after_partial_return_restores_the_rest(self):
        product = ProductFactory(stock=10)
        sale = _sell((product, 5))
        item = sale.items.get()
        _return(sale, (item, 2))
        SaleService.cancel_sale(sale_id=sale.pk)
        assert _stock(product) == 10
        assert StockService.verify_ledger() == []

    @pytest.mark.parametrize('status', [Status.DELIVERED, Status.COMPLETED, Status.CANCELLED])
    def test_cancel_rejected(self, status):
        product = ProductFactory(stock=5)
        sale = _sell((product, 1))
        Sale.objects.filter(pk=sale.pk).update(status=status)
        with pytest.raises(InvalidStateTransition):
            SaleService.cancel_sale(sale_id=sale.pk)
        assert _stock(product) == 4


class TestProcessReturn:
    def test_full_return_cancels_sale(self):
        a = ProductFactory(stock=10)
        b = ProductFactory(stock=10)
        sale = _sell((a, 3), (b, 2))
        items = _items_by_product(sale)

        _return(sale, (items[a.pk], 3), (items[b.pk], 2))
        sale.refresh_from_db()
        assert sale.status == Status.CANCELLED
        assert 'Full return' in sale.notes
        assert _stock(a) == 10
        assert _stock(b) == 10

    def test_partial_return_keeps_status(self):
        a = ProductFactory(stock=10)
        b = ProductFactory(stock=10)
        sale = _sell((a, 3), (b, 2), notes='Counter sale')
        SaleService.advance_status(sale_id=sale.pk, new_status=Status.PROCESSING)
        items = _items_by_product(sale)

        _return(sale, (items[a.pk], 1), notes='Broken casing')
        sale.refresh_from_db()
        assert sale.status == Status.PROCESSING
        assert sale.notes == 'Counter sale\nPartial return: Broken casing'
        assert _stock(a) == 8
        movement = StockMovement.objects.get(reference=str(sale.pk), movement_type='RETURN')
        assert movement.quantity == 1
        assert 'Defective' in movement.notes

    def test_return_on_completed_sale(self):
        product = ProductFactory(stock=5)
        sale = _sell((product, 2))
        Sale.objects.filter(pk=sale.pk).update(status=Status.COMPLETED)
        _return(sale, (sale.items.get(), 2))
        sale.refresh_from_db()
        assert sale.status == Status.CANCELLED

    def test_returns_accumulate(self):
        product = ProductFactory(stock=5)
        sale = _sell((product, 3))
        item = sale.items.get()
        _return(sale, (item, 2))
        with pytest.raises(QuantityViolation):
            _return(sale, (item, 2))
        item.refresh_from_db()
        assert item.returned_quantity == 2
        _return(sale, (item, 1))
        sale.refresh_from_db()
        assert sale.status == Status.CANCELLED
        assert sale.notes.count('\n') == 1

    def test_over_return_rejected_without_side_effects(self):
        a = ProductFactory(stock=10)
        b = ProductFactory(stock=10)
        sale = _sell((a, 3), (b, 2))
        items = _items_by_product(sale)
        with pytest.raises(QuantityViolation):
            _return(sale, (items[a.pk], 1), (items[b.pk], 3))
        assert _stock(a) == 7
        assert _stock(b) == 8
        assert not StockMovement.objects.filter(movement_type='RETURN').exists()
        assert set(SaleItem.objects.values_list('returned_quantity', flat=True)) == {0}

    def test_negative_quantity(self):
        sale = _sell((ProductFactory(stock=5), 2))
        with pytest.raises(QuantityViolation):
            _return(sale, (sale.items.get(), -1))

    def test_foreign_item(self):
        sale = _sell((ProductFactory(stock=5), 2))
        other = SaleItemFactory()
        with pytest.raises(ResourceNotFoundError):
            _return(sale, (other, 1))

    def test_cancelled_sale(self):
        sale = _sell((ProductFactory(stock=5), 2))
        SaleService.cancel_sale(sale_id=sale.pk)
        with pytest.raises(InvalidStateTransition):
            _return(sale, (sale.items.get(), 1))


class TestConcurrentReturns:
    @pytest.mark.django_db(transaction=True)
    def test_competing_returns_cannot_exceed_sold_quantity(self, run_concurrently):
        product = ProductFactory(stock=10)
        sale = _sell((product, 3))
        item = sale.items.get()
        actor = UserFactory()

        outcomes = run_concurrently(
            lambda: _return(sale, (item, 2), actor=actor),
            lambda: _return(sale, (item, 2), actor=actor),
        )

        assert outcomes == ['QuantityViolation', 'ok']
        item.refresh_from_db()
        assert item.returned_quantity == 2
        assert _stock(product) == 9
        assert StockMovement.objects.filter(movement_type='RETURN').count() == 1
        assert StockService.verify_ledger() == []
