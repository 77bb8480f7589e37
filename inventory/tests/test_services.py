"""
Inventory — Service Tests

@file inventory/tests/test_services.py
"""

from decimal import Decimal

import pytest

from core.exceptions import (
    BusinessRuleViolation,
    DuplicateResourceError,
    InvalidInputError,
    ResourceNotFoundError,
)
from core.models import AuditLog
from inventory.models import Category, PriceHistory
from inventory.services import CategoryService, ProductService
from stock.models import StockMovement
from stock.services import StockService
from tests.factories import CategoryFactory, ManagerFactory, ProductFactory, SupplierFactory


pytestmark = pytest.mark.django_db


class TestCategoryService:
    def test_create_duplicate_name(self):
        CategoryService.create_category(name='Lighting')
        with pytest.raises(DuplicateResourceError):
            CategoryService.create_category(name='lighting')

    def test_delete_blocked_while_products_exist(self):
        category = CategoryFactory()
        ProductFactory(category=category)
        with pytest.raises(BusinessRuleViolation):
            CategoryService.delete_category(category_id=category.pk)

    def test_delete_empty_category(self):
        category = CategoryFactory()
        CategoryService.delete_category(category_id=category.pk)
        assert not Category.objects.filter(pk=category.pk).exists()


class TestCreateProduct:
    def test_create_with_initial_stock(self):
        actor = ManagerFactory()
        product = ProductService.create_product(
            sku='CB-2.5-100',
            name='Cable 2.5mm 100m',
            category_id=CategoryFactory().pk,
            supplier_id=SupplierFactory().pk,
            purchase_price=Decimal('180.00'),
            selling_price=Decimal('249.90'),
            initial_stock=12,
            actor=actor,
        )
        product.refresh_from_db()
        assert product.current_stock == 12
        movement = StockMovement.objects.get(product=product)
        assert movement.movement_type == StockMovement.MovementType.ADJUSTMENT
        assert movement.quantity == 12
        assert movement.notes == 'Initial stock'
        assert StockService.get_ledger_balance(product.pk) == 12
        assert PriceHistory.objects.filter(product=product).count() == 1

    def test_create_without_stock_writes_no_movement(self):
        product = ProductService.create_product(
            sku='PLUG-01', name='Plug', category_id=CategoryFactory().pk,
            purchase_price=Decimal('1.00'), selling_price=Decimal('2.00'),
        )
        assert not StockMovement.objects.filter(product=product).exists()

    def test_duplicate_sku(self):
        ProductFactory(sku='PLUG-01')
        with pytest.raises(DuplicateResourceError):
            ProductService.create_product(
                sku='plug-01', name='Plug', category_id=CategoryFactory().pk,
                purchase_price=Decimal('1.00'), selling_price=Decimal('2.00'),
            )

    def test_negative_initial_stock(self):
        with pytest.raises(InvalidInputError):
            ProductService.create_product(
                sku='PLUG-02', name='Plug', category_id=CategoryFactory().pk,
                purchase_price=Decimal('1.00'), selling_price=Decimal('2.00'),
                initial_stock=-1,
            )

    def test_unknown_category(self):
        with pytest.raises(ResourceNotFoundError):
            ProductService.create_product(
                sku='PLUG-03', name='Plug', category_id='00000000-0000-0000-0000-000000000000',
                purchase_price=Decimal('1.00'), selling_price=Decimal('2.00'),
            )

    def test_inactive_supplier(self):
        with pytest.raises(BusinessRuleViolation):
            ProductService.create_product(
                sku='PLUG-04', name='Plug', category_id=CategoryFactory().pk,
                supplier_id=SupplierFactory(is_active=False).pk,
                purchase_price=Decimal('1.00'), selling_price=Decimal('2.00'),
            )


class TestUpdateProduct:
    def test_price_change_appends_history(self):
        product = ProductFactory(selling_price=Decimal('15.00'))
        ProductService.update_product(product_id=product.pk, selling_price=Decimal('17.50'))
        entry = PriceHistory.objects.filter(product=product).latest('effective_date')
        assert entry.selling_price == Decimal('17.50')
        assert entry.notes == 'Price update'

    def test_name_change_is_audited_without_price_history(self):
        product = ProductFactory(name='Old')
        ProductService.update_product(product_id=product.pk, name='New')
        assert not PriceHistory.objects.filter(product=product).exists()
        log = AuditLog.objects.filter(
            model_name='Product', object_id=str(product.pk), action=AuditLog.ActionChoices.UPDATE,
        ).get()
        assert log.new_values == {'name': 'New'}

    def test_current_stock_not_writable(self):
        product = ProductFactory()
        with pytest.raises(BusinessRuleViolation):
            ProductService.update_product(product_id=product.pk, current_stock=100)

    def test_stock_movement_is_not_a_catalogue_edit(self):
        product = ProductFactory()
        before = AuditLog.objects.filter(model_name='Product', action=AuditLog.ActionChoices.UPDATE).count()
        StockService.adjust_stock(product_id=product.pk, quantity=3, notes='count')
        after = AuditLog.objects.filter(model_name='Product', action=AuditLog.ActionChoices.UPDATE).count()
        assert after == before


class TestLowStock:
    def test_low_stock_lists_active_products_at_or_below_minimum(self):
        low = ProductFactory(minimum_stock=5, stock=2)
        edge = ProductFactory(minimum_stock=5, stock=5)
        ProductFactory(minimum_stock=5, stock=20)
        ProductFactory(minimum_stock=5, is_active=False)
        assert list(ProductService.low_stock()) == [low, edge]

    def test_deactivate(self):
        product = ProductFactory()
        ProductService.deactivate_product(product_id=product.pk)
        product.refresh_from_db()
        assert product.is_active is False
