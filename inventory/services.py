"""
Inventory — Service Layer

Catalogue maintenance: categories and products. A new product's opening
quantity goes through the stock ledger as an ADJUSTMENT, and every price
edit appends a PriceHistory row in the same transaction.

@file inventory/services.py
"""

import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import F

from core.constants import AUDIT_ACTION_DELETE
from core.exceptions import (
    BusinessRuleViolation,
    DuplicateResourceError,
    InvalidInputError,
    ResourceNotFoundError,
)
from core.services import AuditService
from partners.models import Supplier
from stock.models import StockMovement
from stock.services import StockService

from .models import Category, PriceHistory, Product

logger = logging.getLogger('voltstock')

PRODUCT_EDITABLE_FIELDS = {
    'name', 'description', 'category', 'supplier', 'purchase_price',
    'selling_price', 'minimum_stock', 'unit', 'location', 'barcode', 'sku',
}


def _validate_prices(**prices):
    for field, value in prices.items():
        if value is not None and Decimal(value) < 0:
            raise InvalidInputError(detail=f'{field} cannot be negative.')


def _resolve_category(category_id) -> Category:
    try:
        return Category.objects.get(pk=category_id)
    except Category.DoesNotExist:
        raise ResourceNotFoundError(detail='Category not found.')


def _resolve_supplier(supplier_id) -> Supplier | None:
    if supplier_id is None:
        return None
    try:
        supplier = Supplier.objects.get(pk=supplier_id)
    except Supplier.DoesNotExist:
        raise ResourceNotFoundError(detail='Supplier not found.')
    if not supplier.is_active:
        raise BusinessRuleViolation(detail='Supplier is inactive.')
    return supplier


class CategoryService:

    @staticmethod
    @transaction.atomic
    def create_category(*, name: str, description: str = '', actor=None) -> Category:
        if Category.objects.filter(name__iexact=name).exists():
            raise DuplicateResourceError(detail=f'Category "{name}" already exists.')
        return Category.objects.create(name=name, description=description, created_by=actor)

    @staticmethod
    @transaction.atomic
    def update_category(*, category_id, actor=None, **fields) -> Category:
        category = _resolve_category(category_id)
        name = fields.get('name')
        if name and Category.objects.filter(name__iexact=name).exclude(pk=category.pk).exists():
            raise DuplicateResourceError(detail=f'Category "{name}" already exists.')
        for field in ('name', 'description'):
            if field in fields:
                setattr(category, field, fields[field])
        category.updated_by = actor
        category.save()
        return category

    @staticmethod
    @transaction.atomic
    def delete_category(*, category_id, actor=None) -> None:
        category = _resolve_category(category_id)
        product_count = category.products.count()
        if product_count:
            raise BusinessRuleViolation(
                detail=f'Category has {product_count} product(s) and cannot be deleted.',
            )
        AuditService.log(
            actor=actor,
            action=AUDIT_ACTION_DELETE,
            model_name='Category',
            object_id=str(category.pk),
            old_values=AuditService.snapshot(category),
        )
        category.delete()


class ProductService:

    @staticmethod
    @transaction.atomic
    def create_product(
        *,
        sku: str,
        name: str,
        category_id,
        purchase_price: Decimal,
        selling_price: Decimal,
        supplier_id=None,
        initial_stock: int = 0,
        actor=None,
        **fields,
    ) -> Product:
        if Product.objects.filter(sku__iexact=sku).exists():
            raise DuplicateResourceError(detail=f'A product with SKU {sku} already exists.')
        if initial_stock < 0:
            raise InvalidInputError(detail='Initial stock cannot be negative.')
        _validate_prices(purchase_price=purchase_price, selling_price=selling_price)

        product = Product.objects.create(
            sku=sku,
            name=name,
            category=_resolve_category(category_id),
            supplier=_resolve_supplier(supplier_id),
            purchase_price=purchase_price,
            selling_price=selling_price,
            created_by=actor,
            updated_by=actor,
            **fields,
        )
        PriceHistory.objects.create(
            product=product,
            purchase_price=product.purchase_price,
            selling_price=product.selling_price,
            notes='Initial price',
            changed_by=actor,
        )

        if initial_stock:
            product = Product.objects.select_for_update().get(pk=product.pk)
            StockService.apply_movement(
                product=product,
                movement_type=StockMovement.MovementType.ADJUSTMENT,
                quantity=initial_stock,
                actor=actor,
                notes='Initial stock',
            )

        logger.info('Product %s (%s) created with stock %s', product.pk, sku, initial_stock)
        return product

    @staticmethod
    @transaction.atomic
    def update_product(*, product_id, actor=None, **fields) -> Product:
        try:
            product = Product.objects.select_for_update().get(pk=product_id)
        except Product.DoesNotExist:
            raise ResourceNotFoundError(detail='Product not found.')

        if 'current_stock' in fields:
            raise BusinessRuleViolation(
                detail='Stock is changed through adjustments, receipts, sales and returns only.',
            )
        sku = fields.get('sku')
        if sku and Product.objects.filter(sku__iexact=sku).exclude(pk=product.pk).exists():
            raise DuplicateResourceError(detail=f'A product with SKU {sku} already exists.')
        _validate_prices(
            purchase_price=fields.get('purchase_price'),
            selling_price=fields.get('selling_price'),
        )
        if 'category_id' in fields:
            fields['category'] = _resolve_category(fields.pop('category_id'))
        if 'supplier_id' in fields:
            fields['supplier'] = _resolve_supplier(fields.pop('supplier_id'))

        old_prices = (product.purchase_price, product.selling_price)
        for field, value in fields.items():
            if field in PRODUCT_EDITABLE_FIELDS:
                setattr(product, field, value)
        product.updated_by = actor
        product.save()
        product.refresh_from_db()

        if (product.purchase_price, product.selling_price) != old_prices:
            PriceHistory.objects.create(
                product=product,
                purchase_price=product.purchase_price,
                selling_price=product.selling_price,
                notes='Price update',
                changed_by=actor,
            )
            logger.info(
                'Product %s price changed %s/%s -> %s/%s',
                product.pk, *old_prices, product.purchase_price, product.selling_price,
            )
        return product

    @staticmethod
    @transaction.atomic
    def deactivate_product(*, product_id, actor=None) -> Product:
        try:
            product = Product.objects.select_for_update().get(pk=product_id)
        except Product.DoesNotExist:
            raise ResourceNotFoundError(detail='Product not found.')
        product.deactivate(user=actor)
        return product

    @staticmethod
    def low_stock():
        """Active products at or below their reorder threshold, emptiest first."""
        return (
            Product.objects.active()
            .filter(current_stock__lte=F('minimum_stock'))
            .select_related('category', 'supplier')
            .order_by('current_stock', 'name')
        )
