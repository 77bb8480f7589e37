"""
Inventory — Models

Product catalogue. Product.current_stock is a cached balance of the
stock ledger; it is written only by stock.services.StockService so that
it always equals the sum of the product's StockMovement deltas.

@file inventory/models.py
"""

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

from core.constants import MONEY_DECIMAL_PLACES, MONEY_MAX_DIGITS
from core.models import BaseModel, DeactivatableModel


class Category(BaseModel):
    name = models.CharField(_('name'), max_length=100, unique=True)
    description = models.TextField(_('description'), blank=True)

    class Meta:
        verbose_name = _('category')
        verbose_name_plural = _('categories')
        ordering = ['name']

    def __str__(self):
        return self.name


class Product(DeactivatableModel):
    """
    A stocked item (cable, breaker, lamp...). Prices are Decimal(10, 2);
    minimum_stock is the reorder threshold used by low-stock reports.
    """

    sku = models.CharField(_('SKU'), max_length=50, unique=True)
    name = models.CharField(_('name'), max_length=200)
    description = models.TextField(_('description'), blank=True)
    category = models.ForeignKey(
        Category,
        on_delete=models.PROTECT,
        related_name='products',
        verbose_name=_('category'),
    )
    supplier = models.ForeignKey(
        'partners.Supplier',
        null=True, blank=True,
        on_delete=models.SET_NULL,
        related_name='products',
        verbose_name=_('supplier'),
    )
    purchase_price = models.DecimalField(
        _('purchase price'), max_digits=MONEY_MAX_DIGITS, decimal_places=MONEY_DECIMAL_PLACES,
    )
    selling_price = models.DecimalField(
        _('selling price'), max_digits=MONEY_MAX_DIGITS, decimal_places=MONEY_DECIMAL_PLACES,
    )
    current_stock = models.IntegerField(_('current stock'), default=0, editable=False)
    minimum_stock = models.PositiveIntegerField(
        _('minimum stock'), default=settings.VOLTSTOCK_DEFAULT_MINIMUM_STOCK,
    )
    unit = models.CharField(_('unit'), max_length=10, default='un')
    location = models.CharField(_('location'), max_length=100, blank=True)
    barcode = models.CharField(_('barcode'), max_length=64, blank=True, db_index=True)

    class Meta:
        verbose_name = _('product')
        verbose_name_plural = _('products')
        ordering = ['name']
        indexes = [
            models.Index(fields=['category', 'is_active']),
            models.Index(fields=['name']),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(current_stock__gte=0),
                name='product_stock_non_negative',
            ),
        ]

    def __str__(self):
        return f'{self.sku} — {self.name}'

    @property
    def is_low_stock(self) -> bool:
        return self.current_stock <= self.minimum_stock

    @property
    def stock_value(self):
        return self.purchase_price * self.current_stock


class PriceHistory(models.Model):
    """Append-only record of a product's prices, one row per change."""

    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name='price_history',
        verbose_name=_('product'),
    )
    purchase_price = models.DecimalField(
        _('purchase price'), max_digits=MONEY_MAX_DIGITS, decimal_places=MONEY_DECIMAL_PLACES,
    )
    selling_price = models.DecimalField(
        _('selling price'), max_digits=MONEY_MAX_DIGITS, decimal_places=MONEY_DECIMAL_PLACES,
    )
    effective_date = models.DateTimeField(_('effective date'), auto_now_add=True, db_index=True)
    notes = models.CharField(_('notes'), max_length=255, blank=True)
    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True, blank=True,
        on_delete=models.SET_NULL,
        related_name='+',
        verbose_name=_('changed by'),
    )

    class Meta:
        verbose_name = _('price history entry')
        verbose_name_plural = _('price history')
        ordering = ['-effective_date']

    def __str__(self):
        return f'{self.product_id} {self.purchase_price}/{self.selling_price} @ {self.effective_date:%Y-%m-%d}'
