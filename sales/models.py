"""
Sales — Models

Customer sales and their lines. Stock leaves the shelf when the sale is
created; returns and cancellation bring it back through RETURN movements.

State machine:
    PENDING → PROCESSING → SHIPPED → DELIVERED → COMPLETED
    PENDING / PROCESSING / SHIPPED → CANCELLED

@file sales/models.py
"""

from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from core.constants import MONEY_DECIMAL_PLACES, MONEY_MAX_DIGITS, TOTAL_MAX_DIGITS
from core.models import BaseModel


class Sale(BaseModel):

    class StatusChoices(models.TextChoices):
        PENDING = 'PENDING', _('Pending')
        PROCESSING = 'PROCESSING', _('Processing')
        SHIPPED = 'SHIPPED', _('Shipped')
        DELIVERED = 'DELIVERED', _('Delivered')
        COMPLETED = 'COMPLETED', _('Completed')
        CANCELLED = 'CANCELLED', _('Cancelled')

    class PaymentMethodChoices(models.TextChoices):
        CASH = 'CASH', _('Cash')
        CREDIT_CARD = 'CREDIT_CARD', _('Credit card')
        DEBIT_CARD = 'DEBIT_CARD', _('Debit card')
        BANK_TRANSFER = 'BANK_TRANSFER', _('Bank transfer')
        PIX = 'PIX', _('Pix')
        INVOICE = 'INVOICE', _('Invoice')

    CANCELLABLE_STATUSES = (StatusChoices.PENDING, StatusChoices.PROCESSING, StatusChoices.SHIPPED)

    customer = models.ForeignKey(
        'partners.Customer',
        null=True, blank=True,
        on_delete=models.PROTECT,
        related_name='sales',
        verbose_name=_('customer'),
        help_text=_('Empty for walk-in counter sales'),
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='sales',
        verbose_name=_('sold by'),
    )
    sale_date = models.DateTimeField(_('sale date'), default=timezone.now, db_index=True)
    status = models.CharField(
        _('status'), max_length=20,
        choices=StatusChoices.choices,
        default=StatusChoices.PENDING,
        db_index=True,
    )
    payment_method = models.CharField(
        _('payment method'), max_length=20,
        choices=PaymentMethodChoices.choices,
        default=PaymentMethodChoices.CASH,
    )
    total_amount = models.DecimalField(
        _('total amount'), max_digits=TOTAL_MAX_DIGITS, decimal_places=MONEY_DECIMAL_PLACES, default=0,
    )
    discount = models.DecimalField(
        _('discount'), max_digits=MONEY_MAX_DIGITS, decimal_places=MONEY_DECIMAL_PLACES, default=0,
    )
    notes = models.TextField(_('notes'), blank=True)

    class Meta:
        verbose_name = _('sale')
        verbose_name_plural = _('sales')
        ordering = ['-sale_date']
        indexes = [
            models.Index(fields=['status', 'sale_date']),
            models.Index(fields=['customer', 'sale_date']),
        ]

    def __str__(self):
        return f'Sale {self.pk} ({self.status})'

    @property
    def is_cancellable(self) -> bool:
        return self.status in self.CANCELLABLE_STATUSES


class SaleItem(BaseModel):
    """One product line of a sale. returned_quantity accumulates across returns."""

    sale = models.ForeignKey(
        Sale,
        on_delete=models.CASCADE,
        related_name='items',
        verbose_name=_('sale'),
    )
    product = models.ForeignKey(
        'inventory.Product',
        on_delete=models.PROTECT,
        related_name='sale_items',
        verbose_name=_('product'),
    )
    quantity = models.PositiveIntegerField(_('quantity'))
    returned_quantity = models.PositiveIntegerField(_('quantity returned'), default=0)
    unit_price = models.DecimalField(
        _('unit price'), max_digits=MONEY_MAX_DIGITS, decimal_places=MONEY_DECIMAL_PLACES,
    )
    discount = models.DecimalField(
        _('line discount'), max_digits=MONEY_MAX_DIGITS, decimal_places=MONEY_DECIMAL_PLACES, default=0,
    )
    total = models.DecimalField(
        _('line total'), max_digits=TOTAL_MAX_DIGITS, decimal_places=MONEY_DECIMAL_PLACES,
    )

    class Meta:
        verbose_name = _('sale item')
        verbose_name_plural = _('sale items')
        ordering = ['sale', 'created_at']
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gt=0),
                name='sale_item_quantity_positive',
            ),
            models.CheckConstraint(
                condition=models.Q(returned_quantity__lte=models.F('quantity')),
                name='sale_item_returned_lte_sold',
            ),
        ]

    def __str__(self):
        return f'{self.sale_id} — {self.product_id} x{self.quantity}'

    @property
    def returnable_quantity(self) -> int:
        return self.quantity - self.returned_quantity

    @property
    def is_fully_returned(self) -> bool:
        return self.returned_quantity >= self.quantity
