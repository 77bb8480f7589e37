"""
Purchasing — Models

Supplier purchase orders and their lines.

State machine:
    PENDING → APPROVED → ORDERED → PARTIALLY_RECEIVED → RECEIVED
    PENDING / APPROVED / ORDERED → CANCELLED

PARTIALLY_RECEIVED and RECEIVED are never set by hand: they follow
from the lines' received_quantity vs quantity after each receipt.

@file purchasing/models.py
"""

from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from core.constants import MONEY_DECIMAL_PLACES, MONEY_MAX_DIGITS, TOTAL_MAX_DIGITS
from core.models import BaseModel


class PurchaseOrder(BaseModel):

    class StatusChoices(models.TextChoices):
        PENDING = 'PENDING', _('Pending')
        APPROVED = 'APPROVED', _('Approved')
        ORDERED = 'ORDERED', _('Ordered')
        PARTIALLY_RECEIVED = 'PARTIALLY_RECEIVED', _('Partially received')
        RECEIVED = 'RECEIVED', _('Received')
        CANCELLED = 'CANCELLED', _('Cancelled')

    OPEN_STATUSES = (StatusChoices.PENDING, StatusChoices.APPROVED, StatusChoices.ORDERED)
    TERMINAL_STATUSES = (StatusChoices.RECEIVED, StatusChoices.CANCELLED)

    supplier = models.ForeignKey(
        'partners.Supplier',
        on_delete=models.PROTECT,
        related_name='purchase_orders',
        verbose_name=_('supplier'),
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='purchase_orders',
        verbose_name=_('placed by'),
    )
    order_date = models.DateTimeField(_('order date'), default=timezone.now, db_index=True)
    expected_delivery = models.DateField(_('expected delivery'), null=True, blank=True)
    actual_delivery = models.DateTimeField(_('actual delivery'), null=True, blank=True)
    status = models.CharField(
        _('status'), max_length=20,
        choices=StatusChoices.choices,
        default=StatusChoices.PENDING,
        db_index=True,
    )
    total_amount = models.DecimalField(
        _('total amount'), max_digits=TOTAL_MAX_DIGITS, decimal_places=MONEY_DECIMAL_PLACES, default=0,
        help_text=_('Sum of line totals, fixed at creation'),
    )
    notes = models.TextField(_('notes'), blank=True)

    class Meta:
        verbose_name = _('purchase order')
        verbose_name_plural = _('purchase orders')
        ordering = ['-order_date']
        indexes = [
            models.Index(fields=['supplier', 'status']),
            models.Index(fields=['status', 'order_date']),
        ]

    def __str__(self):
        return f'PO {self.pk} — {self.supplier} ({self.status})'

    @property
    def is_terminal(self) -> bool:
        return self.status in self.TERMINAL_STATUSES


class PurchaseItem(BaseModel):
    """One product line of a purchase order. received_quantity only grows."""

    order = models.ForeignKey(
        PurchaseOrder,
        on_delete=models.CASCADE,
        related_name='items',
        verbose_name=_('order'),
    )
    product = models.ForeignKey(
        'inventory.Product',
        on_delete=models.PROTECT,
        related_name='purchase_items',
        verbose_name=_('product'),
    )
    quantity = models.PositiveIntegerField(_('quantity ordered'))
    received_quantity = models.PositiveIntegerField(_('quantity received'), default=0)
    unit_price = models.DecimalField(
        _('unit price'), max_digits=MONEY_MAX_DIGITS, decimal_places=MONEY_DECIMAL_PLACES,
    )
    total = models.DecimalField(
        _('line total'), max_digits=TOTAL_MAX_DIGITS, decimal_places=MONEY_DECIMAL_PLACES,
    )

    class Meta:
        verbose_name = _('purchase item')
        verbose_name_plural = _('purchase items')
        ordering = ['order', 'created_at']
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gt=0),
                name='purchase_item_quantity_positive',
            ),
            models.CheckConstraint(
                condition=models.Q(received_quantity__lte=models.F('quantity')),
                name='purchase_item_received_lte_ordered',
            ),
        ]

    def __str__(self):
        return f'{self.order_id} — {self.product_id} {self.received_quantity}/{self.quantity}'

    @property
    def remaining_quantity(self) -> int:
        return self.quantity - self.received_quantity

    @property
    def is_fully_received(self) -> bool:
        return self.received_quantity >= self.quantity
