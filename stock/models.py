"""
Stock — Models

The stock ledger. Every change to Product.current_stock is explained by
exactly one StockMovement row; rows are INSERT ONLY and never updated
or deleted.

Direction is implied by movement_type: PURCHASE and RETURN add stock,
SALE and LOSS remove it, and ADJUSTMENT carries its own sign in
quantity.

@file stock/models.py
"""

import uuid

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

INBOUND_TYPES = {'PURCHASE', 'RETURN'}
OUTBOUND_TYPES = {'SALE', 'LOSS'}
SIGNED_TYPES = {'ADJUSTMENT'}


class StockMovement(models.Model):

    class MovementType(models.TextChoices):
        PURCHASE = 'PURCHASE', _('Purchase receipt')
        SALE = 'SALE', _('Sale')
        RETURN = 'RETURN', _('Customer return')
        ADJUSTMENT = 'ADJUSTMENT', _('Adjustment')
        LOSS = 'LOSS', _('Loss')

    id = models.UUIDField(
        primary_key=True, default=uuid.uuid4, editable=False,
    )
    product = models.ForeignKey(
        'inventory.Product',
        on_delete=models.PROTECT,
        related_name='movements',
        verbose_name=_('product'),
    )
    movement_type = models.CharField(
        _('movement type'), max_length=12,
        choices=MovementType.choices, db_index=True,
    )
    quantity = models.IntegerField(
        _('quantity'),
        help_text=_('Magnitude for directional types; signed for ADJUSTMENT.'),
    )
    reference = models.CharField(
        _('reference'), max_length=64, blank=True, db_index=True,
        help_text=_('ID of the purchase order or sale that caused the movement'),
    )
    reference_type = models.CharField(
        _('reference type'), max_length=32, blank=True,
        help_text=_('Model name of the source record'),
    )
    notes = models.TextField(_('notes'), blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True, blank=True,
        on_delete=models.SET_NULL,
        related_name='+',
        verbose_name=_('created by'),
    )
    created_at = models.DateTimeField(
        _('created at'), auto_now_add=True, db_index=True,
    )
    # Insert-only, so there is no updated_at.

    class Meta:
        verbose_name = _('stock movement')
        verbose_name_plural = _('stock movements')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['product', 'created_at'], name='stock_product_created_idx'),
            models.Index(fields=['reference_type', 'reference'], name='stock_reference_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(quantity__gt=0)
                    | (models.Q(movement_type='ADJUSTMENT') & ~models.Q(quantity=0))
                ),
                name='stock_movement_quantity_valid',
            ),
        ]

    def __str__(self):
        return f'{self.movement_type} {self.signed_quantity:+d} {self.product_id}'

    @property
    def signed_quantity(self) -> int:
        if self.movement_type in OUTBOUND_TYPES:
            return -self.quantity
        return self.quantity

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise NotImplementedError('StockMovement is insert-only; updates are not allowed.')
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise NotImplementedError('StockMovement records cannot be deleted.')
