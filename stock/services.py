"""
Stock — Service Layer

The only code path that changes Product.current_stock. Each call locks
the product row, moves the cached balance and inserts the matching
StockMovement inside one transaction, so the cached balance always
equals the ledger sum.

Callers that move several products (receipts, sales, returns) lock them
through lock_products(), which takes the row locks in primary-key order
so that two concurrent multi-line operations cannot deadlock.

@file stock/services.py
"""

import logging
import uuid
from collections.abc import Iterable

from django.db import transaction
from django.db.models import Case, F, IntegerField, Sum, Value, When
from django.db.models.functions import Coalesce

from core.constants import AUDIT_ACTION_STOCK_ADJUSTMENT
from core.exceptions import InsufficientStockError, InvalidInputError, ResourceNotFoundError
from core.services import AuditService
from inventory.models import Product

from .models import INBOUND_TYPES, OUTBOUND_TYPES, SIGNED_TYPES, StockMovement

logger = logging.getLogger('voltstock')


def signed_delta(movement_type: str, quantity: int) -> int:
    """Stock delta a movement of this type and quantity applies."""
    if movement_type in OUTBOUND_TYPES:
        return -quantity
    if movement_type in INBOUND_TYPES or movement_type in SIGNED_TYPES:
        return quantity
    raise InvalidInputError(detail=f'Invalid movement type: {movement_type}')


def _signed_quantity_sum():
    return Coalesce(
        Sum(
            Case(
                When(movements__movement_type__in=OUTBOUND_TYPES, then=-F('movements__quantity')),
                default=F('movements__quantity'),
                output_field=IntegerField(),
            ),
        ),
        Value(0),
    )


def _ledger_balance(product_id) -> int:
    result = StockMovement.objects.filter(product_id=product_id).aggregate(
        balance=Coalesce(
            Sum(
                Case(
                    When(movement_type__in=OUTBOUND_TYPES, then=-F('quantity')),
                    default=F('quantity'),
                    output_field=IntegerField(),
                ),
            ),
            Value(0),
        ),
    )
    return result['balance']


class StockService:

    @staticmethod
    def get_ledger_balance(product_id) -> int:
        """Sum of signed movement deltas for the product since inception."""
        return _ledger_balance(product_id)

    @staticmethod
    def lock_products(product_ids: Iterable) -> dict:
        """
        SELECT ... FOR UPDATE the given products in primary-key order.
        Must run inside a transaction. Returns {pk: Product}; a missing id
        raises ResourceNotFoundError.
        """
        try:
            ids = {uuid.UUID(str(pk)) for pk in product_ids}
        except ValueError:
            raise ResourceNotFoundError(detail='Product not found.')
        products = {
            p.pk: p
            for p in Product.objects.select_for_update().filter(pk__in=ids).order_by('pk')
        }
        missing = [str(pk) for pk in ids if pk not in products]
        if missing:
            raise ResourceNotFoundError(detail=f'Product(s) not found: {", ".join(missing)}.')
        return products

    @staticmethod
    @transaction.atomic
    def apply_movement(
        *,
        product: Product,
        movement_type: str,
        quantity: int,
        actor=None,
        reference: str = '',
        reference_type: str = '',
        notes: str = '',
    ) -> StockMovement:
        """
        Apply one ledger entry to a product the caller has already locked.

        quantity is a positive magnitude for PURCHASE/RETURN/SALE/LOSS and a
        non-zero signed value for ADJUSTMENT.
        """
        if movement_type not in StockMovement.MovementType.values:
            raise InvalidInputError(detail=f'Invalid movement type: {movement_type}')
        if quantity == 0:
            raise InvalidInputError(detail='Movement quantity cannot be zero.')
        if quantity < 0 and movement_type not in SIGNED_TYPES:
            raise InvalidInputError(detail=f'{movement_type} quantity must be positive.')

        delta = signed_delta(movement_type, quantity)
        new_stock = product.current_stock + delta
        if new_stock < 0:
            raise InsufficientStockError(
                detail=(
                    f'Insufficient stock for {product.sku}: '
                    f'available={product.current_stock}, requested={-delta}.'
                ),
            )

        product.current_stock = new_stock
        product.save(update_fields=['current_stock', 'updated_at'])

        movement = StockMovement(
            product=product,
            movement_type=movement_type,
            quantity=quantity,
            reference=str(reference) if reference else '',
            reference_type=reference_type,
            notes=notes,
            created_by=actor if getattr(actor, 'pk', None) else None,
        )
        movement.save()

        logger.info(
            'StockMovement %s %s %+d product=%s stock=%s ref=%s:%s',
            movement.pk, movement_type, delta, product.pk, new_stock, reference_type, reference,
        )
        return movement

    @staticmethod
    @transaction.atomic
    def adjust_stock(*, product_id, quantity: int, notes: str, actor=None) -> StockMovement:
        """Manual signed correction after a stock count."""
        (product,) = StockService.lock_products([product_id]).values()
        old_stock = product.current_stock
        movement = StockService.apply_movement(
            product=product,
            movement_type=StockMovement.MovementType.ADJUSTMENT,
            quantity=quantity,
            actor=actor,
            notes=notes,
        )
        AuditService.log(
            actor=actor,
            action=AUDIT_ACTION_STOCK_ADJUSTMENT,
            model_name='Product',
            object_id=str(product.pk),
            old_values={'current_stock': old_stock},
            new_values={'current_stock': product.current_stock, 'notes': notes},
        )
        return movement

    @staticmethod
    @transaction.atomic
    def record_loss(*, product_id, quantity: int, notes: str, actor=None) -> StockMovement:
        """Breakage, theft or write-off. quantity is the number of units lost."""
        if quantity <= 0:
            raise InvalidInputError(detail='Loss quantity must be positive.')
        (product,) = StockService.lock_products([product_id]).values()
        old_stock = product.current_stock
        movement = StockService.apply_movement(
            product=product,
            movement_type=StockMovement.MovementType.LOSS,
            quantity=quantity,
            actor=actor,
            notes=notes,
        )
        AuditService.log(
            actor=actor,
            action=AUDIT_ACTION_STOCK_ADJUSTMENT,
            model_name='Product',
            object_id=str(product.pk),
            old_values={'current_stock': old_stock},
            new_values={'current_stock': product.current_stock, 'loss': quantity, 'notes': notes},
        )
        return movement

    @staticmethod
    def verify_ledger(product_ids: Iterable | None = None) -> list[dict]:
        """
        Products whose cached current_stock disagrees with their ledger
        balance. An empty list means the ledger is consistent.
        """
        qs = Product.objects.all()
        if product_ids is not None:
            qs = qs.filter(pk__in=list(product_ids))
        qs = qs.annotate(ledger_balance=_signed_quantity_sum()).exclude(
            current_stock=F('ledger_balance'),
        )
        return [
            {
                'product_id': str(p.pk),
                'sku': p.sku,
                'current_stock': p.current_stock,
                'ledger_balance': p.ledger_balance,
            }
            for p in qs.order_by('sku')
        ]
