"""
Purchasing — Service Layer

Purchase order lifecycle: create (PENDING), advance (APPROVED, ORDERED),
receive (stock in, PARTIALLY_RECEIVED / RECEIVED), cancel.

Every operation is one transaction. Rows are locked in a fixed order
(order, then its items, then products by primary key) and the whole
request is validated before the first write, so a rejected receipt
leaves no trace in items, stock or the ledger.

@file purchasing/services.py
"""

import logging
import uuid
from collections import OrderedDict
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from core.constants import MAX_LINE_QUANTITY, MAX_TOTAL_AMOUNT
from core.exceptions import (
    BusinessRuleViolation,
    InvalidInputError,
    InvalidStateTransition,
    QuantityViolation,
    ResourceNotFoundError,
)
from core.services import AuditService
from inventory.models import Product
from partners.models import Supplier
from stock.models import StockMovement
from stock.services import StockService

from .models import PurchaseItem, PurchaseOrder

logger = logging.getLogger('voltstock')

Status = PurchaseOrder.StatusChoices

# Valid status transitions: from_status -> set of allowed to_status
ORDER_TRANSITIONS = {
    Status.PENDING: {Status.APPROVED, Status.ORDERED, Status.PARTIALLY_RECEIVED, Status.RECEIVED, Status.CANCELLED},
    Status.APPROVED: {Status.ORDERED, Status.PARTIALLY_RECEIVED, Status.RECEIVED, Status.CANCELLED},
    Status.ORDERED: {Status.PARTIALLY_RECEIVED, Status.RECEIVED, Status.CANCELLED},
    Status.PARTIALLY_RECEIVED: {Status.RECEIVED},
    Status.RECEIVED: set(),
    Status.CANCELLED: set(),
}

# Targets a user may request through advance_status; receipt statuses
# are derived by receive_order.
MANUAL_TARGETS = {Status.APPROVED, Status.ORDERED}

CENT = Decimal('0.01')


def _assert_transition(order: PurchaseOrder, new_status: str) -> None:
    allowed = ORDER_TRANSITIONS.get(order.status, set())
    if new_status not in allowed:
        raise InvalidStateTransition(
            detail=f'Cannot transition purchase order from {order.status} to {new_status}.',
        )


def _lock_order(order_id) -> PurchaseOrder:
    try:
        return PurchaseOrder.objects.select_for_update().get(pk=order_id)
    except (PurchaseOrder.DoesNotExist, ValidationError):
        raise ResourceNotFoundError(detail='Purchase order not found.')


def _as_uuid(value, label='Purchase item'):
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise ResourceNotFoundError(detail=f'{label} {value} not found.')


def _receipt_status(items) -> str | None:
    """RECEIVED if every line is complete, PARTIALLY_RECEIVED if any arrived, else None."""
    if all(item.received_quantity >= item.quantity for item in items):
        return Status.RECEIVED
    if any(item.received_quantity > 0 for item in items):
        return Status.PARTIALLY_RECEIVED
    return None


def _set_status(order: PurchaseOrder, new_status: str, actor, extra_fields=(), audit_extra=None):
    old_status = order.status
    order.status = new_status
    order.updated_by = actor
    order.save(update_fields=['status', 'updated_by', 'updated_at', *extra_fields])
    AuditService.log_status_change(actor=actor, instance=order, old_status=old_status, extra=audit_extra)
    logger.info('PurchaseOrder %s %s -> %s', order.pk, old_status, new_status)


class PurchaseOrderService:

    @staticmethod
    @transaction.atomic
    def create_order(
        *,
        supplier_id,
        items: list[dict],
        actor,
        expected_delivery=None,
        notes: str = '',
    ) -> PurchaseOrder:
        """
        items: [{'product_id', 'quantity', 'unit_price'}]. Quantities must
        be positive, prices zero or more. No stock effect.
        """
        if not items:
            raise InvalidInputError(detail='A purchase order needs at least one item.')

        try:
            supplier = Supplier.objects.get(pk=supplier_id)
        except (Supplier.DoesNotExist, ValidationError):
            raise ResourceNotFoundError(detail='Supplier not found.')
        if not supplier.is_active:
            raise BusinessRuleViolation(detail='Cannot order from an inactive supplier.')

        product_ids = [_as_uuid(line['product_id'], 'Product') for line in items]
        products = Product.objects.in_bulk(product_ids)
        lines = []
        for product_id, line in zip(product_ids, items):
            product = products.get(product_id)
            if product is None:
                raise ResourceNotFoundError(detail=f'Product {product_id} not found.')
            if not product.is_active:
                raise BusinessRuleViolation(detail=f'Product {product.sku} is inactive.')
            quantity = int(line['quantity'])
            if quantity <= 0:
                raise InvalidInputError(detail=f'Quantity for {product.sku} must be positive.')
            if quantity > MAX_LINE_QUANTITY:
                raise InvalidInputError(detail=f'Quantity for {product.sku} cannot exceed {MAX_LINE_QUANTITY}.')
            unit_price = line.get('unit_price')
            unit_price = product.purchase_price if unit_price is None else Decimal(str(unit_price))
            if unit_price <= 0:
                raise InvalidInputError(detail=f'Unit price for {product.sku} must be positive.')
            lines.append((product, quantity, unit_price, (unit_price * quantity).quantize(CENT)))

        total_amount = sum((line[3] for line in lines), Decimal('0'))
        if total_amount >= MAX_TOTAL_AMOUNT:
            raise InvalidInputError(detail='Order total is too large.')

        order = PurchaseOrder.objects.create(
            supplier=supplier,
            user=actor,
            expected_delivery=expected_delivery,
            notes=notes,
            total_amount=total_amount,
            status=Status.PENDING,
            created_by=actor,
            updated_by=actor,
        )
        PurchaseItem.objects.bulk_create([
            PurchaseItem(
                order=order,
                product=product,
                quantity=quantity,
                unit_price=unit_price,
                total=total,
                created_by=actor,
            )
            for product, quantity, unit_price, total in lines
        ])

        logger.info(
            'PurchaseOrder %s created: supplier=%s lines=%s total=%s',
            order.pk, supplier.pk, len(lines), order.total_amount,
        )
        return order

    @staticmethod
    @transaction.atomic
    def advance_status(*, order_id, new_status: str, actor=None) -> PurchaseOrder:
        """
        Manual move along PENDING → APPROVED → ORDERED. A CANCELLED request
        is handled by cancel_order so its guard always applies.
        """
        if new_status == Status.CANCELLED:
            return PurchaseOrderService.cancel_order(order_id=order_id, actor=actor)

        order = _lock_order(order_id)
        if order.is_terminal:
            raise InvalidStateTransition(
                detail=f'Purchase order is {order.status}; no further transitions are allowed.',
            )
        if new_status not in MANUAL_TARGETS:
            raise InvalidStateTransition(
                detail=f'{new_status} cannot be set manually; it follows from receiving goods.',
            )
        _assert_transition(order, new_status)
        _set_status(order, new_status, actor)
        return order

    @staticmethod
    @transaction.atomic
    def receive_order(*, order_id, items: list[dict], actor, notes: str = '') -> PurchaseOrder:
        """
        Record goods arriving. items: [{'item_id', 'quantity'}] where quantity
        is the number of units arriving now (zero allowed, negative not).
        Several lines for the same item are added together.
        """
        order = _lock_order(order_id)
        if order.status == Status.CANCELLED:
            raise InvalidStateTransition(detail='Cannot receive goods on a cancelled purchase order.')
        if not items:
            raise InvalidInputError(detail='No items to receive.')

        order_items = {
            item.pk: item
            for item in PurchaseItem.objects.select_for_update().filter(order=order).order_by('pk')
        }

        deltas: OrderedDict = OrderedDict()
        for line in items:
            item_id = _as_uuid(line['item_id'])
            if item_id not in order_items:
                raise ResourceNotFoundError(detail=f'Item {item_id} does not belong to this purchase order.')
            quantity = int(line['quantity'])
            if quantity < 0:
                raise QuantityViolation(detail=f'Received quantity for item {item_id} cannot be negative.')
            deltas[item_id] = deltas.get(item_id, 0) + quantity

        for item_id, delta in deltas.items():
            item = order_items[item_id]
            if item.received_quantity + delta > item.quantity:
                raise QuantityViolation(
                    detail=(
                        f'Item {item_id}: receiving {delta} would exceed the ordered quantity '
                        f'({item.received_quantity} of {item.quantity} already received).'
                    ),
                )

        arriving = {item_id: delta for item_id, delta in deltas.items() if delta > 0}
        products = StockService.lock_products(order_items[i].product_id for i in arriving)

        movement_notes = f'Receipt of purchase order {order.pk}'
        if notes:
            movement_notes = f'{movement_notes} - {notes}'

        for item_id, delta in arriving.items():
            item = order_items[item_id]
            item.received_quantity += delta
            item.updated_by = actor
            item.save(update_fields=['received_quantity', 'updated_by', 'updated_at'])
            StockService.apply_movement(
                product=products[item.product_id],
                movement_type=StockMovement.MovementType.PURCHASE,
                quantity=delta,
                actor=actor,
                reference=str(order.pk),
                reference_type='PurchaseOrder',
                notes=movement_notes,
            )

        order.actual_delivery = timezone.now()
        new_status = _receipt_status(order_items.values())
        if new_status and new_status != order.status:
            _assert_transition(order, new_status)
            _set_status(
                order, new_status, actor,
                extra_fields=['actual_delivery'],
                audit_extra={'received': {str(k): v for k, v in arriving.items()}},
            )
        else:
            order.updated_by = actor
            order.save(update_fields=['actual_delivery', 'updated_by', 'updated_at'])

        logger.info(
            'PurchaseOrder %s received %s unit(s) over %s line(s); status=%s',
            order.pk, sum(arriving.values()), len(arriving), order.status,
        )
        return order

    @staticmethod
    @transaction.atomic
    def cancel_order(*, order_id, actor=None, reason: str = '') -> PurchaseOrder:
        order = _lock_order(order_id)
        if order.status == Status.CANCELLED:
            raise InvalidStateTransition(detail='Purchase order is already cancelled.')
        if order.status in (Status.RECEIVED, Status.PARTIALLY_RECEIVED):
            raise InvalidStateTransition(
                detail=f'Cannot cancel a {order.status} purchase order; goods have already arrived.',
            )
        _assert_transition(order, Status.CANCELLED)
        _set_status(order, Status.CANCELLED, actor, audit_extra={'reason': reason} if reason else None)
        return order
