"""
Sales — Service Layer

SaleService: create (stock out), advance along the delivery chain,
cancel (stock back).
SaleReturnService: customer returns against an existing sale.

Lock order matches purchasing: sale, then its items by primary key,
then products through StockService.lock_products().

@file sales/services.py
"""

import logging
import uuid
from collections import OrderedDict
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction

from core.constants import MAX_LINE_QUANTITY, MAX_TOTAL_AMOUNT
from core.exceptions import (
    BusinessRuleViolation,
    InvalidInputError,
    InvalidStateTransition,
    QuantityViolation,
    ResourceNotFoundError,
)
from core.services import AuditService
from partners.models import Customer
from stock.models import StockMovement
from stock.services import StockService

from .models import Sale, SaleItem

logger = logging.getLogger('voltstock')

Status = Sale.StatusChoices

SALE_TRANSITIONS = {
    Status.PENDING: {Status.PROCESSING, Status.CANCELLED},
    Status.PROCESSING: {Status.SHIPPED, Status.CANCELLED},
    Status.SHIPPED: {Status.DELIVERED, Status.CANCELLED},
    Status.DELIVERED: {Status.COMPLETED},
    Status.COMPLETED: set(),
    Status.CANCELLED: set(),
}

CENT = Decimal('0.01')
ZERO = Decimal('0')


def _assert_transition(sale: Sale, new_status: str) -> None:
    allowed = SALE_TRANSITIONS.get(sale.status, set())
    if new_status not in allowed:
        raise InvalidStateTransition(
            detail=f'Cannot transition sale from {sale.status} to {new_status}.',
        )


def _lock_sale(sale_id) -> Sale:
    try:
        return Sale.objects.select_for_update().get(pk=sale_id)
    except (Sale.DoesNotExist, ValidationError):
        raise ResourceNotFoundError(detail='Sale not found.')


def _lock_items(sale: Sale) -> dict:
    return {
        item.pk: item
        for item in SaleItem.objects.select_for_update().filter(sale=sale).order_by('pk')
    }


def _as_uuid(value, label='Sale item'):
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise ResourceNotFoundError(detail=f'{label} {value} not found.')


def _append_note(sale: Sale, note: str) -> None:
    sale.notes = f'{sale.notes}\n{note}' if sale.notes else note


def _set_status(sale: Sale, new_status: str, actor, extra_fields=(), audit_extra=None):
    old_status = sale.status
    sale.status = new_status
    sale.updated_by = actor
    sale.save(update_fields=['status', 'updated_by', 'updated_at', *extra_fields])
    AuditService.log_status_change(actor=actor, instance=sale, old_status=old_status, extra=audit_extra)
    logger.info('Sale %s %s -> %s', sale.pk, old_status, new_status)


class SaleService:

    @staticmethod
    @transaction.atomic
    def create_sale(
        *,
        items: list[dict],
        actor,
        customer_id=None,
        payment_method: str = Sale.PaymentMethodChoices.CASH,
        discount=ZERO,
        notes: str = '',
    ) -> Sale:
        """
        items: [{'product_id', 'quantity', 'unit_price'?, 'discount'?}].

        Every product is locked before availability is checked, and one SALE
        movement per line takes the units off the shelf. If any line lacks
        stock the whole sale is rolled back.
        """
        if not items:
            raise InvalidInputError(detail='A sale needs at least one item.')
        if payment_method not in Sale.PaymentMethodChoices.values:
            raise InvalidInputError(detail=f'Invalid payment method: {payment_method}')

        customer = None
        if customer_id is not None:
            try:
                customer = Customer.objects.get(pk=customer_id)
            except (Customer.DoesNotExist, ValidationError):
                raise ResourceNotFoundError(detail='Customer not found.')
            if not customer.is_active:
                raise BusinessRuleViolation(detail='Cannot sell to an inactive customer.')

        product_ids = [_as_uuid(line['product_id'], 'Product') for line in items]
        products = StockService.lock_products(product_ids)

        lines = []
        for product_id, line in zip(product_ids, items):
            product = products[product_id]
            if not product.is_active:
                raise BusinessRuleViolation(detail=f'Product {product.sku} is inactive.')
            quantity = int(line['quantity'])
            if quantity <= 0:
                raise InvalidInputError(detail=f'Quantity for {product.sku} must be positive.')
            if quantity > MAX_LINE_QUANTITY:
                raise InvalidInputError(detail=f'Quantity for {product.sku} cannot exceed {MAX_LINE_QUANTITY}.')
            unit_price = line.get('unit_price')
            unit_price = product.selling_price if unit_price is None else Decimal(str(unit_price))
            if unit_price <= 0:
                raise InvalidInputError(detail=f'Unit price for {product.sku} must be positive.')
            line_discount = Decimal(str(line.get('discount') or 0))
            if line_discount < 0:
                raise InvalidInputError(detail=f'Discount for {product.sku} cannot be negative.')
            total = (unit_price * quantity - line_discount).quantize(CENT)
            if total < 0:
                raise InvalidInputError(detail=f'Discount for {product.sku} exceeds the line value.')
            lines.append((product, quantity, unit_price, line_discount, total))

        discount = Decimal(str(discount or 0))
        if discount < 0:
            raise InvalidInputError(detail='Discount cannot be negative.')
        gross = sum((line[4] for line in lines), ZERO)
        if gross >= MAX_TOTAL_AMOUNT:
            raise InvalidInputError(detail='Sale total is too large.')
        total_amount = gross - discount
        if total_amount < 0:
            raise InvalidInputError(detail='Discount exceeds the sale value.')

        sale = Sale.objects.create(
            customer=customer,
            user=actor,
            status=Status.PENDING,
            payment_method=payment_method,
            discount=discount,
            total_amount=total_amount.quantize(CENT),
            notes=notes,
            created_by=actor,
            updated_by=actor,
        )
        SaleItem.objects.bulk_create([
            SaleItem(
                sale=sale,
                product=product,
                quantity=quantity,
                unit_price=unit_price,
                discount=line_discount,
                total=total,
                created_by=actor,
            )
            for product, quantity, unit_price, line_discount, total in lines
        ])

        for product, quantity, *_ in lines:
            StockService.apply_movement(
                product=product,
                movement_type=StockMovement.MovementType.SALE,
                quantity=quantity,
                actor=actor,
                reference=str(sale.pk),
                reference_type='Sale',
                notes=f'Sale {sale.pk}',
            )

        logger.info(
            'Sale %s created: customer=%s lines=%s total=%s',
            sale.pk, customer.pk if customer else None, len(lines), sale.total_amount,
        )
        return sale

    @staticmethod
    @transaction.atomic
    def advance_status(*, sale_id, new_status: str, actor=None) -> Sale:
        if new_status == Status.CANCELLED:
            return SaleService.cancel_sale(sale_id=sale_id, actor=actor)

        sale = _lock_sale(sale_id)
        _assert_transition(sale, new_status)
        _set_status(sale, new_status, actor)
        return sale

    @staticmethod
    @transaction.atomic
    def cancel_sale(*, sale_id, actor=None, reason: str = '') -> Sale:
        """
        Cancel before delivery. Units not already returned go back on the
        shelf as RETURN movements and the lines are marked fully returned.
        """
        sale = _lock_sale(sale_id)
        if not sale.is_cancellable:
            raise InvalidStateTransition(detail=f'Cannot cancel a {sale.status} sale.')

        items = _lock_items(sale)
        pending = [item for item in items.values() if item.returnable_quantity > 0]
        products = StockService.lock_products(item.product_id for item in pending)

        for item in pending:
            quantity = item.returnable_quantity
            item.returned_quantity = item.quantity
            item.updated_by = actor
            item.save(update_fields=['returned_quantity', 'updated_by', 'updated_at'])
            StockService.apply_movement(
                product=products[item.product_id],
                movement_type=StockMovement.MovementType.RETURN,
                quantity=quantity,
                actor=actor,
                reference=str(sale.pk),
                reference_type='Sale',
                notes='sale cancelled',
            )

        if reason:
            _append_note(sale, f'Cancelled: {reason}')
        _set_status(
            sale, Status.CANCELLED, actor,
            extra_fields=['notes'],
            audit_extra={'reason': reason} if reason else None,
        )
        return sale


class SaleReturnService:

    @staticmethod
    @transaction.atomic
    def process_return(*, sale_id, items: list[dict], actor, notes: str = '') -> Sale:
        """
        items: [{'sale_item_id', 'quantity', 'reason'?}]. Quantities are
        checked against what is still returnable on each line, counting
        earlier returns. The whole request is validated before any write.

        When every line of the sale has been given back the sale becomes
        CANCELLED; otherwise its status stays as it was.
        """
        sale = _lock_sale(sale_id)
        if sale.status == Status.CANCELLED:
            raise InvalidStateTransition(detail='Cannot process a return on a cancelled sale.')
        if not items:
            raise InvalidInputError(detail='No items to return.')

        sale_items = _lock_items(sale)

        requested: OrderedDict = OrderedDict()
        reasons: dict = {}
        for line in items:
            item_id = _as_uuid(line['sale_item_id'])
            if item_id not in sale_items:
                raise ResourceNotFoundError(detail=f'Item {item_id} does not belong to this sale.')
            quantity = int(line['quantity'])
            if quantity < 0:
                raise QuantityViolation(detail=f'Return quantity for item {item_id} cannot be negative.')
            requested[item_id] = requested.get(item_id, 0) + quantity
            if line.get('reason'):
                reasons.setdefault(item_id, []).append(line['reason'])

        for item_id, quantity in requested.items():
            item = sale_items[item_id]
            if item.returned_quantity + quantity > item.quantity:
                raise QuantityViolation(
                    detail=(
                        f'Item {item_id}: returning {quantity} would exceed the quantity sold '
                        f'({item.returned_quantity} of {item.quantity} already returned).'
                    ),
                )

        returning = {item_id: q for item_id, q in requested.items() if q > 0}
        products = StockService.lock_products(sale_items[i].product_id for i in returning)

        for item_id, quantity in returning.items():
            item = sale_items[item_id]
            item.returned_quantity += quantity
            item.updated_by = actor
            item.save(update_fields=['returned_quantity', 'updated_by', 'updated_at'])
            movement_notes = f'Return on sale {sale.pk}'
            if reasons.get(item_id):
                movement_notes = f'{movement_notes}: {"; ".join(reasons[item_id])}'
            StockService.apply_movement(
                product=products[item.product_id],
                movement_type=StockMovement.MovementType.RETURN,
                quantity=quantity,
                actor=actor,
                reference=str(sale.pk),
                reference_type='Sale',
                notes=movement_notes,
            )

        fully_returned = all(item.is_fully_returned for item in sale_items.values())
        label = 'Full return' if fully_returned else 'Partial return'
        _append_note(sale, f'{label}: {notes}' if notes else label)

        audit_extra = {'returned': {str(k): v for k, v in returning.items()}}
        if fully_returned:
            _set_status(sale, Status.CANCELLED, actor, extra_fields=['notes'], audit_extra=audit_extra)
        else:
            sale.updated_by = actor
            sale.save(update_fields=['notes', 'updated_by', 'updated_at'])

        logger.info(
            'Sale %s return: %s unit(s) over %s line(s); full=%s',
            sale.pk, sum(returning.values()), len(returning), fully_returned,
        )
        return sale
