"""
Partners — Service Layer

Create, update and deactivate customers and suppliers. A supplier
cannot be switched off while it still backs active products or has
purchase orders in flight.

@file partners/services.py
"""

import logging

from django.db import transaction

from core.constants import AUDIT_ACTION_CREATE, AUDIT_ACTION_DEACTIVATE, AUDIT_ACTION_UPDATE
from core.exceptions import BusinessRuleViolation, DuplicateResourceError, ResourceNotFoundError
from core.services import AuditService
from inventory.models import Product
from purchasing.models import PurchaseOrder

from .models import Customer, Supplier

logger = logging.getLogger('voltstock')


def _get_locked(model, pk):
    try:
        return model.objects.select_for_update().get(pk=pk)
    except model.DoesNotExist:
        raise ResourceNotFoundError(detail=f'{model._meta.verbose_name.title()} not found.')


def _assert_unique_tax_id(model, tax_id, exclude_pk=None):
    if not tax_id:
        return
    qs = model.objects.active().filter(tax_id=tax_id)
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    if qs.exists():
        raise DuplicateResourceError(
            detail=f'An active {model._meta.verbose_name} with tax ID {tax_id} already exists.',
        )


def _apply_update(instance, fields, actor):
    before = AuditService.snapshot(instance)
    for field, value in fields.items():
        setattr(instance, field, value)
    instance.updated_by = actor
    instance.save()
    old_values, new_values = AuditService.diff(before, AuditService.snapshot(instance))
    if new_values:
        AuditService.log(
            actor=actor,
            action=AUDIT_ACTION_UPDATE,
            model_name=instance.__class__.__name__,
            object_id=str(instance.pk),
            old_values=old_values,
            new_values=new_values,
        )
    return instance


class SupplierService:

    @staticmethod
    @transaction.atomic
    def create_supplier(*, actor=None, **fields) -> Supplier:
        _assert_unique_tax_id(Supplier, fields.get('tax_id'))
        supplier = Supplier.objects.create(created_by=actor, **fields)
        AuditService.log(
            actor=actor,
            action=AUDIT_ACTION_CREATE,
            model_name='Supplier',
            object_id=str(supplier.pk),
            new_values=AuditService.snapshot(supplier),
        )
        return supplier

    @staticmethod
    @transaction.atomic
    def update_supplier(*, supplier_id, actor=None, **fields) -> Supplier:
        supplier = _get_locked(Supplier, supplier_id)
        if 'tax_id' in fields:
            _assert_unique_tax_id(Supplier, fields['tax_id'], exclude_pk=supplier.pk)
        return _apply_update(supplier, fields, actor)

    @staticmethod
    @transaction.atomic
    def deactivate_supplier(*, supplier_id, actor=None) -> Supplier:
        supplier = _get_locked(Supplier, supplier_id)

        product_count = Product.objects.active().filter(supplier=supplier).count()
        if product_count:
            raise BusinessRuleViolation(
                detail=(
                    f'Supplier backs {product_count} active product(s). '
                    'Deactivate them or change their supplier first.'
                ),
            )
        open_orders = PurchaseOrder.objects.filter(
            supplier=supplier, status__in=PurchaseOrder.OPEN_STATUSES,
        ).count()
        if open_orders:
            raise BusinessRuleViolation(
                detail=f'Supplier has {open_orders} open purchase order(s). Complete or cancel them first.',
            )

        supplier.deactivate(user=actor)
        AuditService.log(
            actor=actor,
            action=AUDIT_ACTION_DEACTIVATE,
            model_name='Supplier',
            object_id=str(supplier.pk),
            old_values={'is_active': True},
            new_values={'is_active': False},
        )
        logger.info('Supplier %s deactivated', supplier.pk)
        return supplier


class CustomerService:

    @staticmethod
    @transaction.atomic
    def create_customer(*, actor=None, **fields) -> Customer:
        _assert_unique_tax_id(Customer, fields.get('tax_id'))
        customer = Customer.objects.create(created_by=actor, **fields)
        AuditService.log(
            actor=actor,
            action=AUDIT_ACTION_CREATE,
            model_name='Customer',
            object_id=str(customer.pk),
            new_values=AuditService.snapshot(customer),
        )
        return customer

    @staticmethod
    @transaction.atomic
    def update_customer(*, customer_id, actor=None, **fields) -> Customer:
        customer = _get_locked(Customer, customer_id)
        if 'tax_id' in fields:
            _assert_unique_tax_id(Customer, fields['tax_id'], exclude_pk=customer.pk)
        return _apply_update(customer, fields, actor)

    @staticmethod
    @transaction.atomic
    def deactivate_customer(*, customer_id, actor=None) -> Customer:
        customer = _get_locked(Customer, customer_id)
        customer.deactivate(user=actor)
        AuditService.log(
            actor=actor,
            action=AUDIT_ACTION_DEACTIVATE,
            model_name='Customer',
            object_id=str(customer.pk),
            old_values={'is_active': True},
            new_values={'is_active': False},
        )
        return customer
