"""
Inventory — Signals

Audit trail for catalogue edits. current_stock is deliberately absent
from the snapshot: its history lives in the stock ledger.

@file inventory/signals.py
"""

from django.db.models.signals import post_save, pre_save
from django.dispatch import receiver

from core.constants import AUDIT_ACTION_CREATE, AUDIT_ACTION_UPDATE
from core.services import AuditService
from inventory.models import Product

AUDITED_FIELDS = [
    'sku', 'name', 'description', 'category', 'supplier',
    'purchase_price', 'selling_price', 'minimum_stock',
    'unit', 'location', 'barcode', 'is_active',
]


@receiver(pre_save, sender=Product)
def product_pre_save(sender, instance, **kwargs):
    if instance._state.adding:
        return
    old = Product.objects.filter(pk=instance.pk).first()
    if old is not None:
        instance._audit_before = AuditService.snapshot(old, fields=AUDITED_FIELDS)


@receiver(post_save, sender=Product)
def product_post_save(sender, instance, created, update_fields=None, **kwargs):
    if update_fields and not set(update_fields) & set(AUDITED_FIELDS):
        return

    new_values = AuditService.snapshot(instance, fields=AUDITED_FIELDS)
    if created:
        old_values = None
    else:
        old_values, new_values = AuditService.diff(
            getattr(instance, '_audit_before', None) or {}, new_values,
        )
        if not new_values:
            return

    AuditService.log(
        actor=instance.updated_by if not created else instance.created_by,
        action=AUDIT_ACTION_CREATE if created else AUDIT_ACTION_UPDATE,
        model_name='Product',
        object_id=str(instance.pk),
        old_values=old_values,
        new_values=new_values,
    )
