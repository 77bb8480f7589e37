"""
Users — Signals

Audit trail for account creation and edits. Password hashes and login
timestamps are left out of the snapshots.

@file users/signals.py
"""

from django.db.models.signals import post_save, pre_save
from django.dispatch import receiver

from core.constants import AUDIT_ACTION_CREATE, AUDIT_ACTION_UPDATE
from core.services import AuditService
from users.models import User

AUDITED_FIELDS = ['email', 'name', 'role', 'is_active', 'is_staff']


@receiver(pre_save, sender=User)
def user_pre_save(sender, instance, **kwargs):
    if instance._state.adding:
        return
    old = User.objects.filter(pk=instance.pk).first()
    if old is not None:
        instance._audit_before = AuditService.snapshot(old, fields=AUDITED_FIELDS)


@receiver(post_save, sender=User)
def user_post_save(sender, instance, created, **kwargs):
    new_values = AuditService.snapshot(instance, fields=AUDITED_FIELDS)
    if created:
        old_values = None
    else:
        before = getattr(instance, '_audit_before', None) or {}
        old_values, new_values = AuditService.diff(before, new_values)
        if not new_values:
            return

    AuditService.log(
        actor=getattr(instance, '_current_user', None),
        action=AUDIT_ACTION_CREATE if created else AUDIT_ACTION_UPDATE,
        model_name='User',
        object_id=str(instance.pk),
        old_values=old_values,
        new_values=new_values,
    )
