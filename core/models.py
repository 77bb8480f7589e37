"""
Core — Base Models & Audit Infrastructure

Abstract building blocks shared by every VoltStock model (UUID keys,
timestamps, acting-user columns) and the AuditLog
table that records status changes and master-data edits.

@file core/models.py
"""

import uuid

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _


class TimestampMixin(models.Model):
    created_at = models.DateTimeField(
        _('created at'), auto_now_add=True, db_index=True,
    )
    updated_at = models.DateTimeField(
        _('updated at'), auto_now=True,
    )

    class Meta:
        abstract = True


class AuditFieldsMixin(models.Model):
    """Who created and who last touched the row."""

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True, blank=True,
        on_delete=models.SET_NULL,
        related_name='+',
        verbose_name=_('created by'),
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True, blank=True,
        on_delete=models.SET_NULL,
        related_name='+',
        verbose_name=_('updated by'),
    )

    class Meta:
        abstract = True


class BaseModel(TimestampMixin, AuditFieldsMixin):
    """UUID primary key + timestamps + acting-user columns."""

    id = models.UUIDField(
        primary_key=True, default=uuid.uuid4, editable=False,
    )

    class Meta:
        abstract = True


class ActiveQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True)


class DeactivatableModel(BaseModel):
    """
    Master data that is switched off instead of deleted, so that orders,
    sales and ledger rows referencing it keep a valid target.
    """

    is_active = models.BooleanField(_('active'), default=True, db_index=True)

    objects = ActiveQuerySet.as_manager()

    class Meta:
        abstract = True

    def deactivate(self, user=None):
        self.is_active = False
        self.updated_by = user
        self.save(update_fields=['is_active', 'updated_by', 'updated_at'])

    def activate(self, user=None):
        self.is_active = True
        self.updated_by = user
        self.save(update_fields=['is_active', 'updated_by', 'updated_at'])


class AuditLog(models.Model):
    """
    One row per audited write. old_values / new_values hold JSON snapshots
    so a status change or price edit can be diffed after the fact.
    """

    class ActionChoices(models.TextChoices):
        CREATE = 'CREATE', _('Create')
        UPDATE = 'UPDATE', _('Update')
        DELETE = 'DELETE', _('Delete')
        DEACTIVATE = 'DEACTIVATE', _('Deactivate')
        STATUS_CHANGE = 'STATUS_CHANGE', _('Status Change')
        STOCK_ADJUSTMENT = 'STOCK_ADJUSTMENT', _('Stock Adjustment')
        LOGIN = 'LOGIN', _('Login')
        LOGOUT = 'LOGOUT', _('Logout')

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True, blank=True,
        on_delete=models.SET_NULL,
        related_name='audit_logs',
        verbose_name=_('actor'),
    )
    action = models.CharField(
        _('action'), max_length=20,
        choices=ActionChoices.choices, db_index=True,
    )
    model_name = models.CharField(_('model'), max_length=100, db_index=True)
    object_id = models.CharField(_('object ID'), max_length=40, db_index=True)

    old_values = models.JSONField(_('old values'), null=True, blank=True)
    new_values = models.JSONField(_('new values'), null=True, blank=True)

    ip_address = models.GenericIPAddressField(_('IP address'), null=True, blank=True)

    timestamp = models.DateTimeField(_('timestamp'), auto_now_add=True, db_index=True)

    class Meta:
        verbose_name = _('audit log')
        verbose_name_plural = _('audit logs')
        ordering = ['-timestamp']
        indexes = [
            models.Index(fields=['model_name', 'object_id']),
            models.Index(fields=['action', 'timestamp']),
        ]

    def __str__(self):
        return f'{self.action} {self.model_name}:{self.object_id}'
