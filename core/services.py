"""
Core — Audit Service

Writes AuditLog rows on behalf of every app. Snapshots are plain JSON so
Decimal prices and UUID keys survive the trip into a JSONField.

@file core/services.py
"""

import logging
from decimal import Decimal
from typing import Any

from django.forms.models import model_to_dict

from core.constants import AUDIT_ACTION_STATUS_CHANGE
from core.models import AuditLog

logger = logging.getLogger('voltstock')


class AuditService:

    @staticmethod
    def log(
        *,
        actor,
        action: str,
        model_name: str,
        object_id: str,
        old_values: dict[str, Any] | None = None,
        new_values: dict[str, Any] | None = None,
        ip_address: str | None = None,
    ) -> AuditLog:
        return AuditLog.objects.create(
            actor=actor if getattr(actor, 'pk', None) else None,
            action=action,
            model_name=model_name,
            object_id=str(object_id),
            old_values=old_values,
            new_values=new_values,
            ip_address=ip_address,
        )

    @staticmethod
    def log_status_change(*, actor, instance, old_status: str, extra: dict[str, Any] | None = None) -> AuditLog:
        """Record a lifecycle transition of a purchase order or sale."""
        new_values = {'status': instance.status}
        if extra:
            new_values.update(extra)
        return AuditService.log(
            actor=actor,
            action=AUDIT_ACTION_STATUS_CHANGE,
            model_name=instance.__class__.__name__,
            object_id=str(instance.pk),
            old_values={'status': old_status},
            new_values=new_values,
        )

    @staticmethod
    def snapshot(instance, fields=None) -> dict[str, Any]:
        """
        Serialise a model instance to a JSON-safe dict. Decimals and UUIDs
        become strings, dates are ISO-formatted, related managers collapse
        to lists of primary keys.
        """
        data = model_to_dict(instance, fields=fields)
        cleaned: dict[str, Any] = {}
        for key, value in data.items():
            if value is None or isinstance(value, (bool, int, str)):
                cleaned[key] = value
            elif isinstance(value, Decimal):
                cleaned[key] = str(value)
            elif hasattr(value, 'isoformat'):
                cleaned[key] = value.isoformat()
            elif hasattr(value, 'pk'):
                cleaned[key] = str(value.pk)
            elif isinstance(value, (list, tuple)):
                cleaned[key] = [str(v.pk) if hasattr(v, 'pk') else v for v in value]
            else:
                cleaned[key] = str(value)
        return cleaned

    @staticmethod
    def diff(old: dict[str, Any], new: dict[str, Any]) -> tuple[dict[str, Any], dict[str, Any]]:
        """Keep only the keys whose value changed."""
        changed = {k for k in new if old.get(k) != new.get(k)}
        return (
            {k: old.get(k) for k in changed},
            {k: new.get(k) for k in changed},
        )

    @staticmethod
    def get_client_ip(request) -> str | None:
        x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
        if x_forwarded_for:
            return x_forwarded_for.split(',')[0].strip()
        return request.META.get('REMOTE_ADDR')
