"""
Users — Service Layer

Account management and login bookkeeping. Services receive plain
arguments and raise typed exceptions from core.exceptions.

@file users/services.py
"""

import logging

from django.db import transaction

from core.constants import AUDIT_ACTION_DEACTIVATE
from core.exceptions import BusinessRuleViolation, DuplicateResourceError, ResourceNotFoundError
from core.services import AuditService

from .models import User

logger = logging.getLogger('voltstock')

EDITABLE_FIELDS = {'name', 'email', 'role', 'is_staff'}


class UserService:

    @staticmethod
    @transaction.atomic
    def create_user(
        *,
        email: str,
        name: str,
        password: str | None = None,
        role: str = User.RoleChoices.EMPLOYEE,
        actor=None,
        **extra_fields,
    ) -> User:
        email = email.strip().lower()
        if User.objects.filter(email__iexact=email).exists():
            raise DuplicateResourceError(detail=f'Email {email} already registered.')

        user = User(email=email, name=name, role=role, created_by=actor, **extra_fields)
        user._current_user = actor
        user.set_password(password)
        user.save()

        logger.info('User %s created with role %s', user.pk, role)
        return user

    @staticmethod
    @transaction.atomic
    def update_user(*, user_id, actor=None, password: str | None = None, **fields) -> User:
        try:
            user = User.objects.select_for_update().get(pk=user_id)
        except User.DoesNotExist:
            raise ResourceNotFoundError(detail='User not found.')

        email = fields.get('email')
        if email and User.objects.filter(email__iexact=email).exclude(pk=user.pk).exists():
            raise DuplicateResourceError(detail=f'Email {email} already registered.')

        for field, value in fields.items():
            if field in EDITABLE_FIELDS:
                setattr(user, field, value)
        if password:
            user.set_password(password)

        user.updated_by = actor
        user._current_user = actor
        user.save()
        return user

    @staticmethod
    @transaction.atomic
    def deactivate_user(*, user_id, actor=None) -> User:
        try:
            user = User.objects.select_for_update().get(pk=user_id)
        except User.DoesNotExist:
            raise ResourceNotFoundError(detail='User not found.')

        if actor is not None and user.pk == actor.pk:
            raise BusinessRuleViolation(detail='You cannot deactivate your own account.')
        if not user.is_active:
            return user

        user.is_active = False
        user.updated_by = actor
        user._current_user = actor
        user.save(update_fields=['is_active', 'updated_by', 'updated_at'])

        AuditService.log(
            actor=actor,
            action=AUDIT_ACTION_DEACTIVATE,
            model_name='User',
            object_id=str(user.pk),
            old_values={'is_active': True},
            new_values={'is_active': False},
        )
        logger.info('User %s deactivated by %s', user.pk, getattr(actor, 'pk', None))
        return user


class AuthService:

    @staticmethod
    def authenticate(*, email: str, password: str) -> User | None:
        user = User.objects.filter(email__iexact=email.strip()).first()
        if user is None or not user.is_active:
            return None
        if not user.check_password(password):
            return None
        return user

    @staticmethod
    def log_auth_event(*, action: str, user=None, ip_address=None):
        AuditService.log(
            actor=user,
            action=action,
            model_name='User',
            object_id=str(user.pk) if user else '',
            ip_address=ip_address,
        )
