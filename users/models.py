"""
Users — Models

Store staff accounts. Login is by email; authorisation is a single
role per user (ADMIN, MANAGER, EMPLOYEE).

@file users/models.py
"""

from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from core.models import BaseModel
from users.managers import UserManager


class User(AbstractBaseUser, PermissionsMixin, BaseModel):
    """
    A member of staff. Managers approve and cancel orders; employees
    record sales, receipts and returns; admins also manage accounts.
    """

    class RoleChoices(models.TextChoices):
        ADMIN = 'ADMIN', _('Administrator')
        MANAGER = 'MANAGER', _('Manager')
        EMPLOYEE = 'EMPLOYEE', _('Employee')

    email = models.EmailField(_('email'), unique=True)
    name = models.CharField(_('name'), max_length=150)
    role = models.CharField(
        _('role'), max_length=10,
        choices=RoleChoices.choices, default=RoleChoices.EMPLOYEE,
        db_index=True,
    )

    is_staff = models.BooleanField(_('staff status'), default=False)
    is_active = models.BooleanField(_('active'), default=True)
    date_joined = models.DateTimeField(_('date joined'), default=timezone.now)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    EMAIL_FIELD = 'email'
    REQUIRED_FIELDS = ['name']

    class Meta:
        verbose_name = _('user')
        verbose_name_plural = _('users')
        ordering = ['name']
        indexes = [
            models.Index(fields=['role', 'is_active']),
        ]

    def __str__(self):
        return self.name or self.email

    def get_full_name(self):
        return self.name or self.email

    def get_short_name(self):
        return self.name.split(' ')[0] if self.name else self.email

    def has_role(self, *roles: str) -> bool:
        if self.is_superuser:
            return True
        return self.role in roles

    @property
    def is_manager(self) -> bool:
        return self.has_role(self.RoleChoices.ADMIN, self.RoleChoices.MANAGER)

    @property
    def is_admin(self) -> bool:
        return self.has_role(self.RoleChoices.ADMIN)
