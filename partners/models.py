"""
Partners — Models

Customers buy, suppliers sell to us. Both are deactivated rather than
deleted so historic sales and purchase orders keep their counterparty.

@file partners/models.py
"""

from django.db import models
from django.utils.translation import gettext_lazy as _

from core.models import DeactivatableModel


class ContactFieldsMixin(models.Model):
    email = models.EmailField(_('email'), blank=True)
    phone = models.CharField(_('phone'), max_length=30, blank=True)
    address = models.CharField(_('address'), max_length=255, blank=True)
    city = models.CharField(_('city'), max_length=100, blank=True)
    state = models.CharField(_('state'), max_length=50, blank=True)
    postal_code = models.CharField(_('postal code'), max_length=20, blank=True)
    tax_id = models.CharField(
        _('tax ID'), max_length=30, blank=True, db_index=True,
        help_text=_('Company registration or personal tax number'),
    )

    class Meta:
        abstract = True


class Supplier(DeactivatableModel, ContactFieldsMixin):
    company_name = models.CharField(_('company name'), max_length=200)
    contact_name = models.CharField(_('contact name'), max_length=150, blank=True)

    class Meta:
        verbose_name = _('supplier')
        verbose_name_plural = _('suppliers')
        ordering = ['company_name']
        indexes = [
            models.Index(fields=['company_name']),
        ]

    def __str__(self):
        return self.company_name


class Customer(DeactivatableModel, ContactFieldsMixin):

    class TypeChoices(models.TextChoices):
        PERSON = 'PERSON', _('Person')
        COMPANY = 'COMPANY', _('Company')

    name = models.CharField(_('name'), max_length=200)
    customer_type = models.CharField(
        _('type'), max_length=10,
        choices=TypeChoices.choices, default=TypeChoices.PERSON,
    )

    class Meta:
        verbose_name = _('customer')
        verbose_name_plural = _('customers')
        ordering = ['name']
        indexes = [
            models.Index(fields=['name']),
        ]

    def __str__(self):
        return self.name
