"""
Purchasing — Application Configuration
"""

from django.apps import AppConfig


class PurchasingConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'purchasing'
    verbose_name = 'Purchase Orders'
