"""
Inventory — Application Configuration
"""

from django.apps import AppConfig


class InventoryConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'inventory'
    verbose_name = 'Product Catalogue'

    def ready(self):
        import inventory.signals  # noqa: F401
