"""
Users — Application Configuration
"""

from django.apps import AppConfig


class UsersConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'users'
    verbose_name = 'Staff Accounts'

    def ready(self):
        import users.signals  # noqa: F401
