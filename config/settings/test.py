"""
VoltStock — Test Settings

File-backed SQLite, fast hashing, no throttling. Transactions open with
BEGIN IMMEDIATE, so concurrent writers queue on the database lock the
way SELECT ... FOR UPDATE queues them on PostgreSQL. Activated by pytest via
DJANGO_SETTINGS_MODULE=config.settings.test (see pyproject.toml).

@file config/settings/test.py
"""

from .base import *  # noqa: F401, F403

DEBUG = False

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': BASE_DIR / 'voltstock.sqlite3',  # noqa: F405
        'OPTIONS': {'transaction_mode': 'IMMEDIATE', 'timeout': 20},
        'TEST': {'NAME': BASE_DIR / 'test_voltstock.sqlite3'},  # noqa: F405
    },
}

PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]

CACHES = {
    'default': {'BACKEND': 'django.core.cache.backends.locmem.LocMemCache'},
}

REST_FRAMEWORK['DEFAULT_THROTTLE_CLASSES'] = []  # noqa: F405
REST_FRAMEWORK['DEFAULT_RENDERER_CLASSES'] = (  # noqa: F405
    'core.renderers.StandardJSONRenderer',
)

LOGGING['loggers']['voltstock']['level'] = 'WARNING'  # noqa: F405
