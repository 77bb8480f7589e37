"""
VoltStock — Root conftest for pytest

Shared fixtures available to all test modules.

@file conftest.py
"""

import threading

import pytest
from django.db import connection
from rest_framework.test import APIClient

from tests.factories import ManagerFactory, SuperuserFactory, UserFactory


@pytest.fixture
def api_client():
    """Unauthenticated DRF test client."""
    return APIClient()


@pytest.fixture
def user(db):
    """Active EMPLOYEE with default password TestPass2026!"""
    return UserFactory()


@pytest.fixture
def manager(db):
    return ManagerFactory()


@pytest.fixture
def admin_user(db):
    """Superuser with default password TestPass2026!"""
    return SuperuserFactory()


@pytest.fixture
def authenticated_client(api_client, user):
    """API client authenticated as an employee."""
    api_client.force_authenticate(user=user)
    return api_client


@pytest.fixture
def manager_client(api_client, manager):
    api_client.force_authenticate(user=manager)
    return api_client


@pytest.fixture
def admin_client(api_client, admin_user):
    """API client authenticated as a superuser."""
    api_client.force_authenticate(user=admin_user)
    return api_client


@pytest.fixture
def run_concurrently():
    """
    Release every callable at the same moment, each on its own thread and
    database connection. Returns one outcome per call: 'ok', or the class
    name of the exception it raised. Needs django_db(transaction=True) so
    the threads see the test's rows.
    """
    def run(*calls):
        barrier = threading.Barrier(len(calls))
        outcomes = []

        def worker(call):
            try:
                barrier.wait()
                call()
                outcomes.append('ok')
            except Exception as exc:
                outcomes.append(type(exc).__name__)
            finally:
                connection.close()

        threads = [threading.Thread(target=worker, args=(call,)) for call in calls]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=60)
        return sorted(outcomes)

    return run
