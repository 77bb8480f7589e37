"""
Users — Service Tests

@file users/tests/test_services.py
"""

import pytest

from core.exceptions import BusinessRuleViolation, DuplicateResourceError
from core.models import AuditLog
from tests.factories import SuperuserFactory, UserFactory
from users.models import User
from users.services import AuthService, UserService


@pytest.mark.django_db
class TestUserService:
    def test_create_user_normalises_email(self):
        user = UserService.create_user(email=' New@VoltStock.test ', name='New', password='Secret2026!!')
        assert user.email == 'new@voltstock.test'
        assert user.check_password('Secret2026!!')

    def test_create_duplicate_email(self):
        UserFactory(email='dup@voltstock.test')
        with pytest.raises(DuplicateResourceError):
            UserService.create_user(email='DUP@voltstock.test', name='Dup', password='Secret2026!!')

    def test_update_user_changes_role_and_audits(self):
        admin = SuperuserFactory()
        user = UserFactory()
        UserService.update_user(user_id=user.pk, actor=admin, role=User.RoleChoices.MANAGER)
        user.refresh_from_db()
        assert user.role == User.RoleChoices.MANAGER
        log = AuditLog.objects.filter(
            model_name='User', object_id=str(user.pk), action=AuditLog.ActionChoices.UPDATE,
        ).latest('timestamp')
        assert log.new_values == {'role': 'MANAGER'}
        assert log.actor == admin

    def test_update_ignores_non_editable_fields(self):
        user = UserFactory()
        UserService.update_user(user_id=user.pk, is_superuser=True)
        user.refresh_from_db()
        assert user.is_superuser is False

    def test_deactivate_user(self):
        admin = SuperuserFactory()
        user = UserFactory()
        UserService.deactivate_user(user_id=user.pk, actor=admin)
        user.refresh_from_db()
        assert user.is_active is False
        assert AuditLog.objects.filter(
            action=AuditLog.ActionChoices.DEACTIVATE, object_id=str(user.pk),
        ).exists()

    def test_cannot_deactivate_self(self):
        admin = SuperuserFactory()
        with pytest.raises(BusinessRuleViolation):
            UserService.deactivate_user(user_id=admin.pk, actor=admin)


@pytest.mark.django_db
class TestAuthService:
    def test_authenticate(self):
        user = UserFactory(email='login@voltstock.test', password='Secret2026!!')
        assert AuthService.authenticate(email='LOGIN@voltstock.test', password='Secret2026!!') == user

    def test_wrong_password(self):
        UserFactory(email='login@voltstock.test', password='Secret2026!!')
        assert AuthService.authenticate(email='login@voltstock.test', password='nope') is None

    def test_inactive_user_rejected(self):
        UserFactory(email='gone@voltstock.test', password='Secret2026!!', is_active=False)
        assert AuthService.authenticate(email='gone@voltstock.test', password='Secret2026!!') is None
