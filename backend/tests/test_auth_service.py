"""
Tests for credential checks during login.
"""

import uuid
from datetime import datetime, timezone

import bcrypt
import pytest
from unittest.mock import MagicMock

from rentok.exceptions import AuthenticationError, PermissionDeniedError, ValidationError
from rentok.models.admin import Admin
from rentok.schemas.session import Role
from rentok.services.auth_service import AuthService, NOT_VERIFIED_MESSAGE, verify_password

PASSWORD = "s3cret-pass"
HASHED = bcrypt.hashpw(PASSWORD.encode(), bcrypt.gensalt(rounds=4)).decode()


def make_admin(**overrides) -> Admin:
    values = dict(
        id=uuid.uuid4(),
        email="vendor@rentok.test",
        password=HASHED,
        phone_number="+919800000000",
        phone_verified=True,
        email_verified=True,
        is_verified=True,
        type="vendor",
        created_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
        updated_at=datetime(2025, 1, 2, tzinfo=timezone.utc),
    )
    values.update(overrides)
    return Admin(**values)


def admin_result(admin):
    result = MagicMock()
    result.scalar_one_or_none.return_value = admin
    return result


class TestVerifyPassword:

    def test_match(self):
        assert verify_password(PASSWORD, HASHED) is True

    def test_mismatch(self):
        assert verify_password("wrong", HASHED) is False

    def test_malformed_hash(self):
        assert verify_password(PASSWORD, "plaintext") is False


class TestAuthenticate:

    def setup_method(self):
        self.service = AuthService()

    @pytest.mark.asyncio
    async def test_success_builds_session_user(self, mock_db_session):
        admin = make_admin()
        mock_db_session.execute.return_value = admin_result(admin)

        user = await self.service.authenticate(mock_db_session, "vendor@rentok.test", PASSWORD)

        assert user.id == str(admin.id)
        assert user.type is Role.VENDOR
        assert user.is_verified is True
        assert user.model_extra["phone_number"] == "+919800000000"
        assert "password" not in user.model_dump()

    @pytest.mark.asyncio
    async def test_missing_fields(self, mock_db_session):
        with pytest.raises(ValidationError) as exc:
            await self.service.authenticate(mock_db_session, "a@b.c", "")
        assert exc.value.message == "Email and password are required"
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_email(self, mock_db_session):
        mock_db_session.execute.return_value = admin_result(None)

        with pytest.raises(AuthenticationError) as exc:
            await self.service.authenticate(mock_db_session, "who@rentok.test", PASSWORD)
        assert exc.value.message == "Invalid email or password"

    @pytest.mark.asyncio
    async def test_wrong_password(self, mock_db_session):
        mock_db_session.execute.return_value = admin_result(make_admin())

        with pytest.raises(AuthenticationError):
            await self.service.authenticate(mock_db_session, "vendor@rentok.test", "nope")

    @pytest.mark.asyncio
    async def test_unverified_account(self, mock_db_session):
        mock_db_session.execute.return_value = admin_result(make_admin(is_verified=False))

        with pytest.raises(PermissionDeniedError) as exc:
            await self.service.authenticate(mock_db_session, "vendor@rentok.test", PASSWORD)
        assert exc.value.message == NOT_VERIFIED_MESSAGE

    @pytest.mark.asyncio
    async def test_unknown_account_type(self, mock_db_session):
        mock_db_session.execute.return_value = admin_result(make_admin(type="superuser"))

        with pytest.raises(PermissionDeniedError):
            await self.service.authenticate(mock_db_session, "vendor@rentok.test", PASSWORD)
