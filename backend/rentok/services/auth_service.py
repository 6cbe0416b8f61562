"""
RentOK Admin Backend — Authentication Service
==============================================

What:  Verifies admin-panel credentials against the `admins` table and
       builds the identity stored in the session cookie.
Who:   Called by POST /login.

Passwords are bcrypt hashes ($2a$/$2b$, as produced by the onboarding
tools). Unknown email and wrong password give the same message so the
response does not reveal which accounts exist.
"""

import logging

import bcrypt
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from rentok.exceptions import (
    AuthenticationError,
    DatabaseError,
    PermissionDeniedError,
    ValidationError,
)
from rentok.models.admin import Admin
from rentok.schemas.session import SessionUser

logger = logging.getLogger(__name__)

NOT_VERIFIED_MESSAGE = "Account not verified. Please verify your email and phone number."


def verify_password(password: str, hashed: str) -> bool:
    """bcrypt comparison; a malformed stored hash never matches."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


def session_user_for(admin: Admin) -> SessionUser:
    """Identity for the session record. The password hash is never included."""
    return SessionUser(
        id=str(admin.id),
        email=admin.email,
        type=admin.type,
        is_verified=admin.is_verified,
        phone_number=admin.phone_number,
        phone_verified=admin.phone_verified,
        email_verified=admin.email_verified,
        created_at=admin.created_at.isoformat() if admin.created_at else None,
        updated_at=admin.updated_at.isoformat() if admin.updated_at else None,
    )


class AuthService:
    async def authenticate(self, db: AsyncSession, email: str, password: str) -> SessionUser:
        """
        Check credentials and return the identity to store in the session.

        Raises:
            ValidationError:       email or password missing
            AuthenticationError:   unknown email or wrong password (401)
            PermissionDeniedError: account not verified, or of an unknown type (403)
        """
        if not email or not password:
            raise ValidationError("Email and password are required")

        try:
            result = await db.execute(select(Admin).where(Admin.email == email.strip()))
            admin = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error during login: %s", str(e))
            raise DatabaseError(context={"operation": "login"})

        if admin is None or not verify_password(password, admin.password):
            logger.info("Failed login attempt for %s", email)
            raise AuthenticationError()

        if not admin.is_verified:
            logger.info("Login refused for unverified account %s", email)
            raise PermissionDeniedError(NOT_VERIFIED_MESSAGE)

        try:
            user = session_user_for(admin)
        except PydanticValidationError:
            logger.warning("Login refused for %s: unsupported account type %r", email, admin.type)
            raise PermissionDeniedError("Account type is not allowed to sign in")

        logger.info("Login succeeded for %s (%s)", admin.email, user.type.value)
        return user


# ── Singleton Instance ────────────────────────────────────────────────────
auth_service = AuthService()
