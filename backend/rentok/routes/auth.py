"""
RentOK Admin Backend — Login/Logout Route Handlers
===================================================

What:  POST /login issues the session cookie; POST /logout clears it.
How:   The cookie holds the percent-encoded JSON session record
       {user, timestamp}. It lasts one day, is scoped to "/", and is sent
       SameSite=Lax. The Access Gate reads it on every later request.

/login is the only public path: the gate lets POST /login through when the
caller has no identity, and redirects signed-in callers to their home.
"""

import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from rentok.config import settings
from rentok.database import get_db_session
from rentok.middleware.access_gate import role_home
from rentok.schemas.auth import LoginRequest, LoginResponse
from rentok.schemas.common import ErrorResponse, MessageResponse
from rentok.services.auth_service import auth_service
from rentok.services.session_service import now_ms, session_cookie_value

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        401: {"description": "Invalid email or password", "model": ErrorResponse},
        403: {"description": "Account not verified", "model": ErrorResponse},
    },
    summary="Sign in to the admin panel",
)
async def login(
    body: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> LoginResponse:
    user = await auth_service.authenticate(db, body.email, body.password)

    response.set_cookie(
        key=settings.session_cookie_name,
        value=session_cookie_value(user, now_ms()),
        max_age=settings.session_max_age_hours * 60 * 60,
        path="/",
        samesite="lax",
        secure=settings.session_cookie_secure,
    )
    return LoginResponse(user=user, redirect=role_home(user.type))


@router.post("/logout", response_model=MessageResponse, summary="Sign out")
async def logout(response: Response) -> MessageResponse:
    response.delete_cookie(key=settings.session_cookie_name, path="/", samesite="lax")
    return MessageResponse(message="Logged out successfully")
