"""Login/logout schemas."""

from typing import Optional

from pydantic import BaseModel, Field

from rentok.schemas.session import SessionUser


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class LoginResponse(BaseModel):
    user: SessionUser
    redirect: str = Field(description="Home path of the signed-in role")
