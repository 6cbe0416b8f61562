"""
RentOK Admin Backend — Session Record Schemas
==============================================

What:  Pydantic models for the JSON structure carried in the session cookie.
Who:   Parsed by the Access Gate on every request; produced by POST /login.

Wire format (cookie value):
    {
        "user": {"id": "...", "email": "...", "type": "admin", "is_verified": true},
        "timestamp": 1718000000000
    }

`timestamp` is the issuance time in epoch milliseconds. The login flow may
store extra profile fields on `user` (phone number, verification flags);
they are kept but never consulted by the gate.
"""

import math
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator


class Role(str, Enum):
    """Closed set of identity roles. Anything else fails validation."""

    ADMIN = "admin"
    VENDOR = "vendor"


class SessionUser(BaseModel):
    """Identity reference stored in the session record."""

    id: str = Field(description="Account identifier")
    email: str = Field(description="Account email address")
    type: Role = Field(description="Role of the account: admin or vendor")
    is_verified: bool = Field(default=False, description="Account verification flag")

    model_config = {"extra": "allow"}

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        # Numeric ids from older records are accepted as their string form
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("is_verified", mode="before")
    @classmethod
    def null_is_unverified(cls, v: Any) -> Any:
        return False if v is None else v


class SessionRecord(BaseModel):
    """Identity plus issuance timestamp (epoch milliseconds)."""

    user: SessionUser
    timestamp: int = Field(description="Issuance time in epoch milliseconds")

    @field_validator("timestamp", mode="before")
    @classmethod
    def floor_fractional_ms(cls, v: Any) -> Any:
        # Flooring keeps `now - timestamp <= window` exact for integer now/window
        if isinstance(v, float) and math.isfinite(v):
            return math.floor(v)
        return v
