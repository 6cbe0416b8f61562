"""
RentOK Admin Backend — Shared Response Schemas
===============================================

What:  Response shapes reused across resources: error body, offset
       pagination block, bare message, and the health report.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Standardized error body returned by the global exception handlers.

    Example:
        {
            "error": "Coupon code already exists",
            "code": "conflict",
            "request_id": "550e8400-e29b-41d4-a716-446655440000"
        }
    """

    error: str = Field(description="Human-readable error description")
    code: str = Field(description="Machine-readable error code")
    details: Optional[Any] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        # ceil(total / limit) without floats
        return cls(page=page, limit=limit, total=total, pages=-(-total // limit))


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    """
    What:  Health check response for monitoring and load balancers.
    Who:   Returned by GET /health. The path is excluded from the access gate.
    """

    status: str = Field(description="Overall status: healthy or unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database status: connected or disconnected")
    uptime_seconds: float = Field(description="Seconds since the service started")
    checks: Dict[str, str] = Field(default_factory=dict)
