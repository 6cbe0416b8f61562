"""Vendor onboarding: the welcome email with login credentials."""

import logging

from fastapi import APIRouter

from rentok.exceptions import ExternalServiceError, ValidationError
from rentok.schemas.common import ErrorResponse
from rentok.schemas.email import VendorWelcomeEmail, WelcomeEmailResponse
from rentok.services.email_service import email_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Vendors"])


@router.post(
    "/vendors/welcome-email",
    response_model=WelcomeEmailResponse,
    responses={
        400: {"description": "Missing required fields", "model": ErrorResponse},
        500: {"description": "Email could not be sent", "model": ErrorResponse},
    },
    summary="Send the vendor welcome email",
)
async def send_welcome_email(body: VendorWelcomeEmail) -> WelcomeEmailResponse:
    if not (body.vendor_name and body.email and body.password and body.phone):
        raise ValidationError("Missing required fields: vendorName, email, password, phone")

    result = await email_service.send_vendor_welcome_email(body)
    if not result.success:
        raise ExternalServiceError(
            "Failed to send welcome email",
            service="resend",
            detail=str(result.error),
        )
    return WelcomeEmailResponse(message="Welcome email sent successfully", data=result.data)
