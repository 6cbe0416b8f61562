"""
RentOK Admin Backend — ImageKit Service
========================================

What:  Server-side half of image hosting: signs direct browser uploads and
       deletes files by ID.
How:   Upload signatures are computed locally (no network). Deletion calls
       the ImageKit REST API with HTTP basic auth (private key as the
       username, empty password).
Who:   Called by the /api/imagekit route handlers.

Signature Scheme:
    token     = random UUID (single use, chosen here)
    expire    = now (epoch seconds) + IMAGEKIT_TOKEN_TTL
    signature = hex(HMAC-SHA1(key=private_key, msg=token + str(expire)))

    The browser SDK sends all three with the upload; ImageKit recomputes the
    HMAC with the same private key and rejects mismatches or expired tokens.
"""

import hashlib
import hmac
import logging
import time
import uuid
from typing import Optional

import httpx

from rentok.config import settings
from rentok.exceptions import ConfigurationError, ExternalServiceError
from rentok.schemas.imagekit import ImageKitAuthResponse

logger = logging.getLogger(__name__)

MISSING_CONFIG_MESSAGE = "Missing ImageKit environment variables"
DELETE_FAILED_MESSAGE = "Failed to delete file from ImageKit"


def sign_upload_token(private_key: str, token: str, expire: int) -> str:
    return hmac.new(
        private_key.encode("utf-8"),
        f"{token}{expire}".encode("utf-8"),
        hashlib.sha1,
    ).hexdigest()


class ImageKitService:
    """
    ImageKit client.

    `transport` exists for tests: pass an httpx.MockTransport to exercise
    deletion without network access.
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._transport = transport

    def _require_config(self) -> None:
        if not settings.imagekit_configured:
            logger.error("ImageKit request refused: credentials are not configured")
            raise ConfigurationError(MISSING_CONFIG_MESSAGE)

    def get_authentication_parameters(
        self,
        token: Optional[str] = None,
        now: Optional[float] = None,
    ) -> ImageKitAuthResponse:
        """
        Signed upload parameters for the browser.

        Raises:
            ConfigurationError: any of the three ImageKit settings is empty
        """
        self._require_config()
        token = token or str(uuid.uuid4())
        issued_at = time.time() if now is None else now
        expire = int(issued_at) + settings.imagekit_token_ttl
        return ImageKitAuthResponse(
            token=token,
            expire=expire,
            signature=sign_upload_token(settings.imagekit_private_key, token, expire),
        )

    async def delete_file(self, file_id: str) -> None:
        """
        Delete a file from the media library.

        Raises:
            ConfigurationError:   credentials missing
            ExternalServiceError: transport failure or non-2xx response
        """
        self._require_config()
        url = f"{settings.imagekit_api_base.rstrip('/')}/files/{file_id}"

        try:
            async with httpx.AsyncClient(
                timeout=settings.imagekit_timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.delete(url, auth=(settings.imagekit_private_key, ""))
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                "ImageKit refused to delete %s: HTTP %d %s",
                file_id, e.response.status_code, e.response.text[:200],
            )
            raise ExternalServiceError(
                DELETE_FAILED_MESSAGE,
                service="imagekit",
                detail=f"HTTP {e.response.status_code}",
                context={"file_id": file_id},
            )
        except httpx.HTTPError as e:
            logger.error("ImageKit delete of %s failed: %s", file_id, str(e))
            raise ExternalServiceError(
                DELETE_FAILED_MESSAGE,
                service="imagekit",
                detail=type(e).__name__,
                context={"file_id": file_id},
            )

        logger.info("ImageKit file deleted: %s", file_id)


# ── Singleton Instance ────────────────────────────────────────────────────
imagekit_service = ImageKitService()
