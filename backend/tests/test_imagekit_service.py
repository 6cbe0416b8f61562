"""
Tests for ImageKit upload signing and file deletion.

Deletion runs against httpx.MockTransport; nothing leaves the process.
"""

import base64
import hashlib
import hmac

import httpx
import pytest
from unittest.mock import patch

from rentok.config import settings
from rentok.exceptions import ConfigurationError, ExternalServiceError
from rentok.services.imagekit_service import ImageKitService, sign_upload_token


@pytest.fixture
def imagekit_keys():
    with patch.object(settings, "imagekit_public_key", "public_test"), \
         patch.object(settings, "imagekit_private_key", "private_test"), \
         patch.object(settings, "imagekit_url_endpoint", "https://ik.imagekit.io/rentok"):
        yield


class TestSignature:

    def test_hmac_sha1_of_token_and_expire(self):
        expected = hmac.new(b"private_test", b"tok-1" + b"1700002400", hashlib.sha1).hexdigest()
        assert sign_upload_token("private_test", "tok-1", 1700002400) == expected

    def test_signature_depends_on_expiry(self):
        assert sign_upload_token("k", "t", 1) != sign_upload_token("k", "t", 2)


class TestAuthenticationParameters:

    def test_parameters(self, imagekit_keys):
        params = ImageKitService().get_authentication_parameters(token="tok-1", now=1_700_000_000.7)

        assert params.token == "tok-1"
        assert params.expire == 1_700_000_000 + settings.imagekit_token_ttl
        assert params.signature == sign_upload_token("private_test", "tok-1", params.expire)

    def test_fresh_token_per_call(self, imagekit_keys):
        service = ImageKitService()
        assert service.get_authentication_parameters().token != service.get_authentication_parameters().token

    def test_missing_configuration(self):
        with pytest.raises(ConfigurationError) as exc:
            ImageKitService().get_authentication_parameters()
        assert exc.value.message == "Missing ImageKit environment variables"


class TestDeleteFile:

    @pytest.mark.asyncio
    async def test_delete_uses_basic_auth(self, imagekit_keys):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["authorization"]
            return httpx.Response(204)

        await ImageKitService(transport=httpx.MockTransport(handler)).delete_file("file_123")

        assert seen["method"] == "DELETE"
        assert seen["url"] == "https://api.imagekit.io/v1/files/file_123"
        assert seen["auth"] == "Basic " + base64.b64encode(b"private_test:").decode()

    @pytest.mark.asyncio
    async def test_delete_rejected(self, imagekit_keys):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(404, json={"message": "The requested file does not exist."})
        )

        with pytest.raises(ExternalServiceError) as exc:
            await ImageKitService(transport=transport).delete_file("missing")

        assert exc.value.message == "Failed to delete file from ImageKit"
        assert exc.value.detail == "HTTP 404"
        assert exc.value.service == "imagekit"

    @pytest.mark.asyncio
    async def test_delete_transport_failure(self, imagekit_keys):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ExternalServiceError) as exc:
            await ImageKitService(transport=httpx.MockTransport(handler)).delete_file("f")
        assert exc.value.detail == "ConnectError"

    @pytest.mark.asyncio
    async def test_delete_without_configuration(self):
        with pytest.raises(ConfigurationError):
            await ImageKitService().delete_file("f")
