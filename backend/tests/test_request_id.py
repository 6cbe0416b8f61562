"""
RentOK Admin Backend — Request ID Tests
========================================

Caller-supplied correlation IDs are echoed only when they are safe to write
into log lines; everything else gets a generated ID.
"""

import pytest

from rentok.middleware.request_id import resolve_request_id


class TestResolveRequestId:

    @pytest.mark.parametrize("incoming", ["abc123", "req-2024.06_01", "A" * 64])
    def test_safe_ids_are_kept(self, incoming):
        assert resolve_request_id(incoming) == incoming

    @pytest.mark.parametrize(
        "incoming",
        [
            None,
            "",
            "abc\r\nlevel=ERROR forged",
            "has space",
            "quote\"d",
            "A" * 65,
        ],
    )
    def test_unsafe_ids_are_replaced(self, incoming):
        rid = resolve_request_id(incoming)
        assert rid != incoming
        assert len(rid) == 8
        assert rid.isalnum()


class TestRequestIdHeader:

    @pytest.mark.asyncio
    async def test_client_id_is_echoed(self, admin_client):
        response = await admin_client.get("/api/imagekit/auth", headers={"X-Request-ID": "trace-42"})
        assert response.headers["x-request-id"] == "trace-42"
        assert response.json()["request_id"] == "trace-42"

    @pytest.mark.asyncio
    async def test_injected_id_is_replaced_everywhere(self, admin_client):
        forged = "x" * 200
        response = await admin_client.get("/api/imagekit/auth", headers={"X-Request-ID": forged})
        rid = response.headers["x-request-id"]
        assert rid != forged
        assert len(rid) == 8
        assert response.json()["request_id"] == rid
