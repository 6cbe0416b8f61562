"""
RentOK Admin Backend — Access Gate Tests
=========================================

Tests for the pure gate decision (classify_path, decide_access,
evaluate_request) and for the middleware wired into the app.
"""

import json

import pytest

from rentok.middleware.access_gate import (
    AccessOutcome,
    RouteClass,
    classify_path,
    decide_access,
    evaluate_request,
    is_excluded_path,
)
from rentok.schemas.session import Role, SessionUser
from rentok.services.session_service import encode_session, session_cookie_value

COOKIE = "rentok_admin_session"
HOUR_MS = 60 * 60 * 1000
NOW = 1_718_000_000_000

ADMIN = SessionUser(id="a-1", email="admin@rentok.test", type=Role.ADMIN)
VENDOR = SessionUser(id="v-1", email="vendor@rentok.test", type=Role.VENDOR)


def _cookies(user: SessionUser, issued_at: int = NOW) -> dict:
    return {COOKIE: encode_session(user, issued_at)}


def _evaluate(path: str, cookies: dict, now: int = NOW):
    return evaluate_request(path, cookies, now, cookie_name=COOKIE, max_age_ms=24 * HOUR_MS)


class TestClassifyPath:

    @pytest.mark.parametrize(
        "path,expected",
        [
            ("/login", RouteClass.PUBLIC),
            ("/", RouteClass.ROOT),
            ("/admin/dashboard", RouteClass.ADMIN),
            ("/administrator", RouteClass.ADMIN),
            ("/vendor/orders/42", RouteClass.VENDOR),
            ("/api/coupons", RouteClass.OTHER),
            ("/login/extra", RouteClass.OTHER),
        ],
    )
    def test_classification(self, path, expected):
        assert classify_path(path) is expected


class TestExcludedPaths:

    @pytest.mark.parametrize(
        "path",
        [
            "/_next/static/chunks/main.js",
            "/_next/image/foo",
            "/favicon.ico",
            "/health",
            "/logo.svg",
            "/images/banner.png",
            "/photo.jpeg",
            "/anim.gif",
            "/pic.webp",
        ],
    )
    def test_static_assets_are_excluded(self, path):
        assert is_excluded_path(path) is True

    @pytest.mark.parametrize("path", ["/images/banner.PNG", "/admin/report.PNG", "/logo.Svg"])
    def test_upper_case_extensions_are_gated(self, path):
        assert is_excluded_path(path) is False

    def test_vendor_cannot_reach_admin_path_with_image_suffix(self):
        decision = _evaluate("/admin/report.PNG", _cookies(VENDOR))
        assert decision.outcome is AccessOutcome.REDIRECT_HOME
        assert decision.location == "/vendor/dashboard"

    def test_anonymous_upper_case_asset_goes_to_login(self):
        decision = _evaluate("/images/banner.PNG", {})
        assert decision.outcome is AccessOutcome.REDIRECT_LOGIN

    def test_health_probe_needs_no_cookie(self):
        decision = _evaluate("/health", {})
        assert decision.outcome is AccessOutcome.ALLOW
        assert decision.user is None

    @pytest.mark.parametrize("path", ["/admin/dashboard", "/api/tags", "/login", "/docs"])
    def test_application_paths_are_gated(self, path):
        assert is_excluded_path(path) is False

    def test_excluded_path_is_allowed_without_cookie(self):
        decision = _evaluate("/favicon.ico", {})
        assert decision.outcome is AccessOutcome.ALLOW


class TestDecisionTable:

    def test_anonymous_on_login_is_allowed(self):
        assert decide_access("/login", None).outcome is AccessOutcome.ALLOW

    @pytest.mark.parametrize("path", ["/", "/admin/dashboard", "/vendor/orders", "/api/tags"])
    def test_anonymous_is_sent_to_login(self, path):
        decision = decide_access(path, None)
        assert decision.outcome is AccessOutcome.REDIRECT_LOGIN
        assert decision.location == "/login"

    @pytest.mark.parametrize(
        "user,home", [(ADMIN, "/admin/dashboard"), (VENDOR, "/vendor/dashboard")]
    )
    def test_signed_in_user_on_login_goes_home(self, user, home):
        decision = decide_access("/login", user)
        assert decision.outcome is AccessOutcome.REDIRECT_HOME
        assert decision.location == home

    @pytest.mark.parametrize(
        "user,home", [(ADMIN, "/admin/dashboard"), (VENDOR, "/vendor/dashboard")]
    )
    def test_root_goes_to_role_home(self, user, home):
        assert decide_access("/", user).location == home

    def test_vendor_cannot_enter_admin_area(self):
        decision = decide_access("/admin/coupons", VENDOR)
        assert decision.outcome is AccessOutcome.REDIRECT_HOME
        assert decision.location == "/vendor/dashboard"

    def test_admin_cannot_enter_vendor_area(self):
        decision = decide_access("/vendor/products", ADMIN)
        assert decision.location == "/admin/dashboard"

    def test_role_matching_area_is_allowed(self):
        decision = decide_access("/admin/coupons", ADMIN)
        assert decision.outcome is AccessOutcome.ALLOW
        assert decision.user == ADMIN
        assert decide_access("/vendor/products", VENDOR).outcome is AccessOutcome.ALLOW

    def test_other_paths_allowed_for_any_role(self):
        assert decide_access("/api/tags", VENDOR).outcome is AccessOutcome.ALLOW
        assert decide_access("/api/tags", ADMIN).outcome is AccessOutcome.ALLOW


class TestEvaluateRequest:

    def test_fresh_cookie_grants_identity(self):
        decision = _evaluate("/admin/dashboard", _cookies(ADMIN))
        assert decision.outcome is AccessOutcome.ALLOW
        assert decision.user.id == "a-1"

    def test_expired_cookie_is_ignored(self):
        decision = _evaluate("/admin/dashboard", _cookies(ADMIN, NOW - 25 * HOUR_MS))
        assert decision.outcome is AccessOutcome.REDIRECT_LOGIN

    def test_expired_cookie_lets_login_render(self):
        decision = _evaluate("/login", _cookies(ADMIN, NOW - 25 * HOUR_MS))
        assert decision.outcome is AccessOutcome.ALLOW

    def test_window_boundary_is_inclusive(self):
        exactly = _evaluate("/admin", _cookies(ADMIN, NOW - 24 * HOUR_MS))
        past = _evaluate("/admin", _cookies(ADMIN, NOW - 24 * HOUR_MS - 1))
        assert exactly.outcome is AccessOutcome.ALLOW
        assert past.outcome is AccessOutcome.REDIRECT_LOGIN

    @pytest.mark.parametrize(
        "raw",
        [
            "not-json",
            "{}",
            json.dumps({"user": {"id": "1", "email": "x@y.z", "type": "admin"}}),
            json.dumps({"user": {"id": "1", "email": "x@y.z", "type": "root"}, "timestamp": NOW}),
            json.dumps({"timestamp": NOW}),
        ],
    )
    def test_malformed_cookie_is_no_identity(self, raw):
        decision = _evaluate("/admin/dashboard", {COOKIE: raw})
        assert decision.outcome is AccessOutcome.REDIRECT_LOGIN

    def test_cookie_under_another_name_is_ignored(self):
        decision = _evaluate("/admin", {"other": encode_session(ADMIN, NOW)})
        assert decision.outcome is AccessOutcome.REDIRECT_LOGIN

    def test_percent_encoded_cookie_is_accepted(self):
        decision = _evaluate("/vendor/orders", {COOKIE: session_cookie_value(VENDOR, NOW)})
        assert decision.outcome is AccessOutcome.ALLOW
        assert decision.user.type is Role.VENDOR


class TestGateMiddleware:
    """The gate as mounted on the real application."""

    @pytest.mark.asyncio
    async def test_anonymous_request_redirects_to_login(self, test_client):
        response = await test_client.get("/admin/dashboard")
        assert response.status_code == 307
        assert response.headers["location"] == "/login"

    @pytest.mark.asyncio
    async def test_anonymous_api_request_redirects_to_login(self, test_client):
        response = await test_client.get("/api/coupons")
        assert response.status_code == 307
        assert response.headers["location"] == "/login"

    @pytest.mark.asyncio
    async def test_vendor_is_bounced_from_admin_area(self, vendor_client):
        response = await vendor_client.get("/admin/coupons")
        assert response.status_code == 307
        assert response.headers["location"] == "/vendor/dashboard"

    @pytest.mark.asyncio
    async def test_root_redirects_admin_home(self, admin_client):
        response = await admin_client.get("/")
        assert response.status_code == 307
        assert response.headers["location"] == "/admin/dashboard"

    @pytest.mark.asyncio
    async def test_allowed_request_reaches_router(self, admin_client):
        # Gate allows; no page is served by this backend at that path
        response = await admin_client.get("/admin/dashboard")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_expired_cookie_redirects(self, test_client, admin_user, session_cookie):
        test_client.cookies.set(COOKIE, session_cookie(admin_user, age_ms=25 * HOUR_MS))
        response = await test_client.get("/admin/dashboard")
        assert response.status_code == 307
        assert response.headers["location"] == "/login"

    @pytest.mark.asyncio
    async def test_favicon_bypasses_gate(self, test_client):
        response = await test_client.get("/favicon.ico")
        assert response.status_code == 404
