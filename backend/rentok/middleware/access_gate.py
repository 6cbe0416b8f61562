"""
RentOK Admin Backend — Access Gate Middleware
==============================================

What:  Session-based route authorization applied to every inbound request.
How:   Reads the session cookie, derives an identity (or none), and decides
       between three outcomes: pass through, redirect to /login, or redirect
       to the identity's role home.
Who:   Applied to every request via Starlette middleware.
When:  After request-ID and logging middleware, before any route handler.

Decision table (first matching rule wins):
    1. no identity, path != /login          → redirect /login
    2. identity,    path == /login          → redirect role home
    3. identity,    /admin* as vendor       → redirect /vendor/dashboard
       identity,    /vendor* as admin       → redirect /admin/dashboard
    4. identity,    path == /               → redirect role home
    5. no identity, path == /               → redirect /login
    6. otherwise                            → allow

    Role homes: admin → /admin/dashboard, vendor → /vendor/dashboard

Excluded paths (never gated):
    /_next/static/*, /_next/image/*, /favicon.ico, /health,
    and anything ending in .svg .png .jpg .jpeg .gif .webp (lower-case only)

The decision itself is the pure function `evaluate_request(path, cookies,
now)`. The middleware class only adapts it to Starlette. Nothing here holds
state between requests, performs I/O, or raises.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response

from rentok.config import settings
from rentok.schemas.session import Role, SessionUser
from rentok.services.session_service import now_ms, read_session

logger = logging.getLogger(__name__)

# ── Route Constants ───────────────────────────────────────────────────────
LOGIN_PATH = "/login"
ROOT_PATH = "/"
ADMIN_PREFIX = "/admin"
VENDOR_PREFIX = "/vendor"

ROLE_HOME = {
    Role.ADMIN: "/admin/dashboard",
    Role.VENDOR: "/vendor/dashboard",
}

EXCLUDED_PREFIXES = ("/_next/static", "/_next/image", "/favicon.ico")
EXCLUDED_PATHS = {"/health"}
STATIC_EXTENSIONS = (".svg", ".png", ".jpg", ".jpeg", ".gif", ".webp")


class RouteClass(str, Enum):
    """Static classification of a request path."""

    PUBLIC = "public"
    ROOT = "root"
    ADMIN = "admin"
    VENDOR = "vendor"
    OTHER = "other"


class AccessOutcome(str, Enum):
    ALLOW = "allow"
    REDIRECT_LOGIN = "redirect_login"
    REDIRECT_HOME = "redirect_home"


@dataclass(frozen=True)
class AccessDecision:
    """Result of evaluating one request. `location` is set for redirects only."""

    outcome: AccessOutcome
    location: Optional[str] = None
    user: Optional[SessionUser] = None

    @property
    def is_redirect(self) -> bool:
        return self.outcome is not AccessOutcome.ALLOW


def role_home(role: Role) -> str:
    """Dashboard path for a role."""
    return ROLE_HOME[role]


def classify_path(path: str) -> RouteClass:
    """Ordered equality/prefix match; public and root are checked first."""
    if path == LOGIN_PATH:
        return RouteClass.PUBLIC
    if path == ROOT_PATH:
        return RouteClass.ROOT
    if path.startswith(ADMIN_PREFIX):
        return RouteClass.ADMIN
    if path.startswith(VENDOR_PREFIX):
        return RouteClass.VENDOR
    return RouteClass.OTHER


def is_excluded_path(path: str) -> bool:
    """True for static assets and probes that bypass the gate entirely."""
    if path in EXCLUDED_PATHS or path.startswith(EXCLUDED_PREFIXES):
        return True
    # Case-sensitive: "/admin/report.PNG" is not an asset and stays gated
    return path.endswith(STATIC_EXTENSIONS)


def _redirect_login() -> AccessDecision:
    return AccessDecision(outcome=AccessOutcome.REDIRECT_LOGIN, location=LOGIN_PATH)


def _redirect_home(user: SessionUser) -> AccessDecision:
    return AccessDecision(
        outcome=AccessOutcome.REDIRECT_HOME,
        location=role_home(user.type),
        user=user,
    )


def decide_access(path: str, user: Optional[SessionUser]) -> AccessDecision:
    """
    Apply the decision table to an already-derived identity.

    Args:
        path: Request path (no query string)
        user: Identity from a fresh session record, or None

    Returns:
        AccessDecision with the outcome and, for redirects, the target path.
    """
    route = classify_path(path)

    if user is None:
        # Rules 1 and 5: root is not public either
        if route is RouteClass.PUBLIC:
            return AccessDecision(outcome=AccessOutcome.ALLOW)
        return _redirect_login()

    # Rule 2
    if route is RouteClass.PUBLIC:
        return _redirect_home(user)

    # Rule 3: with two roles the other role's home is always the caller's own
    if route is RouteClass.ADMIN and user.type is not Role.ADMIN:
        return _redirect_home(user)
    if route is RouteClass.VENDOR and user.type is not Role.VENDOR:
        return _redirect_home(user)

    # Rule 4
    if route is RouteClass.ROOT:
        return _redirect_home(user)

    return AccessDecision(outcome=AccessOutcome.ALLOW, user=user)


def evaluate_request(
    path: str,
    cookies: Mapping[str, str],
    now: int,
    cookie_name: Optional[str] = None,
    max_age_ms: Optional[int] = None,
) -> AccessDecision:
    """
    Full gate evaluation for one request: exclusion, extraction, decision.

    Args:
        path: Request path
        cookies: Request cookie mapping (name → value)
        now: Current time in epoch milliseconds
        cookie_name: Session cookie name (defaults to settings)
        max_age_ms: Validity window (defaults to settings)

    Returns:
        AccessDecision. Excluded paths are always allowed; the identity is
        still attached when a valid cookie is present.
    """
    name = cookie_name or settings.session_cookie_name
    user = read_session(cookies.get(name), now, max_age_ms)

    if is_excluded_path(path):
        return AccessDecision(outcome=AccessOutcome.ALLOW, user=user)

    return decide_access(path, user)


class AccessGateMiddleware(BaseHTTPMiddleware):
    """
    Starlette adapter for `evaluate_request`.

    On allow, the identity (or None) is exposed to handlers as
    `request.state.user`. On redirect, a 307 response is returned and the
    handler never runs.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        decision = evaluate_request(path, request.cookies, now_ms())

        if decision.is_redirect:
            logger.debug(
                "Access gate: %s %s → %s (%s)",
                request.method,
                path,
                decision.location,
                decision.outcome.value,
            )
            return RedirectResponse(url=decision.location, status_code=307)

        request.state.user = decision.user
        return await call_next(request)
