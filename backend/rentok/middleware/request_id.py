"""
RentOK Admin Backend — Request ID Middleware
=============================================

What:  Assigns a correlation ID to each request and echoes it in the response.
How:   Reuses the caller's X-Request-ID when it is a short token of letters,
       digits, dot, dash or underscore; anything else (CR/LF, spaces, a
       600-byte blob) is replaced by a fresh 8-character ID so the value can
       be written into log lines and error bodies as-is.
When:  Outermost application middleware (after CORS).
"""

import re
import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"
_SAFE_REQUEST_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")

# Coroutine-local: concurrent requests on one event loop each see their own value
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


def resolve_request_id(incoming: Optional[str]) -> str:
    """Caller-supplied ID when it is log-safe, otherwise a generated one."""
    if incoming and _SAFE_REQUEST_ID.match(incoming):
        return incoming
    return new_request_id()


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Binds the resolved ID to request.state, the ContextVar and the response header."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)

        response.headers[REQUEST_ID_HEADER] = rid
        return response
