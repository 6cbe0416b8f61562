"""
RentOK Admin Backend — Session Cookie Codec
============================================

What:  Reads and writes the session record carried in the session cookie.
How:   JSON in, pydantic validation, freshness check against the issuance
       timestamp. Every failure returns None ("no identity").
Who:   The Access Gate (read) and the login route (write).

All functions here are pure: the current time is always passed in, so the
same inputs give the same answer regardless of when or where they run.
"""

import json
import logging
import time
from typing import Optional
from urllib.parse import quote, unquote

from pydantic import ValidationError as PydanticValidationError

from rentok.config import settings
from rentok.schemas.session import SessionRecord, SessionUser

logger = logging.getLogger(__name__)


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def _decode_cookie_value(raw: str) -> str:
    # Browsers that set the cookie through document.cookie with
    # encodeURIComponent send the JSON percent-encoded.
    value = raw.strip()
    if value.startswith("%7B") or value.startswith("%7b"):
        return unquote(value)
    return value


def parse_session_record(raw: Optional[str]) -> Optional[SessionRecord]:
    """
    Parse a cookie value into a SessionRecord.

    Returns None when the value is missing, is not JSON, or does not match
    the record schema (unknown role, missing timestamp, wrong types).
    """
    if not raw:
        return None
    try:
        payload = json.loads(_decode_cookie_value(raw))
        return SessionRecord.model_validate(payload)
    except (ValueError, TypeError, PydanticValidationError) as e:
        # json.JSONDecodeError is a ValueError subclass
        logger.debug("Ignoring unparsable session cookie: %s", type(e).__name__)
        return None


def is_fresh(record: SessionRecord, now: int, max_age_ms: Optional[int] = None) -> bool:
    """True while `now - timestamp` has not exceeded the validity window."""
    window = settings.session_max_age_ms if max_age_ms is None else max_age_ms
    return now - record.timestamp <= window


def read_session(
    raw: Optional[str],
    now: int,
    max_age_ms: Optional[int] = None,
) -> Optional[SessionUser]:
    """
    Derive the identity from a session cookie value.

    A record older than the validity window is treated exactly like a
    missing cookie. Never raises.
    """
    record = parse_session_record(raw)
    if record is None:
        return None
    if not is_fresh(record, now, max_age_ms):
        return None
    return record.user


def encode_session(user: SessionUser, now: int) -> str:
    """Serialize a session record issued at `now` into a cookie value."""
    record = SessionRecord(user=user, timestamp=now)
    return json.dumps(record.model_dump(mode="json"), separators=(",", ":"))


def session_cookie_value(user: SessionUser, now: int) -> str:
    """
    Percent-encoded session record, ready for Set-Cookie.

    Encoding keeps quotes and commas out of the raw header;
    `_decode_cookie_value` reverses it on the way back in.
    """
    return quote(encode_session(user, now), safe="")
