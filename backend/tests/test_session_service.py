"""
Tests for the session cookie codec.
"""

import json
from urllib.parse import unquote

from rentok.schemas.session import Role, SessionUser
from rentok.services.session_service import (
    encode_session,
    is_fresh,
    parse_session_record,
    read_session,
    session_cookie_value,
)

NOW = 1_718_000_000_000
DAY_MS = 24 * 60 * 60 * 1000


class TestParseSessionRecord:

    def test_missing_value(self):
        assert parse_session_record(None) is None
        assert parse_session_record("") is None

    def test_numeric_id_is_coerced_to_string(self):
        raw = json.dumps(
            {"user": {"id": 7, "email": "a@b.c", "type": "vendor"}, "timestamp": NOW}
        )
        record = parse_session_record(raw)
        assert record.user.id == "7"
        assert record.user.type is Role.VENDOR

    def test_extra_profile_fields_are_kept(self):
        raw = json.dumps(
            {
                "user": {
                    "id": "1",
                    "email": "a@b.c",
                    "type": "admin",
                    "phone_number": "+911234567890",
                },
                "timestamp": NOW,
            }
        )
        record = parse_session_record(raw)
        assert record.user.model_extra["phone_number"] == "+911234567890"

    def test_non_object_json_is_rejected(self):
        assert parse_session_record("[1, 2, 3]") is None
        assert parse_session_record("42") is None

    def test_string_timestamp_that_is_not_a_number_is_rejected(self):
        raw = json.dumps(
            {"user": {"id": "1", "email": "a@b.c", "type": "admin"}, "timestamp": "yesterday"}
        )
        assert parse_session_record(raw) is None

    def test_null_verification_flag_reads_as_unverified(self):
        raw = json.dumps(
            {
                "user": {"id": "1", "email": "a@b.c", "type": "vendor", "is_verified": None},
                "timestamp": NOW,
            }
        )
        record = parse_session_record(raw)
        assert record is not None
        assert record.user.is_verified is False
        assert record.user.type is Role.VENDOR

    def test_fractional_timestamp_is_accepted(self):
        raw = json.dumps(
            {"user": {"id": "1", "email": "a@b.c", "type": "admin"}, "timestamp": NOW + 0.75}
        )
        record = parse_session_record(raw)
        assert record.timestamp == NOW

    def test_fractional_timestamp_keeps_window_edge(self):
        user = {"id": "1", "email": "a@b.c", "type": "admin"}
        inside = json.dumps({"user": user, "timestamp": NOW - DAY_MS + 0.5})
        outside = json.dumps({"user": user, "timestamp": NOW - DAY_MS - 0.5})
        assert read_session(inside, NOW) is not None
        assert read_session(outside, NOW) is None

    def test_infinite_timestamp_is_rejected(self):
        raw = '{"user": {"id": "1", "email": "a@b.c", "type": "admin"}, "timestamp": Infinity}'
        assert parse_session_record(raw) is None


class TestFreshness:

    def test_explicit_window(self):
        user = SessionUser(id="1", email="a@b.c", type=Role.ADMIN)
        record = parse_session_record(encode_session(user, NOW - 1000))
        assert is_fresh(record, NOW, max_age_ms=1000) is True
        assert is_fresh(record, NOW, max_age_ms=999) is False

    def test_default_window_is_one_day(self):
        user = SessionUser(id="1", email="a@b.c", type=Role.ADMIN)
        assert read_session(encode_session(user, NOW - DAY_MS), NOW) is not None
        assert read_session(encode_session(user, NOW - DAY_MS - 1), NOW) is None


class TestEncoding:

    def test_encoded_record_reads_back(self):
        user = SessionUser(id="v-9", email="v@rentok.test", type=Role.VENDOR, is_verified=True)
        restored = read_session(encode_session(user, NOW), NOW)
        assert restored == user

    def test_cookie_value_is_percent_encoded_json(self):
        user = SessionUser(id="1", email="a@b.c", type=Role.ADMIN)
        value = session_cookie_value(user, NOW)
        assert value.startswith("%7B")
        assert '"' not in value
        assert json.loads(unquote(value))["timestamp"] == NOW
        assert read_session(value, NOW).email == "a@b.c"
