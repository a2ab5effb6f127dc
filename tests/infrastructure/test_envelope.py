"""Tests for the response discriminator."""
from __future__ import annotations

from transit_mcp.infrastructure.envelope import ErrorEnvelope, Success, parse_envelope


def test_list_payload_is_success() -> None:
    assert parse_envelope([{"id": "1"}]) == Success([{"id": "1"}])


def test_error_shape_detected() -> None:
    result = parse_envelope({"error": {"message": "boom"}})
    assert result == ErrorEnvelope(message="boom")


def test_error_code_and_details() -> None:
    result = parse_envelope({"error": {"message": "bad", "code": 404, "details": "no stop"}})
    assert isinstance(result, ErrorEnvelope)
    assert result.code == 404
    assert result.details == "no stop"


def test_non_integer_code_dropped() -> None:
    result = parse_envelope({"error": {"message": "bad", "code": "E1"}})
    assert isinstance(result, ErrorEnvelope)
    assert result.code is None


def test_boolean_code_dropped() -> None:
    result = parse_envelope({"error": {"message": "bad", "code": True}})
    assert isinstance(result, ErrorEnvelope)
    assert result.code is None


def test_error_without_message_is_not_envelope() -> None:
    assert isinstance(parse_envelope({"error": {"code": 1}}), Success)
    assert isinstance(parse_envelope({"error": "boom"}), Success)
    assert isinstance(parse_envelope({"error": None}), Success)
