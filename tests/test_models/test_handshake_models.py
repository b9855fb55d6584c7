"""Tests for handshake request/result models and normalized events."""

import pytest
from pydantic import ValidationError

from social_handshake.models.events import (
    CancelledEvent,
    CompletionEnvelope,
    FailedEvent,
    SuccessEvent,
    normalized_event_adapter,
)
from social_handshake.models.handshake import (
    HandshakeOutcome,
    HandshakeRequest,
    HandshakeResult,
    ProviderKind,
)


class TestHandshakeRequest:
    def test_create(self) -> None:
        request = HandshakeRequest(
            correlation_token="req-1",
            requested_scope={"email", "public_profile"},
        )
        assert request.correlation_token == "req-1"
        assert request.requested_scope == frozenset({"email", "public_profile"})
        assert request.provider_kind == ProviderKind.FACEBOOK

    def test_is_frozen(self) -> None:
        request = HandshakeRequest(correlation_token="req-1")
        with pytest.raises(ValidationError):
            request.correlation_token = "req-2"  # type: ignore[misc]

    def test_empty_correlation_token_rejected(self) -> None:
        with pytest.raises(ValidationError):
            HandshakeRequest(correlation_token="")

    def test_new_generates_unique_tokens(self) -> None:
        a = HandshakeRequest.new(["email"])
        b = HandshakeRequest.new(["email"])
        assert a.correlation_token.startswith("hs-")
        assert a.correlation_token != b.correlation_token
        assert a.requested_scope == frozenset({"email"})


class TestHandshakeResult:
    def test_ok(self) -> None:
        result = HandshakeResult.ok("tok123", ProviderKind.FACEBOOK)
        assert result.outcome == HandshakeOutcome.OK
        assert result.credential_token == "tok123"
        assert result.is_ok

    def test_cancelled(self) -> None:
        result = HandshakeResult.cancelled(ProviderKind.FACEBOOK)
        assert result.outcome == HandshakeOutcome.CANCELLED
        assert result.credential_token is None
        assert not result.is_ok

    def test_ok_requires_token(self) -> None:
        with pytest.raises(ValidationError):
            HandshakeResult(outcome=HandshakeOutcome.OK)

    def test_ok_rejects_empty_token(self) -> None:
        with pytest.raises(ValidationError):
            HandshakeResult.ok("", ProviderKind.FACEBOOK)

    def test_cancelled_cannot_carry_token(self) -> None:
        with pytest.raises(ValidationError):
            HandshakeResult(outcome=HandshakeOutcome.CANCELLED, credential_token="tok")

    def test_equality(self) -> None:
        assert HandshakeResult.ok("t", ProviderKind.FACEBOOK) == HandshakeResult.ok(
            "t", ProviderKind.FACEBOOK
        )


class TestNormalizedEvents:
    def test_discriminated_parse(self) -> None:
        assert isinstance(
            normalized_event_adapter.validate_python(
                {"kind": "success", "credential_token": "tok"}
            ),
            SuccessEvent,
        )
        assert isinstance(
            normalized_event_adapter.validate_python({"kind": "cancelled"}), CancelledEvent
        )
        failed = normalized_event_adapter.validate_python({"kind": "failed"})
        assert isinstance(failed, FailedEvent)
        assert failed.message is None

    def test_unknown_kind_rejected(self) -> None:
        with pytest.raises(ValidationError):
            normalized_event_adapter.validate_python({"kind": "timeout"})

    def test_success_requires_token(self) -> None:
        with pytest.raises(ValidationError):
            SuccessEvent(credential_token="")

    def test_completion_envelope_defaults(self) -> None:
        envelope = CompletionEnvelope(request_code=102, result_code=0)
        assert envelope.data == {}
