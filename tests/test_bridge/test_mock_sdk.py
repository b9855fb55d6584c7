"""Tests for the scripted identity SDK."""

import pytest

from social_handshake.bridge.mock import (
    RESULT_CANCELED,
    RESULT_OK,
    MockIdentitySdk,
    OutcomeKind,
    ScriptedOutcome,
    envelope_for,
)
from social_handshake.models.events import CompletionEnvelope


class TestScriptedOutcome:
    def test_parse_success(self) -> None:
        outcome = ScriptedOutcome.parse("success:tok123")
        assert outcome.kind == OutcomeKind.SUCCESS
        assert outcome.token == "tok123"

    def test_parse_error_keeps_colons_in_message(self) -> None:
        outcome = ScriptedOutcome.parse("error:network error: timeout")
        assert outcome.kind == OutcomeKind.ERROR
        assert outcome.message == "network error: timeout"

    def test_parse_error_without_message(self) -> None:
        assert ScriptedOutcome.parse("error").message is None

    def test_parse_is_case_insensitive(self) -> None:
        assert ScriptedOutcome.parse("CANCEL").kind == OutcomeKind.CANCEL

    def test_success_requires_token(self) -> None:
        with pytest.raises(ValueError, match="needs a token"):
            ScriptedOutcome.parse("success")

    def test_unknown_kind(self) -> None:
        with pytest.raises(ValueError, match="unknown outcome"):
            ScriptedOutcome.parse("maybe")


class TestEnvelopeFor:
    def test_success(self) -> None:
        envelope = envelope_for(ScriptedOutcome.parse("success:tok"), 7)
        assert envelope.request_code == 7
        assert envelope.result_code == RESULT_OK
        assert envelope.data == {"access_token": "tok"}

    def test_cancel(self) -> None:
        envelope = envelope_for(ScriptedOutcome.parse("cancel"))
        assert envelope.result_code == RESULT_CANCELED

    def test_error(self) -> None:
        envelope = envelope_for(ScriptedOutcome.parse("error:boom"))
        assert envelope.result_code not in (RESULT_OK, RESULT_CANCELED)
        assert envelope.data == {"error": "boom"}


class TestMockIdentitySdk:
    def test_success_caches_token(self) -> None:
        sdk = MockIdentitySdk(outcome="success:tok123")
        sdk.log_in()
        assert sdk.current_access_token() == "tok123"

    def test_envelope_ignored_when_nothing_pending(self) -> None:
        sdk = MockIdentitySdk(deferred=True)
        consumed = sdk.on_completion(
            CompletionEnvelope(request_code=sdk.request_code, result_code=RESULT_CANCELED)
        )
        assert consumed is False

    def test_envelope_consumed_once(self) -> None:
        sdk = MockIdentitySdk(deferred=True)
        sdk.log_in()
        envelope = CompletionEnvelope(request_code=sdk.request_code, result_code=RESULT_CANCELED)
        assert sdk.on_completion(envelope) is True
        assert sdk.on_completion(envelope) is False
