"""Scripted identity SDK for development and testing.

Lets the CLI demo and the test-suite drive every exit path without a real
provider: cached sessions, success, cancel, SDK errors, tokens that land in the
cache without a callback, and flows completed by an external window.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel

from social_handshake.bridge.base import IdentitySdk, LoginCallback
from social_handshake.errors import ProviderError
from social_handshake.models.events import CompletionEnvelope, LoginResult

# Result codes carried by completion envelopes
RESULT_OK = -1
RESULT_CANCELED = 0

DEFAULT_REQUEST_CODE = 102


class OutcomeKind(StrEnum):
    SUCCESS = "success"
    CANCEL = "cancel"
    ERROR = "error"
    SILENT = "silent"  # token cached, callback never fires
    RAISE = "raise"  # log_in itself raises
    NONE = "none"  # nothing happens at all


class ScriptedOutcome(BaseModel):
    kind: OutcomeKind
    token: str | None = None
    message: str | None = None

    @classmethod
    def parse(cls, text: str) -> ScriptedOutcome:
        """Parse ``kind[:argument]``, e.g. ``success:tok123`` or ``error:network error``."""
        kind_text, _, argument = text.partition(":")
        try:
            kind = OutcomeKind(kind_text.strip().lower())
        except ValueError:
            valid = ", ".join(k.value for k in OutcomeKind)
            raise ValueError(f"unknown outcome {kind_text!r} (expected one of: {valid})") from None

        if kind in (OutcomeKind.SUCCESS, OutcomeKind.SILENT):
            if not argument:
                raise ValueError(f"outcome {kind.value!r} needs a token, e.g. {kind.value}:tok123")
            return cls(kind=kind, token=argument)
        if kind in (OutcomeKind.ERROR, OutcomeKind.RAISE):
            return cls(kind=kind, message=argument or None)
        return cls(kind=kind)


def envelope_for(
    outcome: ScriptedOutcome, request_code: int = DEFAULT_REQUEST_CODE
) -> CompletionEnvelope:
    """The envelope an external provider window would return for ``outcome``."""
    if outcome.kind == OutcomeKind.SUCCESS and outcome.token:
        return CompletionEnvelope(
            request_code=request_code,
            result_code=RESULT_OK,
            data={"access_token": outcome.token},
        )
    if outcome.kind == OutcomeKind.ERROR:
        data = {"error": outcome.message} if outcome.message else {}
        return CompletionEnvelope(request_code=request_code, result_code=1, data=data)
    return CompletionEnvelope(request_code=request_code, result_code=RESULT_CANCELED)


class MockIdentitySdk(IdentitySdk):
    """In-memory IdentitySdk whose login outcome is scripted up front.

    With ``deferred=True`` the login waits for a completion envelope, the way
    SDKs that hand off to a separate provider window behave.
    """

    def __init__(
        self,
        cached_token: str | None = None,
        outcome: ScriptedOutcome | str = "cancel",
        *,
        deferred: bool = False,
        request_code: int = DEFAULT_REQUEST_CODE,
    ) -> None:
        self.cached_token = cached_token
        self.outcome = ScriptedOutcome.parse(outcome) if isinstance(outcome, str) else outcome
        self.deferred = deferred
        self.request_code = request_code
        self.callback: LoginCallback | None = None
        self.scope: frozenset[str] = frozenset()
        self.registrations = 0
        self.login_calls = 0
        self._pending = False

    def current_access_token(self) -> str | None:
        return self.cached_token

    def register_callback(self, scope: frozenset[str], callback: LoginCallback) -> None:
        self.scope = scope
        self.callback = callback
        self.registrations += 1

    def log_in(self) -> None:
        self.login_calls += 1
        if self.outcome.kind == OutcomeKind.RAISE:
            raise ProviderError(self.outcome.message)
        if self.deferred:
            self._pending = True
            return
        self._resolve(self.outcome)

    def on_completion(self, envelope: CompletionEnvelope) -> bool:
        if envelope.request_code != self.request_code or not self._pending:
            return False
        self._pending = False

        if envelope.result_code == RESULT_OK and envelope.data.get("access_token"):
            outcome = ScriptedOutcome(kind=OutcomeKind.SUCCESS, token=envelope.data["access_token"])
        elif envelope.result_code == RESULT_CANCELED:
            outcome = ScriptedOutcome(kind=OutcomeKind.CANCEL)
        else:
            outcome = ScriptedOutcome(kind=OutcomeKind.ERROR, message=envelope.data.get("error"))
        self._resolve(outcome)
        return True

    def _resolve(self, outcome: ScriptedOutcome) -> None:
        if outcome.kind in (OutcomeKind.SUCCESS, OutcomeKind.SILENT):
            self.cached_token = outcome.token

        callback = self.callback
        if callback is None:
            return
        if outcome.kind == OutcomeKind.SUCCESS:
            callback.on_success(
                LoginResult(access_token=outcome.token or "", granted_scope=self.scope)
            )
        elif outcome.kind == OutcomeKind.CANCEL:
            callback.on_cancel()
        elif outcome.kind == OutcomeKind.ERROR:
            callback.on_error(ProviderError(outcome.message))
