"""SdkBridge — adapts an IdentitySdk to the ProviderBridge contract.

The SDK's native callback may in principle fire more than once (late or
duplicate callbacks). The bridge installs a single-shot translator so the
controller sees at most one normalized event per arm.
"""

from __future__ import annotations

import inspect
import logging
import weakref
from collections.abc import Callable, Iterable

from social_handshake.bridge.base import EventSink, IdentitySdk, LoginCallback, ProviderBridge
from social_handshake.errors import BridgeStateError, ProviderError
from social_handshake.models.events import (
    CancelledEvent,
    CompletionEnvelope,
    FailedEvent,
    LoginResult,
    NormalizedEvent,
    SuccessEvent,
)
from social_handshake.models.handshake import ProviderKind

logger = logging.getLogger(__name__)


def _as_provider_error(exc: Exception) -> ProviderError:
    if isinstance(exc, ProviderError):
        return exc
    return ProviderError(str(exc) or None)


class _SingleShotCallback(LoginCallback):
    """Translates SDK callbacks into one NormalizedEvent, then goes deaf.

    Bound-method sinks are held weakly, so the SDK keeping this callback
    around does not keep an abandoned handshake alive.
    """

    def __init__(self, on_event: EventSink) -> None:
        self._sink_ref: Callable[[], EventSink | None]
        if inspect.ismethod(on_event):
            self._sink_ref = weakref.WeakMethod(on_event)
        else:
            self._sink_ref = lambda: on_event
        self.fired = False

    def _emit(self, event: NormalizedEvent) -> None:
        if self.fired:
            logger.warning("Dropping duplicate %s callback from identity SDK", event.kind)
            return
        self.fired = True
        sink = self._sink_ref()
        if sink is None:
            logger.debug("Handshake was discarded before the %s callback arrived", event.kind)
            return
        sink(event)

    def on_success(self, result: LoginResult) -> None:
        if not result.access_token:
            self._emit(FailedEvent(message="identity provider returned an empty token"))
            return
        self._emit(SuccessEvent(credential_token=result.access_token))

    def on_cancel(self) -> None:
        self._emit(CancelledEvent())

    def on_error(self, error: ProviderError | None) -> None:
        self._emit(FailedEvent(message=error.message if error is not None else None))


class SdkBridge(ProviderBridge):
    """ProviderBridge over any IdentitySdk implementation."""

    def __init__(
        self, sdk: IdentitySdk, provider_kind: ProviderKind = ProviderKind.FACEBOOK
    ) -> None:
        self._sdk = sdk
        self.provider_kind = provider_kind
        self._callback: _SingleShotCallback | None = None
        self._scope: frozenset[str] = frozenset()

    @property
    def armed(self) -> bool:
        return self._callback is not None and not self._callback.fired

    @property
    def scope(self) -> frozenset[str]:
        return self._scope

    def has_cached_credential(self) -> bool:
        return self.current_credential() is not None

    def current_credential(self) -> str | None:
        # An empty token in the SDK cache counts as no token
        return self._sdk.current_access_token() or None

    def arm(self, scope: Iterable[str], on_event: EventSink) -> None:
        if self.armed:
            raise BridgeStateError("provider bridge is already armed")
        self._scope = frozenset(scope)
        callback = _SingleShotCallback(on_event)
        self._callback = callback
        try:
            self._sdk.register_callback(self._scope, callback)
        except Exception as exc:
            logger.error("Identity SDK rejected callback registration: %s", exc)
            callback.on_error(_as_provider_error(exc))

    def begin_login(self) -> None:
        callback = self._callback
        if callback is None:
            raise BridgeStateError("begin_login called before the bridge was armed")
        if callback.fired:
            logger.debug("Ignoring login request; handshake already reported")
            return
        try:
            self._sdk.log_in()
        except Exception as exc:
            logger.error("Identity SDK login failed to start: %s", exc)
            callback.on_error(_as_provider_error(exc))

    def forward_completion_envelope(self, envelope: CompletionEnvelope) -> None:
        try:
            consumed = self._sdk.on_completion(envelope)
        except Exception as exc:
            if self._callback is None:
                logger.exception("Identity SDK failed to process completion envelope")
                return
            logger.error("Identity SDK failed to process completion envelope: %s", exc)
            self._callback.on_error(_as_provider_error(exc))
            return
        if not consumed:
            logger.debug("Completion envelope %s not consumed by SDK", envelope.request_code)
