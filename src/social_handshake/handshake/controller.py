"""HandshakeController — lifecycle of one social login handshake.

States::

    IDLE → CHECKING → SHORT_CIRCUITED → DELIVERED
                    ↘ ARMED ──────────↗

A controller runs exactly one handshake and delivers exactly one
HandshakeResult, whichever exit path fires first: a cached credential, a
success/cancel/failure event from the provider bridge, or the presentation
surface being closed with no event at all. Everything runs on one event loop,
so the delivered-state check in ``deliver`` is the only guard needed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from functools import partial
from typing import Protocol

from social_handshake.bridge.base import ProviderBridge
from social_handshake.errors import HandshakeStateError
from social_handshake.handshake.registry import HandshakeRequester, RequesterRegistry
from social_handshake.models.events import (
    CancelledEvent,
    CompletionEnvelope,
    NormalizedEvent,
    SuccessEvent,
)
from social_handshake.models.handshake import (
    ExitPath,
    HandshakeRequest,
    HandshakeResult,
    HandshakeState,
)
from social_handshake.models.telemetry import SOCIAL_TOKEN_KIND, TelemetryEventName
from social_handshake.telemetry.sink import TelemetrySink, safe_track

logger = logging.getLogger(__name__)


class PresentationSurface(Protocol):
    """The host-owned dialog/window the handshake is shown in."""

    def add_shown_hook(self, hook: Callable[[], None]) -> None: ...

    def add_closed_hook(self, hook: Callable[[], None]) -> None: ...

    def close_surface(self) -> None: ...


DeliveryListener = Callable[["HandshakeController"], None]


class HandshakeController:
    """Drives a single handshake from open to delivery."""

    def __init__(
        self,
        bridge: ProviderBridge,
        telemetry: TelemetrySink | None = None,
        registry: RequesterRegistry | None = None,
    ) -> None:
        self.bridge = bridge
        self.telemetry = telemetry
        self.registry = registry if registry is not None else RequesterRegistry()
        self.state = HandshakeState.IDLE
        self.request: HandshakeRequest | None = None
        self.result: HandshakeResult | None = None
        self.exit_path: ExitPath | None = None
        self._surface: PresentationSurface | None = None
        self._surface_closed = False
        self._bound_request: HandshakeRequest | None = None
        self._delivery_listeners: list[DeliveryListener] = []

    @property
    def delivered(self) -> bool:
        return self.state == HandshakeState.DELIVERED

    @property
    def correlation_token(self) -> str | None:
        return self.request.correlation_token if self.request else None

    def add_delivery_listener(self, listener: DeliveryListener) -> None:
        """Called once, after the result has gone to the requester (or been dropped)."""
        self._delivery_listeners.append(listener)

    # ------------------------------------------------------------------
    # Host surface wiring
    # ------------------------------------------------------------------

    def bind_surface(
        self,
        surface: PresentationSurface,
        request: HandshakeRequest,
        requester: HandshakeRequester | None = None,
    ) -> None:
        """Open the handshake when ``surface`` is shown; abandon it if closed early.

        The requester is registered right away so the hooks hold no reference to it.
        """
        if requester is not None:
            self.registry.register(request.correlation_token, requester)
        self._surface = surface
        self._bound_request = request
        surface.add_shown_hook(partial(self._open_on_shown, request))
        surface.add_closed_hook(self.on_surface_closed_without_event)

    def _open_on_shown(self, request: HandshakeRequest) -> None:
        if self.state == HandshakeState.IDLE and not self._surface_closed:
            self.open(request)

    # ------------------------------------------------------------------
    # Handshake operations
    # ------------------------------------------------------------------

    def open(self, request: HandshakeRequest, requester: HandshakeRequester | None = None) -> None:
        if self.state != HandshakeState.IDLE:
            raise HandshakeStateError(f"handshake already opened (state: {self.state})")

        self.request = request
        if requester is not None:
            self.registry.register(request.correlation_token, requester)
        self._transition(HandshakeState.CHECKING)

        token = self._cached_credential(check_first=True)
        if token is not None:
            logger.info("Social token is already obtained for %s", request.correlation_token)
            self._transition(HandshakeState.SHORT_CIRCUITED)
            self._complete(HandshakeResult.ok(token, request.provider_kind), ExitPath.SHORT_CIRCUIT)
            return

        self._track(TelemetryEventName.PROMPT_SHOWN)
        self._transition(HandshakeState.ARMED)
        try:
            self.bridge.arm(request.requested_scope, self.handle_event)
        except Exception as exc:
            logger.exception("Provider bridge could not be armed")
            self._handle_failure(str(exc) or None)

    def handle_event(self, event: NormalizedEvent) -> None:
        if self.state != HandshakeState.ARMED or self.request is None:
            logger.debug("Ignoring %s event in state %s", event.kind, self.state)
            return

        provider = self.request.provider_kind
        if isinstance(event, SuccessEvent):
            self._track(
                TelemetryEventName.EXTERNAL_AUTH_SUCCEEDED,
                {"provider": provider.value, "kind": SOCIAL_TOKEN_KIND},
            )
            logger.debug("External auth succeeded for %s", self.request.correlation_token)
            self._complete(HandshakeResult.ok(event.credential_token, provider), ExitPath.SUCCESS)
        elif isinstance(event, CancelledEvent):
            self._track(TelemetryEventName.AUTH_DECLINED)
            logger.warning("Social login cancelled for %s", self.request.correlation_token)
            self._complete(HandshakeResult.cancelled(provider), ExitPath.USER_CANCELLED)
        else:
            self._handle_failure(event.message)

    def _handle_failure(self, message: str | None) -> None:
        """Provider failure: reported to telemetry in full, to the requester as a cancel."""
        if self.state != HandshakeState.ARMED or self.request is None:
            return
        provider = self.request.provider_kind
        params = {"provider": provider.value}
        if message is not None:
            params["message"] = message
        self._track(TelemetryEventName.EXTERNAL_AUTH_FAILED, params)
        logger.error("Social login failed for %s: %s", self.request.correlation_token, message)
        self._complete(HandshakeResult.cancelled(provider), ExitPath.PROVIDER_ERROR)

    def on_surface_closed_without_event(self) -> None:
        self._surface_closed = True
        if self.state == HandshakeState.IDLE and self._bound_request is not None:
            # Torn down before it was ever shown
            self.request = self._bound_request
            result = HandshakeResult.cancelled(self.request.provider_kind)
            self._complete(result, ExitPath.IMPLICIT_ABANDON)
            return
        if self.state != HandshakeState.ARMED or self.request is None:
            return

        self._track(TelemetryEventName.AUTH_DECLINED)
        # The SDK may have cached a token without ever calling back
        token = self._cached_credential()
        provider = self.request.provider_kind
        if token is not None:
            result = HandshakeResult.ok(token, provider)
        else:
            result = HandshakeResult.cancelled(provider)
        self._complete(result, ExitPath.IMPLICIT_ABANDON)

    def forward_completion_envelope(self, envelope: CompletionEnvelope) -> None:
        try:
            self.bridge.forward_completion_envelope(envelope)
        except Exception:
            logger.exception("Failed to forward completion envelope %s", envelope.request_code)

    def deliver(self, result: HandshakeResult) -> None:
        """Send ``result`` to the requester. Only the first call has any effect."""
        if self.state == HandshakeState.DELIVERED:
            logger.debug("Result already delivered for %s; ignoring", self.correlation_token)
            return
        if self.request is None:
            raise HandshakeStateError("cannot deliver a result before the handshake is opened")

        self.result = result
        self._transition(HandshakeState.DELIVERED)

        token = self.request.correlation_token
        requester = self.registry.lookup(token)
        self.registry.unregister(token)
        if requester is None:
            logger.debug("Requester for %s is gone; dropping %s result", token, result.outcome)
        else:
            try:
                requester.on_handshake_result(token, result)
            except Exception:
                logger.exception("Requester failed to handle handshake result for %s", token)

        for listener in self._delivery_listeners:
            try:
                listener(self)
            except Exception:
                logger.exception("Delivery listener failed for %s", token)

        if self._surface is not None and not self._surface_closed:
            self._surface_closed = True
            try:
                self._surface.close_surface()
            except Exception:
                logger.exception("Failed to close presentation surface for %s", token)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _complete(self, result: HandshakeResult, exit_path: ExitPath) -> None:
        if self.state == HandshakeState.DELIVERED:
            return
        self.exit_path = exit_path
        self.deliver(result)

    def _cached_credential(self, check_first: bool = False) -> str | None:
        try:
            if check_first and not self.bridge.has_cached_credential():
                return None
            return self.bridge.current_credential() or None
        except Exception:
            logger.exception("Provider bridge failed to read the cached credential")
            return None

    def _transition(self, state: HandshakeState) -> None:
        logger.debug("Handshake %s: %s -> %s", self.correlation_token, self.state, state)
        self.state = state

    def _track(self, name: TelemetryEventName, params: dict[str, str] | None = None) -> None:
        safe_track(self.telemetry, name, params, correlation_token=self.correlation_token)
