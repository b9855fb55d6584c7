"""Handshake data models, normalized events, and telemetry records."""

from social_handshake.models.events import (
    CancelledEvent,
    CompletionEnvelope,
    FailedEvent,
    LoginResult,
    NormalizedEvent,
    SuccessEvent,
    normalized_event_adapter,
)
from social_handshake.models.handshake import (
    ExitPath,
    HandshakeOutcome,
    HandshakeRequest,
    HandshakeResult,
    HandshakeState,
    ProviderKind,
)
from social_handshake.models.telemetry import TelemetryEventName, TelemetryRecord

__all__ = [
    "CancelledEvent",
    "CompletionEnvelope",
    "ExitPath",
    "FailedEvent",
    "HandshakeOutcome",
    "HandshakeRequest",
    "HandshakeResult",
    "HandshakeState",
    "LoginResult",
    "NormalizedEvent",
    "ProviderKind",
    "SuccessEvent",
    "TelemetryEventName",
    "TelemetryRecord",
    "normalized_event_adapter",
]
