"""Provider bridges — adapt identity SDKs to normalized handshake events."""

from social_handshake.bridge.base import EventSink, IdentitySdk, LoginCallback, ProviderBridge
from social_handshake.bridge.mock import MockIdentitySdk, ScriptedOutcome
from social_handshake.bridge.sdk import SdkBridge

__all__ = [
    "EventSink",
    "IdentitySdk",
    "LoginCallback",
    "MockIdentitySdk",
    "ProviderBridge",
    "ScriptedOutcome",
    "SdkBridge",
]
