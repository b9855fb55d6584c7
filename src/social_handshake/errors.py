"""Exceptions raised inside the handshake package.

None of these reach the requester: provider failures are downgraded to a
Cancelled result, and state errors only signal misuse by the host.
"""

from __future__ import annotations


class HandshakeError(Exception):
    """Base class for handshake errors."""


class HandshakeStateError(HandshakeError):
    """An operation was attempted from a state that does not allow it."""


class BridgeStateError(HandshakeError):
    """The provider bridge was re-armed, or asked to log in without being armed."""


class ProviderError(HandshakeError):
    """Failure reported by the identity provider SDK."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or "identity provider error")
        self.message = message
