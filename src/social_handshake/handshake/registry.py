"""Requester lookup by correlation token.

The registry never owns a requester: entries vanish as soon as the requester is
garbage collected, and a lookup for a vanished requester simply returns None.
"""

from __future__ import annotations

import weakref
from typing import Protocol, runtime_checkable

from social_handshake.models.handshake import HandshakeResult


@runtime_checkable
class HandshakeRequester(Protocol):
    """Anything waiting on a handshake result (usually a screen)."""

    def on_handshake_result(self, correlation_token: str, result: HandshakeResult) -> None: ...


class RequesterRegistry:
    def __init__(self) -> None:
        self._requesters: weakref.WeakValueDictionary[str, HandshakeRequester] = (
            weakref.WeakValueDictionary()
        )

    def register(self, correlation_token: str, requester: HandshakeRequester) -> None:
        self._requesters[correlation_token] = requester

    def lookup(self, correlation_token: str) -> HandshakeRequester | None:
        return self._requesters.get(correlation_token)

    def unregister(self, correlation_token: str) -> None:
        self._requesters.pop(correlation_token, None)

    def __contains__(self, correlation_token: object) -> bool:
        return correlation_token in self._requesters

    def __len__(self) -> int:
        return len(self._requesters)
