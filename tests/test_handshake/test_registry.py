"""Tests for the weak requester registry."""

import gc

from social_handshake.handshake.registry import HandshakeRequester, RequesterRegistry
from social_handshake.models.handshake import HandshakeResult


class _Screen:
    def on_handshake_result(self, correlation_token: str, result: HandshakeResult) -> None:
        pass


def test_register_and_lookup() -> None:
    registry = RequesterRegistry()
    screen = _Screen()
    registry.register("req-1", screen)
    assert registry.lookup("req-1") is screen
    assert "req-1" in registry
    assert len(registry) == 1


def test_lookup_unknown_returns_none() -> None:
    assert RequesterRegistry().lookup("missing") is None


def test_registry_does_not_keep_requester_alive() -> None:
    registry = RequesterRegistry()
    screen = _Screen()
    registry.register("req-1", screen)
    del screen
    gc.collect()
    assert registry.lookup("req-1") is None
    assert len(registry) == 0


def test_unregister_is_idempotent() -> None:
    registry = RequesterRegistry()
    screen = _Screen()
    registry.register("req-1", screen)
    registry.unregister("req-1")
    registry.unregister("req-1")
    assert registry.lookup("req-1") is None


def test_requester_protocol() -> None:
    assert isinstance(_Screen(), HandshakeRequester)
    assert not isinstance(object(), HandshakeRequester)
