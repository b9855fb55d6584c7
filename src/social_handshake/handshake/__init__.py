"""Handshake controller and requester registry."""

from social_handshake.handshake.controller import HandshakeController, PresentationSurface
from social_handshake.handshake.registry import HandshakeRequester, RequesterRegistry

__all__ = [
    "HandshakeController",
    "HandshakeRequester",
    "PresentationSurface",
    "RequesterRegistry",
]
