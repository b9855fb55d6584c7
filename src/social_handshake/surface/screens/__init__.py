"""Handshake surface screens."""

from social_handshake.surface.screens.auth_dialog import AuthDialogScreen
from social_handshake.surface.screens.home import HomeScreen

__all__ = [
    "AuthDialogScreen",
    "HomeScreen",
]
