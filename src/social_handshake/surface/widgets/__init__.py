"""Handshake surface widgets."""

from social_handshake.surface.widgets.login_button import ProviderLoginButton

__all__ = [
    "ProviderLoginButton",
]
