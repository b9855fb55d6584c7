"""ProviderLoginButton — the provider's entry-point control."""

from __future__ import annotations

from dataclasses import dataclass

from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.message import Message
from textual.widget import Widget
from textual.widgets import Button

from social_handshake.models.handshake import ProviderKind

_PROVIDER_LABELS = {
    ProviderKind.FACEBOOK: "Continue with Facebook",
}


class ProviderLoginButton(Widget, can_focus=True):
    """Single login button. Posts LoginRequested; the dialog starts the SDK login."""

    DEFAULT_CSS = """
    ProviderLoginButton {
        height: auto;
        padding: 1 2;
        align: center middle;
    }

    ProviderLoginButton Horizontal {
        align: center middle;
        height: auto;
    }

    ProviderLoginButton Button {
        min-width: 30;
    }
    """

    BINDINGS = [
        ("enter", "log_in", "Log in"),
    ]

    @dataclass
    class LoginRequested(Message):
        """User activated the provider login control."""

        provider_kind: ProviderKind

    def __init__(self, provider_kind: ProviderKind, **kwargs) -> None:
        super().__init__(**kwargs)
        self.provider_kind = provider_kind

    @property
    def label(self) -> str:
        fallback = f"Continue with {self.provider_kind.title()}"
        return _PROVIDER_LABELS.get(self.provider_kind, fallback)

    def compose(self) -> ComposeResult:
        with Horizontal():
            yield Button(self.label, id="btn-provider-login", variant="primary")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-provider-login":
            event.stop()
            self.post_message(self.LoginRequested(self.provider_kind))

    def action_log_in(self) -> None:
        self.post_message(self.LoginRequested(self.provider_kind))
