"""HomeScreen — the calling screen that requests a social credential."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Vertical
from textual.screen import Screen
from textual.widgets import Button, Footer, Header, Label, Static

from social_handshake.models.handshake import HandshakeResult


class HomeScreen(Screen):
    """Opens handshakes and shows the last delivered result."""

    DEFAULT_CSS = """
    HomeScreen .home-content {
        padding: 2 4;
        height: auto;
    }

    HomeScreen .home-title {
        text-style: bold;
        color: $primary;
        padding: 0 0 1 0;
    }

    HomeScreen #result-status {
        padding: 1 0;
    }
    """

    BINDINGS = [
        ("s", "sign_in", "Sign in"),
        ("q", "app.quit", "Quit"),
    ]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.results: list[tuple[str, HandshakeResult]] = []

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(classes="home-content"):
            yield Label("Social sign-in", classes="home-title")
            yield Static("Not signed in", id="result-status")
            yield Button("Sign in [S]", id="btn-sign-in", variant="success")
        yield Footer()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-sign-in":
            self.action_sign_in()

    def action_sign_in(self) -> None:
        self.app.open_handshake(self)  # type: ignore[attr-defined]

    def on_handshake_result(self, correlation_token: str, result: HandshakeResult) -> None:
        self.results.append((correlation_token, result))
        status = self.query_one("#result-status", Static)
        if result.is_ok and result.credential_token:
            status.update(
                f"Signed in with {result.provider_kind.value} "
                f"(token …{result.credential_token[-4:]})"
            )
        else:
            status.update("Sign-in cancelled")
