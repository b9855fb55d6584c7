"""AuthDialogScreen — modal presentation surface for one handshake.

The screen knows nothing about handshake rules. It exposes the two lifecycle
hooks the controller subscribes to (shown on mount, closed on unmount) and
closes itself when the controller asks.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from textual.app import ComposeResult
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Label, Static

from social_handshake.handshake.controller import HandshakeController
from social_handshake.handshake.registry import HandshakeRequester
from social_handshake.models.events import CompletionEnvelope
from social_handshake.models.handshake import HandshakeRequest
from social_handshake.surface.widgets.login_button import ProviderLoginButton

logger = logging.getLogger(__name__)


class AuthDialogScreen(ModalScreen[None]):
    """Untitled dialog holding the provider login button."""

    DEFAULT_CSS = """
    AuthDialogScreen {
        align: center middle;
    }

    AuthDialogScreen .auth-dialog {
        width: 60;
        height: auto;
        padding: 1 2;
        border: round $primary;
        background: $surface;
    }

    AuthDialogScreen .auth-title {
        text-style: bold;
        width: 100%;
        text-align: center;
        padding: 0 0 1 0;
    }

    AuthDialogScreen .auth-scope {
        color: $text-muted;
        padding: 0 1;
    }

    AuthDialogScreen .auth-hint {
        color: $text-muted;
        width: 100%;
        text-align: center;
    }
    """

    BINDINGS = [
        ("escape", "abandon", "Back"),
    ]

    def __init__(
        self,
        controller: HandshakeController,
        request: HandshakeRequest,
        requester: HandshakeRequester | None = None,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.controller = controller
        self.request = request
        self._shown_hooks: list[Callable[[], None]] = []
        self._closed_hooks: list[Callable[[], None]] = []
        self._close_requested = False
        self._dismissed = False
        controller.bind_surface(self, request, requester)

    # ----- PresentationSurface -----

    def add_shown_hook(self, hook: Callable[[], None]) -> None:
        self._shown_hooks.append(hook)

    def add_closed_hook(self, hook: Callable[[], None]) -> None:
        self._closed_hooks.append(hook)

    def close_surface(self) -> None:
        if self._close_requested:
            return
        self._close_requested = True
        self.call_after_refresh(self._dismiss_if_active)

    def _dismiss_if_active(self) -> None:
        if self._dismissed or not self.is_attached:
            return
        if self.app.screen is self:
            self._dismissed = True
            self.dismiss()
        # Otherwise a screen sits above the dialog; on_screen_resume retries

    # ----- Textual lifecycle -----

    def compose(self) -> ComposeResult:
        with Vertical(classes="auth-dialog"):
            yield Label("Sign in to continue", classes="auth-title")
            scope = ", ".join(sorted(self.request.requested_scope)) or "basic profile"
            yield Static(f"Requested access: {scope}", classes="auth-scope")
            yield ProviderLoginButton(self.request.provider_kind, id="provider-login")
            yield Label("Esc to go back", classes="auth-hint")

    def on_mount(self) -> None:
        for hook in list(self._shown_hooks):
            hook()

    def on_screen_resume(self) -> None:
        if self._close_requested:
            self.call_after_refresh(self._dismiss_if_active)

    def on_unmount(self) -> None:
        for hook in list(self._closed_hooks):
            hook()

    def on_provider_login_button_login_requested(
        self, event: ProviderLoginButton.LoginRequested
    ) -> None:
        if self.controller.delivered:
            return
        try:
            self.controller.bridge.begin_login()
        except Exception:
            logger.exception("Could not start %s login", event.provider_kind)

    def forward_completion_envelope(self, envelope: CompletionEnvelope) -> None:
        """Result hook for provider flows that finish in an external window."""
        self.controller.forward_completion_envelope(envelope)

    def action_abandon(self) -> None:
        self.close_surface()
