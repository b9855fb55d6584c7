"""Textual host application for the social sign-in surface.

HandshakeApp owns the long-lived pieces (identity SDK, telemetry, requester
registry) and builds a fresh controller and bridge for every handshake it opens.
"""

from __future__ import annotations

import logging

from textual.app import App

from social_handshake.bridge.base import IdentitySdk
from social_handshake.bridge.sdk import SdkBridge
from social_handshake.config import HandshakeSettings
from social_handshake.handshake.controller import HandshakeController
from social_handshake.handshake.registry import HandshakeRequester, RequesterRegistry
from social_handshake.models.handshake import HandshakeRequest
from social_handshake.surface.screens.auth_dialog import AuthDialogScreen
from social_handshake.surface.screens.home import HomeScreen
from social_handshake.telemetry.sink import TelemetrySink

logger = logging.getLogger(__name__)


class HandshakeApp(App):
    """Social sign-in demo host."""

    TITLE = "Social Handshake"
    SUB_TITLE = "Sign-in Surface"

    CSS = """
    Screen {
        background: $background;
    }
    """

    def __init__(
        self,
        sdk: IdentitySdk,
        settings: HandshakeSettings | None = None,
        telemetry: TelemetrySink | None = None,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.sdk = sdk
        self.settings = settings or HandshakeSettings()
        self.telemetry = telemetry
        self.registry = RequesterRegistry()
        self.finished: list[HandshakeController] = []

    def on_mount(self) -> None:
        self.install_screen(HomeScreen(), name="home")
        self.push_screen("home")

    def open_handshake(self, requester: HandshakeRequester | None = None) -> HandshakeController:
        """Show the sign-in dialog; the result goes to ``requester`` once."""
        request = HandshakeRequest.new(self.settings.default_scope, self.settings.provider)
        controller = HandshakeController(
            SdkBridge(self.sdk, request.provider_kind),
            telemetry=self.telemetry,
            registry=self.registry,
        )
        controller.add_delivery_listener(self.finished.append)
        logger.debug("Opening handshake %s", request.correlation_token)
        self.push_screen(AuthDialogScreen(controller, request, requester))
        return controller
