"""Tests for the Textual sign-in surface."""

from __future__ import annotations

import pytest
from textual.screen import Screen

from social_handshake.bridge.mock import RESULT_OK, MockIdentitySdk
from social_handshake.config import HandshakeSettings
from social_handshake.models.events import CompletionEnvelope
from social_handshake.models.handshake import (
    ExitPath,
    HandshakeOutcome,
    HandshakeResult,
    ProviderKind,
)
from social_handshake.models.telemetry import TelemetryEventName
from social_handshake.surface.app import HandshakeApp
from social_handshake.surface.screens.auth_dialog import AuthDialogScreen
from social_handshake.surface.screens.home import HomeScreen
from social_handshake.telemetry.sink import RecordingTelemetrySink


def _make_app(sdk: MockIdentitySdk) -> tuple[HandshakeApp, RecordingTelemetrySink]:
    recorder = RecordingTelemetrySink()
    settings = HandshakeSettings(default_scope=frozenset({"email"}))
    return HandshakeApp(sdk, settings, telemetry=recorder), recorder


async def _settle(pilot, times: int = 3) -> None:
    for _ in range(times):
        await pilot.pause()


class TestAuthDialog:
    @pytest.mark.asyncio
    async def test_cached_credential_never_shows_prompt(self) -> None:
        app, recorder = _make_app(MockIdentitySdk(cached_token="cached1"))
        async with app.run_test() as pilot:
            await _settle(pilot)
            home = app.screen
            assert isinstance(home, HomeScreen)

            controller = app.open_handshake(home)
            await _settle(pilot)

            assert controller.exit_path == ExitPath.SHORT_CIRCUIT
            assert home.results == [
                (controller.correlation_token, HandshakeResult.ok("cached1", ProviderKind.FACEBOOK))
            ]
            assert TelemetryEventName.PROMPT_SHOWN not in recorder.names()
            assert app.screen is home

    @pytest.mark.asyncio
    async def test_login_button_success(self) -> None:
        sdk = MockIdentitySdk(outcome="success:tok123")
        app, recorder = _make_app(sdk)
        async with app.run_test() as pilot:
            await _settle(pilot)
            home = app.screen
            controller = app.open_handshake(home)
            await _settle(pilot)
            assert isinstance(app.screen, AuthDialogScreen)
            assert sdk.scope == frozenset({"email"})

            await pilot.click("#btn-provider-login")
            await _settle(pilot)

            assert controller.exit_path == ExitPath.SUCCESS
            assert [r for _, r in home.results] == [
                HandshakeResult.ok("tok123", ProviderKind.FACEBOOK)
            ]
            assert recorder.names() == [
                TelemetryEventName.PROMPT_SHOWN,
                TelemetryEventName.EXTERNAL_AUTH_SUCCEEDED,
            ]
            assert app.screen is home

    @pytest.mark.asyncio
    async def test_escape_abandons_with_cancel(self) -> None:
        app, recorder = _make_app(MockIdentitySdk(outcome="success:unused"))
        async with app.run_test() as pilot:
            await _settle(pilot)
            home = app.screen
            controller = app.open_handshake(home)
            await _settle(pilot)

            await pilot.press("escape")
            await _settle(pilot)

            assert controller.exit_path == ExitPath.IMPLICIT_ABANDON
            assert len(home.results) == 1
            assert home.results[0][1].outcome == HandshakeOutcome.CANCELLED
            assert recorder.names()[-1] == TelemetryEventName.AUTH_DECLINED
            assert app.screen is home
            assert app.finished == [controller]

    @pytest.mark.asyncio
    async def test_escape_after_silent_login_delivers_cached_token(self) -> None:
        app, _ = _make_app(MockIdentitySdk(outcome="silent:tokX"))
        async with app.run_test() as pilot:
            await _settle(pilot)
            home = app.screen
            controller = app.open_handshake(home)
            await _settle(pilot)

            await pilot.click("#btn-provider-login")
            await _settle(pilot)
            assert not controller.delivered

            await pilot.press("escape")
            await _settle(pilot)

            assert [r for _, r in home.results] == [
                HandshakeResult.ok("tokX", ProviderKind.FACEBOOK)
            ]

    @pytest.mark.asyncio
    async def test_completion_envelope_forwarded_from_surface(self) -> None:
        sdk = MockIdentitySdk(outcome="success:unused", deferred=True)
        app, _ = _make_app(sdk)
        async with app.run_test() as pilot:
            await _settle(pilot)
            home = app.screen
            controller = app.open_handshake(home)
            await _settle(pilot)

            await pilot.click("#btn-provider-login")
            await _settle(pilot)
            dialog = app.screen
            assert isinstance(dialog, AuthDialogScreen)

            dialog.forward_completion_envelope(
                CompletionEnvelope(
                    request_code=sdk.request_code,
                    result_code=RESULT_OK,
                    data={"access_token": "tok-window"},
                )
            )
            await _settle(pilot)

            assert controller.exit_path == ExitPath.SUCCESS
            assert [r for _, r in home.results] == [
                HandshakeResult.ok("tok-window", ProviderKind.FACEBOOK)
            ]
            assert app.screen is home

    @pytest.mark.asyncio
    async def test_two_handshakes_in_a_row(self) -> None:
        app, _ = _make_app(MockIdentitySdk(outcome="cancel"))
        async with app.run_test() as pilot:
            await _settle(pilot)
            home = app.screen

            await pilot.press("s")
            await _settle(pilot)
            await pilot.click("#btn-provider-login")
            await _settle(pilot)

            await pilot.press("s")
            await _settle(pilot)
            await pilot.press("escape")
            await _settle(pilot)

            assert len(home.results) == 2
            assert home.results[0][0] != home.results[1][0]
            assert [c.exit_path for c in app.finished] == [
                ExitPath.USER_CANCELLED,
                ExitPath.IMPLICIT_ABANDON,
            ]

    @pytest.mark.asyncio
    async def test_dialog_closes_once_screen_above_it_is_popped(self) -> None:
        sdk = MockIdentitySdk(outcome="success:unused", deferred=True)
        app, _ = _make_app(sdk)
        async with app.run_test() as pilot:
            await _settle(pilot)
            home = app.screen
            controller = app.open_handshake(home)
            await _settle(pilot)
            dialog = app.screen
            assert isinstance(dialog, AuthDialogScreen)

            await pilot.click("#btn-provider-login")
            await _settle(pilot)
            overlay = Screen()
            await app.push_screen(overlay)
            await _settle(pilot)

            dialog.forward_completion_envelope(
                CompletionEnvelope(
                    request_code=sdk.request_code,
                    result_code=RESULT_OK,
                    data={"access_token": "tok-late"},
                )
            )
            await _settle(pilot)
            assert controller.delivered
            assert app.screen is overlay
            assert dialog in app.screen_stack

            await app.pop_screen()
            await _settle(pilot)

            assert app.screen is home
            assert [r for _, r in home.results] == [
                HandshakeResult.ok("tok-late", ProviderKind.FACEBOOK)
            ]
