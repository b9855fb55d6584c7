"""CLI entry point for Social Handshake."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from social_handshake.bridge.mock import OutcomeKind
from social_handshake.models.handshake import HandshakeResult
from social_handshake.models.telemetry import TelemetryRecord

app = typer.Typer(
    name="social-handshake",
    help="Social Handshake — mediate a social sign-in and deliver exactly one result.",
    no_args_is_help=True,
)
console = Console()

_OUTCOME_HELP = (
    "Scripted SDK outcome: success:<token>, cancel, error[:<message>], "
    "silent:<token>, raise[:<message>], none"
)

_ENVELOPE_OUTCOMES = (OutcomeKind.SUCCESS, OutcomeKind.CANCEL, OutcomeKind.ERROR)


def _ensure_db_dir(db_path: Path) -> None:
    db_path.parent.mkdir(parents=True, exist_ok=True)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


class _ConsoleRequester:
    """Prints the delivered result."""

    def __init__(self) -> None:
        self.results: list[HandshakeResult] = []

    def on_handshake_result(self, correlation_token: str, result: HandshakeResult) -> None:
        self.results.append(result)
        if result.is_ok:
            console.print(
                f"[green]{correlation_token}: ok[/green] "
                f"({result.provider_kind.value}, token {result.credential_token})"
            )
        else:
            console.print(f"[yellow]{correlation_token}: cancelled[/yellow]")


def _print_telemetry(records: list[TelemetryRecord]) -> None:
    table = Table(title="Telemetry")
    table.add_column("Event")
    table.add_column("Params")
    for record in records:
        params = ", ".join(f"{k}={v}" for k, v in sorted(record.params.items()))
        table.add_row(record.name.value, params or "[dim]-[/dim]")
    console.print(table)


@app.command()
def init(
    db: Path | None = typer.Option(None, help="Path to SQLite database"),
) -> None:
    """Create the telemetry database."""
    from social_handshake.config import load_settings
    from social_handshake.storage.sqlite import StorageEngine

    settings = load_settings(db_path=db)
    _ensure_db_dir(settings.db_path)

    async def _init() -> None:
        engine = StorageEngine(settings.db_path)
        await engine.initialize()
        await engine.close()

    asyncio.run(_init())
    console.print(f"[green]Initialized telemetry database at {settings.db_path}[/green]")


@app.command()
def simulate(
    outcome: str = typer.Option("cancel", help=_OUTCOME_HELP),
    cached: str | None = typer.Option(None, help="Credential already in the SDK cache"),
    scope: str | None = typer.Option(None, help="Comma-separated read permissions"),
    deferred: bool = typer.Option(False, help="Finish login via a forwarded completion envelope"),
    abandon: bool = typer.Option(False, help="Close the surface without starting the login"),
    late_token: str | None = typer.Option(
        None, help="Token the SDK caches without calling back, seen when the surface closes"
    ),
    db: Path | None = typer.Option(None, help="Persist telemetry and the audit row here"),
    log_level: str = typer.Option("warning", help="Logging level"),
) -> None:
    """Run one handshake headlessly against the scripted identity SDK."""
    from social_handshake.bridge.mock import (
        MockIdentitySdk,
        ScriptedOutcome,
        envelope_for,
    )
    from social_handshake.bridge.sdk import SdkBridge
    from social_handshake.config import load_settings
    from social_handshake.handshake.controller import HandshakeController
    from social_handshake.models.handshake import HandshakeRequest
    from social_handshake.telemetry.sink import (
        FanOutTelemetrySink,
        LoggingTelemetrySink,
        RecordingTelemetrySink,
    )

    _configure_logging(log_level)
    settings = load_settings(default_scope=scope, db_path=db)
    try:
        scripted = ScriptedOutcome.parse(outcome)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from None

    sdk = MockIdentitySdk(
        cached_token=cached,
        outcome=scripted,
        deferred=deferred,
        request_code=settings.request_code,
    )
    recorder = RecordingTelemetrySink()
    controller = HandshakeController(
        SdkBridge(sdk, settings.provider),
        telemetry=FanOutTelemetrySink(LoggingTelemetrySink(logging.DEBUG), recorder),
    )
    requester = _ConsoleRequester()
    request = HandshakeRequest.new(settings.default_scope, settings.provider)

    controller.open(request, requester)
    if not controller.delivered and not abandon:
        controller.bridge.begin_login()
        if deferred and scripted.kind in _ENVELOPE_OUTCOMES:
            controller.forward_completion_envelope(envelope_for(scripted, settings.request_code))
    if not controller.delivered:
        # No terminal callback: the user backed out of the dialog
        if late_token:
            sdk.cached_token = late_token
        controller.on_surface_closed_without_event()

    console.print(f"[dim]exit path: {controller.exit_path}[/dim]")
    _print_telemetry(recorder.records)

    if db is not None:
        from social_handshake.storage.sqlite import StorageEngine, persist_session

        _ensure_db_dir(settings.db_path)

        async def _persist() -> None:
            storage = StorageEngine(settings.db_path)
            await storage.initialize()
            try:
                await persist_session(storage, controller, recorder)
            finally:
                await storage.close()

        asyncio.run(_persist())
        console.print(f"[green]Recorded in {settings.db_path}[/green]")


@app.command()
def login(
    outcome: str = typer.Option("success:demo-token-1234", help=_OUTCOME_HELP),
    cached: str | None = typer.Option(None, help="Credential already in the SDK cache"),
    scope: str | None = typer.Option(None, help="Comma-separated read permissions"),
    db: Path | None = typer.Option(None, help="Path to SQLite database"),
) -> None:
    """Launch the sign-in surface (Textual TUI) against the scripted identity SDK."""
    from textual.logging import TextualHandler

    from social_handshake.bridge.mock import MockIdentitySdk, ScriptedOutcome
    from social_handshake.config import load_settings
    from social_handshake.storage.sqlite import StorageEngine, persist_session
    from social_handshake.surface.app import HandshakeApp
    from social_handshake.telemetry.sink import (
        FanOutTelemetrySink,
        LoggingTelemetrySink,
        RecordingTelemetrySink,
    )

    logging.basicConfig(level=logging.INFO, handlers=[TextualHandler()], force=True)
    settings = load_settings(default_scope=scope, db_path=db)
    try:
        scripted = ScriptedOutcome.parse(outcome)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from None

    sdk = MockIdentitySdk(cached_token=cached, outcome=scripted, request_code=settings.request_code)
    recorder = RecordingTelemetrySink()
    tui = HandshakeApp(
        sdk,
        settings,
        telemetry=FanOutTelemetrySink(LoggingTelemetrySink(), recorder),
    )
    _ensure_db_dir(settings.db_path)

    async def _login() -> None:
        storage = StorageEngine(settings.db_path)
        await storage.initialize()
        try:
            await tui.run_async()
            for controller in tui.finished:
                await persist_session(storage, controller, recorder)
        finally:
            await storage.close()

    asyncio.run(_login())
    console.print(f"[dim]{len(tui.finished)} handshake(s) recorded in {settings.db_path}[/dim]")


@app.command()
def events(
    db: Path | None = typer.Option(None, help="Path to SQLite database"),
    token: str | None = typer.Option(None, help="Only show this correlation token"),
    name: str | None = typer.Option(None, help="Only show telemetry events with this name"),
) -> None:
    """Show recorded handshakes and telemetry events."""
    from social_handshake.config import load_settings
    from social_handshake.storage.sqlite import StorageEngine

    settings = load_settings(db_path=db)
    if not settings.db_path.exists():
        console.print(f"[red]No database at {settings.db_path}. Run init first.[/red]")
        raise typer.Exit(1)

    async def _events() -> None:
        storage = StorageEngine(settings.db_path)
        await storage.initialize()
        try:
            handshakes = await storage.list_handshakes()
            telemetry = await storage.list_telemetry(name=name, correlation_token=token)
        finally:
            await storage.close()

        if token:
            handshakes = [h for h in handshakes if h["correlation_token"] == token]

        if not handshakes and not telemetry:
            console.print("[dim]No handshakes recorded.[/dim]")
            return

        table = Table(title="Handshakes")
        table.add_column("Token")
        table.add_column("Provider")
        table.add_column("Outcome")
        table.add_column("Exit path")
        table.add_column("Completed")
        for h in handshakes:
            color = "green" if h["outcome"] == "ok" else "yellow"
            table.add_row(
                h["correlation_token"],
                h["provider"],
                f"[{color}]{h['outcome']}[/{color}]",
                h["exit_path"] or "-",
                h["completed_at"][:16].replace("T", " "),
            )
        console.print(table)

        table = Table(title="Telemetry")
        table.add_column("Token")
        table.add_column("Event")
        table.add_column("Params")
        for t in telemetry:
            params = ", ".join(f"{k}={v}" for k, v in sorted(t["params"].items()))
            table.add_row(t["correlation_token"] or "-", t["name"], params or "-")
        console.print(table)

    asyncio.run(_events())


if __name__ == "__main__":
    app()
