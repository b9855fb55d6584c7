"""Telemetry sinks.

Telemetry is fire-and-forget: the controller reports through ``safe_track`` so a
broken sink can never stop a result from being delivered.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import UTC, datetime

from social_handshake.models.telemetry import TelemetryEventName, TelemetryRecord

logger = logging.getLogger(__name__)

_event_logger = logging.getLogger("social_handshake.telemetry")


class TelemetrySink(ABC):
    """Receives named handshake events."""

    @abstractmethod
    def track(
        self,
        name: TelemetryEventName,
        params: dict[str, str] | None = None,
        *,
        correlation_token: str | None = None,
    ) -> None: ...


class LoggingTelemetrySink(TelemetrySink):
    """Writes every event to the ``social_handshake.telemetry`` logger."""

    def __init__(self, level: int = logging.INFO) -> None:
        self.level = level

    def track(
        self,
        name: TelemetryEventName,
        params: dict[str, str] | None = None,
        *,
        correlation_token: str | None = None,
    ) -> None:
        _event_logger.log(self.level, "%s %s [%s]", name.value, params or {}, correlation_token)


class RecordingTelemetrySink(TelemetrySink):
    """Keeps events in memory. Used for tests and for flushing to storage."""

    def __init__(self) -> None:
        self.records: list[TelemetryRecord] = []

    def track(
        self,
        name: TelemetryEventName,
        params: dict[str, str] | None = None,
        *,
        correlation_token: str | None = None,
    ) -> None:
        self.records.append(
            TelemetryRecord(
                name=name,
                params=dict(params or {}),
                recorded_at=datetime.now(UTC),
                correlation_token=correlation_token,
            )
        )

    def names(self) -> list[TelemetryEventName]:
        return [r.name for r in self.records]

    def drain(self, correlation_token: str | None = None) -> list[TelemetryRecord]:
        """Remove and return recorded events, optionally only those for one handshake."""
        if correlation_token is None:
            drained, self.records = self.records, []
            return drained
        drained = [r for r in self.records if r.correlation_token == correlation_token]
        self.records = [r for r in self.records if r.correlation_token != correlation_token]
        return drained


class FanOutTelemetrySink(TelemetrySink):
    """Forwards each event to several sinks; one failing sink does not starve the others."""

    def __init__(self, *sinks: TelemetrySink) -> None:
        self.sinks = list(sinks)

    def track(
        self,
        name: TelemetryEventName,
        params: dict[str, str] | None = None,
        *,
        correlation_token: str | None = None,
    ) -> None:
        for sink in self.sinks:
            safe_track(sink, name, params, correlation_token=correlation_token)


def safe_track(
    sink: TelemetrySink | None,
    name: TelemetryEventName,
    params: dict[str, str] | None = None,
    *,
    correlation_token: str | None = None,
) -> None:
    """Report to ``sink``, logging and swallowing any failure."""
    if sink is None:
        return
    try:
        sink.track(name, params, correlation_token=correlation_token)
    except Exception:
        logger.exception("Telemetry sink failed to record %s", name.value)
