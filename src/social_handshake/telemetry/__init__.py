"""Telemetry sinks for handshake events."""

from social_handshake.telemetry.sink import (
    FanOutTelemetrySink,
    LoggingTelemetrySink,
    RecordingTelemetrySink,
    TelemetrySink,
    safe_track,
)

__all__ = [
    "FanOutTelemetrySink",
    "LoggingTelemetrySink",
    "RecordingTelemetrySink",
    "TelemetrySink",
    "safe_track",
]
