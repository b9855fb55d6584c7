"""Telemetry event names and recorded telemetry entries."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field

# Credential kind reported with external auth telemetry
SOCIAL_TOKEN_KIND = "social_token"


class TelemetryEventName(StrEnum):
    PROMPT_SHOWN = "prompt_shown"
    AUTH_DECLINED = "auth_declined"
    EXTERNAL_AUTH_SUCCEEDED = "external_auth_succeeded"
    EXTERNAL_AUTH_FAILED = "external_auth_failed"


class TelemetryRecord(BaseModel):
    name: TelemetryEventName
    params: dict[str, str] = Field(default_factory=dict)
    recorded_at: datetime
    correlation_token: str | None = None
