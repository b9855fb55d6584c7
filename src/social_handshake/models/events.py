"""Normalized provider events and the SDK completion envelope.

The provider bridge turns whatever the identity SDK reports into exactly one of
three events. A prompt that is dismissed without the SDK reporting anything
produces no event at all; the controller handles that case itself.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class SuccessEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["success"] = "success"
    credential_token: str = Field(min_length=1)


class CancelledEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["cancelled"] = "cancelled"


class FailedEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["failed"] = "failed"
    message: str | None = None


NormalizedEvent = Annotated[
    SuccessEvent | CancelledEvent | FailedEvent,
    Field(discriminator="kind"),
]

normalized_event_adapter: TypeAdapter[NormalizedEvent] = TypeAdapter(NormalizedEvent)


class CompletionEnvelope(BaseModel):
    """Opaque result handed back by an external provider window/activity.

    The host surface forwards it untouched; only the SDK interprets it.
    """

    request_code: int
    result_code: int
    data: dict[str, str] = Field(default_factory=dict)


class LoginResult(BaseModel):
    """What an identity SDK reports on a successful login."""

    access_token: str
    granted_scope: frozenset[str] = frozenset()
    denied_scope: frozenset[str] = frozenset()
