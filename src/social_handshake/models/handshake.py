"""Handshake request/result types and controller state enums."""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ProviderKind(StrEnum):
    FACEBOOK = "facebook"


class HandshakeOutcome(StrEnum):
    OK = "ok"
    CANCELLED = "cancelled"


class HandshakeState(StrEnum):
    IDLE = "idle"
    CHECKING = "checking"
    SHORT_CIRCUITED = "short_circuited"
    ARMED = "armed"
    DELIVERED = "delivered"


class ExitPath(StrEnum):
    """How a handshake ended. Only telemetry and the audit log see this."""

    SHORT_CIRCUIT = "short_circuit"
    SUCCESS = "success"
    USER_CANCELLED = "user_cancelled"
    PROVIDER_ERROR = "provider_error"
    IMPLICIT_ABANDON = "implicit_abandon"


class HandshakeRequest(BaseModel):
    """Created by the caller when opening a handshake. Read-only thereafter."""

    model_config = ConfigDict(frozen=True)

    correlation_token: str = Field(min_length=1)
    requested_scope: frozenset[str] = frozenset()
    provider_kind: ProviderKind = ProviderKind.FACEBOOK

    @classmethod
    def new(
        cls,
        requested_scope: Iterable[str] = (),
        provider_kind: ProviderKind = ProviderKind.FACEBOOK,
    ) -> HandshakeRequest:
        """Request with a freshly generated correlation token."""
        return cls(
            correlation_token=f"hs-{uuid.uuid4().hex[:8]}",
            requested_scope=frozenset(requested_scope),
            provider_kind=provider_kind,
        )


class HandshakeResult(BaseModel):
    """The caller-facing contract: either Ok with a credential, or Cancelled.

    Provider errors and abandoned prompts are deliberately indistinguishable
    from an explicit cancel here.
    """

    model_config = ConfigDict(frozen=True)

    outcome: HandshakeOutcome
    credential_token: str | None = None
    provider_kind: ProviderKind = ProviderKind.FACEBOOK

    @field_validator("credential_token")
    @classmethod
    def _empty_token_is_absent(cls, value: str | None) -> str | None:
        return value or None

    @model_validator(mode="after")
    def _token_only_when_ok(self) -> HandshakeResult:
        if self.outcome == HandshakeOutcome.OK and self.credential_token is None:
            raise ValueError("an Ok result requires a credential token")
        if self.outcome == HandshakeOutcome.CANCELLED and self.credential_token is not None:
            raise ValueError("a Cancelled result cannot carry a credential token")
        return self

    @classmethod
    def ok(cls, credential_token: str, provider_kind: ProviderKind) -> HandshakeResult:
        return cls(
            outcome=HandshakeOutcome.OK,
            credential_token=credential_token,
            provider_kind=provider_kind,
        )

    @classmethod
    def cancelled(cls, provider_kind: ProviderKind) -> HandshakeResult:
        return cls(outcome=HandshakeOutcome.CANCELLED, provider_kind=provider_kind)

    @property
    def is_ok(self) -> bool:
        return self.outcome == HandshakeOutcome.OK
