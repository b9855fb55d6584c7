"""Settings for the handshake host, with environment overrides.

Environment variables:
    SOCIAL_HANDSHAKE_PROVIDER      provider kind (default: facebook)
    SOCIAL_HANDSHAKE_SCOPE         comma-separated read permissions
    SOCIAL_HANDSHAKE_DB            SQLite path for telemetry and the audit log
    SOCIAL_HANDSHAKE_REQUEST_CODE  request code of forwarded completion envelopes
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from social_handshake.bridge.mock import DEFAULT_REQUEST_CODE
from social_handshake.models.handshake import ProviderKind

DEFAULT_SCOPE = frozenset({"email", "public_profile"})
DEFAULT_DB = Path.cwd() / ".handshake" / "telemetry.db"


def parse_scope(text: str) -> frozenset[str]:
    return frozenset(part.strip() for part in text.split(",") if part.strip())


class HandshakeSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SOCIAL_HANDSHAKE_",
        env_ignore_empty=True,
        extra="ignore",
    )

    provider: ProviderKind = ProviderKind.FACEBOOK
    default_scope: Annotated[frozenset[str], NoDecode] = Field(
        default=DEFAULT_SCOPE,
        validation_alias=AliasChoices("default_scope", "SOCIAL_HANDSHAKE_SCOPE"),
    )
    db_path: Path = Field(
        default=DEFAULT_DB,
        validation_alias=AliasChoices("db_path", "SOCIAL_HANDSHAKE_DB"),
    )
    request_code: int = Field(default=DEFAULT_REQUEST_CODE, ge=0)

    @field_validator("default_scope", mode="before")
    @classmethod
    def _split_scope(cls, value: object) -> object:
        if isinstance(value, str):
            return parse_scope(value)
        return value


def load_settings(**overrides: object) -> HandshakeSettings:
    """Build settings from defaults, then the environment, then explicit overrides.

    ``None`` overrides are ignored so CLI options can be passed straight through.
    """
    return HandshakeSettings(**{k: v for k, v in overrides.items() if v is not None})
