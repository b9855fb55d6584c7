"""Provider bridge and identity SDK interfaces.

The bridge isolates the handshake controller from any particular identity
SDK's API shape. Facebook, Google, Apple etc. would each ship an IdentitySdk
implementation; SdkBridge adapts any of them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable

from social_handshake.errors import ProviderError
from social_handshake.models.events import CompletionEnvelope, LoginResult, NormalizedEvent
from social_handshake.models.handshake import ProviderKind

EventSink = Callable[[NormalizedEvent], None]


class ProviderBridge(ABC):
    """Thin adapter over an external identity SDK.

    Holds no handshake state between invocations apart from the single
    armed callback.
    """

    provider_kind: ProviderKind

    @abstractmethod
    def has_cached_credential(self) -> bool:
        """Non-blocking check against the SDK's session cache."""

    @abstractmethod
    def current_credential(self) -> str | None:
        """The cached credential token, or None. Must not block on network."""

    @abstractmethod
    def arm(self, scope: Iterable[str], on_event: EventSink) -> None:
        """Register the entry-point control.

        User interaction then triggers exactly one call to ``on_event``.
        Arming twice without the first arm having fired is an error.
        """

    @abstractmethod
    def begin_login(self) -> None:
        """Called by the entry-point control when the user activates it."""

    @abstractmethod
    def forward_completion_envelope(self, envelope: CompletionEnvelope) -> None:
        """Hand an external window/activity result to the SDK, untouched."""


class LoginCallback(ABC):
    """Native completion callback shape expected by identity SDKs."""

    @abstractmethod
    def on_success(self, result: LoginResult) -> None: ...

    @abstractmethod
    def on_cancel(self) -> None: ...

    @abstractmethod
    def on_error(self, error: ProviderError | None) -> None: ...


class IdentitySdk(ABC):
    """The external identity SDK, treated as a black box."""

    @abstractmethod
    def current_access_token(self) -> str | None:
        """Token from the SDK's own session cache, if any."""

    @abstractmethod
    def register_callback(self, scope: frozenset[str], callback: LoginCallback) -> None:
        """Attach the login callback and the read permissions to request."""

    @abstractmethod
    def log_in(self) -> None:
        """Start the SDK's login UI. Completion is reported via the callback."""

    @abstractmethod
    def on_completion(self, envelope: CompletionEnvelope) -> bool:
        """Feed an external result back into the SDK. Returns True if it was consumed."""
