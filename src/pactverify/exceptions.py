"""Package exceptions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pactverify.typing.models import VerificationOutcome


class PackageError(Exception):
    """Root exception for the package."""


@dataclass(frozen=True)
class SettingsError(PackageError):
    """Raised when settings cannot be loaded or validated."""

    message: str = "Failed to load settings"
    exc: BaseException | None = None

    def __str__(self) -> str:
        """Return error message payload."""
        return f"{self.message}: {self.exc}" if self.exc else self.message


@dataclass(frozen=True)
class AsyncExecutionError(PackageError):
    """Raised when an async operation fails in compatibility runner."""

    result: BaseException
    message: str = "Async operation failed"

    def __str__(self) -> str:
        """Return error message payload."""
        return f"{self.message}: {self.result}"


@dataclass(frozen=True)
class DependencyError(PackageError):
    """Raised when optional runtime dependencies are missing."""

    missing_package: list[str]
    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return f"Missing runtime dependencies for '{self.message}': {', '.join(self.missing_package)}"


@dataclass
class EmptyConsumerError(PackageError):
    """Raised when verification starts without a consumer name."""

    message: str = "Consumer name is not set, call honours_pact_with() first"

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message


@dataclass
class EmptyProviderError(PackageError):
    """Raised when verification starts without a provider name."""

    message: str = "Provider name is not set, call service_provider() first"

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message


@dataclass
class InvalidSourceError(PackageError):
    """Raised when the pact source is malformed or unreachable."""

    source: str
    reason: str

    def __str__(self) -> str:
        """Return error message payload."""
        return f"Invalid pact source '{self.source}': {self.reason}"


@dataclass
class ParseError(PackageError):
    """Raised when pact bytes are not a well-formed contract document."""

    source: str
    reason: str

    def __str__(self) -> str:
        """Return error message payload."""
        return f"Cannot parse pact from '{self.source}': {self.reason}"


@dataclass
class NoInteractionsSelectedError(PackageError):
    """Raised when the interaction filter selects nothing."""

    description: str = ""
    state: str = ""

    def __str__(self) -> str:
        """Return error message payload."""
        return (
            "No interactions found matching "
            f"description '{self.description or '*'}' and provider state '{self.state or '*'}'"
        )


@dataclass
class ProviderStateSetupError(PackageError):
    """Raised when a provider-state setup hook fails."""

    state: str
    reason: str

    def __str__(self) -> str:
        """Return error message payload."""
        return f"Provider state setup failed for '{self.state}': {self.reason}"


@dataclass
class TransportError(PackageError):
    """Raised when a replayed request cannot be delivered."""

    method: str
    url: str
    reason: str

    def __str__(self) -> str:
        """Return error message payload."""
        return f"Request {self.method} {self.url} failed: {self.reason}"


@dataclass
class VerificationFailedError(PackageError):
    """Raised at the end of a verify call when one or more interactions failed."""

    outcome: VerificationOutcome = field(repr=False)

    def __str__(self) -> str:
        """Return error message payload."""
        return (
            f"Verification failed: {self.outcome.failed_count} of {self.outcome.executed_count} "
            f"interactions between '{self.outcome.consumer}' and '{self.outcome.provider}' failed"
        )
