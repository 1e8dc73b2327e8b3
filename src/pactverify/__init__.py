"""pactverify package."""

from pactverify.async_runner import run_async
from pactverify.exceptions import (
    AsyncExecutionError,
    DependencyError,
    EmptyConsumerError,
    EmptyProviderError,
    InvalidSourceError,
    NoInteractionsSelectedError,
    PackageError,
    ParseError,
    ProviderStateSetupError,
    SettingsError,
    TransportError,
    VerificationFailedError,
)
from pactverify.logging import configure_logging, get_logger
from pactverify.settings import Settings, get_settings
from pactverify.typing.models import ContractDocument, VerificationOutcome
from pactverify.verifier import Verifier

__version__ = "0.1.0"

# Initialize package logger at import time via `get_logger`.
logger = get_logger("pactverify")

__all__ = [
    "AsyncExecutionError",
    "ContractDocument",
    "DependencyError",
    "EmptyConsumerError",
    "EmptyProviderError",
    "InvalidSourceError",
    "NoInteractionsSelectedError",
    "PackageError",
    "ParseError",
    "ProviderStateSetupError",
    "Settings",
    "SettingsError",
    "TransportError",
    "VerificationFailedError",
    "VerificationOutcome",
    "Verifier",
    "__version__",
    "configure_logging",
    "get_logger",
    "get_settings",
    "logger",
    "run_async",
]
