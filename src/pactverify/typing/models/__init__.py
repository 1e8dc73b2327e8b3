"""Core domain model exports."""

from pactverify.typing.models.config import (
    PactSource,
    ProviderEndpoint,
    ProviderStateRegistration,
    StateHook,
    VerificationPlan,
    VerifierConfig,
)
from pactverify.typing.models.contract import (
    ContractDocument,
    ExpectedRequest,
    ExpectedResponse,
    Interaction,
)
from pactverify.typing.models.directives import EachLike, Equality, MatchingDirective, Regex, TypeOnly
from pactverify.typing.models.outcome import InteractionResult, Mismatch, VerificationOutcome

__all__ = [
    "ContractDocument",
    "EachLike",
    "Equality",
    "ExpectedRequest",
    "ExpectedResponse",
    "Interaction",
    "InteractionResult",
    "MatchingDirective",
    "Mismatch",
    "PactSource",
    "ProviderEndpoint",
    "ProviderStateRegistration",
    "Regex",
    "StateHook",
    "TypeOnly",
    "VerificationOutcome",
    "VerificationPlan",
    "VerifierConfig",
]
