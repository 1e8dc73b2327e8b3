"""Typing-centric domain modules."""

from pactverify.typing.enums import (
    DirectiveKind,
    InteractionStatus,
    MismatchKind,
    StateAction,
    VerifierState,
)
from pactverify.typing.models import (
    ContractDocument,
    EachLike,
    Equality,
    ExpectedRequest,
    ExpectedResponse,
    Interaction,
    InteractionResult,
    MatchingDirective,
    Mismatch,
    PactSource,
    ProviderEndpoint,
    ProviderStateRegistration,
    Regex,
    TypeOnly,
    VerificationOutcome,
    VerificationPlan,
    VerifierConfig,
)
from pactverify.typing.protocol import StateHandler

__all__ = [
    "ContractDocument",
    "DirectiveKind",
    "EachLike",
    "Equality",
    "ExpectedRequest",
    "ExpectedResponse",
    "Interaction",
    "InteractionResult",
    "InteractionStatus",
    "MatchingDirective",
    "Mismatch",
    "MismatchKind",
    "PactSource",
    "ProviderEndpoint",
    "ProviderStateRegistration",
    "Regex",
    "StateAction",
    "StateHandler",
    "TypeOnly",
    "VerificationOutcome",
    "VerificationPlan",
    "VerifierConfig",
    "VerifierState",
]
