from pactverify.exceptions import (
    AsyncExecutionError,
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
from pactverify.typing.enums import InteractionStatus
from pactverify.typing.models import InteractionResult, VerificationOutcome


def test_root_exception_hierarchy() -> None:
    for error_type in (
        SettingsError,
        AsyncExecutionError,
        EmptyConsumerError,
        EmptyProviderError,
        InvalidSourceError,
        ParseError,
        NoInteractionsSelectedError,
        ProviderStateSetupError,
        TransportError,
        VerificationFailedError,
    ):
        assert issubclass(error_type, PackageError)


def test_invalid_source_error_keeps_source_verbatim() -> None:
    assert str(InvalidSourceError(source="badpath///", reason="file not found")) == (
        "Invalid pact source 'badpath///': file not found"
    )


def test_no_interactions_selected_error_shows_wildcards() -> None:
    assert "description '*'" in str(NoInteractionsSelectedError(state="s"))


def test_verification_failed_error_summarizes_outcome() -> None:
    outcome = VerificationOutcome(
        consumer="web",
        provider="api",
        source="pact.json",
        results=[
            InteractionResult(description="a", status=InteractionStatus.FAILED),
            InteractionResult(description="b", status=InteractionStatus.PASSED),
        ],
    )

    assert str(VerificationFailedError(outcome=outcome)) == (
        "Verification failed: 1 of 2 interactions between 'web' and 'api' failed"
    )
