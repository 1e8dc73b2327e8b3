"""Provider verification orchestrator."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from pactverify.exceptions import (
    EmptyConsumerError,
    EmptyProviderError,
    InvalidSourceError,
    TransportError,
    VerificationFailedError,
)
from pactverify.filtering import filter_interactions
from pactverify.loader import load_contract
from pactverify.logging import bind_verification_context, clear_verification_context, get_logger
from pactverify.matching.matcher import ResponseMatcher
from pactverify.provider_states import ProviderStateChangeUrl, ProviderStateCoordinator
from pactverify.replayer import RequestReplayer
from pactverify.settings import get_settings
from pactverify.typing.enums import InteractionStatus, VerifierState
from pactverify.typing.models import (
    InteractionResult,
    PactSource,
    ProviderEndpoint,
    ProviderStateRegistration,
    VerificationOutcome,
    VerificationPlan,
    VerifierConfig,
)

if TYPE_CHECKING:
    import httpx

    from pactverify.settings import Settings
    from pactverify.typing.models import ContractDocument, Interaction, StateHook

logger = get_logger(__name__)


class Verifier:
    """Verify that a provider honours the pact recorded by a consumer.

    Configure with chained setters, then call `verify()` or `verify_state()`::

        outcome = (
            Verifier()
            .honours_pact_with("chrome browser")
            .service_provider("go api", base_url="http://localhost:8080")
            .pact_uri("./pacts/chrome_browser-go_api.json")
            .provider_state("there is a user with id {23}", setup=seed_user)
            .verify()
        )

    A verifier runs one verify call at a time and must not be shared across threads.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize an unconfigured verifier.

        Args:
            settings (Settings | None): Runtime settings used to build default HTTP
                clients. Defaults to `get_settings()` when first needed.
        """
        self._settings = settings
        self._config = VerifierConfig()
        self._matcher = ResponseMatcher()
        self.state = VerifierState.UNCONFIGURED
        self.last_outcome: VerificationOutcome | None = None

    @property
    def config(self) -> VerifierConfig:
        """Return the accumulated builder configuration."""
        return self._config

    def _configured(self) -> Verifier:
        self.state = VerifierState.CONFIGURING
        return self

    def honours_pact_with(self, consumer: str) -> Verifier:
        """Set the consumer whose pact is verified."""
        self._config.consumer = consumer
        return self._configured()

    def service_provider(
        self,
        provider: str,
        client: httpx.Client | None = None,
        base_url: str | None = None,
    ) -> Verifier:
        """Set the provider under verification and how to reach it.

        Args:
            provider (str): Provider name.
            client (httpx.Client | None): Client used to replay requests. When omitted a
                settings-built client is used.
            base_url (str | None): Provider base URL, e.g. ``http://localhost:8080``.

        Returns:
            Verifier: This verifier.
        """
        self._config.provider = provider
        self._config.endpoint = ProviderEndpoint(base_url=base_url or "", client=client)
        return self._configured()

    def pact_uri(
        self,
        uri: str,
        headers: dict[str, str] | None = None,
        auth: tuple[str, str] | str | None = None,
        client: httpx.Client | None = None,
    ) -> Verifier:
        """Set where the pact is loaded from.

        Args:
            uri (str): Local path, ``file://`` URI or ``http(s)://`` URI.
            headers (dict[str, str] | None): Extra headers for remote fetches.
            auth (tuple[str, str] | str | None): Basic credentials or bearer token.
            client (httpx.Client | None): Dedicated client for remote fetches.

        Returns:
            Verifier: This verifier.
        """
        self._config.source = PactSource(uri=uri, headers=headers or {}, auth=auth, client=client)
        return self._configured()

    def provider_state(
        self,
        state: str,
        setup: StateHook | None = None,
        teardown: StateHook | None = None,
    ) -> Verifier:
        """Register hooks for a provider-state label; a later call for the same label wins.

        Args:
            state (str): Provider-state label, matched exactly.
            setup (StateHook | None): Called with the label before the request is replayed.
            teardown (StateHook | None): Called with the label after the response is matched.

        Returns:
            Verifier: This verifier.
        """
        self._config.registrations = [
            *self._config.registrations,
            ProviderStateRegistration(state=state, setup=setup, teardown=teardown),
        ]
        return self._configured()

    def provider_states_setup_url(self, url: str) -> Verifier:
        """Set the provider endpoint handling states that have no registered hooks."""
        self._config.states_setup_url = url or None
        return self._configured()

    def filter_interactions(self, description: str = "", state: str = "") -> Verifier:
        """Store the interaction filter used by `verify()`.

        Args:
            description (str): Description filter (equals or contains), empty for any.
            state (str): Provider-state filter (exact label), empty for any.

        Returns:
            Verifier: This verifier.
        """
        self._config.description_filter = description or ""
        self._config.state_filter = state or ""
        return self._configured()

    def verify(self) -> VerificationOutcome:
        """Verify the interactions selected by the stored filter.

        Returns:
            VerificationOutcome: Outcome of a fully passing run.
        """
        return self._run(self._config.description_filter, self._config.state_filter)

    def verify_state(self, description: str = "", state: str = "") -> VerificationOutcome:
        """Verify the interactions matching the given filter, leaving the stored filter as is.

        Args:
            description (str): Description filter, empty for any.
            state (str): Provider-state filter, empty for any.

        Returns:
            VerificationOutcome: Outcome of a fully passing run.
        """
        return self._run(description or "", state or "")

    def _get_settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    def _plan(self, description: str, state: str) -> VerificationPlan:
        """Validate the configuration and freeze it for one run.

        Args:
            description (str): Description filter of this run.
            state (str): Provider-state filter of this run.

        Raises:
            EmptyConsumerError: If no consumer name is set.
            EmptyProviderError: If no provider name is set.
            InvalidSourceError: If no pact source is set.

        Returns:
            VerificationPlan: Immutable run configuration.
        """
        config = self._config
        if not config.consumer.strip():
            raise EmptyConsumerError
        if not config.provider.strip():
            raise EmptyProviderError
        if config.source is None:
            raise InvalidSourceError(source="", reason="no pact source configured, call pact_uri() first")

        plan = VerificationPlan(
            consumer=config.consumer,
            provider=config.provider,
            source=config.source,
            endpoint=config.endpoint,
            registrations=tuple(config.registrations),
            states_setup_url=config.states_setup_url,
            description_filter=description,
            state_filter=state,
        )
        self.state = VerifierState.VALIDATED
        return plan

    def _run(self, description: str, state: str) -> VerificationOutcome:
        """Load, filter and verify, then publish the outcome.

        Args:
            description (str): Description filter of this run.
            state (str): Provider-state filter of this run.

        Raises:
            VerificationFailedError: If any executed interaction failed.

        Returns:
            VerificationOutcome: Outcome of a fully passing run.
        """
        plan = self._plan(description, state)
        bind_verification_context(consumer=plan.consumer, provider=plan.provider, source=plan.source.uri)
        try:
            document = load_contract(plan.source, self._settings)
            self._warn_on_participant_mismatch(plan, document)
            selected = filter_interactions(document, plan.description_filter, plan.state_filter)

            self.state = VerifierState.VERIFYING
            client = plan.endpoint.client or self._get_settings().select_sync_httpx_client(plan.endpoint.base_url)
            replayer = RequestReplayer(client, plan.endpoint.base_url)
            fallback = None
            if plan.states_setup_url:
                fallback = ProviderStateChangeUrl(plan.states_setup_url, client, plan.consumer)
            coordinator = ProviderStateCoordinator(plan.registrations, fallback=fallback)

            selected_ids = {id(interaction) for interaction in selected}
            results = [
                self._verify_interaction(interaction, replayer, coordinator)
                if id(interaction) in selected_ids
                else InteractionResult(
                    description=interaction.description,
                    provider_states=interaction.provider_states,
                    status=InteractionStatus.SKIPPED,
                )
                for interaction in document.interactions
            ]

            outcome = VerificationOutcome(
                consumer=plan.consumer,
                provider=plan.provider,
                source=plan.source.uri,
                specification_version=document.specification_version,
                description_filter=plan.description_filter,
                state_filter=plan.state_filter,
                results=results,
            )
            self.last_outcome = outcome
            self.state = VerifierState.COMPLETED
            logger.info(
                "Verification completed",
                extra={
                    "passed": outcome.passed,
                    "executed": outcome.executed_count,
                    "failed": outcome.failed_count,
                },
            )
        finally:
            clear_verification_context()

        if not outcome.passed:
            raise VerificationFailedError(outcome=outcome)
        return outcome

    def _verify_interaction(
        self,
        interaction: Interaction,
        replayer: RequestReplayer,
        coordinator: ProviderStateCoordinator,
    ) -> InteractionResult:
        """Run setup, replay, match and teardown for one interaction.

        Args:
            interaction (Interaction): Interaction to verify.
            replayer (RequestReplayer): Provider request replayer.
            coordinator (ProviderStateCoordinator): Provider-state hooks.

        Returns:
            InteractionResult: Per-interaction result; failures are data, never raised.
        """
        started = time.perf_counter()
        result = InteractionResult(description=interaction.description, provider_states=interaction.provider_states)

        prepared: list[str] = []
        if interaction.provider_states:
            prepared, errors = coordinator.prepare(interaction)
            result.errors.extend(errors)

        try:
            if not result.errors:
                try:
                    response = replayer.replay(interaction.request)
                except TransportError as exc:
                    logger.warning("Request replay failed", extra={"interaction": interaction.description})
                    result.errors.append(str(exc))
                else:
                    result.mismatches.extend(self._matcher.match(interaction.response, response))
        finally:
            if prepared:
                result.warnings.extend(coordinator.teardown(interaction, prepared))

        result.status = (
            InteractionStatus.FAILED if result.errors or result.mismatches else InteractionStatus.PASSED
        )
        result.duration_ms = int((time.perf_counter() - started) * 1000)
        logger.info(
            "Interaction verified",
            extra={
                "interaction": interaction.description,
                "status": result.status.to_str(),
                "mismatches": len(result.mismatches),
                "duration_ms": result.duration_ms,
            },
        )
        return result

    @staticmethod
    def _warn_on_participant_mismatch(plan: VerificationPlan, document: ContractDocument) -> None:
        if document.consumer != plan.consumer or document.provider != plan.provider:
            logger.warning(
                "Pact participants differ from the configured ones",
                extra={
                    "configured_consumer": plan.consumer,
                    "configured_provider": plan.provider,
                    "pact_consumer": document.consumer,
                    "pact_provider": document.provider,
                },
            )
