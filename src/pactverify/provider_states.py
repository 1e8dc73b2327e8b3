"""Provider-state setup and teardown around each interaction."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx

from pactverify.async_runner import resolve_hook_result
from pactverify.exceptions import ProviderStateSetupError
from pactverify.logging import get_logger
from pactverify.typing.enums import StateAction

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from pactverify.typing.models import Interaction, ProviderStateRegistration, StateHook
    from pactverify.typing.protocol import StateHandler

logger = get_logger(__name__)


class ProviderStateChangeUrl:
    """Delegate provider states to an HTTP endpoint exposed by the provider.

    Each hook call POSTs ``{"consumer", "state", "states", "action"}`` as JSON; any
    non-2xx answer counts as a failed hook.
    """

    def __init__(self, url: str, client: httpx.Client, consumer: str) -> None:
        """Initialize the handler.

        Args:
            url (str): Provider-states setup URL.
            client (httpx.Client): Client used for the POST.
            consumer (str): Consumer name sent with every call.
        """
        self.url = url
        self.client = client
        self.consumer = consumer

    def handle(self, state: str, action: StateAction) -> None:
        """POST one state change.

        Args:
            state (str): Provider-state label.
            action (StateAction): Setup or teardown.

        Raises:
            ProviderStateSetupError: If the request fails or the endpoint answers an error.
        """
        payload = {"consumer": self.consumer, "state": state, "states": [state], "action": action.to_str()}
        try:
            response = self.client.post(self.url, json=payload)
        except httpx.HTTPError as exc:
            raise ProviderStateSetupError(state=state, reason=f"POST {self.url} failed: {exc}") from exc
        if not response.is_success:
            raise ProviderStateSetupError(
                state=state,
                reason=f"POST {self.url} answered HTTP {response.status_code}",
            )


class ProviderStateCoordinator:
    """Invoke registered hooks for the provider states of an interaction."""

    def __init__(
        self,
        registrations: Iterable[ProviderStateRegistration] = (),
        fallback: StateHandler | None = None,
    ) -> None:
        """Index registrations by label; a later registration replaces an earlier one.

        Args:
            registrations (Iterable[ProviderStateRegistration]): Caller-supplied hooks.
            fallback (StateHandler | None): Handler for labels without a registration.
        """
        self._registrations = {registration.state: registration for registration in registrations}
        self._fallback = fallback

    def setup(self, interaction: Interaction) -> list[str]:
        """Run setup hooks in label order, stopping at the first failure.

        Args:
            interaction (Interaction): Interaction about to be replayed.

        Returns:
            list[str]: Error messages; non-empty means the interaction must not be replayed.
        """
        _, errors = self.prepare(interaction)
        return errors

    def prepare(self, interaction: Interaction) -> tuple[list[str], list[str]]:
        """Run setup hooks and report which labels were prepared.

        Args:
            interaction (Interaction): Interaction about to be replayed.

        Returns:
            tuple[list[str], list[str]]: Labels whose setup completed, and error messages.
        """
        prepared: list[str] = []
        errors: list[str] = []
        for state in interaction.provider_states:
            try:
                self._invoke(state, StateAction.SETUP)
            except Exception as exc:  # noqa: BLE001
                error = exc if isinstance(exc, ProviderStateSetupError) else _setup_error(state, exc)
                logger.warning(
                    "Provider state setup failed",
                    extra={"state": state, "interaction": interaction.description, "reason": error.reason},
                )
                errors.append(str(error))
                break
            prepared.append(state)
        return prepared, errors

    def teardown(self, interaction: Interaction, states: Sequence[str] | None = None) -> list[str]:
        """Run teardown hooks in reverse label order, best effort.

        Args:
            interaction (Interaction): Interaction that was just verified.
            states (Sequence[str] | None): Labels to tear down; all of the interaction's by default.

        Returns:
            list[str]: Warning messages for hooks that failed.
        """
        warnings: list[str] = []
        labels = interaction.provider_states if states is None else states
        for state in reversed(labels):
            try:
                self._invoke(state, StateAction.TEARDOWN)
            except Exception as exc:  # noqa: BLE001
                reason = _reason(exc)
                logger.warning(
                    "Provider state teardown failed",
                    extra={"state": state, "interaction": interaction.description, "reason": reason},
                )
                warnings.append(f"Provider state teardown failed for '{state}': {reason}")
        return warnings

    def _invoke(self, state: str, action: StateAction) -> None:
        """Call the hook registered for a label, or the fallback handler.

        Args:
            state (str): Provider-state label.
            action (StateAction): Setup or teardown.
        """
        registration = self._registrations.get(state)
        if registration is None:
            if self._fallback is not None:
                self._fallback.handle(state, action)
            return

        hook: StateHook | None = registration.setup if action == StateAction.SETUP else registration.teardown
        if hook is not None:
            resolve_hook_result(hook(state))


def _reason(exc: BaseException) -> str:
    """Return a readable failure reason for a hook exception."""
    if isinstance(exc, ProviderStateSetupError):
        return exc.reason
    return str(exc) or type(exc).__name__


def _setup_error(state: str, exc: BaseException) -> ProviderStateSetupError:
    """Wrap a hook exception as a setup error."""
    return ProviderStateSetupError(state=state, reason=_reason(exc))
