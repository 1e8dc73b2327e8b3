"""Provider-state interfaces."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from pactverify.typing.enums import StateAction


class StateHandler(Protocol):
    """Capability that places the provider into, or out of, a named state."""

    def handle(self, state: str, action: StateAction) -> None:
        """Run the hook for a state label.

        Args:
            state: Provider-state label from the interaction.
            action: Whether the state is being set up or torn down.

        Raises:
            Exception: Any failure; the coordinator records it against the interaction.
        """
