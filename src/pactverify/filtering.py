"""Interaction selection by description and provider state."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pactverify.exceptions import NoInteractionsSelectedError

if TYPE_CHECKING:
    from pactverify.typing.models import ContractDocument, Interaction


def is_selected(interaction: Interaction, description: str | None = "", state: str | None = "") -> bool:
    """Return whether an interaction passes the filter.

    Empty values are wildcards. The description matches when it equals, or is
    contained in, the interaction description; the state must equal one of the
    interaction's provider-state labels.
    """
    if description and description not in interaction.description:
        return False
    return not state or state in interaction.provider_states


def filter_interactions(
    document: ContractDocument,
    description: str | None = "",
    state: str | None = "",
) -> list[Interaction]:
    """Narrow a contract to the interactions matching description and state.

    Args:
        document (ContractDocument): Loaded contract.
        description (str | None): Description filter, empty for any.
        state (str | None): Provider-state filter, empty for any.

    Raises:
        NoInteractionsSelectedError: If nothing matches.

    Returns:
        list[Interaction]: Selected interactions in document order.
    """
    selected = [
        interaction for interaction in document.interactions if is_selected(interaction, description, state)
    ]
    if not selected:
        raise NoInteractionsSelectedError(description=description or "", state=state or "")
    return selected
