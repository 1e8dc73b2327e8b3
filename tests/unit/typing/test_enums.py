from __future__ import annotations

import pytest

from pactverify.typing.enums import InteractionStatus, MismatchKind, StateAction


def test_interaction_status_from_str() -> None:
    assert InteractionStatus.from_str("passed") == InteractionStatus.PASSED


def test_mismatch_kind_from_str_raises_on_invalid_value() -> None:
    with pytest.raises(ValueError, match="Unsupported MismatchKind value"):
        MismatchKind.from_str("close-enough")


def test_state_action_to_str() -> None:
    assert StateAction.TEARDOWN.to_str() == "teardown"
