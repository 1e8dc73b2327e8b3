from __future__ import annotations

import json
from typing import TYPE_CHECKING

from pactverify.reporting import persist_outcome, render_summary
from pactverify.typing.enums import InteractionStatus, MismatchKind
from pactverify.typing.models import InteractionResult, Mismatch, VerificationOutcome

if TYPE_CHECKING:
    from pathlib import Path


def _outcome() -> VerificationOutcome:
    return VerificationOutcome(
        consumer="chrome browser",
        provider="go api",
        source="pact.json",
        results=[
            InteractionResult(
                description="get user 23",
                provider_states=("there is a user with id {23}",),
                status=InteractionStatus.FAILED,
                mismatches=[
                    Mismatch(
                        path="$.body.firstName",
                        kind=MismatchKind.VALUE,
                        expected="John",
                        actual="Jane",
                        message="Expected 'John' but received 'Jane'",
                    ),
                ],
                warnings=["teardown hiccup"],
            ),
            InteractionResult(description="get user 200", status=InteractionStatus.PASSED),
            InteractionResult(description="filtered out"),
        ],
    )


def test_render_summary_lists_results_and_mismatches() -> None:
    summary = render_summary(_outcome())

    assert "Verifying a pact between chrome browser and go api (pact.json)" in summary
    assert "[FAIL] get user 23 given there is a user with id {23}" in summary
    assert "$.body.firstName: Expected 'John' but received 'Jane'" in summary
    assert "warning: teardown hiccup" in summary
    assert "[SKIP] filtered out" in summary
    assert summary.endswith("2 interaction(s) verified, 1 failed: verification failed")


def test_persist_outcome_writes_json(tmp_path: Path) -> None:
    path = tmp_path / "reports" / "outcome.json"

    persist_outcome(_outcome(), path)

    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["passed"] is False
    assert payload["executed_count"] == 2
    assert payload["failed_count"] == 1
    assert payload["results"][0]["mismatches"][0]["kind"] == "value"
