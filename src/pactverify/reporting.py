"""Verification outcome reporting."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pactverify.typing.enums import InteractionStatus

if TYPE_CHECKING:
    from pathlib import Path

    from pactverify.typing.models import VerificationOutcome

_STATUS_LABELS = {
    InteractionStatus.PASSED: "PASS",
    InteractionStatus.FAILED: "FAIL",
    InteractionStatus.SKIPPED: "SKIP",
}


def persist_outcome(outcome: VerificationOutcome, path: Path) -> None:
    """Persist verification outcome as JSON.

    Args:
        outcome (VerificationOutcome): Outcome payload.
        path (Path): Output path.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(outcome.model_dump_json(indent=2), encoding="utf-8")


def render_summary(outcome: VerificationOutcome) -> str:
    """Render a plain-text summary suitable for CI logs.

    Args:
        outcome (VerificationOutcome): Outcome to render.

    Returns:
        str: One line per interaction, followed by its errors, mismatches and warnings.
    """
    lines = [
        f"Verifying a pact between {outcome.consumer} and {outcome.provider} ({outcome.source})",
    ]
    for result in outcome.results:
        states = f" given {', '.join(result.provider_states)}" if result.provider_states else ""
        lines.append(f"  [{_STATUS_LABELS[result.status]}] {result.description}{states}")
        lines.extend(f"      error: {error}" for error in result.errors)
        lines.extend(f"      {mismatch.path}: {mismatch.message}" for mismatch in result.mismatches)
        lines.extend(f"      warning: {warning}" for warning in result.warnings)

    verdict = "passed" if outcome.passed else "failed"
    lines.append(
        f"{outcome.executed_count} interaction(s) verified, {outcome.failed_count} failed: verification {verdict}",
    )
    return "\n".join(lines)
