"""Verification result models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field

from pactverify.typing.enums import InteractionStatus, MismatchKind


class Mismatch(BaseModel):
    """One discrepancy between the expected and the actual response."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    path: str
    kind: MismatchKind
    expected: Any = None
    actual: Any = None
    message: str


class InteractionResult(BaseModel):
    """Result of one interaction within a verify call."""

    model_config = ConfigDict(extra="forbid")

    description: str
    provider_states: tuple[str, ...] = ()
    status: InteractionStatus = InteractionStatus.SKIPPED
    mismatches: list[Mismatch] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    duration_ms: int = 0

    @property
    def executed(self) -> bool:
        """Return whether the interaction ran (was not filtered out)."""
        return self.status != InteractionStatus.SKIPPED

    @property
    def passed(self) -> bool:
        """Return whether the interaction ran and passed."""
        return self.status == InteractionStatus.PASSED


class VerificationOutcome(BaseModel):
    """Aggregate result of one verify call."""

    model_config = ConfigDict(extra="forbid")

    consumer: str
    provider: str
    source: str
    specification_version: str | None = None
    description_filter: str = ""
    state_filter: str = ""
    results: list[InteractionResult] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def passed(self) -> bool:
        """Return whether every executed interaction passed."""
        return all(result.passed for result in self.results if result.executed)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def executed_count(self) -> int:
        """Return the number of interactions that ran."""
        return sum(1 for result in self.results if result.executed)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def failed_count(self) -> int:
        """Return the number of interactions that ran and failed."""
        return sum(1 for result in self.results if result.status == InteractionStatus.FAILED)

    @property
    def failures(self) -> list[InteractionResult]:
        """Return failed interaction results in document order."""
        return [result for result in self.results if result.status == InteractionStatus.FAILED]

    def mismatches(self) -> list[Mismatch]:
        """Return every mismatch across failed interactions."""
        return [mismatch for result in self.failures for mismatch in result.mismatches]
