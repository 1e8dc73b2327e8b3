"""Verifier configuration models."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field

StateHook = Callable[[str], Any]


class PactSource(BaseModel):
    """Where to fetch the pact from."""

    model_config = ConfigDict(extra="forbid", frozen=True, arbitrary_types_allowed=True)

    uri: str
    headers: dict[str, str] = Field(default_factory=dict)
    auth: tuple[str, str] | str | None = Field(
        default=None,
        description="Basic auth (user, password) tuple or bearer token.",
    )
    client: httpx.Client | None = None

    def __str__(self) -> str:
        """Return the source URI."""
        return self.uri


class ProviderEndpoint(BaseModel):
    """Live provider the interactions are replayed against."""

    model_config = ConfigDict(extra="forbid", frozen=True, arbitrary_types_allowed=True)

    base_url: str = ""
    client: httpx.Client | None = None


class ProviderStateRegistration(BaseModel):
    """Setup/teardown hooks registered for one provider-state label."""

    model_config = ConfigDict(extra="forbid", frozen=True, arbitrary_types_allowed=True)

    state: str
    setup: StateHook | None = None
    teardown: StateHook | None = None


class VerifierConfig(BaseModel):
    """Mutable builder state accumulated by chained verifier setters."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True, arbitrary_types_allowed=True)

    consumer: str = ""
    provider: str = ""
    source: PactSource | None = None
    endpoint: ProviderEndpoint = Field(default_factory=ProviderEndpoint)
    registrations: list[ProviderStateRegistration] = Field(default_factory=list)
    states_setup_url: str | None = None
    description_filter: str = ""
    state_filter: str = ""


class VerificationPlan(BaseModel):
    """Validated, immutable snapshot of a verifier configuration for one verify call."""

    model_config = ConfigDict(extra="forbid", frozen=True, arbitrary_types_allowed=True)

    consumer: str
    provider: str
    source: PactSource
    endpoint: ProviderEndpoint
    registrations: tuple[ProviderStateRegistration, ...] = ()
    states_setup_url: str | None = None
    description_filter: str = ""
    state_filter: str = ""
