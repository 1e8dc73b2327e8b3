"""Contract document models."""

from __future__ import annotations

from typing import Any
from urllib.parse import parse_qsl

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from pactverify.matching.directives import MatchingRules, decode_tree, example_of
from pactverify.typing.models.directives import MatchingDirective

DEFAULT_SPECIFICATION_VERSION = "2.0.0"


class ExpectedRequest(BaseModel):
    """Request the consumer sends, reduced to plain example values."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    method: str
    path: str = "/"
    query: dict[str, list[str]] = Field(default_factory=dict)
    headers: dict[str, str] = Field(default_factory=dict)
    body: Any = None

    @model_validator(mode="before")
    @classmethod
    def _reify_examples(cls, data: Any) -> Any:  # noqa: ANN401
        """Replace matching directives by their example values.

        Args:
            data (Any): Raw request payload.

        Raises:
            ValueError: If the query has an unsupported shape.

        Returns:
            Any: Payload with plain values.
        """
        if not isinstance(data, dict):
            return data
        rules = MatchingRules.from_wire(data.get("matchingRules"))
        payload = {key: value for key, value in data.items() if key != "matchingRules"}
        if "path" in payload:
            payload["path"] = example_of(decode_tree(payload["path"], rules, "$.path"))
        if "headers" in payload and isinstance(payload["headers"], dict):
            payload["headers"] = {
                name: _header_text(example_of(decode_tree(value, rules, f"$.headers.{name}")))
                for name, value in payload["headers"].items()
            }
        if "body" in payload:
            payload["body"] = example_of(decode_tree(payload["body"], rules, "$.body"))
        payload["query"] = _normalize_query(payload.get("query"))
        return payload

    @field_validator("method")
    @classmethod
    def _upper_method(cls, value: str) -> str:
        """Normalize HTTP method casing.

        Args:
            value (str): Raw method.

        Returns:
            str: Upper-cased method.
        """
        return value.upper()


class ExpectedResponse(BaseModel):
    """Response the consumer expects, with decoded matching directives."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    status: int
    headers: dict[str, MatchingDirective] = Field(default_factory=dict)
    body: Any = None

    @model_validator(mode="before")
    @classmethod
    def _decode_directives(cls, data: Any) -> Any:  # noqa: ANN401
        """Decode markers and matching rules of headers and body.

        Args:
            data (Any): Raw response payload.

        Returns:
            Any: Payload with directive trees.
        """
        if not isinstance(data, dict):
            return data
        rules = MatchingRules.from_wire(data.get("matchingRules"))
        payload = {key: value for key, value in data.items() if key != "matchingRules"}
        if isinstance(payload.get("headers"), dict):
            payload["headers"] = {
                name: decode_tree(value, rules, f"$.headers.{name}") for name, value in payload["headers"].items()
            }
        if payload.get("body") is not None:
            payload["body"] = decode_tree(payload["body"], rules, "$.body")
        return payload


class Interaction(BaseModel):
    """One request/response expectation pair."""

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    description: str
    provider_states: tuple[str, ...] = Field(default=())
    request: ExpectedRequest
    response: ExpectedResponse

    @model_validator(mode="before")
    @classmethod
    def _collect_provider_states(cls, data: Any) -> Any:  # noqa: ANN401
        """Merge v2 ``providerState`` and v3 ``providerStates`` into one tuple.

        Args:
            data (Any): Raw interaction payload.

        Raises:
            ValueError: If ``providerStates`` entries have no name.

        Returns:
            Any: Payload with ``provider_states``.
        """
        if not isinstance(data, dict) or "provider_states" in data:
            return data
        payload = dict(data)
        states: list[str] = []
        single = payload.pop("providerState", None) or payload.pop("provider_state", None)
        if single:
            states.append(single)
        for entry in payload.pop("providerStates", None) or []:
            name = entry.get("name") if isinstance(entry, dict) else entry
            if not isinstance(name, str):
                raise ValueError("providerStates entries must have a name")  # noqa: TRY003
            states.append(name)
        payload["provider_states"] = tuple(states)
        return payload

    @property
    def provider_state(self) -> str | None:
        """Return the first provider-state label, if any."""
        return self.provider_states[0] if self.provider_states else None


class ContractDocument(BaseModel):
    """Pact between one consumer and one provider."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    consumer: str
    provider: str
    interactions: tuple[Interaction, ...]
    specification_version: str = DEFAULT_SPECIFICATION_VERSION

    @model_validator(mode="before")
    @classmethod
    def _unwrap_wire_format(cls, data: Any) -> Any:  # noqa: ANN401
        """Flatten participant objects and pact metadata.

        Args:
            data (Any): Raw pact payload.

        Raises:
            ValueError: If a participant has no name.

        Returns:
            Any: Payload matching the model fields.
        """
        if not isinstance(data, dict):
            return data
        payload = dict(data)
        for role in ("consumer", "provider"):
            participant = payload.get(role)
            if isinstance(participant, dict):
                if not isinstance(participant.get("name"), str):
                    raise ValueError(f"{role}.name is required")  # noqa: TRY003
                payload[role] = participant["name"]
        metadata = payload.pop("metadata", None)
        if "specification_version" not in payload and isinstance(metadata, dict):
            version = _specification_version(metadata)
            if version:
                payload["specification_version"] = version
        return payload


def _specification_version(metadata: dict[str, Any]) -> str | None:
    """Read the pact specification version from document metadata.

    Args:
        metadata (dict[str, Any]): ``metadata`` object.

    Returns:
        str | None: Version string when declared.
    """
    for key in ("pactSpecification", "pact-specification"):
        entry = metadata.get(key)
        if isinstance(entry, dict) and entry.get("version"):
            return str(entry["version"])
    version = metadata.get("pactSpecificationVersion")
    return str(version) if version else None


def _normalize_query(raw: object) -> dict[str, list[str]]:
    """Normalize a v2 query string or v3 query mapping.

    Args:
        raw (object): Raw ``query`` value.

    Raises:
        ValueError: If the query has an unsupported shape.

    Returns:
        dict[str, list[str]]: Parameter values in order.
    """
    if raw is None or raw == "":
        return {}
    query: dict[str, list[str]] = {}
    if isinstance(raw, str):
        for name, value in parse_qsl(raw, keep_blank_values=True):
            query.setdefault(name, []).append(value)
        return query
    if isinstance(raw, dict):
        for name, value in raw.items():
            plain = example_of(decode_tree(value, MatchingRules(), f"$.query.{name}"))
            values = plain if isinstance(plain, list) else [plain]
            query[name] = [str(item) for item in values]
        return query
    raise ValueError("query must be a string or an object")  # noqa: TRY003


def _header_text(value: Any) -> str:  # noqa: ANN401
    """Render an example header value as text.

    Args:
        value (Any): Example value.

    Returns:
        str: Header text.
    """
    if isinstance(value, list):
        return ", ".join(str(item) for item in value)
    return "" if value is None else str(value)
