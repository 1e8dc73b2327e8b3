"""Matching directive models.

A response expectation is a directive tree: nested ``dict``/``list`` containers whose
leaves are directives, plus ``EachLike`` nodes whose template is itself a tree.
"""

from __future__ import annotations

import re
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pactverify.typing.enums import DirectiveKind


class Equality(BaseModel):
    """Actual value must deep-equal the literal value."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal[DirectiveKind.EQUALITY] = DirectiveKind.EQUALITY
    value: Any = None


class TypeOnly(BaseModel):
    """Actual value must have the JSON type of the example."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal[DirectiveKind.TYPE] = DirectiveKind.TYPE
    example: Any = None


class Regex(BaseModel):
    """Actual value must be a string fully matching the pattern."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal[DirectiveKind.REGEX] = DirectiveKind.REGEX
    pattern: str
    example: str | None = None

    @field_validator("pattern")
    @classmethod
    def _compilable_pattern(cls, value: str) -> str:
        """Reject patterns the regex engine cannot compile.

        Args:
            value (str): Raw pattern.

        Raises:
            ValueError: If the pattern is not a valid regular expression.

        Returns:
            str: The pattern, unchanged.
        """
        try:
            re.compile(value)
        except re.error as exc:
            raise ValueError(f"Invalid regular expression {value!r}: {exc}") from exc  # noqa: TRY003
        return value


class EachLike(BaseModel):
    """Actual value must be an array whose every element matches the template."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal[DirectiveKind.EACH_LIKE] = DirectiveKind.EACH_LIKE
    template: Any = None
    min: int = Field(default=1, ge=0)
    max: int | None = Field(default=None, ge=0)


MatchingDirective = Annotated[Equality | TypeOnly | Regex | EachLike, Field(discriminator="kind")]

DIRECTIVE_TYPES = (Equality, TypeOnly, Regex, EachLike)
