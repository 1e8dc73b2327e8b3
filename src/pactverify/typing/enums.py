"""Project enums."""

from __future__ import annotations

from enum import StrEnum


class _EnumMixin(StrEnum):
    """Shared conversion helpers for user-facing enums."""

    @classmethod
    def from_str(cls, value: str) -> _EnumMixin:
        """Parse enum from string.

        Args:
            value: Raw string value.

        Raises:
            ValueError: If the value is not supported.

        Returns:
            _EnumMixin: Parsed enum value.
        """
        try:
            return cls(value)
        except ValueError as exc:
            supported = ", ".join(member.value for member in cls)
            message = f"Unsupported {cls.__name__} value '{value}'. Expected one of: {supported}"
            raise ValueError(message) from exc

    def to_str(self) -> str:
        """Return string representation.

        Returns:
            str: Enum string value.
        """
        return self.value


class DirectiveKind(_EnumMixin):
    """Matching directive variants."""

    EQUALITY = "equality"
    TYPE = "type"
    REGEX = "regex"
    EACH_LIKE = "each_like"


class MismatchKind(_EnumMixin):
    """Category of a response discrepancy."""

    STATUS = "status"
    HEADER_MISSING = "header_missing"
    HEADER_VALUE = "header_value"
    BODY_MISSING = "body_missing"
    VALUE = "value"
    TYPE = "type"
    REGEX = "regex"
    MISSING_KEY = "missing_key"
    MISSING_ELEMENT = "missing_element"
    ARRAY_TOO_SHORT = "array_too_short"
    ARRAY_TOO_LONG = "array_too_long"


class InteractionStatus(_EnumMixin):
    """Result of one interaction within a verify call."""

    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


class VerifierState(_EnumMixin):
    """Lifecycle of a verifier instance."""

    UNCONFIGURED = "unconfigured"
    CONFIGURING = "configuring"
    VALIDATED = "validated"
    VERIFYING = "verifying"
    COMPLETED = "completed"


class StateAction(_EnumMixin):
    """Provider-state hook phase, as sent to a state change URL."""

    SETUP = "setup"
    TEARDOWN = "teardown"
