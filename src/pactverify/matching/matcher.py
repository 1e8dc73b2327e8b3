"""Structural comparison of actual provider responses against expectations."""

from __future__ import annotations

import re
from functools import lru_cache
from typing import TYPE_CHECKING, Any

from pactverify.matching.directives import build_path, like_tree
from pactverify.typing.enums import MismatchKind
from pactverify.typing.models.directives import EachLike, Equality, Regex, TypeOnly
from pactverify.typing.models.outcome import Mismatch

if TYPE_CHECKING:
    import httpx

    from pactverify.typing.models.contract import ExpectedResponse

_COMMA_WHITESPACE = re.compile(r"\s*,\s*")


@lru_cache(maxsize=256)
def _compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile and cache a regex pattern."""
    return re.compile(pattern)


def is_numeric(value: Any) -> bool:  # noqa: ANN401
    """Check if a value is a JSON number (booleans excluded)."""
    return isinstance(value, int | float) and not isinstance(value, bool)


def json_type(value: Any) -> str:  # noqa: ANN401
    """Return the JSON type name of a decoded value.

    Args:
        value (Any): Decoded JSON value.

    Returns:
        str: One of ``null``, ``boolean``, ``number``, ``string``, ``array``, ``object``.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if is_numeric(value):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def values_equal(expected: Any, actual: Any) -> bool:  # noqa: ANN401
    """Deep-compare two JSON values; ``1 == 1.0`` but ``True != 1``.

    Args:
        expected (Any): Expected value.
        actual (Any): Actual value.

    Returns:
        bool: Whether both values are equal.
    """
    if is_numeric(expected) and is_numeric(actual):
        return expected == actual
    if json_type(expected) != json_type(actual):
        return False
    if isinstance(expected, dict):
        return expected.keys() == actual.keys() and all(
            values_equal(value, actual[key]) for key, value in expected.items()
        )
    if isinstance(expected, list):
        return len(expected) == len(actual) and all(
            values_equal(left, right) for left, right in zip(expected, actual, strict=True)
        )
    return expected == actual


def normalize_header_value(value: str) -> str:
    """Drop whitespace around commas so ``a, b`` and ``a,b`` compare equal."""
    return _COMMA_WHITESPACE.sub(",", value.strip())


class BodyMatcher:
    """Walk a directive tree against an actual value, collecting every mismatch."""

    def __init__(self) -> None:
        """Start with an empty mismatch list."""
        self.mismatches: list[Mismatch] = []

    def _add(self, path: str, kind: MismatchKind, expected: Any, actual: Any, message: str) -> None:  # noqa: ANN401, PLR0913, PLR0917
        self.mismatches.append(
            Mismatch(path=path, kind=kind, expected=expected, actual=actual, message=message),
        )

    def match(self, tree: Any, actual: Any, path: str) -> bool:  # noqa: ANN401
        """Compare one node of the tree.

        Args:
            tree (Any): Directive tree node.
            actual (Any): Actual value at the same position.
            path (str): JSON path of the node.

        Returns:
            bool: True if no mismatch was found below this node.
        """
        if isinstance(tree, Equality):
            return self._match_equality(tree, actual, path)
        if isinstance(tree, TypeOnly):
            return self._match_type(tree, actual, path)
        if isinstance(tree, Regex):
            return self._match_regex(tree, actual, path)
        if isinstance(tree, EachLike):
            return self._match_each_like(tree, actual, path)
        if isinstance(tree, dict):
            return self._match_object(tree, actual, path)
        if isinstance(tree, list):
            return self._match_array(tree, actual, path)
        return self._match_equality(Equality(value=tree), actual, path)

    def _match_equality(self, directive: Equality, actual: Any, path: str) -> bool:  # noqa: ANN401
        if values_equal(directive.value, actual):
            return True
        self._add(
            path,
            MismatchKind.VALUE,
            directive.value,
            actual,
            f"Expected {directive.value!r} but received {actual!r}",
        )
        return False

    def _match_type(self, directive: TypeOnly, actual: Any, path: str) -> bool:  # noqa: ANN401
        expected_type = json_type(directive.example)
        actual_type = json_type(actual)
        if expected_type != actual_type:
            self._add(
                path,
                MismatchKind.TYPE,
                directive.example,
                actual,
                f"Expected a value of type {expected_type} but received {actual_type} ({actual!r})",
            )
            return False
        if isinstance(directive.example, dict | list):
            return self.match(like_tree(directive.example, path), actual, path)
        return True

    def _match_regex(self, directive: Regex, actual: Any, path: str) -> bool:  # noqa: ANN401
        if isinstance(actual, str) and _compile_pattern(directive.pattern).fullmatch(actual):
            return True
        self._add(
            path,
            MismatchKind.REGEX,
            directive.pattern,
            actual,
            f"Expected {actual!r} to match /{directive.pattern}/",
        )
        return False

    def _match_each_like(self, directive: EachLike, actual: Any, path: str) -> bool:  # noqa: ANN401
        if not isinstance(actual, list):
            self._add(
                path,
                MismatchKind.TYPE,
                "array",
                actual,
                f"Expected an array but received {json_type(actual)} ({actual!r})",
            )
            return False

        all_match = True
        if len(actual) < directive.min:
            self._add(
                path,
                MismatchKind.ARRAY_TOO_SHORT,
                directive.min,
                len(actual),
                f"Expected at least {directive.min} element(s) but received {len(actual)}",
            )
            all_match = False
        if directive.max is not None and len(actual) > directive.max:
            self._add(
                path,
                MismatchKind.ARRAY_TOO_LONG,
                directive.max,
                len(actual),
                f"Expected at most {directive.max} element(s) but received {len(actual)}",
            )
            all_match = False

        if directive.template is not None:
            for index, item in enumerate(actual):
                if not self.match(directive.template, item, build_path(path, index)):
                    all_match = False
        return all_match

    def _match_object(self, tree: dict[str, Any], actual: Any, path: str) -> bool:  # noqa: ANN401
        if not isinstance(actual, dict):
            self._add(
                path,
                MismatchKind.TYPE,
                "object",
                actual,
                f"Expected an object but received {json_type(actual)} ({actual!r})",
            )
            return False

        all_match = True
        for key, expected in tree.items():
            child_path = build_path(path, key)
            if key not in actual:
                self._add(
                    child_path,
                    MismatchKind.MISSING_KEY,
                    key,
                    None,
                    f"Expected key '{key}' is missing",
                )
                all_match = False
                continue
            if not self.match(expected, actual[key], child_path):
                all_match = False
        return all_match

    def _match_array(self, tree: list[Any], actual: Any, path: str) -> bool:  # noqa: ANN401
        if not isinstance(actual, list):
            self._add(
                path,
                MismatchKind.TYPE,
                "array",
                actual,
                f"Expected an array but received {json_type(actual)} ({actual!r})",
            )
            return False

        all_match = True
        for index, expected in enumerate(tree):
            child_path = build_path(path, index)
            if index >= len(actual):
                self._add(
                    child_path,
                    MismatchKind.MISSING_ELEMENT,
                    None,
                    None,
                    f"Expected an element at index {index}",
                )
                all_match = False
                continue
            if not self.match(expected, actual[index], child_path):
                all_match = False

        if len(actual) > len(tree):
            self._add(
                path,
                MismatchKind.ARRAY_TOO_LONG,
                len(tree),
                len(actual),
                f"Expected {len(tree)} element(s) but received {len(actual)}",
            )
            all_match = False
        return all_match


def match_body(tree: Any, actual: Any, path: str = "$.body") -> list[Mismatch]:  # noqa: ANN401
    """Compare an actual decoded body against a directive tree.

    Args:
        tree (Any): Expected directive tree.
        actual (Any): Actual decoded body.
        path (str): JSON path of the body root.

    Returns:
        list[Mismatch]: Every discrepancy, empty when the body matches.
    """
    matcher = BodyMatcher()
    matcher.match(tree, actual, path)
    return matcher.mismatches


class ResponseMatcher:
    """Compare status, headers and body of an actual response."""

    def match(self, expected: ExpectedResponse, response: httpx.Response) -> list[Mismatch]:
        """Collect all mismatches between the expectation and the actual response.

        Args:
            expected (ExpectedResponse): Expected response.
            response (httpx.Response): Actual provider response.

        Returns:
            list[Mismatch]: Status, header and body mismatches in that order.
        """
        mismatches: list[Mismatch] = []
        if expected.status != response.status_code:
            mismatches.append(
                Mismatch(
                    path="$.status",
                    kind=MismatchKind.STATUS,
                    expected=expected.status,
                    actual=response.status_code,
                    message=f"Expected status {expected.status} but received {response.status_code}",
                ),
            )
        mismatches.extend(self._match_headers(expected, response))
        mismatches.extend(self._match_body(expected, response))
        return mismatches

    @staticmethod
    def _match_headers(expected: ExpectedResponse, response: httpx.Response) -> list[Mismatch]:
        mismatches: list[Mismatch] = []
        for name, directive in expected.headers.items():
            path = f"$.headers.{name}"
            actual = response.headers.get(name)
            if actual is None:
                mismatches.append(
                    Mismatch(
                        path=path,
                        kind=MismatchKind.HEADER_MISSING,
                        expected=name,
                        message=f"Expected header '{name}' is missing",
                    ),
                )
                continue

            if isinstance(directive, Regex):
                if _compile_pattern(directive.pattern).fullmatch(actual):
                    continue
                mismatches.append(
                    Mismatch(
                        path=path,
                        kind=MismatchKind.HEADER_VALUE,
                        expected=directive.pattern,
                        actual=actual,
                        message=f"Expected header '{name}' to match /{directive.pattern}/ but received '{actual}'",
                    ),
                )
            elif isinstance(directive, Equality):
                expected_value = "" if directive.value is None else str(directive.value)
                if normalize_header_value(expected_value) == normalize_header_value(actual):
                    continue
                mismatches.append(
                    Mismatch(
                        path=path,
                        kind=MismatchKind.HEADER_VALUE,
                        expected=expected_value,
                        actual=actual,
                        message=f"Expected header '{name}' to equal '{expected_value}' but received '{actual}'",
                    ),
                )
        return mismatches

    @staticmethod
    def _match_body(expected: ExpectedResponse, response: httpx.Response) -> list[Mismatch]:
        if expected.body is None:
            return []
        if not response.content:
            return [
                Mismatch(
                    path="$.body",
                    kind=MismatchKind.BODY_MISSING,
                    message="Expected a response body but received none",
                ),
            ]
        try:
            actual = response.json()
        except ValueError:
            actual = response.text
        return match_body(expected.body, actual)
