"""Decode pact matching conventions into directive trees.

Three conventions are understood and all decode to the same tree:

* embedded Ruby mock-service markers (``Pact::SomethingLike``, ``Pact::ArrayLike``,
  ``Pact::Term``) used by pact specification 1.x/2.0 writers;
* v2 ``matchingRules`` keyed by JSON path (``$.body.items[*].id``);
* v3 ``matchingRules`` grouped by category (``{"body": {"$.id": {"matchers": [...]}}}``).
"""

from __future__ import annotations

import re
from typing import Any

from pactverify.typing.models.directives import DIRECTIVE_TYPES, EachLike, Equality, Regex, TypeOnly

_JSON_CLASS = "json_class"
_SOMETHING_LIKE = "Pact::SomethingLike"
_ARRAY_LIKE = "Pact::ArrayLike"
_TERM = "Pact::Term"
_IDENTIFIER = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")
_PATH_TOKEN = re.compile(r"\.([^.\[\]]+)|\[(\d+|\*)\]|\['([^']*)'\]|\[\"([^\"]*)\"\]")
_TYPE_MATCHERS = frozenset({"type", "integer", "decimal", "number"})


def build_path(parent_path: str, key: str | int) -> str:
    """Build a JSON path from parent path and key."""
    if isinstance(key, int):
        return f"{parent_path}[{key}]"
    if _IDENTIFIER.match(key):
        return f"{parent_path}.{key}"
    return f"{parent_path}['{key}']"


def tokenize_path(path: str) -> tuple[str, ...]:
    """Split a JSON path into segments, dropping the leading ``$``.

    Header names are case-insensitive, so segments under ``$.headers`` are lowercased.

    Args:
        path (str): JSON path such as ``$.body.items[*].id`` or ``$.headers.Content-Type``.

    Returns:
        tuple[str, ...]: Path segments; array indexes and wildcards stay as strings.
    """
    body = path[1:] if path.startswith("$") else f".{path}"
    tokens: list[str] = []
    for match in _PATH_TOKEN.finditer(body):
        token = next(group for group in match.groups() if group is not None)
        if tokens and tokens[0] == "headers" and len(tokens) == 1:
            token = token.lower()
        tokens.append(token)
    return tuple(tokens)


class MatchingRules:
    """JSON-path keyed matching rules with wildcard lookup."""

    def __init__(self, rules: dict[str, dict[str, Any]] | None = None) -> None:
        """Index rules by tokenized path.

        Args:
            rules (dict[str, dict[str, Any]] | None): Rules keyed by v2-style JSON path.
        """
        self._rules: list[tuple[tuple[str, ...], dict[str, Any]]] = [
            (tokenize_path(path), rule) for path, rule in (rules or {}).items()
        ]

    def __bool__(self) -> bool:
        """Return whether any rule is defined."""
        return bool(self._rules)

    @classmethod
    def from_wire(cls, raw: object) -> MatchingRules:
        """Build rules from a v2 or v3 ``matchingRules`` payload.

        Args:
            raw (object): The ``matchingRules`` value of a request or response.

        Raises:
            ValueError: If the payload is not a JSON object.

        Returns:
            MatchingRules: Normalized rules.
        """
        if raw is None:
            return cls()
        if not isinstance(raw, dict):
            raise ValueError("matchingRules must be a JSON object")  # noqa: TRY003
        if all(key.startswith("$") for key in raw):
            return cls({path: _check_rule(path, rule) for path, rule in raw.items()})
        return cls(_flatten_v3_rules(raw))

    def lookup(self, path: str) -> dict[str, Any] | None:
        """Return the most specific rule applying to a concrete path.

        Args:
            path (str): Concrete JSON path, e.g. ``$.body.items[0].id``.

        Returns:
            dict[str, Any] | None: Matching rule, or None.
        """
        tokens = tokenize_path(path)
        best: dict[str, Any] | None = None
        best_weight = -1
        for pattern, rule in self._rules:
            if len(pattern) != len(tokens):
                continue
            if not all(expected in ("*", actual) for expected, actual in zip(pattern, tokens, strict=True)):
                continue
            weight = sum(1 for segment in pattern if segment != "*")
            if weight > best_weight:
                best, best_weight = rule, weight
        return best


def _check_rule(path: str, rule: object) -> dict[str, Any]:
    """Validate one v2 rule payload.

    Args:
        path (str): Rule path, used in error messages.
        rule (object): Rule payload.

    Raises:
        ValueError: If the rule is not an object.

    Returns:
        dict[str, Any]: The rule.
    """
    if not isinstance(rule, dict):
        raise ValueError(f"Matching rule for '{path}' must be a JSON object")  # noqa: TRY003
    return rule


def _flatten_v3_rules(raw: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """Convert v3 category-grouped rules to v2-style path keys.

    Only the first matcher of each path is kept; ``path``/``query``/``status``
    categories carry nothing the response matcher needs.

    Args:
        raw (dict[str, Any]): v3 ``matchingRules`` payload.

    Returns:
        dict[str, dict[str, Any]]: Rules keyed by ``$.body...`` / ``$.headers...`` paths.
    """
    flattened: dict[str, dict[str, Any]] = {}
    for category, entries in raw.items():
        if category not in {"body", "header", "headers"} or not isinstance(entries, dict):
            continue
        for key, entry in entries.items():
            matchers = entry.get("matchers") if isinstance(entry, dict) else None
            if not matchers:
                continue
            if not isinstance(matchers, list):
                raise ValueError(f"Matchers for '{key}' must be a JSON array")  # noqa: TRY003
            rule = _check_rule(key, matchers[0])
            if category == "body":
                flattened["$.body" + (key[1:] if key.startswith("$") else f".{key}")] = rule
            else:
                flattened[build_path("$.headers", key)] = rule
    return flattened


def decode_tree(value: Any, rules: MatchingRules, path: str, *, cascade: bool = False) -> Any:  # noqa: ANN401
    """Decode an expected value into a directive tree.

    Args:
        value (Any): Raw expected value from the pact document.
        rules (MatchingRules): Path-keyed rules of the enclosing request/response.
        path (str): JSON path of ``value``.
        cascade (bool): Whether an enclosing type directive applies.

    Raises:
        ValueError: If a marker or rule uses an unsupported matcher.

    Returns:
        Any: Nested containers with directive leaves, or an ``EachLike`` node.
    """
    if isinstance(value, DIRECTIVE_TYPES):
        return value
    if isinstance(value, dict) and _JSON_CLASS in value:
        return _decode_marker(value, rules, path)

    rule = rules.lookup(path) if rules else None
    if rule is not None:
        match = rule.get("match", "regex" if "regex" in rule else "type")
        has_bounds = "min" in rule or "max" in rule
        if isinstance(value, list) and has_bounds and match in _TYPE_MATCHERS:
            template = decode_tree(value[0], rules, build_path(path, 0), cascade=True) if value else None
            return EachLike(template=template, min=rule.get("min", 0), max=rule.get("max"))
        if match == "regex":
            if not isinstance(rule.get("regex"), str):
                raise ValueError(f"Regex rule at {path} has no 'regex' pattern")  # noqa: TRY003
            return Regex(pattern=rule["regex"], example=value if isinstance(value, str) else None)
        if match in _TYPE_MATCHERS:
            cascade = True
        elif match == "equality":
            cascade = False
        else:
            raise ValueError(f"Unsupported matcher '{match}' at {path}")  # noqa: TRY003

    if isinstance(value, dict):
        return {key: decode_tree(item, rules, build_path(path, key), cascade=cascade) for key, item in value.items()}
    if isinstance(value, list):
        return [decode_tree(item, rules, build_path(path, index), cascade=cascade) for index, item in enumerate(value)]
    return TypeOnly(example=value) if cascade else Equality(value=value)


def _decode_marker(marker: dict[str, Any], rules: MatchingRules, path: str) -> Any:  # noqa: ANN401
    """Decode one embedded ``json_class`` marker.

    Args:
        marker (dict[str, Any]): Marker object.
        rules (MatchingRules): Rules, passed down to nested values.
        path (str): JSON path of the marker.

    Raises:
        ValueError: If the marker class is unknown or malformed.

    Returns:
        Any: Decoded directive tree.
    """
    json_class = marker[_JSON_CLASS]
    if json_class == _SOMETHING_LIKE:
        return decode_tree(marker.get("contents"), rules, path, cascade=True)
    if json_class == _ARRAY_LIKE:
        template = decode_tree(marker.get("contents"), rules, build_path(path, 0), cascade=True)
        return EachLike(template=template, min=marker.get("min", 1), max=marker.get("max"))
    if json_class == _TERM:
        data = marker.get("data")
        matcher = data.get("matcher") if isinstance(data, dict) else None
        pattern = matcher.get("s") if isinstance(matcher, dict) else None
        if not isinstance(pattern, str):
            raise ValueError(f"Pact::Term at {path} has no regular expression")  # noqa: TRY003
        return Regex(pattern=pattern, example=data.get("generate"))
    if isinstance(json_class, str) and json_class.startswith("Pact::"):
        raise ValueError(f"Unsupported matcher '{json_class}' at {path}")  # noqa: TRY003
    return {key: decode_tree(item, rules, build_path(path, key)) for key, item in marker.items()}


def example_of(tree: Any) -> Any:  # noqa: ANN401
    """Return the plain example value described by a directive tree.

    Args:
        tree (Any): Directive tree.

    Returns:
        Any: JSON-compatible example value.
    """
    if isinstance(tree, Equality):
        return tree.value
    if isinstance(tree, TypeOnly):
        return tree.example
    if isinstance(tree, Regex):
        return tree.example
    if isinstance(tree, EachLike):
        if tree.template is None:
            return []
        return [example_of(tree.template) for _ in range(max(tree.min, 1))]
    if isinstance(tree, dict):
        return {key: example_of(item) for key, item in tree.items()}
    if isinstance(tree, list):
        return [example_of(item) for item in tree]
    return tree


def like_tree(example: Any, path: str) -> Any:  # noqa: ANN401
    """Expand a ``TypeOnly`` container example into a type-matching tree.

    Args:
        example (Any): Example value of a type directive.
        path (str): JSON path of the example.

    Returns:
        Any: Directive tree matching by type at every leaf.
    """
    return decode_tree(example, MatchingRules(), path, cascade=True)
