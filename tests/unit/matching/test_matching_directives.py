from __future__ import annotations

import pytest

from pactverify.matching.directives import (
    MatchingRules,
    build_path,
    decode_tree,
    example_of,
    tokenize_path,
)
from pactverify.typing.models.directives import EachLike, Equality, Regex, TypeOnly


def test_build_path_quotes_non_identifier_keys() -> None:
    assert build_path("$.body", "name") == "$.body.name"
    assert build_path("$.body", 2) == "$.body[2]"
    assert build_path("$.body", "first-name") == "$.body['first-name']"


def test_tokenize_path_lowercases_header_names() -> None:
    assert tokenize_path("$.body.items[*].id") == ("body", "items", "*", "id")
    assert tokenize_path("$.headers.Content-Type") == ("headers", "content-type")
    assert tokenize_path("$.body['first-name']") == ("body", "first-name")


def test_plain_values_decode_to_equality() -> None:
    tree = decode_tree({"name": "John", "tags": ["a"]}, MatchingRules(), "$.body")

    assert tree == {"name": Equality(value="John"), "tags": [Equality(value="a")]}


def test_something_like_cascades_to_descendants() -> None:
    marker = {"json_class": "Pact::SomethingLike", "contents": {"id": 1, "names": ["x"]}}

    tree = decode_tree(marker, MatchingRules(), "$.body")

    assert tree == {"id": TypeOnly(example=1), "names": [TypeOnly(example="x")]}


def test_array_like_decodes_to_each_like_with_min() -> None:
    marker = {"json_class": "Pact::ArrayLike", "contents": {"id": 1}, "min": 2}

    tree = decode_tree(marker, MatchingRules(), "$.body")

    assert tree == EachLike(template={"id": TypeOnly(example=1)}, min=2)


def test_term_decodes_to_regex() -> None:
    marker = {
        "json_class": "Pact::Term",
        "data": {"generate": "2024-01-01", "matcher": {"json_class": "Regexp", "s": r"\d{4}-\d{2}-\d{2}", "o": 0}},
    }

    assert decode_tree(marker, MatchingRules(), "$.body.date") == Regex(pattern=r"\d{4}-\d{2}-\d{2}", example="2024-01-01")


def test_unknown_pact_marker_is_rejected() -> None:
    with pytest.raises(ValueError, match="Unsupported matcher 'Pact::Unknown'"):
        decode_tree({"json_class": "Pact::Unknown"}, MatchingRules(), "$.body")


def test_v2_rules_use_most_specific_path() -> None:
    rules = MatchingRules.from_wire(
        {
            "$.body.items[*].id": {"match": "type"},
            "$.body.items[0].id": {"match": "regex", "regex": r"\d+"},
        },
    )

    tree = decode_tree({"items": [{"id": "1"}, {"id": "2"}]}, rules, "$.body")

    assert tree == {"items": [{"id": Regex(pattern=r"\d+", example="1")}, {"id": TypeOnly(example="2")}]}


def test_v2_rules_with_min_decode_to_each_like() -> None:
    rules = MatchingRules.from_wire({"$.body.users": {"match": "type", "min": 1}})

    tree = decode_tree({"users": [{"id": 1}]}, rules, "$.body")

    assert tree == {"users": EachLike(template={"id": TypeOnly(example=1)}, min=1)}


def test_v3_rules_decode_like_v2_rules() -> None:
    v2 = MatchingRules.from_wire({"$.body.id": {"match": "type"}, "$.headers.Content-Type": {"match": "regex", "regex": "json"}})
    v3 = MatchingRules.from_wire(
        {
            "body": {"$.id": {"matchers": [{"match": "integer"}]}},
            "header": {"Content-Type": {"matchers": [{"match": "regex", "regex": "json"}]}},
        },
    )

    body = {"id": 5, "name": "x"}
    assert decode_tree(body, v2, "$.body") == decode_tree(body, v3, "$.body")
    assert v3.lookup("$.headers.content-type") == {"match": "regex", "regex": "json"}


def test_markers_and_rules_decode_to_the_same_tree() -> None:
    marker = {"json_class": "Pact::SomethingLike", "contents": {"id": 1}}
    rules = MatchingRules.from_wire({"$.body": {"match": "type"}})

    assert decode_tree(marker, MatchingRules(), "$.body") == decode_tree({"id": 1}, rules, "$.body")


def test_equality_rule_stops_type_cascade() -> None:
    rules = MatchingRules.from_wire({"$.body": {"match": "type"}, "$.body.kind": {"match": "equality"}})

    tree = decode_tree({"kind": "user", "id": 1}, rules, "$.body")

    assert tree == {"kind": Equality(value="user"), "id": TypeOnly(example=1)}


def test_unsupported_rule_is_rejected() -> None:
    rules = MatchingRules.from_wire({"$.body.id": {"match": "timestamp"}})

    with pytest.raises(ValueError, match="Unsupported matcher 'timestamp'"):
        decode_tree({"id": "x"}, rules, "$.body")


def test_matching_rules_payload_must_be_an_object() -> None:
    with pytest.raises(ValueError, match="JSON object"):
        MatchingRules.from_wire(["$.body"])


def test_example_of_returns_plain_values() -> None:
    tree = {
        "id": TypeOnly(example=1),
        "date": Regex(pattern=".*", example="2024"),
        "items": EachLike(template=Equality(value="a"), min=2),
    }

    assert example_of(tree) == {"id": 1, "date": "2024", "items": ["a", "a"]}
