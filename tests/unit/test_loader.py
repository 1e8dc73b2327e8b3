from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import httpx
import pytest

from pactverify.exceptions import InvalidSourceError, ParseError
from pactverify.loader import load_contract, parse_contract
from pactverify.settings import Settings
from pactverify.typing.models import PactSource

if TYPE_CHECKING:
    from pathlib import Path


def test_load_contract_from_plain_path(pact_path: Path) -> None:
    document = load_contract(str(pact_path))

    assert document.consumer == "chrome browser"
    assert document.provider == "go api"
    assert [interaction.description for interaction in document.interactions] == [
        "get request for user with id {23}",
        "get request for user with id {200}",
    ]


def test_load_contract_from_file_uri(pact_path: Path) -> None:
    document = load_contract(pact_path.as_uri())

    assert len(document.interactions) == 2


def test_load_contract_rejects_missing_file() -> None:
    with pytest.raises(InvalidSourceError, match="badpath///"):
        load_contract("badpath///")


def test_load_contract_rejects_directory(tmp_path: Path) -> None:
    with pytest.raises(InvalidSourceError, match="directory"):
        load_contract(str(tmp_path))


def test_load_contract_rejects_unsupported_scheme() -> None:
    with pytest.raises(InvalidSourceError, match="ftp://host/pact.json"):
        load_contract("ftp://host/pact.json")


def test_load_contract_fetches_http_source_with_headers_and_auth(pact_payload: dict[str, Any]) -> None:
    seen: list[httpx.Request] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=pact_payload)

    with httpx.Client(transport=httpx.MockTransport(_handler)) as client:
        source = PactSource(
            uri="https://broker.test/pacts/latest",
            headers={"X-Tenant": "acme"},
            auth="s3cret",
            client=client,
        )
        document = load_contract(source, Settings())

    assert document.provider == "go api"
    assert seen[0].headers["X-Tenant"] == "acme"
    assert seen[0].headers["Authorization"] == "Bearer s3cret"


def test_load_contract_uses_broker_credentials_from_settings(pact_payload: dict[str, Any]) -> None:
    seen: list[httpx.Request] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=pact_payload)

    with httpx.Client(transport=httpx.MockTransport(_handler)) as client:
        settings = Settings(PACT_BROKER_USERNAME="user", PACT_BROKER_PASSWORD="pass")
        load_contract(PactSource(uri="https://broker.test/pact", client=client), settings)

    assert seen[0].headers["Authorization"].startswith("Basic ")


def test_load_contract_wraps_http_error_status() -> None:
    with httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(500))) as client:
        source = PactSource(uri="http://broker.test/pact", client=client)
        with pytest.raises(InvalidSourceError, match="HTTP 500"):
            load_contract(source, Settings())


def test_load_contract_wraps_transport_failure() -> None:
    def _handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with httpx.Client(transport=httpx.MockTransport(_handler)) as client:
        source = PactSource(uri="http://broker.test/pact", client=client)
        with pytest.raises(InvalidSourceError, match="http://broker.test/pact"):
            load_contract(source, Settings())


def test_parse_contract_rejects_invalid_json() -> None:
    with pytest.raises(ParseError, match="invalid JSON"):
        parse_contract(b"{not json", source="pact.json")


def test_parse_contract_rejects_non_object_root() -> None:
    with pytest.raises(ParseError, match="JSON object"):
        parse_contract(b"[]", source="pact.json")


def test_parse_contract_rejects_missing_interactions() -> None:
    payload = {"consumer": {"name": "a"}, "provider": {"name": "b"}}

    with pytest.raises(ParseError, match="interactions"):
        parse_contract(json.dumps(payload), source="pact.json")


def test_parse_contract_rejects_unsupported_matcher() -> None:
    payload = {
        "consumer": {"name": "a"},
        "provider": {"name": "b"},
        "interactions": [
            {
                "description": "d",
                "request": {"method": "GET", "path": "/"},
                "response": {"status": 200, "body": {"json_class": "Pact::Mystery", "contents": 1}},
            },
        ],
    }

    with pytest.raises(ParseError, match="Pact::Mystery"):
        parse_contract(json.dumps(payload), source="pact.json")


def _pact_with_response(response: dict[str, Any]) -> str:
    return json.dumps(
        {
            "consumer": {"name": "a"},
            "provider": {"name": "b"},
            "interactions": [
                {"description": "d", "request": {"method": "GET", "path": "/"}, "response": response},
            ],
        },
    )


def test_parse_contract_rejects_term_with_invalid_pattern() -> None:
    term = {
        "json_class": "Pact::Term",
        "data": {"generate": "x", "matcher": {"json_class": "Regexp", "s": "(", "o": 0}},
    }

    with pytest.raises(ParseError, match="Invalid regular expression"):
        parse_contract(_pact_with_response({"status": 200, "body": {"name": term}}), source="pact.json")


def test_parse_contract_rejects_regex_rule_without_pattern() -> None:
    response = {"status": 200, "body": {"a": "x"}, "matchingRules": {"$.body.a": {"match": "regex"}}}

    with pytest.raises(ParseError, match="no 'regex' pattern"):
        parse_contract(_pact_with_response(response), source="pact.json")


def test_parse_contract_rejects_v3_matchers_that_are_not_a_list() -> None:
    response = {
        "status": 200,
        "body": {"a": "x"},
        "matchingRules": {"body": {"$.a": {"matchers": {"match": "type"}}}},
    }

    with pytest.raises(ParseError, match="must be a JSON array"):
        parse_contract(_pact_with_response(response), source="pact.json")
