"""Pytest marker auto-assignment by folder and shared pact fixtures."""

from __future__ import annotations

import json
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import httpx
import pytest

from pactverify import logger

FIXTURES_DIR = Path(__file__).parent / "fixtures"

VALID_USERS = {
    23: {"id": 23, "firstName": "John", "lastName": "Doe"},
    24: {"id": 24, "firstName": "Jane", "lastName": "Dame"},
}
MISMATCH_USERS = {
    24: {"id": 24, "firstName": "John", "lastName": "Doe"},
    23: {"id": 23, "firstName": "Jane", "lastName": "Dame"},
}


def _mark_tests_by_directory(
    config: pytest.Config,
    items: list[pytest.Item],
    marker: str,
) -> None:
    """Mark collected tests located under tests/<marker>/."""
    target_dir = Path(config.rootpath) / "tests" / marker
    target_dir = target_dir.resolve()

    for item in items:
        try:
            path = Path(str(item.fspath)).resolve()
        except Exception:
            logger.warning(
                f"Could not resolve path for test item {item.name!s}; skipping {marker!s} marker assignment",
            )
            continue

        if path == target_dir or target_dir in path.parents:
            item.add_marker(getattr(pytest.mark, marker))


def pytest_collection_modifyitems(
    config: pytest.Config,
    items: list[pytest.Item],
) -> None:
    """Apply directory-based markers to test items."""
    _mark_tests_by_directory(config, items, "unit")
    _mark_tests_by_directory(config, items, "integration")
    _mark_tests_by_directory(config, items, "end2end")


def user_provider(users: dict[int, dict[str, Any]]) -> Callable[[httpx.Request], httpx.Response]:
    """Build a provider handler serving `/user?id=N` and `/getpact`."""
    pact_bytes = (FIXTURES_DIR / "chrome_browser-go_api.json").read_bytes()

    def _handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/getpact":
            return httpx.Response(200, content=pact_bytes, headers={"Content-Type": "application/json"})
        if request.url.path == "/user":
            try:
                user_id = int(request.url.params.get("id", ""))
            except ValueError:
                user_id = 0
            if user_id not in users:
                return httpx.Response(404, text="\n")
            return httpx.Response(200, json=users[user_id])
        return httpx.Response(404)

    return _handler


@pytest.fixture
def pact_path() -> Path:
    return FIXTURES_DIR / "chrome_browser-go_api.json"


@pytest.fixture
def pact_payload(pact_path: Path) -> dict[str, Any]:
    return json.loads(pact_path.read_text(encoding="utf-8"))


@pytest.fixture
def valid_provider() -> Iterator[httpx.Client]:
    with httpx.Client(
        transport=httpx.MockTransport(user_provider(VALID_USERS)),
        base_url="http://provider.test",
    ) as client:
        yield client


@pytest.fixture
def mismatch_provider() -> Iterator[httpx.Client]:
    with httpx.Client(
        transport=httpx.MockTransport(user_provider(MISMATCH_USERS)),
        base_url="http://provider.test",
    ) as client:
        yield client
