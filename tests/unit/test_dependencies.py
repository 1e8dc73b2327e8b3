from __future__ import annotations

import pytest

from pactverify.dependencies import ensure_cli_dependencies_for_verify
from pactverify.exceptions import DependencyError


def test_ensure_cli_dependencies_for_verify_succeeds(monkeypatch) -> None:
    monkeypatch.setattr("pactverify.dependencies._is_module_available", lambda module_name: True)
    ensure_cli_dependencies_for_verify()


def test_ensure_cli_dependencies_for_verify_raises(monkeypatch) -> None:
    monkeypatch.setattr("pactverify.dependencies._is_module_available", lambda module_name: module_name != "structlog")
    with pytest.raises(DependencyError, match="Missing runtime dependencies for 'verify': structlog"):
        ensure_cli_dependencies_for_verify()
