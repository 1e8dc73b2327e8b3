"""Fetch and parse pact documents from disk or over HTTP."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Any
from urllib.parse import unquote, urlparse

import httpx
from pydantic import ValidationError

from pactverify.exceptions import InvalidSourceError, ParseError
from pactverify.logging import get_logger
from pactverify.settings import BearerAuth, get_settings
from pactverify.typing.models import ContractDocument, PactSource

if TYPE_CHECKING:
    from pactverify.settings import Settings

logger = get_logger(__name__)

_HTTP_SCHEMES = frozenset({"http", "https"})


def load_contract(source: PactSource | str, settings: Settings | None = None) -> ContractDocument:
    """Load a pact from a local path, a `file://` URI or an `http(s)://` URI.

    Args:
        source (PactSource | str): Pact location, with optional headers and credentials.
        settings (Settings | None): Runtime settings; only needed for remote sources
            without a dedicated client. Defaults to `get_settings()`.

    Raises:
        InvalidSourceError: If the source cannot be located or fetched.
        ParseError: If the fetched bytes are not a pact document.

    Returns:
        ContractDocument: Parsed contract.
    """
    if isinstance(source, str):
        source = PactSource(uri=source)
    uri = source.uri.strip()
    if not uri:
        raise InvalidSourceError(source=source.uri, reason="no pact source given")

    parsed = urlparse(uri)
    scheme = parsed.scheme.lower()
    if scheme in _HTTP_SCHEMES:
        raw = _fetch_remote(source, settings or get_settings())
    elif scheme == "file":
        raw = _read_file(source.uri, Path(unquote(parsed.path)))
    elif not scheme or len(scheme) == 1:
        # Plain path, including Windows drive letters (`C:\...`).
        raw = _read_file(source.uri, Path(uri))
    else:
        raise InvalidSourceError(source=source.uri, reason=f"unsupported scheme '{parsed.scheme}'")

    document = parse_contract(raw, source=source.uri)
    logger.info(
        "Pact loaded",
        extra={
            "pact_source": source.uri,
            "interactions": len(document.interactions),
            "specification_version": document.specification_version,
        },
    )
    return document


def parse_contract(raw: bytes | str, *, source: str = "<memory>") -> ContractDocument:
    """Parse pact bytes into a contract document.

    Args:
        raw (bytes | str): JSON document.
        source (str): Source label used in error messages.

    Raises:
        ParseError: If the payload is not valid JSON, not an object, or not a pact.

    Returns:
        ContractDocument: Parsed contract.
    """
    try:
        payload: Any = json.loads(raw)
    except ValueError as exc:
        raise ParseError(source=source, reason=f"invalid JSON ({exc})") from exc

    if not isinstance(payload, dict):
        raise ParseError(source=source, reason="document root must be a JSON object")

    try:
        return ContractDocument.model_validate(payload)
    except ValidationError as exc:
        raise ParseError(source=source, reason=str(exc)) from exc


def _read_file(source: str, path: Path) -> bytes:
    """Read pact bytes from disk.

    Args:
        source (str): Original source string, used in error messages.
        path (Path): Resolved filesystem path.

    Raises:
        InvalidSourceError: If the path is missing, a directory, or unreadable.

    Returns:
        bytes: File content.
    """
    if not path.exists():
        raise InvalidSourceError(source=source, reason="file not found")
    if path.is_dir():
        raise InvalidSourceError(source=source, reason="path is a directory")
    try:
        return path.read_bytes()
    except OSError as exc:
        raise InvalidSourceError(source=source, reason=str(exc)) from exc


def _fetch_remote(source: PactSource, settings: Settings) -> bytes:
    """Fetch pact bytes with one GET request.

    Args:
        source (PactSource): Remote pact source.
        settings (Settings): Runtime settings providing the default client and broker credentials.

    Raises:
        InvalidSourceError: If the URL has no host, the request fails, or the status is an error.

    Returns:
        bytes: Response body.
    """
    if not urlparse(source.uri).hostname:
        raise InvalidSourceError(source=source.uri, reason="URL has no host")

    client = source.client or settings.select_sync_httpx_client(source.uri)
    request_kwargs: dict[str, Any] = {"headers": {"Accept": "application/json", **source.headers}}
    auth = _source_auth(source) or settings.broker_auth()
    if auth is not None:
        request_kwargs["auth"] = auth

    try:
        response = client.get(source.uri, **request_kwargs)
    except httpx.HTTPError as exc:
        raise InvalidSourceError(source=source.uri, reason=f"request failed: {exc}") from exc

    if response.is_error:
        raise InvalidSourceError(
            source=source.uri,
            reason=f"server answered HTTP {response.status_code}",
        )
    return response.content


def _source_auth(source: PactSource) -> httpx.Auth | None:
    """Build request auth from the source credentials.

    Args:
        source (PactSource): Pact source.

    Returns:
        httpx.Auth | None: Basic auth for a (user, password) pair, bearer auth for a token.
    """
    if source.auth is None:
        return None
    if isinstance(source.auth, str):
        return BearerAuth(source.auth)
    username, password = source.auth
    return httpx.BasicAuth(username, password)
