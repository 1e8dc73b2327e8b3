"""Replay expected requests against the live provider."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any
from urllib.parse import urlencode

import httpx

from pactverify.exceptions import TransportError
from pactverify.logging import get_logger

if TYPE_CHECKING:
    from pactverify.typing.models import ExpectedRequest

logger = get_logger(__name__)

_JSON_CONTENT_TYPE = "application/json"
_FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


def join_url(base_url: str, path: str) -> str:
    """Join a base URL and a request path with exactly one slash between them.

    An empty base URL returns the path unchanged, leaving resolution to a client
    configured with its own ``base_url``.
    """
    if not base_url:
        return path
    if not path:
        return base_url
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


def encode_body(body: Any, headers: dict[str, str]) -> tuple[bytes | None, dict[str, str]]:  # noqa: ANN401
    """Serialize a request body according to its content type.

    Args:
        body (Any): Example body from the contract.
        headers (dict[str, str]): Request headers.

    Returns:
        tuple[bytes | None, dict[str, str]]: Encoded content and the headers to send,
            with ``Content-Type`` added for structured bodies that had none.
    """
    if body is None:
        return None, headers

    content_type = next((value for name, value in headers.items() if name.lower() == "content-type"), None)
    media_type = (content_type or "").split(";", 1)[0].strip().lower()

    if isinstance(body, str):
        return body.encode("utf-8"), headers
    if media_type == _FORM_CONTENT_TYPE and isinstance(body, dict):
        return urlencode(body, doseq=True).encode("utf-8"), headers
    if content_type is None and isinstance(body, dict | list):
        headers = {**headers, "Content-Type": _JSON_CONTENT_TYPE}
    return json.dumps(body).encode("utf-8"), headers


class RequestReplayer:
    """Send one expected request through an injected HTTP client."""

    def __init__(self, client: httpx.Client, base_url: str = "") -> None:
        """Initialize the replayer.

        Args:
            client (httpx.Client): Client owned by the caller.
            base_url (str): Provider base URL.
        """
        self.client = client
        self.base_url = base_url

    def replay(self, request: ExpectedRequest) -> httpx.Response:
        """Issue the request once, without retry.

        Args:
            request (ExpectedRequest): Request to replay.

        Raises:
            TransportError: If no response could be obtained.

        Returns:
            httpx.Response: Provider response, whatever its status.
        """
        url = join_url(self.base_url, request.path)
        content, headers = encode_body(request.body, dict(request.headers))
        params = [(name, value) for name, values in request.query.items() for value in values]

        logger.debug("Replaying request", extra={"method": request.method, "url": url})
        try:
            return self.client.request(
                request.method,
                url,
                params=params or None,
                headers=headers,
                content=content,
            )
        except httpx.HTTPError as exc:
            raise TransportError(method=request.method, url=url, reason=str(exc) or type(exc).__name__) from exc
