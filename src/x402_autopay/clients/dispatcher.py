"""
HTTP request dispatcher.

Thin layer over ``httpx.AsyncClient`` that returns every HTTP response as a
``DispatchResponse`` regardless of status code. Only transport-level
failures (DNS, refused connection, timeout) raise, as ``TransportError``.
"""

import json
from typing import Any, Dict, Literal, Optional, Union

import httpx

from ..engine.exceptions import TransportError
from ..schemas.https import DispatchResponse
from ..utils import logger

BodyDecoding = Literal["auto", "json", "text"]


def _is_json_content_type(content_type: str) -> bool:
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == "application/json" or media_type.endswith("+json")


def decode_body(response: httpx.Response, decode: BodyDecoding = "auto") -> Any:
    """
    Decode a response body.

    Args:
        response: The httpx response.
        decode: ``"json"`` parses JSON and falls back to text when the body
            is not JSON; ``"text"`` returns text; ``"auto"`` parses JSON only
            when the declared content type is JSON.

    Returns:
        Parsed JSON value, text, or None for an empty body.
    """
    if not response.content:
        return None

    text = response.text
    if decode == "text":
        return text

    if decode == "json" or _is_json_content_type(response.headers.get("content-type", "")):
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            return text
    return text


class RequestDispatcher:
    """
    Issues HTTP requests and never raises on HTTP status.

    The underlying ``httpx.AsyncClient`` is either injected (and left open)
    or created from ``client_kwargs`` (and closed by ``aclose`` / the async
    context manager).

    Usage:
        ```python
        async with RequestDispatcher(timeout=30) as dispatcher:
            response = await dispatcher.send("GET", "https://api.example.com/data")
            if response.status_code == 402:
                ...
        ```
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None, **client_kwargs):
        """
        Args:
            client: Optional pre-configured httpx client (e.g. with a mock transport).
            **client_kwargs: httpx.AsyncClient arguments used when ``client`` is None.
        """
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(**client_kwargs)

    async def send(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        body: Optional[Union[str, bytes]] = None,
        decode: BodyDecoding = "auto",
    ) -> DispatchResponse:
        """
        Send one HTTP request.

        Args:
            method: HTTP method.
            url: Target URL.
            headers: Request headers.
            body: Raw request body.
            decode: Body decoding mode, see ``decode_body``.

        Returns:
            DispatchResponse: Status, headers and decoded body, for any status.

        Raises:
            TransportError: On connection, DNS or timeout failures.
        """
        method = method.upper()
        try:
            response = await self._client.request(method, url, headers=headers, content=body)
        except httpx.TimeoutException as exc:
            raise TransportError(
                f"Request {method} {url} timed out: {exc}", method=method, url=url
            ) from exc
        except httpx.RequestError as exc:
            raise TransportError(
                f"Request {method} {url} failed: {exc}", method=method, url=url
            ) from exc

        logger.debug(f"{method} {url} -> {response.status_code}")
        return DispatchResponse(
            status_code=response.status_code,
            headers=dict(response.headers),
            body=decode_body(response, decode),
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "RequestDispatcher":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
