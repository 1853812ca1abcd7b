"""
ReqCheck — Client Fetcher
=========================

What:  The browser side of the wire: send a request, await the response,
       try to decode the body as JSON.
How:   httpx.AsyncClient performs the round trip (the only await);
       decoding happens exactly once, whatever the status code.
Who:   Used by tests and by anyone poking at a running ReqCheck server.

Outcomes:
    body decodes         → FetchResult(payload=..., fault=None)
    empty body           → FetchResult(fault=ParseError "Unexpected end of JSON input")
    malformed body       → FetchResult(fault=ParseError "Unexpected token ...")
    no response at all   → TransportError raised

    A 4xx/5xx status does not by itself make the fetch fail; the body is
    still decoded, like window.fetch resolving for any status.

Timeouts and retries:
    No retries. No timeout unless `client_timeout` (or the timeout
    argument) sets one.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

import httpx

from reqcheck.config import settings
from reqcheck.exceptions import TransportError
from reqcheck.schemas.http import Fault, FaultKind, Request
from reqcheck.services.encoder import JSON_MEDIA_TYPE, encode

# Console-equivalent sink for client-side faults
console = logging.getLogger("reqcheck.console")


@dataclass(frozen=True)
class FetchResult:
    status: int
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    body: bytes = b""
    payload: Any = None
    fault: Optional[Fault] = None

    @property
    def ok(self) -> bool:
        """True when the body decoded and the status is 2xx."""
        return self.fault is None and 200 <= self.status < 300


def decode_body(body: bytes) -> Any:
    """
    Decode a response body as JSON.

    Raises:
        ValueError: with a browser-style message for empty or malformed bodies
    """
    if not body.strip():
        raise ValueError("Unexpected end of JSON input")
    try:
        return json.loads(body.decode("utf-8"))
    except UnicodeDecodeError as e:
        raise ValueError(f"Unexpected token in JSON: body is not UTF-8 ({e.reason})") from e
    except json.JSONDecodeError as e:
        raise ValueError(
            f"Unexpected token in JSON at line {e.lineno} column {e.colno}: {e.msg}"
        ) from e


class ClientFetcher:
    """
    Async client over httpx.

    Usage:
        async with ClientFetcher() as fetcher:
            result = await fetcher.fetch_json("POST", "/movies", {"title": "", "year": 2021})
            if result.fault:
                print(result.fault.describe())
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        if client is not None:
            self._client = client
            self._owns_client = False
        else:
            self._client = httpx.AsyncClient(
                base_url=base_url or settings.client_base_url,
                transport=transport,
                timeout=httpx.Timeout(timeout if timeout is not None else settings.client_timeout),
            )
            self._owns_client = True

    async def __aenter__(self) -> "ClientFetcher":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def fetch(self, request: Request) -> FetchResult:
        """
        Send a Request and decode the reply once.

        Raises:
            TransportError: the request never got a response
        """
        try:
            response = await self._client.request(
                request.verb,
                request.path,
                headers=request.headers.raw,
                content=request.body or None,
                params=dict(request.query) or None,
            )
        except httpx.TransportError as e:
            url = str(self._client.base_url.join(request.path))
            console.error("%s %s net::ERR %s: %s", request.verb, url, type(e).__name__, str(e))
            raise TransportError(
                message=f"{request.verb} {url} failed: {type(e).__name__}",
                url=url,
                context={"error": str(e)},
            ) from e

        try:
            payload = decode_body(response.content)
        except ValueError as e:
            fault = Fault(kind=FaultKind.PARSE_ERROR, message=str(e))
            console.error(
                "%s %s %d - Uncaught (in promise) SyntaxError: %s",
                request.verb,
                request.path,
                response.status_code,
                fault.message,
            )
            return FetchResult(
                status=response.status_code,
                headers=response.headers,
                body=response.content,
                fault=fault,
            )

        return FetchResult(
            status=response.status_code,
            headers=response.headers,
            body=response.content,
            payload=payload,
        )

    async def fetch_json(
        self,
        verb: str,
        path: str,
        payload: Any = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> FetchResult:
        """Send payload (if any) as application/json and fetch the reply."""
        request_headers: Dict[str, str] = {"Accept": JSON_MEDIA_TYPE}
        body = b""
        if payload is not None:
            body = encode(payload).body
            request_headers["Content-Type"] = JSON_MEDIA_TYPE
        request_headers.update(headers or {})
        return await self.fetch(
            Request(verb=verb, path=path, headers=request_headers, body=body)
        )
