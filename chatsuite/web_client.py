"""HTTP transport shared by all providers."""

import json
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, Optional

import httpx

from chatsuite.errors import WebClientError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60.0


@dataclass
class WebRequestData:
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    payload: Dict[str, Any] = field(default_factory=dict)


@dataclass
class WebResponse:
    status_code: int
    body: Any

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


def decode_body(text: str) -> Any:
    """Parse a response body as JSON, falling back to the raw text."""
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


class WebClient:
    """
    Thin wrapper over ``httpx.AsyncClient``.

    The client is created lazily and reused across calls. Transport failures
    are raised as WebClientError; status codes are left to the caller.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, http_client: Optional[httpx.AsyncClient] = None):
        self.timeout = timeout
        self._client = http_client

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    @staticmethod
    def _headers(headers: Dict[str, str]) -> Dict[str, str]:
        return {"Content-Type": "application/json", **headers}

    async def do_post(self, url: str, headers: Dict[str, str], payload: Dict[str, Any]) -> WebResponse:
        try:
            response = await self.client.post(url, headers=self._headers(headers), json=payload)
        except httpx.HTTPError as e:
            logger.error(f"POST {_redact(url)} failed: {e}")
            raise WebClientError(_redact(url), e) from e

        body = decode_body(response.text)
        logger.debug(f"POST {_redact(url)} -> {response.status_code}: {body}")
        return WebResponse(status_code=response.status_code, body=body)

    @asynccontextmanager
    async def stream_post(self, url: str, headers: Dict[str, str], payload: Dict[str, Any]) -> AsyncIterator[httpx.Response]:
        """Open a streaming POST; the response is closed when the block exits."""
        request_headers = self._headers(headers)
        request_headers.setdefault("Accept", "text/event-stream")
        try:
            async with self.client.stream("POST", url, headers=request_headers, json=payload) as response:
                logger.debug(f"POST {_redact(url)} (stream) -> {response.status_code}")
                yield response
        except httpx.HTTPError as e:
            logger.error(f"Streaming POST {_redact(url)} failed: {e}")
            raise WebClientError(_redact(url), e) from e

    async def aclose(self):
        if self._client is not None:
            await self._client.aclose()
            self._client = None


async def read_error_body(response: httpx.Response) -> Any:
    """Read and decode the body of a failed streaming response."""
    await response.aread()
    return decode_body(response.text)


def _redact(url: str) -> str:
    # Gemini carries the API key in the query string
    return url.split("?key=", 1)[0]
