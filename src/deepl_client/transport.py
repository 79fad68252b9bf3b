# SPDX-License-Identifier: Apache-2.0
"""Single-exchange HTTP transport built on aiohttp."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol, runtime_checkable

import aiohttp

logger = logging.getLogger(__name__)


class TransportError(Exception):
    """The exchange produced no HTTP response.

    Attributes:
        timeout: True if the attempt ran out of time.
    """

    def __init__(self, message: str, timeout: bool = False) -> None:
        super().__init__(message)
        self.timeout = timeout


@dataclass(frozen=True)
class HttpResponse:
    """Status, headers and raw body of one exchange."""

    status: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""

    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        """Decode the body as JSON.

        Raises:
            ValueError: If the body is not valid JSON.
        """
        return json.loads(self.body.decode("utf-8"))


@runtime_checkable
class Transport(Protocol):
    """Anything that can perform one HTTP exchange."""

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, str] | None = None,
        data: Any = None,
        files: Mapping[str, tuple[str, bytes]] | None = None,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> HttpResponse: ...

    async def close(self) -> None: ...


class HttpTransport:
    """aiohttp-backed transport.

    One ``ClientSession`` is created on first use and shared by every
    request until ``close()``. The transport never retries and never looks
    at status codes.
    """

    def __init__(
        self,
        base_url: str,
        headers: Mapping[str, str] | None = None,
        proxy: str | None = None,
    ) -> None:
        """Initialize HttpTransport.

        Args:
            base_url: Scheme and host prepended to every path.
            headers: Headers sent with every request.
            proxy: Optional proxy URL passed to aiohttp.
        """
        self._base_url = base_url.rstrip("/")
        self._headers = dict(headers or {})
        self._proxy = proxy
        self._session: aiohttp.ClientSession | None = None

    @property
    def base_url(self) -> str:
        return self._base_url

    async def __aenter__(self) -> HttpTransport:
        await self._ensure_session()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(headers=self._headers)
        return self._session

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, str] | None = None,
        data: Any = None,
        files: Mapping[str, tuple[str, bytes]] | None = None,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> HttpResponse:
        """Perform one exchange.

        Args:
            method: HTTP method.
            path: Path below the base URL, e.g. "/v2/usage".
            params: Query parameters.
            data: Form fields as a mapping or list of pairs.
            files: Uploads as name -> (filename, content); when given, the
                body is sent as multipart/form-data together with ``data``.
            headers: Extra headers for this request only.
            timeout: Total seconds allowed for this attempt.

        Returns:
            The response, whatever its status.

        Raises:
            TransportError: If no response was received.
        """
        session = await self._ensure_session()
        url = f"{self._base_url}{path}"
        client_timeout = aiohttp.ClientTimeout(total=timeout)
        if files:
            data = _multipart(data, files)
        logger.debug("%s %s", method, url)

        try:
            async with session.request(
                method,
                url,
                params=params,
                data=data,
                headers=headers,
                proxy=self._proxy,
                timeout=client_timeout,
            ) as response:
                body = await response.read()
                return HttpResponse(
                    status=response.status,
                    headers=dict(response.headers),
                    body=body,
                )
        except asyncio.TimeoutError as e:
            raise TransportError(
                f"Request to {url} timed out after {timeout}s", timeout=True
            ) from e
        except aiohttp.ClientError as e:
            raise TransportError(f"Request to {url} failed: {e}") from e

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None


def _multipart(
    data: Mapping[str, str] | list[tuple[str, str]] | None,
    files: Mapping[str, tuple[str, bytes]],
) -> aiohttp.FormData:
    form = aiohttp.FormData()
    pairs = data.items() if isinstance(data, Mapping) else (data or [])
    for name, value in pairs:
        form.add_field(name, value)
    for name, (filename, content) in files.items():
        form.add_field(name, content, filename=filename)
    return form
