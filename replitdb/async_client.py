"""Asyncio HTTP client for the key-value database."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, Self

import httpx

from ._wire import (
    FORM_CONTENT_TYPE,
    decode_value,
    failure,
    key_root,
    key_url,
    list_params,
    parse_key_listing,
    read_failure,
)
from .config import HTTP_TIMEOUT, discover_url, parse_url
from .errors import DecodeError, TransportError


if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType


logger = logging.getLogger(__name__)


class AsyncClient:
    """Async twin of :class:`replitdb.client.Client` built on ``httpx.AsyncClient``."""

    def __init__(
        self,
        url: str,
        *,
        http_client: httpx.AsyncClient | None = None,
        json_encoder: Callable[[Any], str] = json.dumps,
        json_decoder: Callable[[str], Any] = json.loads,
    ) -> None:
        """Create a client for the database at ``url``.

        Parameters
        ----------
        url
            Base URL of the database, including any embedded token.
        http_client
            Optional injected ``httpx.AsyncClient``. The caller keeps ownership of it.
        json_encoder
            Serializer used by ``set_json``.
        json_decoder
            Deserializer used by ``get_json``.
        """
        super().__init__()
        self._root = key_root(parse_url(url))
        self._owns_http_client = http_client is None
        if http_client is None:
            http_client = httpx.AsyncClient(timeout=HTTP_TIMEOUT, follow_redirects=True)
        self._http = http_client
        self._json_encoder = json_encoder
        self._json_decoder = json_decoder

    @classmethod
    def from_environment(cls, **kwargs: Any) -> Self:
        """Create a client from the cached URL file or ``REPLIT_DB_URL``."""
        return cls(discover_url(), **kwargs)

    async def _send(self, method: str, url: str, *, label: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._http.request(method, url, **kwargs)
        except httpx.RequestError as error:
            msg = f"{method} {label!r} failed: {error}"
            raise TransportError(msg) from error
        logger.debug("%s %r -> %d", method, label, response.status_code)
        return response

    async def _get_bytes(self, key: str) -> bytes:
        response = await self._send("GET", key_url(self._root, key), label=key)
        if response.status_code > 299:
            raise read_failure(response, key)
        return response.content

    async def get(self, key: str) -> str:
        """Return the value of ``key``, or raise ``KeyNotFoundError``."""
        return decode_value(await self._get_bytes(key), key)

    async def get_json(self, key: str) -> Any:
        """Return the JSON-decoded value of ``key``."""
        raw = await self._get_bytes(key)
        try:
            return self._json_decoder(raw.decode())
        except ValueError as error:
            msg = f"value of {key!r} is not valid JSON"
            raise DecodeError(msg) from error

    async def set(self, key: str, value: str) -> None:
        """Create or update ``key`` with ``value``."""
        response = await self._send(
            "POST",
            key_url(self._root, key),
            label=key,
            data={key: value},
            headers={"Content-Type": FORM_CONTENT_TYPE},
        )
        if response.status_code > 200:
            raise failure(response)

    async def set_json(self, key: str, value: Any) -> None:
        """Create or update ``key`` with the JSON serialization of ``value``."""
        await self.set(key, self._json_encoder(value))

    async def delete(self, key: str) -> None:
        """Delete ``key``. Deleting a missing key is not an error."""
        response = await self._send("DELETE", key_url(self._root, key), label=key)
        if response.status_code > 299:
            raise failure(response)

    async def list_keys(self, prefix: str = "") -> list[str]:
        """Return every key that begins with ``prefix``, in backend order."""
        response = await self._send("GET", self._root, label=prefix, params=list_params(prefix))
        if response.status_code > 299:
            raise failure(response)
        return parse_key_listing(response.text)

    async def aclose(self) -> None:
        """Close the HTTP client if this client created it."""
        if self._owns_http_client:
            await self._http.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        await self.aclose()
