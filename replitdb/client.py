"""Synchronous HTTP client for the key-value database."""

from __future__ import annotations

import io
import json
import logging
from typing import TYPE_CHECKING, Any, Self

import httpx
from typing_extensions import override

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
    from collections.abc import Buffer, Callable, Iterator
    from types import TracebackType


logger = logging.getLogger(__name__)


class ValueReader(io.RawIOBase):
    """Readable binary stream over a value's response body.

    The reader owns the underlying HTTP response; callers must close it,
    typically with a ``with`` block.
    """

    def __init__(self, response: httpx.Response) -> None:
        super().__init__()
        self._response = response
        self._chunks: Iterator[bytes] = response.iter_bytes()
        self._pending = b""

    @override
    def readable(self) -> bool:
        return True

    @override
    def readinto(self, buffer: Buffer) -> int:
        view = memoryview(buffer).cast("B")
        while not self._pending:
            try:
                self._pending = next(self._chunks)
            except StopIteration:
                return 0
            except httpx.RequestError as error:
                msg = f"reading value failed: {error}"
                raise TransportError(msg) from error
        size = min(len(view), len(self._pending))
        view[:size] = self._pending[:size]
        self._pending = self._pending[size:]
        return size

    @override
    def close(self) -> None:
        if not self.closed:
            self._response.close()
        super().close()


class Client:
    """Client for a single database endpoint.

    Every operation performs exactly one HTTP request and never retries.
    """

    def __init__(
        self,
        url: str,
        *,
        http_client: httpx.Client | None = None,
        json_encoder: Callable[[Any], str] = json.dumps,
        json_decoder: Callable[[str], Any] = json.loads,
    ) -> None:
        """Create a client for the database at ``url``.

        Parameters
        ----------
        url
            Base URL of the database, including any embedded token.
        http_client
            Optional injected ``httpx.Client``. The caller keeps ownership of it.
        json_encoder
            Serializer used by ``set_json``.
        json_decoder
            Deserializer used by ``get_json``.
        """
        super().__init__()
        self._root = key_root(parse_url(url))
        self._owns_http_client = http_client is None
        if http_client is None:
            http_client = httpx.Client(timeout=HTTP_TIMEOUT, follow_redirects=True)
        self._http = http_client
        self._json_encoder = json_encoder
        self._json_decoder = json_decoder

    @classmethod
    def from_environment(cls, **kwargs: Any) -> Self:
        """Create a client from the cached URL file or ``REPLIT_DB_URL``."""
        return cls(discover_url(), **kwargs)

    def _send(self, method: str, url: str, *, label: str, stream: bool = False, **kwargs: Any) -> httpx.Response:
        request = self._http.build_request(method, url, **kwargs)
        try:
            response = self._http.send(request, stream=stream)
        except httpx.RequestError as error:
            msg = f"{method} {label!r} failed: {error}"
            raise TransportError(msg) from error
        logger.debug("%s %r -> %d", method, label, response.status_code)
        return response

    def get_reader(self, key: str) -> ValueReader:
        """Return a stream over the value of ``key``.

        Raises ``KeyNotFoundError`` if the key does not exist. The caller must
        close the returned reader.
        """
        response = self._send("GET", key_url(self._root, key), label=key, stream=True)
        if response.status_code <= 299:
            return ValueReader(response)

        try:
            _ = response.read()
        except httpx.RequestError as error:
            msg = f"reading error response for {key!r} failed: {error}"
            raise TransportError(msg) from error
        finally:
            response.close()
        raise read_failure(response, key)

    def get(self, key: str) -> str:
        """Return the value of ``key``, or raise ``KeyNotFoundError``."""
        with self.get_reader(key) as reader:
            return decode_value(reader.read(), key)

    def get_json(self, key: str) -> Any:
        """Return the JSON-decoded value of ``key``.

        Raises ``KeyNotFoundError`` if the key does not exist and
        ``DecodeError`` if the stored value is not valid JSON.
        """
        with self.get_reader(key) as reader:
            raw = reader.read()
        try:
            return self._json_decoder(raw.decode())
        except ValueError as error:
            msg = f"value of {key!r} is not valid JSON"
            raise DecodeError(msg) from error

    def set(self, key: str, value: str) -> None:
        """Create or update ``key`` with ``value``."""
        response = self._send(
            "POST",
            key_url(self._root, key),
            label=key,
            data={key: value},
            headers={"Content-Type": FORM_CONTENT_TYPE},
        )
        if response.status_code > 200:
            raise failure(response)

    def set_json(self, key: str, value: Any) -> None:
        """Create or update ``key`` with the JSON serialization of ``value``."""
        self.set(key, self._json_encoder(value))

    def delete(self, key: str) -> None:
        """Delete ``key``. Deleting a missing key is not an error."""
        response = self._send("DELETE", key_url(self._root, key), label=key)
        if response.status_code > 299:
            raise failure(response)

    def list_keys(self, prefix: str = "") -> list[str]:
        """Return every key that begins with ``prefix``, in backend order."""
        response = self._send("GET", self._root, label=prefix, params=list_params(prefix))
        if response.status_code > 299:
            raise failure(response)
        return parse_key_listing(response.text)

    def close(self) -> None:
        """Close the HTTP client if this client created it."""
        if self._owns_http_client:
            self._http.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()
