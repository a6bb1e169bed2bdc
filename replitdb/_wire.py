"""HTTP conventions of the database service shared by the sync and async clients."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING
from urllib.parse import quote, unquote_plus


if TYPE_CHECKING:
    import httpx

from .errors import DecodeError, KeyNotFoundError, RequestFailedError


FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def key_root(base_url: httpx.URL) -> str:
    """Return the base URL without query or fragment, the parent of every key URL."""
    return str(base_url.copy_with(query=None, fragment=None))


def key_url(root: str, key: str) -> str:
    """Build ``{root}/{key}`` with the key percent-encoded into the path."""
    return f"{root}/{quote(key, safe='/')}"


def list_params(prefix: str) -> dict[str, str]:
    return {"prefix": prefix, "encode": "true"}


def parse_key_listing(body: str) -> list[str]:
    """Split a listing body into keys and undo their query encoding.

    Lines are separated by ``\\n`` with an optional trailing ``\\r``; a final
    newline does not produce an empty key.
    """
    if not body:
        return []
    lines = body.split("\n")
    if lines[-1] == "":
        _ = lines.pop()
    return [_unescape_key(line.removesuffix("\r")) for line in lines]


def _unescape_key(line: str) -> str:
    if _BAD_ESCAPE.search(line):
        msg = f"malformed escape in listed key: {line!r}"
        raise DecodeError(msg)
    try:
        return unquote_plus(line, errors="strict")
    except UnicodeDecodeError as error:
        msg = f"listed key is not valid UTF-8: {line!r}"
        raise DecodeError(msg) from error


def decode_value(raw: bytes, key: str) -> str:
    """Decode a stored value as UTF-8, raising ``DecodeError`` when it is not."""
    try:
        return raw.decode()
    except UnicodeDecodeError as error:
        msg = f"value of {key!r} is not valid UTF-8"
        raise DecodeError(msg) from error


def failure(response: httpx.Response) -> RequestFailedError:
    """Build the error for an unsuccessful response whose body has been read."""
    return RequestFailedError(response.status_code, response.reason_phrase, response.text)


def read_failure(response: httpx.Response, key: str) -> KeyNotFoundError | RequestFailedError:
    """Map a non-2xx read response to ``KeyNotFoundError`` or ``RequestFailedError``."""
    if response.status_code == 404:
        return KeyNotFoundError(key)
    return failure(response)
