"""Exceptions raised by database clients."""

from __future__ import annotations


class DatabaseError(Exception):
    """Base class for every error raised by this package."""


class KeyNotFoundError(DatabaseError, KeyError):
    """The requested key does not exist."""

    def __init__(self, key: str) -> None:
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"key not found: {self.key!r}"


class ConfigurationError(DatabaseError):
    """The connection URL is missing or cannot be parsed."""


class TransportError(DatabaseError):
    """The request never produced a usable response (network failure, timeout, redirect loop)."""


class RequestFailedError(DatabaseError):
    """The backend answered with a status that is not a success."""

    def __init__(self, status_code: int, reason: str, body: str = "") -> None:
        self.status_code = status_code
        self.reason = reason
        self.body = body
        message = f"{status_code} {reason}".rstrip()
        if body:
            message = f"{message}: {body}"
        super().__init__(message)


class DecodeError(DatabaseError, ValueError):
    """A stored value is not valid JSON."""
