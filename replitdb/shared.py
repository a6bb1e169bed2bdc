"""Process-wide shared client and the module-level convenience functions.

The simplest way to use the database is through the functions below, which
lazily build one :class:`~replitdb.client.Client` from the environment and
reuse it. Applications that prefer explicit state can own a
:class:`SharedClient` and pass it around instead.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import TYPE_CHECKING, Any

from .client import Client


if TYPE_CHECKING:
    from collections.abc import Callable


logger = logging.getLogger(__name__)

REFRESH_INTERVAL = 60 * 60.0


class SharedClient:
    """Lazily built client, rebuilt once it is older than ``refresh_interval``.

    A replaced client stays open for one more interval, since calls started
    on other threads may still be using it, and is closed at the following
    refresh. At most one retired client is open at a time.
    """

    def __init__(
        self,
        factory: Callable[[], Client] = Client.from_environment,
        *,
        refresh_interval: float | None = REFRESH_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Create an empty holder.

        Parameters
        ----------
        factory
            Builds a new client. Defaults to environment discovery.
        refresh_interval
            Age in seconds after which the client is rebuilt. ``None`` keeps
            the first client for the life of the holder.
        clock
            Monotonic time source, in seconds.
        """
        super().__init__()
        self._factory = factory
        self._refresh_interval = refresh_interval
        self._clock = clock
        self._lock = threading.Lock()
        self._client: Client | None = None
        self._created_at: float | None = None
        self._retired: Client | None = None

    def _expired(self, now: float) -> bool:
        if self._refresh_interval is None or self._created_at is None:
            return False
        return now - self._created_at >= self._refresh_interval

    def get(self) -> Client:
        """Return the current client, building it if absent or expired.

        A failing build propagates and leaves the holder unchanged.
        """
        with self._lock:
            now = self._clock()
            if self._client is not None and not self._expired(now):
                return self._client

            client = self._factory()
            if self._client is None:
                logger.info("database client created")
            else:
                logger.info("database client refreshed")
                if self._retired is not None:
                    self._retired.close()
                self._retired = self._client
            self._client = client
            self._created_at = now
            return client

    def reset(self) -> None:
        """Close and drop the current client and any retired one."""
        with self._lock:
            for client in (self._client, self._retired):
                if client is not None:
                    client.close()
            self._client = None
            self._retired = None
            self._created_at = None


_default = SharedClient()


def get_shared_client() -> Client:
    """Return the process-wide client, building it from the environment on first use."""
    return _default.get()


def get(key: str) -> str:
    """Return the value of ``key``, or raise ``KeyNotFoundError``."""
    return get_shared_client().get(key)


def get_json(key: str) -> Any:
    """Return the JSON-decoded value of ``key``."""
    return get_shared_client().get_json(key)


def set(key: str, value: str) -> None:  # noqa: A001
    """Create or update ``key`` with ``value``."""
    get_shared_client().set(key, value)


def set_json(key: str, value: Any) -> None:
    """Create or update ``key`` with the JSON serialization of ``value``."""
    get_shared_client().set_json(key, value)


def delete(key: str) -> None:
    """Delete ``key``. Deleting a missing key is not an error."""
    get_shared_client().delete(key)


def list_keys(prefix: str = "") -> list[str]:
    """Return every key that begins with ``prefix``."""
    return get_shared_client().list_keys(prefix)
