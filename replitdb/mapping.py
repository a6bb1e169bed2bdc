"""MutableMapping facade over a database client."""

from __future__ import annotations

from collections.abc import Iterator, MutableMapping
from typing import TYPE_CHECKING

from typing_extensions import override

from .errors import KeyNotFoundError


if TYPE_CHECKING:
    from .client import Client


class DatabaseMapping(MutableMapping[str, str]):
    """Dict-like view of the keys that start with ``prefix``.

    Keys are exposed with the prefix stripped. Every access is a round trip
    to the database; nothing is cached locally.
    """

    def __init__(self, client: Client, prefix: str = "") -> None:
        super().__init__()
        self._client = client
        self.prefix = prefix

    def _full_key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def _backend_keys(self) -> list[str]:
        return self._client.list_keys(self.prefix)

    def _exists(self, full_key: str) -> bool:
        return full_key in self._client.list_keys(full_key)

    @override
    def __getitem__(self, key: str) -> str:
        try:
            return self._client.get(self._full_key(key))
        except KeyNotFoundError:
            raise KeyError(key) from None

    @override
    def __setitem__(self, key: str, value: str) -> None:
        self._client.set(self._full_key(key), value)

    @override
    def __delitem__(self, key: str) -> None:
        full_key = self._full_key(key)
        if not self._exists(full_key):
            raise KeyError(key)
        self._client.delete(full_key)

    @override
    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        return self._exists(self._full_key(key))

    @override
    def __iter__(self) -> Iterator[str]:
        """Iterate keys under the prefix in backend order."""
        return iter([key.removeprefix(self.prefix) for key in self._backend_keys()])

    @override
    def __len__(self) -> int:
        return len(self._backend_keys())

    @override
    def __repr__(self) -> str:
        return f"{type(self).__name__}(prefix={self.prefix!r})"

    def to_dict(self) -> dict[str, str]:
        """Return a detached snapshot of every key under the prefix and its value."""
        return {key: self[key] for key in self}
