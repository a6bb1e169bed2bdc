"""replitdb - client for an HTTP key-value database"""

from ._version import version as __version__
from .async_client import AsyncClient
from .client import Client, ValueReader
from .errors import (
    ConfigurationError,
    DatabaseError,
    DecodeError,
    KeyNotFoundError,
    RequestFailedError,
    TransportError,
)
from .mapping import DatabaseMapping
from .shared import (
    REFRESH_INTERVAL,
    SharedClient,
    delete,
    get,
    get_json,
    get_shared_client,
    list_keys,
    set,
    set_json,
)


__all__ = [
    "REFRESH_INTERVAL",
    "AsyncClient",
    "Client",
    "ConfigurationError",
    "DatabaseError",
    "DatabaseMapping",
    "DecodeError",
    "KeyNotFoundError",
    "RequestFailedError",
    "SharedClient",
    "TransportError",
    "ValueReader",
    "__version__",
    "delete",
    "get",
    "get_json",
    "get_shared_client",
    "list_keys",
    "set_json",
]

# ``replitdb.set`` is importable by name but left out of ``__all__`` so a star
# import does not shadow the builtin ``set``.
