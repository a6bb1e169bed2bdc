"""Interface for ``python -m replitdb``."""

from __future__ import annotations

import logging
import sys
from argparse import ArgumentParser
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from collections.abc import Sequence

from ._version import version
from .client import Client
from .errors import DatabaseError, KeyNotFoundError


__all__ = ["main"]


def _build_parser() -> ArgumentParser:
    parser = ArgumentParser(prog="replitdb", description="Read and write keys in the database.")
    _ = parser.add_argument("-v", "--version", action="version", version=version)
    _ = parser.add_argument("--url", help="database URL; defaults to /tmp/replitdb or $REPLIT_DB_URL")
    _ = parser.add_argument("--debug", action="store_true", help="log every request")
    commands = parser.add_subparsers(dest="command", required=True)

    get_parser = commands.add_parser("get", help="print the value of a key")
    _ = get_parser.add_argument("key")

    set_parser = commands.add_parser("set", help="create or update a key")
    _ = set_parser.add_argument("key")
    _ = set_parser.add_argument("value")

    delete_parser = commands.add_parser("delete", help="delete a key")
    _ = delete_parser.add_argument("key")

    list_parser = commands.add_parser("list", help="list keys starting with a prefix")
    _ = list_parser.add_argument("prefix", nargs="?", default="")
    return parser


def main(args: Sequence[str] | None = None) -> int:
    """Run the command line interface and return the exit status."""
    options = _build_parser().parse_args(args)
    logging.basicConfig(level=logging.DEBUG if options.debug else logging.WARNING)

    try:
        client = Client(options.url) if options.url else Client.from_environment()
        with client:
            if options.command == "get":
                print(client.get(options.key))
            elif options.command == "set":
                client.set(options.key, options.value)
            elif options.command == "delete":
                client.delete(options.key)
            else:
                for key in client.list_keys(options.prefix):
                    print(key)
    except KeyNotFoundError as error:
        print(error, file=sys.stderr)
        return 1
    except DatabaseError as error:
        print(f"error: {error}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
