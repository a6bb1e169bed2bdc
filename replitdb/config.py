"""Connection discovery for the database endpoint."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

import httpx

from .errors import ConfigurationError


if TYPE_CHECKING:
    from collections.abc import Mapping


logger = logging.getLogger(__name__)

DB_URL_ENV_VAR = "REPLIT_DB_URL"
DB_URL_FILE = Path("/tmp/replitdb")  # noqa: S108
HTTP_TIMEOUT = 10.0


def parse_url(url: str) -> httpx.URL:
    """Parse and validate a database connection URL.

    Parameters
    ----------
    url
        Full base URL of the database, including any embedded token.

    Raises
    ------
    ConfigurationError
        When the URL cannot be parsed or is not an absolute http(s) URL.
    """
    try:
        parsed = httpx.URL(url.strip())
    except (httpx.InvalidURL, TypeError) as error:
        msg = f"malformed database URL: {error}"
        raise ConfigurationError(msg) from error

    if parsed.scheme not in {"http", "https"} or not parsed.host:
        msg = "database URL must be an absolute http(s) URL"
        raise ConfigurationError(msg)
    return parsed


def discover_url(
    *,
    url_file: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> str:
    """Return the connection URL from the cached file or the environment.

    The cached file takes precedence over ``REPLIT_DB_URL``.
    """
    url_file = DB_URL_FILE if url_file is None else url_file
    if url_file.exists():
        logger.debug("reading database URL from %s", url_file)
        try:
            return url_file.read_text().strip()
        except OSError as error:
            msg = f"cannot read database URL file {url_file}"
            raise ConfigurationError(msg) from error

    env = os.environ if environ is None else environ
    url = env.get(DB_URL_ENV_VAR)
    if url is None:
        msg = f"{DB_URL_ENV_VAR} not set in environment"
        raise ConfigurationError(msg)
    logger.debug("using database URL from %s", DB_URL_ENV_VAR)
    return url
