"""
Connection configuration.

A connection is given either as a DSN string of the form
``user:password@tcp(host:port)/database`` or as a JSON file holding the
same pieces::

    {"database": "shop", "user": "app", "password": "secret",
     "host": "127.0.0.1", "port": 3306}

The file is rendered into a DSN and every DSN is checked against the same
shape before it is used.
"""

import json
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path

from sqldiff.utils.tracing import trace_function

from .errors import ConfigError

logger = logging.getLogger(__name__)

DSN_ENV_VAR = "SQLDIFF_DSN"

DSN_FORMAT = re.compile(r"^[a-z0-9]+:.*@tcp\([a-z0-9_.-]+:[0-9]+\)/[a-zA-Z0-9_.-]+$")
DSN_PARTS = re.compile(
    r"^(?P<user>[a-z0-9]+):(?P<password>.*)@tcp\((?P<host>[a-z0-9_.-]+):(?P<port>[0-9]+)\)"
    r"/(?P<database>[a-zA-Z0-9_.-]+)$"
)

REQUIRED_FIELDS = ("database", "user", "host", "port")


@dataclass(frozen=True)
class ConnectionSettings:
    """Connection parameters extracted from a validated DSN."""

    user: str
    password: str
    host: str
    port: int
    database: str

    def __repr__(self) -> str:
        return (
            f"ConnectionSettings(user={self.user!r}, password='***', host={self.host!r}, "
            f"port={self.port}, database={self.database!r})"
        )


def is_dsn_format(dsn: str) -> bool:
    """Whether ``dsn`` has the ``user:password@tcp(host:port)/database`` shape."""
    return bool(DSN_FORMAT.match(dsn or ""))


def json_to_dsn(path: str | Path) -> str:
    """
    Read a JSON connection file and render it as a DSN.

    ``password`` may also be spelled ``passwd``.

    Raises:
        ConfigError: file missing, unreadable, not JSON, or a field is missing
    """
    try:
        with open(path, encoding="utf-8") as f:
            info = json.load(f)
    except OSError as e:
        raise ConfigError(f"cannot read connection file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid JSON in connection file {path}: {e}") from e

    if not isinstance(info, dict):
        raise ConfigError(f"connection file {path} must contain a JSON object")

    missing = [name for name in REQUIRED_FIELDS if info.get(name) in (None, "")]
    if missing:
        raise ConfigError(f"connection file {path} is missing: {', '.join(missing)}")

    password = info.get("password", info.get("passwd", ""))
    try:
        port = int(info["port"])
    except (TypeError, ValueError) as e:
        raise ConfigError(f"invalid port in connection file {path}: {info['port']!r}") from e

    return f"{info['user']}:{password}@tcp({info['host']}:{port})/{info['database']}"


@trace_function("sqldiff.resolve_dsn", component="config")
def resolve_dsn(value: str | None) -> str:
    """
    Turn a ``--dsn`` value into a validated DSN.

    Values ending in ``.json`` are read as connection files. When
    ``value`` is empty, ``SQLDIFF_DSN`` from the environment is used.

    Raises:
        ConfigError: nothing given, or the result does not have DSN shape
    """
    dsn = value or os.getenv(DSN_ENV_VAR)
    if not dsn:
        raise ConfigError(f"no DSN given (use --dsn or set {DSN_ENV_VAR})")

    if dsn.endswith(".json"):
        logger.debug(f"Reading connection file {dsn}")
        dsn = json_to_dsn(dsn)

    if not is_dsn_format(dsn):
        raise ConfigError(f"invalid format: {_mask(dsn)}")
    return dsn


def parse_dsn(dsn: str) -> ConnectionSettings:
    """
    Split a DSN into its connection parameters.

    Raises:
        ConfigError: dsn does not have DSN shape
    """
    match = DSN_PARTS.match(dsn or "")
    if not match:
        raise ConfigError(f"invalid format: {_mask(dsn)}")
    return ConnectionSettings(
        user=match.group("user"),
        password=match.group("password"),
        host=match.group("host"),
        port=int(match.group("port")),
        database=match.group("database"),
    )


def _mask(dsn: str) -> str:
    """Hide the password part of a DSN-like string for messages."""
    return re.sub(r"^([^:@]*):.*@", r"\1:***@", dsn or "", count=1)
