"""
Structured logging configuration for sqldiff

Provides JSON-formatted or coloured console logging on stderr so that
diff output on stdout is never interleaved with log lines.

Usage:
    import logging

    from sqldiff.utils.logging import setup_logging

    setup_logging(level="INFO")
    logger = logging.getLogger(__name__)

    logger.info("Comparing tables", extra={"left": "bak_users", "right": "users"})
"""

from .config import configure_from_env, setup_logging
from .formatters import ConsoleFormatter, JSONFormatter
from .adapters import ContextLogger

__all__ = [
    "setup_logging",
    "configure_from_env",
    "JSONFormatter",
    "ConsoleFormatter",
    "ContextLogger",
]
