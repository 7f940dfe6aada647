"""
Command-line interface for sqldiff.

Compares two tables and exits with 0 when they match, 1 when they
differ and 2 when the comparison could not be completed.
"""

import sys

from sqldiff.utils.logging import configure_from_env
from sqldiff.utils.tracing import shutdown_tracing

from .commands import EXIT_ERROR, EXIT_MATCH, EXIT_MISMATCH, cmd_diff
from .parser import create_parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the sqldiff CLI"""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.batch_size < 1:
        parser.error("--batch-size must be a positive integer")

    configure_from_env(level=args.log_level)

    try:
        code = cmd_diff(args)
    finally:
        shutdown_tracing()
    sys.exit(code)


__all__ = [
    'main',
    'cmd_diff',
    'create_parser',
    'EXIT_MATCH',
    'EXIT_MISMATCH',
    'EXIT_ERROR',
]
