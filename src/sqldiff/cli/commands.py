"""
CLI command implementation.
"""

import argparse
import logging
import sys
from contextlib import ExitStack
from pathlib import Path

from prometheus_client import CollectorRegistry

from sqldiff.utils.metrics import DiffMetrics

from ..config import resolve_dsn
from ..errors import SqlDiffError
from ..report import create_renderer
from ..runner import diff_tables

logger = logging.getLogger(__name__)

EXIT_MATCH = 0
EXIT_MISMATCH = 1
EXIT_ERROR = 2


def cmd_diff(args: argparse.Namespace) -> int:
    """
    Run one diff from parsed arguments.

    Returns:
        Exit status: 0 match, 1 mismatch, 2 error
    """
    metrics = DiffMetrics(registry=CollectorRegistry()) if args.metrics_file else None

    try:
        dsn = resolve_dsn(args.dsn)

        with ExitStack() as stack:
            if args.output:
                output_path = Path(args.output)
                output_path.parent.mkdir(parents=True, exist_ok=True)
                stream = stack.enter_context(
                    open(output_path, 'w', encoding='utf-8', newline='')
                )
            else:
                stream = sys.stdout

            renderer = create_renderer(args.format, stream, print_header=args.print_header)
            result = diff_tables(
                dsn,
                args.table1,
                args.table2,
                driver=args.driver,
                column=args.column,
                key=args.key,
                exclude_audit=args.modified,
                renderer=renderer,
                batch_size=args.batch_size,
                metrics=metrics,
            )

        if args.output:
            logger.info(f"Report saved to {args.output}")

    except SqlDiffError as e:
        logger.error(f"Diff failed: {e}")
        return EXIT_ERROR
    except Exception as e:
        logger.error(f"Diff failed: {type(e).__name__}: {e}", exc_info=True)
        return EXIT_ERROR
    finally:
        if metrics is not None:
            try:
                metrics.write_textfile(args.metrics_file)
            except OSError as e:
                logger.error(f"Cannot write metrics to {args.metrics_file}: {e}")

    if result.matched:
        return EXIT_MATCH
    logger.warning(f"Tables differ: {result.mismatched_rows} rows")
    return EXIT_MISMATCH
