"""
Command-line argument parser configuration.

Long options also accept the single-dash spelling (``-dsn``, ``-table1``)
so existing invocations keep working.
"""

import argparse

from ..report.formatters import FORMATS
from ..source import DatabaseType


def create_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser for the CLI.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="sqldiff",
        description="Compare two tables row by row in primary key order",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exit status:
  0  tables match
  1  tables differ
  2  an error occurred

Examples:
  # Snapshot, migrate, then compare
  sqldiff --dsn ~/dbinfo.json --table1 bak_users --table2 users

  # Ignore audit columns and print table headers
  sqldiff --dsn 'app:secret@tcp(127.0.0.1:3306)/shop' \\
      --table1 bak_orders --table2 orders --modified -p

  # Restrict rows and columns, write a JSON report
  sqldiff --dsn ~/dbinfo.json --table1 "bak_orders WHERE shop_id = 3" \\
      --table2 "orders WHERE shop_id = 3" --column id,total,status \\
      --format json --output orders-diff.json
        """
    )

    parser.add_argument(
        '--dsn', '-dsn',
        help='Data source name user:pass@tcp(host:port)/db, or a *.json connection '
             'file (default: $SQLDIFF_DSN)'
    )
    parser.add_argument(
        '--driver', '-driver',
        choices=[db_type.value for db_type in DatabaseType],
        default=DatabaseType.MYSQL.value,
        help='Database driver (default: mysql)'
    )
    parser.add_argument(
        '--table1', '-table1',
        required=True,
        help='Left table, optionally with a WHERE clause'
    )
    parser.add_argument(
        '--table2', '-table2',
        required=True,
        help='Right table, optionally with a WHERE clause'
    )
    parser.add_argument(
        '--column', '-column',
        default='*',
        help='Comma-separated columns to compare (default: *)'
    )
    parser.add_argument(
        '--key',
        default='id',
        help='Ordering / identity column (default: id)'
    )
    parser.add_argument(
        '--modified', '-modified',
        action='store_true',
        help='Ignore created, created_user, modified, modified_user'
    )
    parser.add_argument(
        '-p', '--print-header',
        dest='print_header',
        action='store_true',
        help='Print ---/+++ table names before the first difference'
    )
    parser.add_argument(
        '--format',
        choices=list(FORMATS),
        default='console',
        help='Output format (default: console)'
    )
    parser.add_argument(
        '--output',
        help='Write the report to this file instead of stdout'
    )
    parser.add_argument(
        '--batch-size',
        type=int,
        default=1000,
        help='Rows fetched per round trip (default: 1000)'
    )
    parser.add_argument(
        '--metrics-file',
        help='Write Prometheus metrics for this run to a textfile-collector file'
    )
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level (default: $LOG_LEVEL or WARNING)'
    )

    return parser
