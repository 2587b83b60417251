"""
Command-line argument parser configuration.

This module sets up the argument parser for the kvcheck CLI tool,
defining all commands and their options.
"""

import argparse

from ..config import SchemaVariant
from ..stores import STORES


def _percent(text: str) -> int:
    value = int(text)
    if not 0 <= value <= 100:
        raise argparse.ArgumentTypeError(f"must be in [0, 100], got {value}")
    return value


def create_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser for the CLI.

    Run options default to None so that only flags given explicitly
    override the configuration file and environment.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="kvcheck",
        description="Differential tester for key-value stores",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Row-store run with a fixed seed
  kvcheck run --variant row --rows 1000 --ops 5000 --seed 42

  # Fixed-length column store, 3 bits per value, operation trace to a file
  kvcheck run --variant fix --bitcnt 3 --log-ops --ops-log-file ops.log

  # Ten runs with randomly drawn configurations, JSON report
  kvcheck run --random-config --runs 10 --format json --output report.json

  # Render a saved report
  kvcheck report --input report.json
        """
    )

    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        default='INFO',
        help='Logging level (default: INFO)'
    )
    parser.add_argument('--log-file', help='Also write logs to this file (rotated)')
    parser.add_argument(
        '--json-logs',
        action='store_true',
        help='Emit logs as JSON lines'
    )
    parser.add_argument(
        '--ops-log-file',
        help='Write the operation trace to this file instead of the main log'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # ========== Run command ==========
    run_parser = subparsers.add_parser('run', help='Execute test runs')
    run_parser.add_argument('--config', help='JSON configuration file')
    run_parser.add_argument(
        '--variant',
        choices=[v.value for v in SchemaVariant],
        help='Schema variant (default: row)'
    )
    run_parser.add_argument('--rows', type=int, help='Initial row count')
    run_parser.add_argument('--ops', type=int, help='Operations per run')
    run_parser.add_argument('--delete-pct', type=_percent, help='Percentage of deletes')
    run_parser.add_argument('--insert-pct', type=_percent, help='Percentage of inserts')
    run_parser.add_argument('--write-pct', type=_percent, help='Percentage of updates')
    run_parser.add_argument('--bitcnt', type=int, help='Value bit width for the fix variant')
    run_parser.add_argument('--seed', type=int, help='Base random seed')
    run_parser.add_argument('--runs', type=int, help='Number of runs')
    run_parser.add_argument(
        '--reverse',
        action='store_true',
        default=None,
        help='Use the reverse collation (row variant only)'
    )
    run_parser.add_argument(
        '--log-ops',
        action='store_true',
        default=None,
        help='Log every operation'
    )
    run_parser.add_argument('--sut', choices=sorted(STORES), help='Store under test (default: sqlite)')
    run_parser.add_argument('--oracle', choices=sorted(STORES), help='Reference store (default: memory)')
    run_parser.add_argument('--home', help='Directory for on-disk stores')
    run_parser.add_argument(
        '--random-config',
        action='store_true',
        help='Draw every unspecified setting from the seed'
    )
    run_parser.add_argument(
        '--output',
        help='Output file path for report'
    )
    run_parser.add_argument(
        '--format',
        choices=['console', 'json'],
        default='console',
        help='Output format (default: console)'
    )
    run_parser.add_argument(
        '--metrics-port',
        type=int,
        help='Expose Prometheus metrics on this port'
    )
    run_parser.add_argument(
        '--otlp-endpoint',
        help='Export traces to this OTLP collector'
    )

    # ========== Report command ==========
    report_parser = subparsers.add_parser('report', help='Render a saved report')
    report_parser.add_argument(
        '--input',
        required=True,
        help='Input JSON report file'
    )
    report_parser.add_argument(
        '--format',
        choices=['console', 'json'],
        default='console',
        help='Output format (default: console)'
    )
    report_parser.add_argument(
        '--output',
        help='Output file path (required for json format)'
    )

    return parser
