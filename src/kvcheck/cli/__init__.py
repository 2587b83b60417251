"""
Command-line interface for kvcheck.

Available commands:
- run: Execute differential test runs
- report: Render a report saved by a previous run
"""

import sys

from kvutils.logging import configure_from_env, setup_logging

from .commands import build_config, cmd_report, cmd_run
from .parser import create_parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the kvcheck CLI"""
    parser = create_parser()
    args = parser.parse_args(argv)

    # Flags win over KVCHECK_LOG_* variables
    if args.log_file or args.json_logs or args.ops_log_file or args.log_level != "INFO":
        setup_logging(
            level=args.log_level,
            log_file=args.log_file,
            json_format=args.json_logs,
            ops_log_file=args.ops_log_file,
        )
    else:
        configure_from_env()

    if args.command == 'run':
        sys.exit(cmd_run(args))
    elif args.command == 'report':
        sys.exit(cmd_report(args))
    else:
        parser.print_help()
        sys.exit(1)


__all__ = [
    'main',
    'build_config',
    'cmd_run',
    'cmd_report',
    'create_parser',
]


if __name__ == '__main__':
    main()
