"""
CLI command implementations.

This module contains the implementation of the CLI commands:
- run: Execute one or more differential test runs
- report: Render a report saved by a previous run
"""

import argparse
import json
import logging
import random
from pathlib import Path
from typing import Any

from kvutils.metrics import HarnessMetrics, MetricsPublisher
from kvutils.tracing import initialize_tracing, shutdown_tracing

from ..config import RunConfig, config_from_env, randomize_config, read_config_file
from ..errors import HarnessError
from ..events import LoggingEventHandler
from ..report import (
    export_report_json,
    format_report_console,
    generate_report,
    load_report_json,
)
from ..runner import Runner

logger = logging.getLogger(__name__)

# argparse destination -> RunConfig field
RUN_OPTIONS = (
    "variant", "rows", "ops", "delete_pct", "insert_pct", "write_pct", "bitcnt",
    "seed", "runs", "reverse", "log_ops", "sut", "oracle", "home",
)


def build_config(args: argparse.Namespace, environ: dict[str, str] | None = None) -> RunConfig:
    """
    Assemble the run configuration from file, environment and flags

    Later sources win. With ``--random-config`` every field that none of
    them set is drawn from the seed.

    Args:
        args: Parsed command-line arguments
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Validated RunConfig

    Raises:
        ConfigurationError: If any source holds an invalid value
    """
    overrides: dict[str, Any] = {}
    if args.config:
        overrides.update(read_config_file(args.config))
    overrides.update(config_from_env(environ))
    overrides.update({
        name: getattr(args, name) for name in RUN_OPTIONS if getattr(args, name, None) is not None
    })

    if getattr(args, "random_config", False):
        seed = overrides.pop("seed", None)
        if seed is None:
            seed = random.SystemRandom().randrange(2 ** 32)
        logger.info(f"Drawing configuration from seed {seed}")
        return randomize_config(seed, **overrides)

    return RunConfig().merged(**overrides)


def _emit(report: dict[str, Any], fmt: str, output: str | None) -> None:
    if output:
        output_path = Path(output)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        if fmt == "json":
            export_report_json(report, output_path)
            logger.info(f"Report saved to {output_path}")
        else:
            output_path.write_text(format_report_console(report) + "\n", encoding="utf-8")
            logger.info(f"Report saved to {output_path}")
    elif fmt == "json":
        print(json.dumps(report, indent=2))
    else:
        print(format_report_console(report))


def cmd_run(args: argparse.Namespace) -> int:
    """
    Execute the configured runs

    Args:
        args: Parsed command-line arguments

    Returns:
        Process exit code: 0 when every run passed, 1 otherwise
    """
    try:
        config = build_config(args)
    except HarnessError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    logger.info(
        f"Starting {config.runs} run(s): variant={config.variant.value} "
        f"rows={config.rows} ops={config.ops} sut={config.sut} oracle={config.oracle}"
    )

    metrics = HarnessMetrics()
    publisher = None
    if args.metrics_port:
        publisher = MetricsPublisher(port=args.metrics_port)
        publisher.start()
    initialize_tracing(otlp_endpoint=args.otlp_endpoint)

    try:
        runner = Runner(config, events=LoggingEventHandler(metrics), metrics=metrics)
        summaries = runner.run_all()
    finally:
        shutdown_tracing()
        if publisher is not None:
            publisher.stop()

    report = generate_report(config, summaries)
    _emit(report, args.format, args.output)

    if report["status"] != "PASS":
        logger.warning("Stores diverged; see the failing run above")
        return 1
    logger.info("All runs passed")
    return 0


def cmd_report(args: argparse.Namespace) -> int:
    """
    Render a report from a previous run's JSON file

    Args:
        args: Parsed command-line arguments

    Returns:
        Process exit code
    """
    logger.info(f"Loading report from {args.input}")

    try:
        report = load_report_json(args.input)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Failed to load report: {e}")
        return 1

    if args.format == "json" and not args.output:
        logger.error("Output file required for JSON format")
        return 1

    _emit(report, args.format, args.output)
    return 0
