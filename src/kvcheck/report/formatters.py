"""
Run report formatting and export utilities.

A report is a plain dict: the configuration, an overall status and the
list of run summaries. It can be printed for a terminal or exported to
and loaded back from JSON.
"""

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from ..config import RunConfig
from ..runner import STATUS_FAIL, STATUS_PASS, RunSummary


def generate_report(config: RunConfig, summaries: list[RunSummary]) -> dict[str, Any]:
    """
    Build a report from completed runs

    Args:
        config: Configuration the runs were executed with
        summaries: Run summaries in execution order

    Returns:
        Dictionary containing:
        - status: PASS, FAIL or NO_DATA
        - timestamp: ISO format timestamp
        - total_runs / runs_passed / runs_failed
        - config: Configuration as a dict
        - runs: Each run summary as a dict
    """
    failed = sum(1 for s in summaries if not s.passed)
    if not summaries:
        status = "NO_DATA"
    else:
        status = STATUS_FAIL if failed else STATUS_PASS

    return {
        "status": status,
        "timestamp": datetime.now(UTC).isoformat(),
        "total_runs": len(summaries),
        "runs_passed": len(summaries) - failed,
        "runs_failed": failed,
        "config": config.to_dict(),
        "runs": [s.to_dict() for s in summaries],
    }


def export_report_json(report: dict[str, Any], output_path: str | Path) -> None:
    """
    Export report to JSON file

    Args:
        report: Report dictionary
        output_path: Path to output file
    """
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(report, f, indent=2)


def load_report_json(input_path: str | Path) -> dict[str, Any]:
    with open(input_path, encoding="utf-8") as f:
        return json.load(f)


def _format_counts(counts: dict[str, int]) -> str:
    if not counts:
        return "-"
    return ", ".join(f"{name}={count:,}" for name, count in sorted(counts.items()))


def format_report_console(report: dict[str, Any]) -> str:
    """
    Format report for console output

    Args:
        report: Report dictionary

    Returns:
        Formatted string for console display
    """
    lines = []

    lines.append("=" * 80)
    lines.append("KVCHECK REPORT")
    lines.append("=" * 80)
    lines.append(f"Status: {report['status']}")
    lines.append(f"Timestamp: {report['timestamp']}")
    lines.append(f"Total Runs: {report['total_runs']}")
    lines.append(f"Runs Passed: {report['runs_passed']}")
    lines.append(f"Runs Failed: {report['runs_failed']}")

    config = report.get("config") or {}
    if config:
        lines.append(
            f"Stores: sut={config.get('sut')} oracle={config.get('oracle')}, "
            f"variant {config.get('variant')}"
        )
    lines.append("")

    for run in report["runs"]:
        lines.append(f"RUN {run['run']} (seed {run['seed']}): {run['status']}")
        lines.append("-" * 80)
        lines.append(f"  Variant: {run['variant']}")
        lines.append(f"  Rows: {run['rows_initial']:,} -> {run['rows_final']:,}")
        lines.append(f"  Loaded: {run['loaded']:,}  Scanned: {run['scanned']:,}  Dumped: {run['dumped']:,}")
        lines.append(f"  Operations: {_format_counts(run['operations'])}")
        lines.append(f"  Not found: {_format_counts(run['notfound'])}")
        lines.append(f"  Duration: {run['duration_seconds']:.2f}s")
        if run.get("error"):
            lines.append("  Error:")
            lines.extend(f"    {line}" for line in run["error"].splitlines())
        lines.append("")

    lines.append("=" * 80)

    return "\n".join(lines)
