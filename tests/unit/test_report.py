"""
Unit tests for kvcheck.report
"""

import json

from kvcheck.config import RunConfig
from kvcheck.report import (
    export_report_json,
    format_report_console,
    generate_report,
    load_report_json,
)
from kvcheck.runner import STATUS_FAIL, RunSummary


def summary(run=1, status="PASS", error=None):
    s = RunSummary(run=run, seed=10 + run, variant="var", rows_initial=100, rows_final=104,
                   ops=50, loaded=100, scanned=204, dumped=98, status=status, error=error)
    s.operations.update({"read": 60, "insert": 4})
    s.notfound.update({"read": 2})
    return s


class TestGenerateReport:
    def test_all_passed(self):
        report = generate_report(RunConfig(variant="var"), [summary(1), summary(2)])
        assert report["status"] == "PASS"
        assert report["total_runs"] == 2
        assert report["runs_failed"] == 0
        assert report["config"]["variant"] == "var"

    def test_failure(self):
        report = generate_report(RunConfig(), [summary(1), summary(2, STATUS_FAIL, "read: boom")])
        assert report["status"] == "FAIL"
        assert report["runs_passed"] == 1

    def test_no_runs(self):
        assert generate_report(RunConfig(), [])["status"] == "NO_DATA"


class TestExport:
    def test_json_round_trip(self, tmp_path):
        report = generate_report(RunConfig(), [summary()])
        path = tmp_path / "report.json"

        export_report_json(report, path)

        assert json.loads(path.read_text())["runs"][0]["seed"] == 11
        assert load_report_json(path) == report


class TestConsoleFormat:
    def test_sections(self):
        output = format_report_console(generate_report(RunConfig(), [summary()]))
        assert "KVCHECK REPORT" in output
        assert "Status: PASS" in output
        assert "RUN 1 (seed 11): PASS" in output
        assert "Rows: 100 -> 104" in output
        assert "Operations: insert=4, read=60" in output
        assert "Not found: read=2" in output

    def test_error_lines_indented(self):
        failing = summary(1, STATUS_FAIL, "read: row 3: value mismatch\n\toracle {a}\n\tsut {b}")
        output = format_report_console(generate_report(RunConfig(), [failing]))
        assert "    read: row 3: value mismatch" in output
        assert "    \tsut {b}" in output
