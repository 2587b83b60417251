"""
Run report generation and formatting.
"""

from .formatters import (
    export_report_json,
    format_report_console,
    generate_report,
    load_report_json,
)

__all__ = [
    'generate_report',
    'export_report_json',
    'load_report_json',
    'format_report_console',
]
