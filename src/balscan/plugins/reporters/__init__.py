"""Reporter plugins for balscan output formatting."""

from balscan.plugins.reporters.base import ReporterPlugin, ReportError
from balscan.plugins.reporters.html_reporter import HTMLReporter
from balscan.plugins.reporters.json_reporter import JSONReporter
from balscan.plugins.reporters.output import resolve_report_dir
from balscan.plugins.reporters.rules_reporter import RulesReporter

__all__ = [
    "HTMLReporter",
    "JSONReporter",
    "ReportError",
    "ReporterPlugin",
    "RulesReporter",
    "resolve_report_dir",
]
