"""JSON reporter plugin for balscan."""

from __future__ import annotations

import json
from pathlib import Path
from typing import IO, Any, Dict, List, Optional, Sequence

from balscan.core.fs import atomic_write
from balscan.core.logging import get_logger
from balscan.core.models import Issue
from balscan.core.project import Project
from balscan.plugins.reporters.base import ReporterPlugin, ReportError
from balscan.plugins.reporters.output import resolve_report_dir

LOGGER = get_logger(__name__)

RESULTS_JSON_FILE = "scan_results.json"


class JSONReporter(ReporterPlugin):
    """Reporter plugin that outputs the issue list as a JSON array.

    Each element carries the qualified rule id, the rule kind as
    ``severity``, the issue provenance as ``issueType``, the message, the
    file and the text range exactly as reported by the provider.
    """

    @property
    def name(self) -> str:
        return "json"

    def report(self, issues: Sequence[Issue], output: IO[str]) -> None:
        """Format issues as JSON and write to output.

        Args:
            issues: Issues to format.
            output: Output stream to write to.
        """
        output.write(self.render(issues))
        output.write("\n")

    def render(self, issues: Sequence[Issue]) -> str:
        return json.dumps(self._format_issues(issues), indent=2)

    def save_to_directory(
        self,
        issues: Sequence[Issue],
        project: Project,
        directory_name: Optional[str] = None,
    ) -> Path:
        """Write ``scan_results.json`` into the project's report directory.

        Args:
            issues: Issues to save.
            project: Scanned project.
            directory_name: Optional report directory under the package root.

        Returns:
            Path of the written JSON file.

        Raises:
            ReportError: If the report cannot be written.
        """
        report_dir = resolve_report_dir(project, directory_name)
        json_path = report_dir / RESULTS_JSON_FILE
        try:
            atomic_write(json_path, self.render(issues))
        except OSError as e:
            raise ReportError(f"Cannot write {json_path}: {e}") from e
        LOGGER.debug(f"Saved {len(issues)} issue(s) to {json_path}")
        return json_path

    def _format_issues(self, issues: Sequence[Issue]) -> List[Dict[str, Any]]:
        return [issue_to_dict(issue, include_file=True) for issue in issues]


def issue_to_dict(issue: Issue, include_file: bool = False) -> Dict[str, Any]:
    """Convert an Issue to a JSON-serializable dict."""
    line_range = issue.location.line_range
    data: Dict[str, Any] = {
        "ruleID": issue.rule_id,
        "severity": issue.rule.kind.value,
        "issueType": issue.source.value,
        "message": issue.display_message,
    }
    if include_file:
        data["fileName"] = issue.location.file_name
        data["filePath"] = str(issue.location.file_path)
    data["textRange"] = {
        "startLine": line_range.start.line,
        "startLineOffset": line_range.start.offset,
        "endLine": line_range.end.line,
        "endLineOffset": line_range.end.offset,
    }
    return data
