"""HTML reporter plugin for balscan.

The report is a static single-page application shipped as a zip archive in
``balscan.resources``. The archive is extracted into the report directory
and the ``__data__`` placeholder in ``index.html`` is replaced with the scan
payload:

    {
      "projectName": "...",
      "scannedFiles": [
        {"fileName": "...", "filePath": "...", "fileContent": "...", "issues": [...]}
      ]
    }
"""

from __future__ import annotations

import io
import json
import zipfile
from importlib.resources import files
from pathlib import Path
from typing import IO, Any, Dict, List, Optional, Sequence

from balscan.core.fs import atomic_write, is_within
from balscan.core.logging import get_logger
from balscan.core.models import Issue
from balscan.core.project import Project
from balscan.plugins.reporters.base import ReporterPlugin, ReportError
from balscan.plugins.reporters.json_reporter import issue_to_dict
from balscan.plugins.reporters.output import resolve_report_dir

LOGGER = get_logger(__name__)

RESULTS_HTML_FILE = "index.html"
SCAN_REPORT_ZIP_FILE = "scan_report.zip"
REPORT_DATA_PLACEHOLDER = "__data__"


class HTMLReporter(ReporterPlugin):
    """Reporter plugin that renders the bundled HTML report."""

    def __init__(self, template_archive: Optional[Path] = None) -> None:
        """Initialize the reporter.

        Args:
            template_archive: Report template zip; defaults to the packaged one.
        """
        self._template_archive = template_archive

    @property
    def name(self) -> str:
        return "html"

    def report(self, issues: Sequence[Issue], output: IO[str], project_name: str = "") -> None:
        """Write the report payload (without the template) to output.

        ``projectName`` is empty unless ``project_name`` is given.
        """
        json.dump(self.build_payload(issues, project_name), output, indent=2)
        output.write("\n")

    def generate(
        self,
        issues: Sequence[Issue],
        project: Project,
        directory_name: Optional[str] = None,
    ) -> Path:
        """Extract the template and write the populated ``index.html``.

        Args:
            issues: Final issue list.
            project: Scanned project.
            directory_name: Optional report directory under the package root.

        Returns:
            Path of the generated ``index.html``.

        Raises:
            ReportError: If a source file, the template or the report
                directory cannot be read or written.
        """
        payload = self.build_payload(issues, project.name)
        report_dir = resolve_report_dir(project, directory_name)

        self._extract_template(report_dir)

        html_path = report_dir / RESULTS_HTML_FILE
        try:
            content = html_path.read_text(encoding="utf-8")
        except OSError as e:
            raise ReportError(f"Report template has no readable {RESULTS_HTML_FILE}: {e}") from e

        if REPORT_DATA_PLACEHOLDER not in content:
            LOGGER.warning(f"{RESULTS_HTML_FILE} has no {REPORT_DATA_PLACEHOLDER} placeholder")
        content = content.replace(REPORT_DATA_PLACEHOLDER, _script_safe_json(payload))

        try:
            atomic_write(html_path, content)
        except OSError as e:
            raise ReportError(f"Cannot write {html_path}: {e}") from e
        LOGGER.debug(f"Generated HTML report at {html_path}")
        return html_path

    def build_payload(self, issues: Sequence[Issue], project_name: str) -> Dict[str, Any]:
        """Group issues by file path in first-seen order.

        Each file's content is read once, when the file is first seen.

        Raises:
            ReportError: If a file referenced by an issue cannot be read.
        """
        scanned_files: Dict[str, Dict[str, Any]] = {}
        for issue in issues:
            file_path = str(issue.location.file_path)
            entry = scanned_files.get(file_path)
            if entry is None:
                entry = {
                    "fileName": issue.location.file_name,
                    "filePath": file_path,
                    "fileContent": _read_source(issue.location.file_path),
                    "issues": [],
                }
                scanned_files[file_path] = entry
            entry["issues"].append(issue_to_dict(issue))

        return {
            "projectName": project_name,
            "scannedFiles": list(scanned_files.values()),
        }

    def _extract_template(self, report_dir: Path) -> List[Path]:
        """Unpack the template archive into the report directory."""
        extracted: List[Path] = []
        try:
            with zipfile.ZipFile(io.BytesIO(self._read_archive())) as archive:
                for info in archive.infolist():
                    if info.is_dir():
                        continue
                    destination = report_dir / info.filename
                    if not is_within(destination, report_dir):
                        raise ReportError(f"Report template entry escapes the report directory: {info.filename}")
                    destination.parent.mkdir(parents=True, exist_ok=True)
                    atomic_write(destination, archive.read(info))
                    extracted.append(destination)
        except zipfile.BadZipFile as e:
            raise ReportError(f"Report template is not a valid zip archive: {e}") from e
        except OSError as e:
            raise ReportError(f"Cannot extract report template into {report_dir}: {e}") from e
        return extracted

    def _read_archive(self) -> bytes:
        if self._template_archive is not None:
            return self._template_archive.read_bytes()
        return files("balscan.resources").joinpath(SCAN_REPORT_ZIP_FILE).read_bytes()


def _read_source(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ReportError(f"Failed to read {path}: {e}") from e


def _script_safe_json(payload: Dict[str, Any]) -> str:
    # Payload is embedded in a <script> block
    return json.dumps(payload, indent=2).replace("</", "<\\/")
