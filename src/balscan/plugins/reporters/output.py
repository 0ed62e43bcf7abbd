"""Resolution of the directory that receives report files."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from balscan.bootstrap.paths import ScanPaths
from balscan.core.logging import get_logger
from balscan.core.project import Project
from balscan.plugins.reporters.base import ReportError

LOGGER = get_logger(__name__)


def resolve_report_dir(project: Project, directory_name: Optional[str] = None) -> Path:
    """Return the report directory for a project, creating it if missing.

    A supplied ``directory_name`` is honoured only for build projects, where
    it is resolved against the package root; every other case falls back to
    ``<target_dir>/report``.

    Raises:
        ReportError: If the directory cannot be created.
    """
    if directory_name and project.source_root is not None:
        report_dir = project.source_root / directory_name
    else:
        if directory_name:
            LOGGER.debug(f"Ignoring report directory '{directory_name}' for a single-file project")
        report_dir = ScanPaths(project.target_dir).report_dir

    try:
        report_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ReportError(f"Cannot create report directory {report_dir}: {e}") from e
    return report_dir
