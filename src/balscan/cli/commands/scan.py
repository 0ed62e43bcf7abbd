"""Scan command implementation."""

from __future__ import annotations

import sys
from argparse import Namespace
from pathlib import Path
from typing import Optional, TextIO

from balscan.bootstrap.cache import ArtifactDownloadError
from balscan.cli.commands import Command
from balscan.cli.exit_codes import (
    EXIT_CONFIG_ERROR,
    EXIT_INVALID_USAGE,
    EXIT_REPORT_ERROR,
    EXIT_SCAN_ERROR,
    EXIT_SUCCESS,
)
from balscan.config.loader import ConfigError
from balscan.core.logging import get_logger
from balscan.core.models import InvalidLocationError, ScanResult
from balscan.core.project import Project, ProjectError, load_project
from balscan.core.streaming import CLIStreamHandler, NullStreamHandler, StreamHandler
from balscan.pipeline import AnalysisError, PipelineConfig, ScanPipeline
from balscan.plugins.platforms import PlatformError, dispatch_to_platforms
from balscan.plugins.reporters import HTMLReporter, JSONReporter, ReportError
from balscan.rules.catalog import RuleIntegrityError

LOGGER = get_logger(__name__)

_STAGE = "report"


def build_stream_handler(args: Namespace) -> StreamHandler:
    """Progress messages go to stderr unless --quiet-progress is given."""
    if getattr(args, "quiet_progress", False):
        return NullStreamHandler()
    return CLIStreamHandler(output=sys.stderr)


def build_pipeline(
    args: Namespace,
    project: Project,
    stream_handler: StreamHandler,
    version: str,
) -> ScanPipeline:
    """Create the scan pipeline for the parsed command line."""
    pipeline_config = PipelineConfig(
        max_workers=getattr(args, "max_workers", 1),
        include_rules=list(getattr(args, "include_rules", None) or []),
        exclude_rules=list(getattr(args, "exclude_rules", None) or []),
    )
    return ScanPipeline(
        project,
        pipeline_config=pipeline_config,
        stream_handler=stream_handler,
        balscan_version=version,
    )


def log_scan_summary(result: ScanResult) -> None:
    """Log per-provider counts and the issue totals of a finished scan."""
    for run in result.provider_runs:
        LOGGER.info(f"{run.provider}: ran {run.rules_run} rule(s), {run.issues_found} issue(s) reported")
    by_source = result.issues_by_source()
    totals = ", ".join(f"{source.value}={count}" for source, count in by_source.items()) or "none"
    LOGGER.info(f"Total issues: {len(result.issues)} ({totals})")
    if result.metadata:
        LOGGER.debug(
            f"Scan of {result.metadata.get('project_name')} took {result.metadata.get('duration_ms')}ms "
            f"(balscan {result.metadata.get('balscan_version')})"
        )


def load_target_project(args: Namespace) -> Optional[Project]:
    """Load the project named on the command line, logging failures."""
    try:
        return load_project(Path(args.path).resolve())
    except ProjectError as e:
        LOGGER.error(str(e))
        return None


class ScanCommand(Command):
    """Runs static code analysis and writes the reports."""

    def __init__(self, version: str, output: Optional[TextIO] = None):
        """Initialize ScanCommand.

        Args:
            version: Current balscan version string.
            output: Stream receiving the JSON issue list (defaults to stdout).
        """
        self._version = version
        self._output = output

    @property
    def name(self) -> str:
        """Command identifier."""
        return "scan"

    def execute(self, args: Namespace) -> int:
        """Execute the scan command.

        Args:
            args: Parsed command-line arguments.

        Returns:
            Exit code of the first failing stage, or EXIT_SUCCESS.
        """
        project = load_target_project(args)
        if project is None:
            return EXIT_INVALID_USAGE

        stream = build_stream_handler(args)
        pipeline = build_pipeline(args, project, stream, self._version)

        try:
            config = pipeline.resolve_configuration()
        except (ConfigError, ArtifactDownloadError) as e:
            LOGGER.error(f"Failed to load scan configuration: {e}")
            return EXIT_CONFIG_ERROR

        try:
            result = pipeline.execute(config)
        except (ConfigError, ArtifactDownloadError) as e:
            LOGGER.error(f"Failed to load analyzers: {e}")
            return EXIT_CONFIG_ERROR
        except (RuleIntegrityError, InvalidLocationError, AnalysisError) as e:
            LOGGER.error(f"Analysis failed: {e}")
            return EXIT_SCAN_ERROR

        log_scan_summary(result)

        try:
            self._write_reports(args, project, result, stream)
        except ReportError as e:
            LOGGER.error(f"Failed to write reports: {e}")
            return EXIT_REPORT_ERROR

        platforms = getattr(args, "platforms", None) or []
        if platforms:
            try:
                dispatch_to_platforms(
                    config.platforms,
                    platforms,
                    result.issues,
                    project,
                    stream_handler=stream,
                )
            except PlatformError as e:
                LOGGER.error(str(e))
                return EXIT_REPORT_ERROR

        return EXIT_SUCCESS

    def _write_reports(
        self,
        args: Namespace,
        project: Project,
        result: ScanResult,
        stream: StreamHandler,
    ) -> None:
        output = self._output or sys.stdout
        json_reporter = JSONReporter()
        output.write("\n")
        json_reporter.report(result.issues, output)

        json_path = json_reporter.save_to_directory(result.issues, project, args.target_dir)
        stream.status(_STAGE, f"View scan results at: {json_path.as_uri()}")

        if getattr(args, "scan_report", False):
            html_path = HTMLReporter().generate(result.issues, project, args.target_dir)
            stream.status(_STAGE, f"View scan report at: {html_path.as_uri()}")
