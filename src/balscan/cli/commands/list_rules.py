"""List rules command implementation."""

from __future__ import annotations

import sys
from argparse import Namespace
from typing import Optional, TextIO

from balscan.bootstrap.cache import ArtifactDownloadError
from balscan.cli.commands import Command
from balscan.cli.commands.scan import build_pipeline, build_stream_handler, load_target_project
from balscan.cli.exit_codes import (
    EXIT_CONFIG_ERROR,
    EXIT_INVALID_USAGE,
    EXIT_SCAN_ERROR,
    EXIT_SUCCESS,
)
from balscan.config.loader import ConfigError
from balscan.core.logging import get_logger
from balscan.plugins.reporters import RulesReporter
from balscan.rules.catalog import RuleIntegrityError

LOGGER = get_logger(__name__)


class ListRulesCommand(Command):
    """Lists the core rules and the rules of every configured analyzer."""

    def __init__(self, version: str, output: Optional[TextIO] = None):
        self._version = version
        self._output = output

    @property
    def name(self) -> str:
        """Command identifier."""
        return "list_rules"

    def execute(self, args: Namespace) -> int:
        """Execute the list-rules command.

        Args:
            args: Parsed command-line arguments.

        Returns:
            Exit code.
        """
        project = load_target_project(args)
        if project is None:
            return EXIT_INVALID_USAGE

        pipeline = build_pipeline(args, project, build_stream_handler(args), self._version)
        try:
            catalog = pipeline.build_catalog(pipeline.resolve_configuration())
        except (ConfigError, ArtifactDownloadError) as e:
            LOGGER.error(f"Failed to load scan configuration: {e}")
            return EXIT_CONFIG_ERROR
        except RuleIntegrityError as e:
            LOGGER.error(str(e))
            return EXIT_SCAN_ERROR

        RulesReporter().report(catalog.rules(), self._output or sys.stdout)
        return EXIT_SUCCESS
