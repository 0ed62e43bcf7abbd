"""CLI runner orchestration.

This module handles command dispatch and execution for the balscan CLI.
"""

from __future__ import annotations

import traceback
from importlib.metadata import PackageNotFoundError, version
from typing import Iterable, Optional

from balscan.cli.arguments import build_parser
from balscan.cli.commands.list_rules import ListRulesCommand
from balscan.cli.commands.scan import ScanCommand
from balscan.cli.exit_codes import EXIT_SCAN_ERROR, EXIT_SUCCESS
from balscan.core.logging import configure_logging, get_logger

LOGGER = get_logger(__name__)


def get_version() -> str:
    """Get balscan version.

    Returns:
        Version string from package metadata or fallback.
    """
    try:
        return version("balscan")
    except PackageNotFoundError:
        # Fallback for source checkouts without installed metadata.
        from balscan import __version__
        return __version__


class CLIRunner:
    """Orchestrates CLI execution with subcommand dispatch."""

    def __init__(self) -> None:
        """Initialize CLIRunner with parser and commands."""
        self.parser = build_parser()
        self._version = get_version()
        self.scan_cmd = ScanCommand(version=self._version)
        self.list_rules_cmd = ListRulesCommand(version=self._version)

    def run(self, argv: Optional[Iterable[str]] = None) -> int:
        """Run the CLI.

        Args:
            argv: Command-line arguments (defaults to sys.argv).

        Returns:
            Exit code.
        """
        # Handle --help specially to return 0
        if argv is not None:
            argv_list = list(argv)
            if argv_list in (["--help"], ["-h"]):
                self.parser.print_help()
                return EXIT_SUCCESS
        else:
            argv_list = None

        args = self.parser.parse_args(argv_list)

        # Configure logging as early as possible
        configure_logging(
            debug=args.debug,
            verbose=args.verbose,
            quiet=args.quiet,
        )

        if args.version:
            print(self._version)
            return EXIT_SUCCESS

        command = getattr(args, "command", None)

        if command == "scan":
            return self._handle_scan(args)

        # No command specified - show help
        self.parser.print_help()
        return EXIT_SUCCESS

    def _handle_scan(self, args) -> int:
        """Handle the scan command.

        Args:
            args: Parsed command-line arguments.

        Returns:
            Exit code.
        """
        command = self.list_rules_cmd if args.list_rules else self.scan_cmd
        try:
            return command.execute(args)
        except Exception as e:
            if args.debug:
                traceback.print_exc()
            LOGGER.error(f"Scan failed: {e}")
            return EXIT_SCAN_ERROR
