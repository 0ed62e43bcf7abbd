"""Argument parser construction for balscan CLI.

This module builds the argument parser with subcommands:
- balscan scan         - Analyze a project and write reports
- balscan scan --list-rules - List the available rules
"""

from __future__ import annotations

import argparse
from typing import List

from balscan.pipeline.executor import DEFAULT_MAX_WORKERS


def comma_separated(value: str) -> List[str]:
    """Split a comma separated option value, dropping empty items."""
    return [item.strip() for item in value.split(",") if item.strip()]


def _add_global_options(parser: argparse.ArgumentParser) -> None:
    """Add global options available to all commands."""
    parser.add_argument(
        "--version",
        action="store_true",
        help="Show balscan version and exit.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging.",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (info-level) logging.",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Reduce logging output to errors only.",
    )


def _build_scan_parser(subparsers: argparse._SubParsersAction) -> None:
    """Build the 'scan' subcommand parser."""
    scan_parser = subparsers.add_parser(
        "scan",
        help="Run static code analysis on a Ballerina project.",
        description=(
            "Run the core rules and the analyzers declared in Scan.toml. "
            "Issues are printed as JSON and saved to scan_results.json."
        ),
    )

    target_group = scan_parser.add_argument_group("targets")
    target_group.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Ballerina package directory or single .bal file (default: current directory).",
    )

    output_group = scan_parser.add_argument_group("output")
    output_group.add_argument(
        "--target-dir",
        metavar="DIR",
        help="Directory, relative to the package root, that receives the reports "
             "(default: target/report).",
    )
    output_group.add_argument(
        "--scan-report",
        action="store_true",
        help="Also generate the HTML scan report.",
    )
    output_group.add_argument(
        "--list-rules",
        action="store_true",
        help="List the available rules instead of scanning.",
    )
    output_group.add_argument(
        "--quiet-progress",
        action="store_true",
        help="Do not print progress messages to stderr.",
    )

    rules_group = scan_parser.add_argument_group("rules")
    rules_group.add_argument(
        "--include-rules",
        type=comma_separated,
        default=[],
        metavar="IDS",
        help="Comma separated rule ids to run, e.g. ballerina:1,org/name:2.",
    )
    rules_group.add_argument(
        "--exclude-rules",
        type=comma_separated,
        default=[],
        metavar="IDS",
        help="Comma separated rule ids to skip.",
    )

    exec_group = scan_parser.add_argument_group("execution")
    exec_group.add_argument(
        "--platforms",
        type=comma_separated,
        default=[],
        metavar="NAMES",
        help="Comma separated platforms from Scan.toml that receive the results.",
    )
    exec_group.add_argument(
        "--max-workers",
        type=int,
        default=DEFAULT_MAX_WORKERS,
        metavar="N",
        help=f"Run up to N analyzers in parallel (default: {DEFAULT_MAX_WORKERS}).",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser for balscan CLI.

    Returns:
        Configured ArgumentParser instance with subcommands.
    """
    parser = argparse.ArgumentParser(
        prog="balscan",
        description="balscan - Static code analysis for Ballerina projects.",
        epilog=(
            "Examples:\n"
            "  balscan scan                          # Scan the current package\n"
            "  balscan scan --scan-report            # Also write the HTML report\n"
            "  balscan scan --list-rules             # Show available rules\n"
            "  balscan scan --include-rules ballerina:1\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    _add_global_options(parser)

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        description="Available commands:",
        metavar="COMMAND",
    )

    _build_scan_parser(subparsers)

    return parser
