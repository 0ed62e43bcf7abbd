"""Base class for reporter plugins."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import IO, Sequence

from balscan.core.models import Issue


class ReportError(Exception):
    """A report could not be written."""

    pass


class ReporterPlugin(ABC):
    """Base class for all issue reporters.

    Each reporter implements a specific output format (JSON, HTML, ...).
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Reporter identifier (e.g., 'json', 'html')."""

    @abstractmethod
    def report(self, issues: Sequence[Issue], output: IO[str]) -> None:
        """Format and write the final issues.

        Args:
            issues: Final issue list in discovery order.
            output: Output stream to write the formatted result.
        """
