"""Thread-safe accumulation of issues during analysis."""

from __future__ import annotations

import threading
from typing import Iterable, List, Tuple

from balscan.core.models import Issue


class IssueReporter:
    """Collects issues in discovery order.

    Issues may be recorded from several threads. After ``freeze()`` the
    analysis phase is over and further ``record`` calls are rejected.
    """

    def __init__(self) -> None:
        self._issues: List[Issue] = []
        self._lock = threading.Lock()
        self._frozen = False

    def record(self, issue: Issue) -> None:
        with self._lock:
            if self._frozen:
                raise RuntimeError("Cannot record issues after analysis has finished")
            self._issues.append(issue)

    def record_all(self, issues: Iterable[Issue]) -> None:
        """Record a batch atomically, preserving its order."""
        batch = list(issues)
        with self._lock:
            if self._frozen:
                raise RuntimeError("Cannot record issues after analysis has finished")
            self._issues.extend(batch)

    def issues(self) -> Tuple[Issue, ...]:
        with self._lock:
            return tuple(self._issues)

    def freeze(self) -> Tuple[Issue, ...]:
        """End the analysis phase and return the final snapshot."""
        with self._lock:
            self._frozen = True
            return tuple(self._issues)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __len__(self) -> int:
        with self._lock:
            return len(self._issues)
