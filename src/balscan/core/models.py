"""Core domain models shared by rule providers, the pipeline and reporters.

Rules and issues are immutable value records. A rule is identified by the
provider that declares it plus a numeric id that is unique within that
provider; the qualified id (``ballerina:1``, ``org/name:3``) is the single
identity used for filtering, display and report grouping.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

if TYPE_CHECKING:
    from balscan.config.models import ScanConfiguration

# Qualifier of the built-in rule provider
CORE_PROVIDER_NAME = "ballerina"

# Repository marker for analyzers resolved from the local repository
LOCAL_REPOSITORY_NAME = "local"

# <core>:<digits> or <org>/<name>:<digits>
QUALIFIED_RULE_ID_PATTERN = re.compile(r"^(?:[^\s/:]+|[^\s/:]+/[^\s/:]+):\d+$")


class RuleKind(str, Enum):
    """Kinds of findings a rule can report."""

    CODE_SMELL = "CODE_SMELL"
    BUG = "BUG"
    VULNERABILITY = "VULNERABILITY"


class Source(str, Enum):
    """Provenance of an issue: the core rules or an external analyzer."""

    BUILT_IN = "BUILT_IN"
    EXTERNAL = "EXTERNAL"


class InvalidLocationError(ValueError):
    """A provider supplied a location that is not a valid text range."""


@dataclass(frozen=True)
class ProviderIdentity:
    """Identity of a rule provider.

    The core provider is the ``ballerina`` sentinel and has no organization.
    External analyzers are identified by ``org/name``; ``version`` and
    ``repository`` are carried for resolution and display but are not part
    of the qualified rule id.
    """

    name: str
    org: Optional[str] = None
    version: Optional[str] = None
    repository: Optional[str] = None

    @classmethod
    def core(cls) -> "ProviderIdentity":
        """Return the identity of the built-in rule provider."""
        return cls(name=CORE_PROVIDER_NAME)

    @property
    def is_core(self) -> bool:
        return self.org is None

    @property
    def qualifier(self) -> str:
        """Provider part of every qualified rule id."""
        if self.org is None:
            return self.name
        return f"{self.org}/{self.name}"

    @property
    def is_local(self) -> bool:
        """True when the analyzer is pinned to the local repository."""
        return self.repository == LOCAL_REPOSITORY_NAME and bool(self.version)

    def __str__(self) -> str:
        if self.version:
            return f"{self.qualifier}:{self.version}"
        return self.qualifier


@dataclass(frozen=True)
class Rule:
    """A single diagnostic rule declared by a provider."""

    numeric_id: int
    description: str
    kind: RuleKind
    provider: ProviderIdentity = field(default_factory=ProviderIdentity.core)

    def __post_init__(self) -> None:
        if isinstance(self.numeric_id, bool) or not isinstance(self.numeric_id, int):
            raise TypeError(f"Rule numeric id must be an int, got {self.numeric_id!r}")
        if self.numeric_id < 1:
            raise ValueError(f"Rule numeric id must be positive, got {self.numeric_id}")

    @property
    def id(self) -> str:
        """Qualified rule id, e.g. ``ballerina:1`` or ``org/name:2``."""
        return f"{self.provider.qualifier}:{self.numeric_id}"


@dataclass(frozen=True)
class LinePosition:
    """A line/column position as reported by the parser."""

    line: int
    offset: int


@dataclass(frozen=True)
class LineRange:
    """Text range of an issue. Lines are 1-based, offsets 0-based, end exclusive."""

    start: LinePosition
    end: LinePosition

    def __post_init__(self) -> None:
        for position in (self.start, self.end):
            if position.line < 1 or position.offset < 0:
                raise InvalidLocationError(
                    f"Invalid position line={position.line} offset={position.offset}"
                )
        if (self.end.line, self.end.offset) < (self.start.line, self.start.offset):
            raise InvalidLocationError(
                f"Range ends before it starts: {self.start} > {self.end}"
            )

    @classmethod
    def of(cls, start_line: int, start_offset: int, end_line: int, end_offset: int) -> "LineRange":
        return cls(LinePosition(start_line, start_offset), LinePosition(end_line, end_offset))


@dataclass(frozen=True)
class Location:
    """Where an issue was found."""

    file_name: str
    file_path: Path
    line_range: LineRange


@dataclass(frozen=True)
class Issue:
    """A rule match at a specific source location.

    Issues are created once at analysis time and only ever filtered or
    serialized afterwards.
    """

    rule: Rule
    source: Source
    location: Location
    message: Optional[str] = None

    @property
    def rule_id(self) -> str:
        return self.rule.id

    @property
    def display_message(self) -> str:
        """Message shown in reports; falls back to the rule description."""
        return self.message if self.message else self.rule.description


@dataclass
class ProviderRun:
    """Outcome of running one provider during a scan."""

    provider: str
    source: Source
    rules_run: int
    issues_found: int = 0


@dataclass
class ScanResult:
    """Aggregated, filtered result of one scan invocation."""

    issues: Tuple[Issue, ...] = ()
    rules: Tuple[Rule, ...] = ()
    configuration: Optional["ScanConfiguration"] = None
    provider_runs: List[ProviderRun] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def issues_by_source(self) -> Dict[Source, int]:
        counts: Dict[Source, int] = {}
        for issue in self.issues:
            counts[issue.source] = counts.get(issue.source, 0) + 1
        return counts
