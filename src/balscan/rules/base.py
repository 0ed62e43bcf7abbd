"""Base classes for rule providers.

A rule provider declares a fixed set of rules and runs them against a
project. The core rules and every external analyzer implement the same
interface; external analyzers are installed packages that register a
provider class under the ``balscan.analyzers`` entry point group.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import ClassVar, List, Optional, Sequence

from balscan.core.models import (
    Issue,
    LineRange,
    Location,
    ProviderIdentity,
    Rule,
    RuleKind,
    Source,
)
from balscan.core.project import Project


class RuleProvider(ABC):
    """Base class for all rule providers."""

    @property
    @abstractmethod
    def identity(self) -> ProviderIdentity:
        """Provider identity; its qualifier prefixes every rule id."""

    @property
    def source(self) -> Source:
        """Provenance stamped on every issue this provider reports."""
        return Source.EXTERNAL

    @abstractmethod
    def rules(self) -> List[Rule]:
        """Return every rule this provider declares."""

    @abstractmethod
    def analyze(self, project: Project, rules: Sequence[Rule]) -> List[Issue]:
        """Run the given subset of this provider's rules.

        Args:
            project: Project to analyze. Providers must not modify it.
            rules: Active rules, already narrowed by the rule filter.

        Returns:
            Issues in discovery order.
        """

    def rule(self, numeric_id: int, description: str, kind: RuleKind) -> Rule:
        """Create a rule owned by this provider."""
        return Rule(numeric_id=numeric_id, description=description, kind=kind, provider=self.identity)

    def issue(
        self,
        rule: Rule,
        file_path: Path,
        line_range: LineRange,
        message: Optional[str] = None,
    ) -> Issue:
        """Create an issue for one of this provider's rules."""
        return Issue(
            rule=rule,
            source=self.source,
            location=Location(file_name=file_path.name, file_path=file_path, line_range=line_range),
            message=message,
        )


class ExternalRuleProvider(RuleProvider):
    """Base class for analyzers distributed as separate packages.

    Subclasses set ``ORG`` and ``NAME`` to the values users write in their
    ``[[analyzer]]`` entries and register themselves in their pyproject.toml:

        [project.entry-points."balscan.analyzers"]
        my_analyzer = "my_package.analyzer:MyAnalyzer"
    """

    ORG: ClassVar[str] = ""
    NAME: ClassVar[str] = ""

    def __init__(self, version: Optional[str] = None, repository: Optional[str] = None) -> None:
        self._identity = ProviderIdentity(
            name=self.NAME,
            org=self.ORG,
            version=version,
            repository=repository,
        )

    @property
    def identity(self) -> ProviderIdentity:
        return self._identity

    @classmethod
    def matches(cls, org: str, name: str) -> bool:
        """Check whether this class implements the analyzer ``org/name``."""
        return cls.ORG == org and cls.NAME == name
