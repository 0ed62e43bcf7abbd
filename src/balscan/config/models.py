"""In-memory representation of a resolved Scan.toml file."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from balscan.core.models import LOCAL_REPOSITORY_NAME, ProviderIdentity


@dataclass(frozen=True)
class Platform:
    """A platform plugin declaration.

    Attributes:
        name: Platform name, matched against installed platform plugins.
        path: Local path of the platform artifact (downloaded if remote).
        arguments: Free-form keys of the ``[[platform]]`` table.
    """

    name: str
    path: Path
    arguments: Mapping[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def key(self) -> Tuple[str, str, str]:
        """Value identity including the arguments, used for set semantics."""
        return (self.name, str(self.path), json.dumps(dict(self.arguments), sort_keys=True, default=str))


@dataclass(frozen=True)
class Analyzer:
    """An external analyzer reference."""

    org: str
    name: str
    version: Optional[str] = None
    repository: Optional[str] = None

    @property
    def is_local(self) -> bool:
        """Local fast path needs both the local repository marker and a version."""
        return self.repository == LOCAL_REPOSITORY_NAME and bool(self.version)

    @property
    def identity(self) -> ProviderIdentity:
        return ProviderIdentity(
            name=self.name,
            org=self.org,
            version=self.version,
            repository=self.repository,
        )


class ScanConfiguration:
    """Resolved scan configuration.

    All four collections have set semantics: duplicates collapse, and
    iteration follows first insertion only to keep reports stable.
    """

    def __init__(self) -> None:
        self._platforms: Dict[Tuple[str, str, str], Platform] = {}
        self._analyzers: Dict[Analyzer, None] = {}
        self._rules_to_include: Dict[str, None] = {}
        self._rules_to_exclude: Dict[str, None] = {}

    @classmethod
    def empty(cls) -> "ScanConfiguration":
        """Configuration with no platforms, analyzers or filters."""
        return cls()

    def add_platform(self, platform: Platform) -> None:
        self._platforms.setdefault(platform.key, platform)

    def add_analyzer(self, analyzer: Analyzer) -> None:
        self._analyzers.setdefault(analyzer, None)

    def include_rule(self, rule_id: str) -> None:
        self._rules_to_include.setdefault(rule_id, None)

    def exclude_rule(self, rule_id: str) -> None:
        self._rules_to_exclude.setdefault(rule_id, None)

    @property
    def platforms(self) -> Tuple[Platform, ...]:
        return tuple(self._platforms.values())

    @property
    def analyzers(self) -> Tuple[Analyzer, ...]:
        return tuple(self._analyzers)

    @property
    def rules_to_include(self) -> Tuple[str, ...]:
        return tuple(self._rules_to_include)

    @property
    def rules_to_exclude(self) -> Tuple[str, ...]:
        return tuple(self._rules_to_exclude)

    @property
    def is_empty(self) -> bool:
        return not (
            self._platforms or self._analyzers or self._rules_to_include or self._rules_to_exclude
        )

    def with_rule_filters(
        self,
        include: Iterable[str] = (),
        exclude: Iterable[str] = (),
    ) -> "ScanConfiguration":
        """Return a copy with extra include/exclude rule ids added.

        Args:
            include: Rule ids added to the include set.
            exclude: Rule ids added to the exclude set.

        Returns:
            New ScanConfiguration; this instance is left untouched.
        """
        merged = ScanConfiguration()
        merged._platforms = dict(self._platforms)
        merged._analyzers = dict(self._analyzers)
        merged._rules_to_include = dict(self._rules_to_include)
        merged._rules_to_exclude = dict(self._rules_to_exclude)
        for rule_id in include:
            merged.include_rule(rule_id)
        for rule_id in exclude:
            merged.exclude_rule(rule_id)
        return merged

    def __repr__(self) -> str:
        return (
            f"ScanConfiguration(platforms={len(self._platforms)}, "
            f"analyzers={len(self._analyzers)}, "
            f"include={list(self._rules_to_include)}, exclude={list(self._rules_to_exclude)})"
        )
