"""Include/exclude filtering of rules and issues.

Policy, applied identically before analysis (to skip rules) and after it
(to drop issues):
1. a non-empty include set is an allow-list;
2. the exclude set is then applied as a deny-list.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, FrozenSet, Iterable, List

from balscan.core.models import Issue, Rule

if TYPE_CHECKING:
    from balscan.config.models import ScanConfiguration


class RuleFilter:
    """Retains qualified rule ids according to include/exclude sets."""

    def __init__(self, include: Iterable[str] = (), exclude: Iterable[str] = ()) -> None:
        self._include: FrozenSet[str] = frozenset(include)
        self._exclude: FrozenSet[str] = frozenset(exclude)

    @classmethod
    def from_config(cls, config: "ScanConfiguration") -> "RuleFilter":
        return cls(include=config.rules_to_include, exclude=config.rules_to_exclude)

    @property
    def include(self) -> FrozenSet[str]:
        return self._include

    @property
    def exclude(self) -> FrozenSet[str]:
        return self._exclude

    @property
    def is_empty(self) -> bool:
        return not self._include and not self._exclude

    def allows(self, rule_id: str) -> bool:
        if self._include and rule_id not in self._include:
            return False
        return rule_id not in self._exclude

    def filter_ids(self, rule_ids: Iterable[str]) -> List[str]:
        return [rule_id for rule_id in rule_ids if self.allows(rule_id)]

    def filter_rules(self, rules: Iterable[Rule]) -> List[Rule]:
        return [rule for rule in rules if self.allows(rule.id)]

    def filter_issues(self, issues: Iterable[Issue]) -> List[Issue]:
        return [issue for issue in issues if self.allows(issue.rule.id)]

    def __repr__(self) -> str:
        return f"RuleFilter(include={sorted(self._include)}, exclude={sorted(self._exclude)})"
