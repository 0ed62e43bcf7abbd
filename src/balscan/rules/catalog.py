"""Rule catalog: every active rule, partitioned by provider.

The catalog holds the core provider first and then one entry per
configured analyzer, in declaration order. Provider identities are not
de-duplicated: two configured analyzers with the same ``org/name`` (for
example a local and a remote build) are two independent entries.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Tuple

from balscan.core.logging import get_logger
from balscan.core.models import ProviderIdentity, Rule
from balscan.rules.base import RuleProvider
from balscan.rules.core import CoreRuleProvider

if TYPE_CHECKING:
    from balscan.config.models import Analyzer
    from balscan.plugins.analyzers import AnalyzerLoader

LOGGER = get_logger(__name__)


class RuleIntegrityError(Exception):
    """A provider declared an inconsistent rule set."""

    pass


@dataclass(frozen=True)
class ProviderRuleSet:
    """All rules declared by one provider, ordered by numeric id."""

    identity: ProviderIdentity
    rules: Tuple[Rule, ...]

    @classmethod
    def from_provider(cls, provider: RuleProvider) -> "ProviderRuleSet":
        """Collect and validate the rules of ``provider``.

        Raises:
            RuleIntegrityError: If numeric ids repeat or a rule is declared
                under another provider's identity.
        """
        identity = provider.identity
        seen: Dict[int, Rule] = {}
        for rule in provider.rules():
            if rule.provider.qualifier != identity.qualifier:
                raise RuleIntegrityError(
                    f"Provider {identity.qualifier} declared rule {rule.id} "
                    f"belonging to {rule.provider.qualifier}"
                )
            if rule.numeric_id in seen:
                raise RuleIntegrityError(
                    f"Provider {identity.qualifier} declares numeric rule id "
                    f"{rule.numeric_id} more than once"
                )
            seen[rule.numeric_id] = rule
        ordered = tuple(seen[numeric_id] for numeric_id in sorted(seen))
        return cls(identity=identity, rules=ordered)

    def find(self, rule_id: str) -> Optional[Rule]:
        for rule in self.rules:
            if rule.id == rule_id:
                return rule
        return None


class RuleCatalog:
    """Ordered registry of rule providers and their validated rule sets."""

    def __init__(self, core_provider: Optional[RuleProvider] = None) -> None:
        """Initialize the catalog with the core provider.

        Args:
            core_provider: Provider of the built-in rules (defaults to
                           CoreRuleProvider).
        """
        self._entries: List[Tuple[RuleProvider, ProviderRuleSet]] = []
        self._frozen = False
        self.add(core_provider or CoreRuleProvider())

    def add(self, provider: RuleProvider) -> ProviderRuleSet:
        """Register a provider after validating its rules.

        Raises:
            RuleIntegrityError: If the provider's rule set is inconsistent.
            RuntimeError: If the catalog is already frozen.
        """
        if self._frozen:
            raise RuntimeError("Rule catalog is read-only once analysis has started")
        rule_set = ProviderRuleSet.from_provider(provider)
        self._entries.append((provider, rule_set))
        LOGGER.debug(f"Registered {len(rule_set.rules)} rule(s) from {rule_set.identity}")
        return rule_set

    def resolve_external(
        self,
        analyzers: Iterable["Analyzer"],
        loader: "AnalyzerLoader",
    ) -> List[Tuple[ProviderIdentity, List[Rule]]]:
        """Load and register a provider for each configured analyzer.

        Args:
            analyzers: Analyzer references in declaration order.
            loader: Resolves an analyzer reference to a provider instance.

        Returns:
            One (identity, rules) pair per registered provider, in
            declaration order. Repeated identities stay separate entries.
        """
        resolved: List[Tuple[ProviderIdentity, List[Rule]]] = []
        for analyzer in analyzers:
            provider = loader.load(analyzer)
            rule_set = self.add(provider)
            resolved.append((rule_set.identity, list(rule_set.rules)))
        return resolved

    def freeze(self) -> None:
        """Make the catalog read-only."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def providers(self) -> List[RuleProvider]:
        return [provider for provider, _ in self._entries]

    @property
    def rule_sets(self) -> List[ProviderRuleSet]:
        return [rule_set for _, rule_set in self._entries]

    @property
    def core_rule_set(self) -> ProviderRuleSet:
        return self._entries[0][1]

    @property
    def external_rule_sets(self) -> List[ProviderRuleSet]:
        return [rule_set for _, rule_set in self._entries[1:]]

    def entries(self) -> List[Tuple[RuleProvider, ProviderRuleSet]]:
        return list(self._entries)

    def rules(self) -> List[Rule]:
        """All rules: core first, then providers in declaration order.

        Each provider's rules are in numeric id order.
        """
        return [rule for _, rule_set in self._entries for rule in rule_set.rules]

    def find(self, rule_id: str) -> Optional[Rule]:
        for _, rule_set in self._entries:
            rule = rule_set.find(rule_id)
            if rule is not None:
                return rule
        return None

    def __len__(self) -> int:
        return len(self._entries)
