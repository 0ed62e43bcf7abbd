"""Rule providers, the rule catalog and rule filtering."""

from balscan.rules.base import ExternalRuleProvider, RuleProvider
from balscan.rules.catalog import ProviderRuleSet, RuleCatalog, RuleIntegrityError
from balscan.rules.core import CoreRule, CoreRuleProvider
from balscan.rules.filter import RuleFilter

__all__ = [
    "CoreRule",
    "CoreRuleProvider",
    "ExternalRuleProvider",
    "ProviderRuleSet",
    "RuleCatalog",
    "RuleFilter",
    "RuleIntegrityError",
    "RuleProvider",
]
