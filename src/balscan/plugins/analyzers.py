"""Resolution of configured analyzers to installed rule providers."""

from __future__ import annotations

from typing import Callable, Dict, Optional, Type

from balscan.config.loader import ConfigError
from balscan.config.models import Analyzer
from balscan.core.logging import get_logger
from balscan.plugins.discovery import ANALYZER_ENTRY_POINT_GROUP, discover_plugins
from balscan.rules.base import ExternalRuleProvider

LOGGER = get_logger(__name__)

ProviderClasses = Dict[str, Type[ExternalRuleProvider]]


class AnalyzerLoader:
    """Instantiates the provider implementing each ``[[analyzer]]`` entry.

    Provider classes are discovered once, on first use, from the
    ``balscan.analyzers`` entry point group.
    """

    def __init__(self, discover: Optional[Callable[[], ProviderClasses]] = None) -> None:
        """Initialize the loader.

        Args:
            discover: Returns the available provider classes keyed by entry
                      point name. Defaults to entry point discovery.
        """
        self._discover = discover or _discover_analyzers
        self._classes: Optional[ProviderClasses] = None

    @property
    def available(self) -> ProviderClasses:
        if self._classes is None:
            self._classes = self._discover()
        return self._classes

    def load(self, analyzer: Analyzer) -> ExternalRuleProvider:
        """Create the provider for a configured analyzer.

        Args:
            analyzer: Analyzer reference from the scan configuration.

        Returns:
            Provider constructed with the configured version and repository.

        Raises:
            ConfigError: If no installed provider implements the analyzer.
        """
        for entry_name, provider_class in self.available.items():
            if provider_class.matches(analyzer.org, analyzer.name):
                location = "local repository" if analyzer.is_local else "installed package"
                LOGGER.debug(
                    f"Loading analyzer {analyzer.org}/{analyzer.name} "
                    f"from {location} (entry point: {entry_name})"
                )
                return provider_class(version=analyzer.version, repository=analyzer.repository)

        raise ConfigError(
            f"No installed analyzer provides {analyzer.org}/{analyzer.name}. "
            f"Install a package registering it under '{ANALYZER_ENTRY_POINT_GROUP}'."
        )


def _discover_analyzers() -> ProviderClasses:
    return discover_plugins(ANALYZER_ENTRY_POINT_GROUP, ExternalRuleProvider)
