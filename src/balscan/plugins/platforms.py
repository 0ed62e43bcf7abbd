"""Platform plugins: consumers of the final issue list.

A platform plugin forwards scan results to an external system (a code
quality dashboard, a CI annotation service, ...). Platforms are declared in
``Scan.toml`` as ``[[platform]]`` tables and selected per run with
``--platforms``; the implementing class is found by name in the
``balscan.platforms`` entry point group.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Type

from balscan.config.models import Platform
from balscan.core.logging import get_logger
from balscan.core.models import Issue
from balscan.core.project import Project
from balscan.core.streaming import NullStreamHandler, StreamHandler
from balscan.plugins.discovery import PLATFORM_ENTRY_POINT_GROUP, discover_plugins

LOGGER = get_logger(__name__)

_STAGE = "platforms"


class PlatformError(Exception):
    """A platform plugin failed to initialise or to consume the results."""

    pass


@dataclass(frozen=True)
class PlatformContext:
    """Everything a platform plugin receives before the results."""

    project: Project
    artifact_path: Path
    arguments: Mapping[str, Any] = field(default_factory=dict)


class PlatformPlugin(ABC):
    """Base class for all platform plugins."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Platform identifier, matched against ``[[platform]] name``."""

    @abstractmethod
    def init(self, context: PlatformContext) -> None:
        """Prepare the plugin with its configured arguments."""

    @abstractmethod
    def on_result(self, issues: Sequence[Issue]) -> None:
        """Consume the final, filtered issues of the scan."""


PlatformClasses = Dict[str, Type[PlatformPlugin]]


def discover_platform_plugins() -> PlatformClasses:
    """Discover all installed platform plugins via entry points."""
    return discover_plugins(PLATFORM_ENTRY_POINT_GROUP, PlatformPlugin)


def dispatch_to_platforms(
    platforms: Iterable[Platform],
    selected: Iterable[str],
    issues: Sequence[Issue],
    project: Project,
    discover: Optional[Callable[[], PlatformClasses]] = None,
    stream_handler: Optional[StreamHandler] = None,
) -> List[str]:
    """Hand the final issues to each selected, configured platform.

    Args:
        platforms: Platforms declared in the scan configuration.
        selected: Platform names requested for this run.
        issues: Final issue list.
        project: Scanned project.
        discover: Returns installed platform classes; defaults to entry
                  point discovery.
        stream_handler: Sink for user-facing progress messages.

    Returns:
        Names of the platforms that received the issues, in declared order.

    Raises:
        PlatformError: If a plugin raises while initialising or consuming.
    """
    wanted = set(selected)
    if not wanted:
        return []

    stream = stream_handler or NullStreamHandler()
    available = (discover or discover_platform_plugins)()
    notified: List[str] = []

    for platform in platforms:
        if platform.name not in wanted:
            continue
        plugin_class = available.get(platform.name)
        if plugin_class is None:
            stream.warning(_STAGE, f"No installed platform plugin named '{platform.name}', skipping")
            LOGGER.warning(f"Platform plugin '{platform.name}' not found")
            continue

        plugin = plugin_class()
        context = PlatformContext(
            project=project,
            artifact_path=platform.path,
            arguments=dict(platform.arguments),
        )
        try:
            plugin.init(context)
            plugin.on_result(issues)
        except Exception as e:
            raise PlatformError(f"Platform '{platform.name}' failed: {e}") from e

        stream.status(_STAGE, f"Reported {len(issues)} issue(s) to {platform.name}")
        notified.append(platform.name)

    for name in sorted(wanted - {platform.name for platform in platforms}):
        LOGGER.warning(f"Platform '{name}' is not declared in the scan configuration")

    return notified
