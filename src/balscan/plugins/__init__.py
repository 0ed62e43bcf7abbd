"""Plugin infrastructure for balscan.

This package provides plugin discovery for:
- Analyzer plugins (balscan.analyzers) - External rule providers
- Platform plugins (balscan.platforms) - Consumers of the final issues

Plugins are discovered via Python entry points.
"""

from balscan.plugins.discovery import (
    ANALYZER_ENTRY_POINT_GROUP,
    PLATFORM_ENTRY_POINT_GROUP,
    discover_plugins,
)

__all__ = [
    "discover_plugins",
    "ANALYZER_ENTRY_POINT_GROUP",
    "PLATFORM_ENTRY_POINT_GROUP",
]
