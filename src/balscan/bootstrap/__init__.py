"""
Bootstrap module for balscan's project-local artifact handling.

This module handles:
- Target directory layout (report and platform artifact locations)
- Secure downloads of remote artifacts
- The local-first artifact cache used for remote configuration and platforms
"""

from balscan.bootstrap.cache import (
    ArtifactCache,
    ArtifactDownloadError,
    CacheEntry,
    InvalidArtifactURLError,
)
from balscan.bootstrap.paths import SCAN_FILE, ScanPaths

__all__ = [
    "ArtifactCache",
    "ArtifactDownloadError",
    "CacheEntry",
    "InvalidArtifactURLError",
    "SCAN_FILE",
    "ScanPaths",
]
