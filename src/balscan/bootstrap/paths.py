"""Path management for balscan's per-project cache and report directories.

Everything balscan writes for a project lives under the project's target
directory, so cleaning the build output also clears the artifact cache.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar

# Conventional name of the scan configuration file
SCAN_FILE = "Scan.toml"

# Suffix of cached platform plugin artifacts
JAR_SUFFIX = ".jar"


@dataclass
class ScanPaths:
    """Manages paths within a project's target directory.

    Directory structure:
        target/
            report/
                Scan.toml           - Cached remote scan configuration
                scan_results.json   - Default JSON report location
                index.html          - Default HTML report location
            platforms/
                {name}.jar          - Cached remote platform artifacts
    """

    target_dir: Path

    _REPORT_DIR: ClassVar[str] = "report"
    _PLATFORMS_DIR: ClassVar[str] = "platforms"

    @property
    def report_subpath(self) -> str:
        """Cache subpath of the scan configuration artifact."""
        return self._REPORT_DIR

    @property
    def platforms_subpath(self) -> str:
        """Cache subpath of platform artifacts."""
        return self._PLATFORMS_DIR

    @property
    def report_dir(self) -> Path:
        """Default directory for generated reports."""
        return self.target_dir / self._REPORT_DIR

    @property
    def platforms_dir(self) -> Path:
        """Directory for downloaded platform artifacts."""
        return self.target_dir / self._PLATFORMS_DIR

    def platform_artifact(self, platform_name: str) -> Path:
        """Location of a downloaded platform artifact.

        Args:
            platform_name: Name of the platform from the scan configuration.

        Returns:
            Path of ``{platform_name}.jar`` under the platforms directory.
        """
        return self.platforms_dir / f"{platform_name}{JAR_SUFFIX}"
