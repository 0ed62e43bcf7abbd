"""Scan configuration loading.

Resolves the project's Scan.toml with local-first semantics:
- ``[scan] configPath`` in Ballerina.toml, as an absolute path or relative
  to the project root
- otherwise a Scan.toml in the project root
- a reference that is not an existing file is fetched as a remote URL and
  cached under the target directory
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Dict, List, Optional

from balscan.bootstrap.cache import ArtifactCache, InvalidArtifactURLError
from balscan.bootstrap.paths import SCAN_FILE, ScanPaths
from balscan.config.models import Analyzer, Platform, ScanConfiguration
from balscan.config.validation import (
    ANALYZER_TABLE,
    PLATFORM_TABLE,
    RULES_TABLE,
    validate_scan_config,
)
from balscan.core.logging import get_logger
from balscan.core.models import LOCAL_REPOSITORY_NAME
from balscan.core.project import Project
from balscan.core.streaming import NullStreamHandler, StreamHandler
from balscan.core.toml_utils import TOMLDecodeError, load_toml

LOGGER = get_logger(__name__)

# Semantic version accepted for analyzer entries, e.g. 0.1.0 or 1.2.3-alpha.1+build
ANALYZER_VERSION_PATTERN = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?"
    r"(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?$"
)

_STAGE = "config load"


class ConfigError(Exception):
    """Configuration loading or parsing error."""

    pass


class ConfigResolver:
    """Produces the ScanConfiguration of one project."""

    def __init__(
        self,
        project: Project,
        cache: Optional[ArtifactCache] = None,
        stream_handler: Optional[StreamHandler] = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            project: Project whose configuration is resolved.
            cache: Artifact cache for remote references; defaults to one
                   rooted at the project's target directory.
            stream_handler: Sink for user-facing progress messages.
        """
        self._project = project
        self._stream = stream_handler or NullStreamHandler()
        self._cache = cache or ArtifactCache(project.target_dir, stream_handler=self._stream)
        self._paths = ScanPaths(project.target_dir)

    def resolve(self) -> ScanConfiguration:
        """Locate, fetch if remote, and parse the scan configuration.

        Returns:
            The resolved configuration; empty when no configuration exists.

        Raises:
            ConfigError: If the configuration cannot be read or parsed, or a
                remote reference is not a valid URL.
            ArtifactDownloadError: If a remote artifact cannot be downloaded.
        """
        reference = self._project.scan_config_path
        if reference is None:
            default_path = find_project_config(self._project.root)
            if default_path is None:
                LOGGER.debug(f"No {SCAN_FILE} found in {self._project.root}")
                return ScanConfiguration.empty()
            self._stream.status(_STAGE, f"Loading scan tool configurations from {default_path}...")
            return load_scan_file(default_path, self._cache, base_dir=self._project.root)

        local_path = self._to_local_path(reference)
        if local_path is not None:
            self._stream.status(_STAGE, f"Loading scan tool configurations from {local_path}...")
            return load_scan_file(local_path, self._cache, base_dir=self._project.root)

        try:
            entry = self._cache.fetch(reference, self._paths.report_subpath, SCAN_FILE)
        except InvalidArtifactURLError as e:
            raise ConfigError(
                f"Scan configuration '{reference}' is neither an existing file nor a valid URL"
            ) from e
        if not entry.downloaded:
            self._stream.status(_STAGE, "Loading scan tool configurations from cache...")
        else:
            self._stream.status(_STAGE, f"Loading scan tool configurations from {reference}")
        return load_scan_file(entry.path, self._cache, base_dir=self._project.root)

    def _to_local_path(self, reference: str) -> Optional[Path]:
        """Return the local file a reference points at, or None if it is remote."""
        try:
            path = Path(reference).expanduser()
        except (TypeError, ValueError, RuntimeError):
            return None
        if not path.is_absolute():
            path = self._project.root / path
        try:
            return path if path.exists() else None
        except OSError:
            return None


def load_config(
    project: Project,
    cache: Optional[ArtifactCache] = None,
    stream_handler: Optional[StreamHandler] = None,
) -> ScanConfiguration:
    """Resolve the scan configuration of ``project``.

    Convenience wrapper around ``ConfigResolver(...).resolve()``.
    """
    return ConfigResolver(project, cache=cache, stream_handler=stream_handler).resolve()


def find_project_config(project_root: Path) -> Optional[Path]:
    """Find Scan.toml in the project root.

    Args:
        project_root: Directory to search in.

    Returns:
        Path to the config file if found, None otherwise.
    """
    config_path = project_root / SCAN_FILE
    if config_path.is_file():
        return config_path
    return None


def load_scan_file(
    path: Path,
    cache: ArtifactCache,
    base_dir: Optional[Path] = None,
) -> ScanConfiguration:
    """Parse a local Scan.toml file.

    Args:
        path: Local path of the configuration file.
        cache: Artifact cache used for remote platform artifacts.
        base_dir: Directory relative platform paths resolve against
                  (defaults to the config file's directory).

    Returns:
        Parsed ScanConfiguration.

    Raises:
        ConfigError: If the file can't be read or has invalid syntax.
        ArtifactDownloadError: If a remote platform artifact can't be downloaded.
    """
    try:
        data = load_toml(path)
    except TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read the configuration file {path}: {e}") from e

    validate_scan_config(data, source=str(path))

    config = ScanConfiguration()
    base = base_dir if base_dir is not None else path.parent

    for platform in _parse_platforms(_tables(data, PLATFORM_TABLE), base, cache):
        config.add_platform(platform)

    for analyzer in _parse_analyzers(_tables(data, ANALYZER_TABLE)):
        config.add_analyzer(analyzer)

    rules_table = data.get(RULES_TABLE)
    if isinstance(rules_table, dict):
        for rule_id in _rule_ids(rules_table.get("include")):
            config.include_rule(rule_id)
        for rule_id in _rule_ids(rules_table.get("exclude")):
            config.exclude_rule(rule_id)

    LOGGER.debug(f"Loaded {config!r} from {path}")
    return config


def _tables(data: Dict[str, Any], name: str) -> List[Dict[str, Any]]:
    value = data.get(name)
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _parse_platforms(
    tables: List[Dict[str, Any]],
    base_dir: Path,
    cache: ArtifactCache,
) -> List[Platform]:
    """Parse ``[[platform]]`` entries, fetching remote artifacts.

    Entries without a non-empty ``name`` or a ``path`` are dropped.
    """
    platforms = []
    paths = ScanPaths(cache.target_dir)
    for table in tables:
        properties = dict(table)
        name = properties.pop("name", None)
        raw_path = properties.pop("path", None)
        if not isinstance(name, str) or not name or not isinstance(raw_path, str) or not raw_path:
            LOGGER.debug(f"Dropping platform entry without name/path: {table}")
            continue

        local = Path(raw_path).expanduser()
        if not local.is_absolute():
            local = base_dir / local
        if not local.is_file():
            try:
                entry = cache.fetch(raw_path, paths.platforms_subpath, paths.platform_artifact(name).name)
            except InvalidArtifactURLError as e:
                raise ConfigError(
                    f"Failed to retrieve remote platform file for '{name}': {e}"
                ) from e
            local = entry.path

        if local.is_file():
            platforms.append(Platform(name=name, path=local.resolve(), arguments=properties))
        else:
            LOGGER.debug(f"Dropping platform '{name}': {local} does not exist")
    return platforms


def _parse_analyzers(tables: List[Dict[str, Any]]) -> List[Analyzer]:
    """Parse ``[[analyzer]]`` entries.

    ``org`` and ``name`` are mandatory. A version is kept only if it is a
    semantic version, and the repository marker only for a versioned local
    analyzer; every other entry resolves from the default repository.
    """
    analyzers = []
    for table in tables:
        org = table.get("org")
        name = table.get("name")
        if not isinstance(org, str) or not org or not isinstance(name, str) or not name:
            LOGGER.debug(f"Dropping analyzer entry without org/name: {table}")
            continue

        provided_version = table.get("version")
        version = (
            provided_version
            if isinstance(provided_version, str) and ANALYZER_VERSION_PATTERN.match(provided_version)
            else None
        )
        if provided_version is not None and version is None:
            LOGGER.debug(f"Ignoring invalid version {provided_version!r} for analyzer {org}/{name}")

        repository = table.get("repository")
        if repository == LOCAL_REPOSITORY_NAME and version:
            analyzers.append(Analyzer(org=org, name=name, version=version, repository=repository))
        else:
            analyzers.append(Analyzer(org=org, name=name, version=version))
    return analyzers


def _rule_ids(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    ids = []
    for item in value:
        rule_id = str(item).strip()
        if rule_id:
            ids.append(rule_id)
    return ids
