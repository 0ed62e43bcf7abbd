"""Tests for Scan.toml resolution and parsing."""

from __future__ import annotations

from pathlib import Path
from typing import BinaryIO, Dict, List, Optional

import pytest

from balscan.bootstrap.cache import ArtifactCache, ArtifactDownloadError
from balscan.config.loader import ConfigError, ConfigResolver, load_config, load_scan_file
from balscan.config.models import ScanConfiguration
from balscan.core.project import load_project
from balscan.core.streaming import CallbackStreamHandler, StreamEvent

SAMPLE_SCAN_TOML = """
[[analyzer]]
org = "exampleOrg"
name = "exampleName"

[[analyzer]]
org = "ballerina"
name = "example_module_static_code_analyzer"
version = "0.1.0"

[[analyzer]]
org = "ballerinax"
name = "example_module_static_code_analyzer"
version = "0.1.0"
repository = "local"

[[analyzer]]
org = "ballerinax"
name = "invalid_version_analyzer"
version = "latest"

[rule]
include = [
    "ballerina:1",
    "exampleOrg/exampleName:1",
    "ballerina/example_module_static_code_analyzer:1",
    "ballerinax/example_module_static_code_analyzer:1",
]
exclude = ["ballerina:1"]
"""


class FakeDownloader:
    """Serves canned bodies and counts downloads per URL."""

    def __init__(self, bodies: Dict[str, bytes]) -> None:
        self.bodies = bodies
        self.calls: List[str] = []

    def __call__(self, url: str, dest: BinaryIO, timeout: Optional[float]) -> None:
        self.calls.append(url)
        if url not in self.bodies:
            raise OSError(f"HTTP Error 404: {url}")
        dest.write(self.bodies[url])


def _cache(target_dir: Path, bodies: Optional[Dict[str, bytes]] = None) -> ArtifactCache:
    return ArtifactCache(target_dir, downloader=FakeDownloader(bodies or {}))


class TestLoadScanFile:
    """Tests for load_scan_file."""

    def test_sample_configuration(self, tmp_path: Path) -> None:
        scan_file = tmp_path / "Scan.toml"
        scan_file.write_text(SAMPLE_SCAN_TOML, encoding="utf-8")

        config = load_scan_file(scan_file, _cache(tmp_path / "target"))

        assert len(config.analyzers) == 4
        assert len(config.rules_to_include) == 4
        assert config.rules_to_exclude == ("ballerina:1",)
        assert config.platforms == ()

        first, second, third, fourth = config.analyzers
        assert (first.org, first.name, first.version) == ("exampleOrg", "exampleName", None)
        assert second.version == "0.1.0"
        assert not second.is_local
        assert third.repository == "local"
        assert third.is_local
        assert fourth.version is None

    def test_local_repository_without_version_is_not_local(self, tmp_path: Path) -> None:
        scan_file = tmp_path / "Scan.toml"
        scan_file.write_text(
            '[[analyzer]]\norg = "o"\nname = "n"\nrepository = "local"\n', encoding="utf-8"
        )

        (analyzer,) = load_scan_file(scan_file, _cache(tmp_path / "target")).analyzers

        assert analyzer.repository is None
        assert not analyzer.is_local

    def test_analyzer_missing_org_dropped(self, tmp_path: Path) -> None:
        scan_file = tmp_path / "Scan.toml"
        scan_file.write_text('[[analyzer]]\nname = "n"\n', encoding="utf-8")

        assert load_scan_file(scan_file, _cache(tmp_path / "target")).analyzers == ()

    def test_platform_missing_path_dropped(self, tmp_path: Path) -> None:
        scan_file = tmp_path / "Scan.toml"
        scan_file.write_text('[[platform]]\nname = "sonarqube"\n', encoding="utf-8")

        config = load_scan_file(scan_file, _cache(tmp_path / "target"))

        assert config.platforms == ()

    def test_local_platform_keeps_arguments(self, tmp_path: Path) -> None:
        artifact = tmp_path / "sonar.jar"
        artifact.write_bytes(b"jar")
        scan_file = tmp_path / "Scan.toml"
        scan_file.write_text(
            '[[platform]]\nname = "sonarqube"\npath = "sonar.jar"\nsonarProjectKey = "demo"\n',
            encoding="utf-8",
        )

        (platform,) = load_scan_file(scan_file, _cache(tmp_path / "target")).platforms

        assert platform.name == "sonarqube"
        assert platform.path == artifact.resolve()
        assert platform.arguments == {"sonarProjectKey": "demo"}

    def test_remote_platform_is_cached(self, tmp_path: Path) -> None:
        url = "https://example.com/artifacts/sonar-platform.jar"
        downloader = FakeDownloader({url: b"jar-bytes"})
        cache = ArtifactCache(tmp_path / "target", downloader=downloader)
        scan_file = tmp_path / "Scan.toml"
        scan_file.write_text(f'[[platform]]\nname = "sonarqube"\npath = "{url}"\n', encoding="utf-8")

        (platform,) = load_scan_file(scan_file, cache).platforms

        expected = (tmp_path / "target" / "platforms" / "sonarqube.jar").resolve()
        assert platform.path == expected
        assert expected.read_bytes() == b"jar-bytes"
        assert downloader.calls == [url]

    def test_platform_with_invalid_reference_raises(self, tmp_path: Path) -> None:
        scan_file = tmp_path / "Scan.toml"
        scan_file.write_text('[[platform]]\nname = "p"\npath = "missing.jar"\n', encoding="utf-8")

        with pytest.raises(ConfigError, match="remote platform"):
            load_scan_file(scan_file, _cache(tmp_path / "target"))

    def test_platform_with_invalid_reference_ignores_cached_artifact(self, tmp_path: Path) -> None:
        cached = tmp_path / "target" / "platforms" / "p.jar"
        cached.parent.mkdir(parents=True)
        cached.write_bytes(b"stale")
        scan_file = tmp_path / "Scan.toml"
        scan_file.write_text('[[platform]]\nname = "p"\npath = "missing.jar"\n', encoding="utf-8")

        with pytest.raises(ConfigError, match="remote platform"):
            load_scan_file(scan_file, _cache(tmp_path / "target"))

    def test_rule_filters_collapse_duplicates(self, tmp_path: Path) -> None:
        scan_file = tmp_path / "Scan.toml"
        scan_file.write_text(
            '[rule]\ninclude = ["ballerina:1", "ballerina:2", "ballerina:1"]\nexclude = ["ballerina:2"]\n',
            encoding="utf-8",
        )

        config = load_scan_file(scan_file, _cache(tmp_path / "target"))

        assert config.rules_to_include == ("ballerina:1", "ballerina:2")
        assert config.rules_to_exclude == ("ballerina:2",)

    def test_rule_table_order_does_not_matter(self, tmp_path: Path) -> None:
        scan_file = tmp_path / "Scan.toml"
        scan_file.write_text(
            '[rule]\nexclude = ["ballerina:1"]\ninclude = ["ballerina:2", "acme/tool:1"]\n',
            encoding="utf-8",
        )

        config = load_scan_file(scan_file, _cache(tmp_path / "target"))

        assert len(config.rules_to_include) == 2
        assert len(config.rules_to_exclude) == 1

    def test_non_array_rule_values_ignored(self, tmp_path: Path) -> None:
        scan_file = tmp_path / "Scan.toml"
        scan_file.write_text('[rule]\ninclude = "ballerina:1"\n', encoding="utf-8")

        config = load_scan_file(scan_file, _cache(tmp_path / "target"))

        assert config.rules_to_include == ()

    def test_malformed_toml_raises(self, tmp_path: Path) -> None:
        scan_file = tmp_path / "Scan.toml"
        scan_file.write_text("[[analyzer]\norg = \n", encoding="utf-8")

        with pytest.raises(ConfigError, match="Invalid TOML"):
            load_scan_file(scan_file, _cache(tmp_path / "target"))

    def test_unreadable_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError) as exc_info:
            load_scan_file(tmp_path / "missing.toml", _cache(tmp_path / "target"))
        assert isinstance(exc_info.value.__cause__, OSError)


class TestConfigResolver:
    """Tests for ConfigResolver."""

    def test_absent_configuration_is_empty(self, package_factory) -> None:
        project = package_factory({"main.bal": ""})

        config = load_config(project)

        assert config.is_empty
        assert repr(config) == repr(ScanConfiguration.empty())

    def test_default_scan_file_in_project_root(self, package_factory) -> None:
        project = package_factory({"main.bal": ""}, scan_toml='[rule]\nexclude = ["ballerina:2"]\n')

        config = load_config(project)

        assert config.rules_to_exclude == ("ballerina:2",)

    def test_relative_config_path(self, package_factory) -> None:
        project = package_factory({"main.bal": ""}, scan_config_path="config/Scan.toml")
        (project.root / "config").mkdir()
        (project.root / "config" / "Scan.toml").write_text(
            '[rule]\ninclude = ["ballerina:1"]\n', encoding="utf-8"
        )

        config = load_config(project)

        assert config.rules_to_include == ("ballerina:1",)

    def test_remote_config_downloaded_once(self, package_factory) -> None:
        url = "https://example.com/shared/Scan.toml"
        project = package_factory({"main.bal": ""}, scan_config_path=url)
        downloader = FakeDownloader({url: b'[rule]\ninclude = ["ballerina:1"]\n'})
        cache = ArtifactCache(project.target_dir, downloader=downloader)
        events: List[StreamEvent] = []
        stream = CallbackStreamHandler(on_event=events.append)

        first = ConfigResolver(project, cache, stream).resolve()
        second = ConfigResolver(project, cache, stream).resolve()

        assert first.rules_to_include == second.rules_to_include == ("ballerina:1",)
        assert downloader.calls == [url]
        assert (project.target_dir / "report" / "Scan.toml").is_file()
        assert "Loading scan tool configurations from cache..." in [e.content for e in events]

    def test_invalid_reference_raises(self, package_factory) -> None:
        project = package_factory({"main.bal": ""}, scan_config_path="does/not/exist.toml")

        with pytest.raises(ConfigError, match="neither an existing file nor a valid URL"):
            load_config(project, cache=_cache(project.target_dir))

    def test_invalid_reference_ignores_cached_configuration(self, package_factory) -> None:
        project = package_factory({"main.bal": ""}, scan_config_path="does/not/exist.toml")
        cached = project.target_dir / "report" / "Scan.toml"
        cached.parent.mkdir(parents=True)
        cached.write_text('[rule]\nexclude = ["ballerina:1"]\n', encoding="utf-8")

        with pytest.raises(ConfigError, match="neither an existing file nor a valid URL"):
            load_config(project, cache=_cache(project.target_dir))

    def test_failed_download_raises(self, package_factory) -> None:
        project = package_factory({"main.bal": ""}, scan_config_path="https://example.com/404")

        with pytest.raises(ArtifactDownloadError):
            load_config(project, cache=_cache(project.target_dir))

        assert not (project.target_dir / "report" / "Scan.toml").exists()

    def test_single_file_project_uses_parent_directory(self, tmp_path: Path) -> None:
        source = tmp_path / "script.bal"
        source.write_text("", encoding="utf-8")
        (tmp_path / "Scan.toml").write_text('[rule]\nexclude = ["ballerina:1"]\n', encoding="utf-8")

        config = load_config(load_project(source))

        assert config.rules_to_exclude == ("ballerina:1",)
