"""Tests for Ballerina project loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from balscan.core.project import ProjectError, load_project


class TestLoadBuildProject:
    """Tests for loading package directories."""

    def test_reads_package_name_and_sources(self, tmp_path: Path) -> None:
        (tmp_path / "Ballerina.toml").write_text('[package]\nname = "orders"\n', encoding="utf-8")
        (tmp_path / "main.bal").write_text("public function main() {}\n", encoding="utf-8")
        (tmp_path / "modules" / "util").mkdir(parents=True)
        (tmp_path / "modules" / "util" / "util.bal").write_text("", encoding="utf-8")

        project = load_project(tmp_path)

        assert project.name == "orders"
        assert project.is_build_project
        assert project.source_root == tmp_path.resolve()
        assert project.target_dir == tmp_path.resolve() / "target"
        assert [doc.name for doc in project.documents] == ["main.bal", "util.bal"]

    def test_skips_target_directory(self, tmp_path: Path) -> None:
        (tmp_path / "Ballerina.toml").write_text('[package]\nname = "p"\n', encoding="utf-8")
        (tmp_path / "main.bal").write_text("", encoding="utf-8")
        (tmp_path / "target" / "gen").mkdir(parents=True)
        (tmp_path / "target" / "gen" / "generated.bal").write_text("", encoding="utf-8")

        project = load_project(tmp_path)

        assert [doc.name for doc in project.documents] == ["main.bal"]

    def test_reads_scan_config_path(self, tmp_path: Path) -> None:
        (tmp_path / "Ballerina.toml").write_text(
            '[package]\nname = "p"\n\n[scan]\nconfigPath = "config/Scan.toml"\n',
            encoding="utf-8",
        )

        project = load_project(tmp_path)

        assert project.scan_config_path == "config/Scan.toml"

    def test_falls_back_to_directory_name(self, tmp_path: Path) -> None:
        root = tmp_path / "unnamed"
        root.mkdir()
        (root / "Ballerina.toml").write_text("", encoding="utf-8")

        project = load_project(root)

        assert project.name == "unnamed"
        assert project.scan_config_path is None

    def test_missing_manifest_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ProjectError, match="Ballerina.toml"):
            load_project(tmp_path)

    def test_invalid_manifest_raises(self, tmp_path: Path) -> None:
        (tmp_path / "Ballerina.toml").write_text("[package\n", encoding="utf-8")
        with pytest.raises(ProjectError, match="Invalid TOML"):
            load_project(tmp_path)

    def test_missing_path_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ProjectError, match="does not exist"):
            load_project(tmp_path / "nope")


class TestLoadSingleFileProject:
    """Tests for loading a single .bal file."""

    def test_single_file(self, tmp_path: Path) -> None:
        source = tmp_path / "script.bal"
        source.write_text("public function main() {}\n", encoding="utf-8")

        project = load_project(source)

        assert project.name == "script"
        assert not project.is_build_project
        assert project.source_root is None
        assert project.target_dir == tmp_path.resolve() / "target"
        assert [doc.path for doc in project.documents] == [source.resolve()]

    def test_non_bal_file_rejected(self, tmp_path: Path) -> None:
        other = tmp_path / "notes.txt"
        other.write_text("", encoding="utf-8")
        with pytest.raises(ProjectError):
            load_project(other)
