"""Shared fixtures for balscan tests."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, Optional

import pytest

from balscan.core.project import Project, load_project


def write_package(
    root: Path,
    sources: Dict[str, str],
    name: str = "demo",
    scan_config_path: Optional[str] = None,
) -> Path:
    """Create a Ballerina package with the given sources under ``root``."""
    root.mkdir(parents=True, exist_ok=True)
    manifest = f'[package]\norg = "acme"\nname = "{name}"\nversion = "0.1.0"\n'
    if scan_config_path is not None:
        manifest += f'\n[scan]\nconfigPath = "{scan_config_path}"\n'
    (root / "Ballerina.toml").write_text(manifest, encoding="utf-8")
    for relative, content in sources.items():
        source = root / relative
        source.parent.mkdir(parents=True, exist_ok=True)
        source.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def package_factory(tmp_path: Path) -> Callable[..., Project]:
    """Return a factory that writes a package and loads it as a Project."""

    def factory(
        sources: Dict[str, str],
        name: str = "demo",
        scan_config_path: Optional[str] = None,
        scan_toml: Optional[str] = None,
    ) -> Project:
        root = write_package(tmp_path / name, sources, name=name, scan_config_path=scan_config_path)
        if scan_toml is not None:
            (root / "Scan.toml").write_text(scan_toml, encoding="utf-8")
        return load_project(root)

    return factory
