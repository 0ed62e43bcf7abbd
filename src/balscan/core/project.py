"""Loading of Ballerina projects into the minimal view the scanner needs.

Parsing Ballerina itself is out of balscan's hands; a project here is the
package name, its directories, the optional ``[scan] configPath`` from
``Ballerina.toml`` and the list of ``.bal`` documents.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from balscan.core.logging import get_logger
from balscan.core.toml_utils import TOMLDecodeError, load_toml

LOGGER = get_logger(__name__)

BALLERINA_TOML = "Ballerina.toml"
BAL_SOURCE_SUFFIX = ".bal"
TARGET_DIR_NAME = "target"

# Directories never searched for sources
_SKIPPED_DIRS = frozenset({TARGET_DIR_NAME, ".git", ".idea", ".vscode"})


class ProjectError(Exception):
    """The given path is not a loadable Ballerina project."""

    pass


@dataclass(frozen=True)
class Document:
    """A single Ballerina source file."""

    name: str
    path: Path

    def read_text(self) -> str:
        return self.path.read_text(encoding="utf-8")


@dataclass
class Project:
    """A Ballerina build project or single-file project.

    Attributes:
        name: Package name (file stem for single-file projects).
        root: Directory holding the project; config lookups start here.
        source_root: Package root for build projects, None for single files.
        target_dir: Build output directory; caches and default reports live here.
        scan_config_path: Raw ``[scan] configPath`` value, if declared.
        documents: Source documents in a stable order.
    """

    name: str
    root: Path
    target_dir: Path
    source_root: Optional[Path] = None
    scan_config_path: Optional[str] = None
    documents: List[Document] = field(default_factory=list)

    @property
    def is_build_project(self) -> bool:
        return self.source_root is not None


def load_project(path: Path) -> Project:
    """Load a build project directory or a single ``.bal`` file.

    Args:
        path: Project directory (containing Ballerina.toml) or a .bal file.

    Returns:
        Loaded Project.

    Raises:
        ProjectError: If the path does not exist or is not a Ballerina project.
    """
    path = path.resolve()
    if not path.exists():
        raise ProjectError(f"Path does not exist: {path}")

    if path.is_file():
        if path.suffix != BAL_SOURCE_SUFFIX:
            raise ProjectError(f"Not a Ballerina source file: {path}")
        LOGGER.debug(f"Loading single-file project {path}")
        return Project(
            name=path.stem,
            root=path.parent,
            target_dir=path.parent / TARGET_DIR_NAME,
            documents=[Document(name=path.name, path=path)],
        )

    manifest = path / BALLERINA_TOML
    if not manifest.is_file():
        raise ProjectError(f"{BALLERINA_TOML} not found in {path}")

    try:
        data = load_toml(manifest)
    except TOMLDecodeError as e:
        raise ProjectError(f"Invalid TOML in {manifest}: {e}") from e
    except OSError as e:
        raise ProjectError(f"Failed to read {manifest}: {e}") from e

    package = data.get("package", {})
    name = package.get("name") if isinstance(package, dict) else None
    if not isinstance(name, str) or not name:
        name = path.name

    scan_table = data.get("scan")
    config_path = None
    if isinstance(scan_table, dict):
        value = scan_table.get("configPath")
        if isinstance(value, str) and value:
            config_path = value
        else:
            LOGGER.info(f"configPath for the scan configuration is missing in {manifest}")

    return Project(
        name=name,
        root=path,
        target_dir=path / TARGET_DIR_NAME,
        source_root=path,
        scan_config_path=config_path,
        documents=_collect_documents(path),
    )


def _collect_documents(root: Path) -> List[Document]:
    """Find .bal sources below root, skipping build output and tool dirs."""
    documents = []
    for source in sorted(root.rglob(f"*{BAL_SOURCE_SUFFIX}")):
        relative = source.relative_to(root)
        if any(part in _SKIPPED_DIRS for part in relative.parts[:-1]):
            continue
        if source.is_file():
            documents.append(Document(name=source.name, path=source))
    return documents
