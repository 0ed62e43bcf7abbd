"""TOML loading shared by the project loader and the scan configuration loader."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict

# Import tomllib (Python 3.11+) or tomli (Python 3.10)
if sys.version_info >= (3, 11):
    import tomllib as _tomllib
else:
    import tomli as _tomllib

TOMLDecodeError = _tomllib.TOMLDecodeError


def load_toml(path: Path) -> Dict[str, Any]:
    """Parse a TOML file into a dictionary.

    Raises:
        OSError: If the file cannot be read.
        TOMLDecodeError: If the file is not valid TOML.
    """
    with open(path, "rb") as f:
        return _tomllib.load(f)
