"""Filesystem helpers for writing artifacts that readers must never see half-written."""

from __future__ import annotations

import contextlib
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator, Union


def atomic_write(path: Path, data: Union[bytes, str], *, encoding: str = "utf-8") -> None:
    """Atomically write ``data`` to ``path``.

    The data is written to a temporary file in the destination directory and
    moved over the target with ``os.replace``. The temporary file is removed
    if anything fails.

    Args:
        path: Destination file. Its parent directory must exist.
        data: Bytes, or text encoded with ``encoding``.
        encoding: Text encoding used when ``data`` is a str.
    """
    payload = data.encode(encoding) if isinstance(data, str) else data
    with atomic_output(path) as handle:
        handle.write(payload)


@contextmanager
def atomic_output(path: Path) -> Iterator[BinaryIO]:
    """Yield a binary handle whose content replaces ``path`` on clean exit.

    Args:
        path: Destination file. Its parent directory must exist.

    Yields:
        Writable binary file object backed by a temporary file.
    """
    target = Path(path)
    parent = target.parent
    if not parent.is_dir():
        raise NotADirectoryError(f"{parent} is not a directory")

    fd, temp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=str(parent))
    temp_path = Path(temp_name)
    try:
        with os.fdopen(fd, "wb") as handle:
            yield handle
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(temp_path, target)
    except BaseException:
        with contextlib.suppress(OSError):
            temp_path.unlink(missing_ok=True)
        raise


def is_within(child: Path, parent: Path) -> bool:
    """Return True if ``child`` resolves to a location inside ``parent``."""
    try:
        child.resolve().relative_to(parent.resolve())
    except ValueError:
        return False
    return True
