from __future__ import annotations

import logging
from typing import Optional

# Root logger name shared by every balscan module logger
ROOT_LOGGER_NAME = "balscan"


def configure_logging(*, debug: bool = False, verbose: bool = False, quiet: bool = False) -> None:
    """Configure the balscan logging level based on CLI flags.

    Precedence:
    - quiet → ERROR
    - debug → DEBUG
    - verbose → INFO
    - default → WARNING

    Log records go to stderr so that JSON printed to stdout stays parseable.
    """

    if quiet:
        level = logging.ERROR
    elif debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger(ROOT_LOGGER_NAME).setLevel(level)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a module-level logger under the balscan namespace."""

    return logging.getLogger(name if name is not None else ROOT_LOGGER_NAME)
