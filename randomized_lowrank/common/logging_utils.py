"""Logging helpers for the experiment runner and plotting scripts.

Library modules only call ``logging.getLogger(__name__)`` and never set a
level or attach handlers, so their DEBUG records (rank clamping, basis
collapse) follow whatever the caller configures.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict

PACKAGE_LOGGER = "randomized_lowrank"


def get_logger(name: str = PACKAGE_LOGGER, level: int = logging.INFO) -> logging.Logger:
    """Return a logger for a script entry point.

    A stream handler is attached once to the package logger, so records
    from every module under ``randomized_lowrank`` share one output. Only
    the returned logger gets ``level``; library loggers stay unset.

    Parameters
    ----------
    name:
        Logger name, normally the calling script's ``__name__``.
    level:
        Level of the returned logger.

    Returns
    -------
    logging.Logger
        Configured logger instance.
    """

    package = logging.getLogger(PACKAGE_LOGGER)
    if not package.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter(
                fmt="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        package.addHandler(handler)

    logger = logging.getLogger(name)
    logger.setLevel(level)
    return logger


def append_jsonl(path: Path, record: Dict[str, Any]) -> None:
    """Append ``record`` as one line of a JSONL file, creating parents."""

    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as f:
        json.dump(record, f)
        f.write("\n")
