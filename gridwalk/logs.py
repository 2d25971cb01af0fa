"""File logging for the browser session.

The TUI owns the terminal, so records go to
``user_log_dir("gridwalk")/gridwalk.log``. ``$GRIDWALK_DEBUG`` turns on DEBUG.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from platformdirs import user_log_dir

DEBUG_ENV = "GRIDWALK_DEBUG"
LOG_FILENAME = "gridwalk.log"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def default_log_path() -> Path:
    return Path(user_log_dir("gridwalk", appauthor=False)) / LOG_FILENAME


def configure_logging(path: Path | None = None, environ: Mapping[str, str] | None = None) -> Path | None:
    """Attach a file handler to the ``gridwalk`` logger.

    Returns the log path, or ``None`` when the log file cannot be opened (the
    browser then runs without a log).
    """
    env = os.environ if environ is None else environ
    target = path or default_log_path()
    logger = logging.getLogger("gridwalk")
    logger.setLevel(logging.DEBUG if env.get(DEBUG_ENV) else logging.INFO)
    logger.propagate = False
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(target, encoding="utf-8")
    except OSError:
        logger.addHandler(logging.NullHandler())
        return None
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    return target
