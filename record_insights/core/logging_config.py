"""
Logging setup for the record insights engine.

Library modules log through ``logging.getLogger(__name__)`` and never
configure handlers themselves. The CLI calls ``setup_logging`` once.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

from record_insights.core.constants import LOG_FORMAT, LOG_DATE_FORMAT, ROOT_LOGGER_NAME


def setup_logging(level: Union[str, int] = "WARNING", log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure the package logger.

    Args:
        level: Logging level name or number (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional path of a log file; parent directories are created

    Returns:
        The configured package root logger
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.WARNING)

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level)

    # Re-running setup (tests, repeated CLI invocations) must not stack handlers
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    root.propagate = False
    return root


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the package namespace."""
    if not name.startswith(ROOT_LOGGER_NAME):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
