"""
Logging setup for the engine.

stdout belongs to the action protocol, so every handler installed here
writes to stderr or to a file. Entry points call configure_logging() once;
library modules only ever ask for a logger.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import List, Union

TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s:%(lineno)d %(message)s"
JSON_FORMAT = (
    '{"time":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","line":%(lineno)d,"msg":"%(message)s"}'
)

# Third-party loggers held at WARNING unless DEBUG is requested.
QUIET_LOGGERS = ("uvicorn.access", "httpx")


def _build_handlers(formatter: logging.Formatter, logfile: str | Path | None) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if logfile is not None:
        path = Path(logfile)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def configure_logging(
    level: Union[str, int] = "INFO",
    *,
    json: bool = False,
    logfile: str | Path | None = None,
) -> None:
    """
    Replace the root logger's handlers.

    Args:
        level: Level name (case-insensitive) or number
        json: One JSON object per line instead of plain text
        logfile: Also append to this file; parent directories are created
    """
    if isinstance(level, str):
        level = level.upper()

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    formatter = logging.Formatter(JSON_FORMAT if json else TEXT_FORMAT)
    for handler in _build_handlers(formatter, logfile):
        root.addHandler(handler)

    quiet_level = logging.NOTSET if root.level <= logging.DEBUG else logging.WARNING
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)

    logging.captureWarnings(True)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
