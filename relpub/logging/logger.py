# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Structured JSON logging for relpub.

Every record leaves the process as one JSON object per line:

  {"ts": "2026-...", "level": "INFO", "module": "relpub.release.publisher",
   "msg": "Artifact uploaded", "key": "app1/artifact/ab12..."}

Anything passed through `extra=` lands in the object next to the four fixed
fields, which is how the publish steps report keys, checksums and the name of
the step that failed. Use `get_logger` to obtain loggers; it wires the
formatter and handlers and reuses them on later calls. Module loggers are
created at import time, so the CLI calls `configure_logging` once its settings
are known; that re-levels every existing relpub logger, points them at the log
file, and becomes the default for loggers created afterwards.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

# Attributes every LogRecord carries. Anything else on the record came from
# the caller's `extra` mapping.
_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None)).keys()
) | {"message", "asctime", "taskName"}

PACKAGE_LOGGER = "relpub"

# Defaults set by configure_logging for loggers that do not pass their own.
_default_level = "INFO"
_default_log_file: Optional[Path] = None

_LEVELS: dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


class _StdoutHandler(logging.StreamHandler):
    """Stream handler bound to whatever sys.stdout is at emit time."""

    @property
    def stream(self):  # type: ignore[override]
        return sys.stdout

    @stream.setter
    def stream(self, value: object) -> None:
        pass


class JsonFormatter(logging.Formatter):
    """Render a LogRecord as a single JSON line with its extra context."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.name,
            "msg": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRS or key.startswith("_"):
                continue
            entry[key] = value

        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def resolve_log_level(level_name: str) -> int:
    """Map a level name such as "info" to its logging constant."""
    try:
        return _LEVELS[level_name.upper()]
    except KeyError:
        raise ValueError(
            f"Invalid log level '{level_name}'. Must be one of: {', '.join(sorted(_LEVELS))}"
        ) from None


def get_logger(
    name: str,
    log_level: Optional[str] = None,
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """
    Return a logger that writes JSON lines to stdout and, optionally, a file.

    Calling this again for the same name adjusts the level and adds the file
    destination if it is new; existing handlers are reused, so repeated calls
    (CLI commands, tests) never duplicate output.

    Args:
        name: Logger name, normally the caller's ``__name__``.
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL (case-insensitive).
            Defaults to the level given to configure_logging, else INFO.
        log_file: Extra destination for the same JSON lines. Defaults to the
            file given to configure_logging, if any.

    Raises:
        ValueError: If ``log_level`` is not a known level name.
    """
    level = resolve_log_level(log_level or _default_level)
    if log_file is None:
        log_file = _default_log_file

    logger = logging.getLogger(name)
    logger.setLevel(level)

    new_handlers: list[logging.Handler] = []
    if not logger.handlers:
        new_handlers.append(_StdoutHandler())

    if log_file is not None:
        target = os.path.abspath(log_file)
        if not any(
            isinstance(h, logging.FileHandler) and h.baseFilename == target
            for h in logger.handlers
        ):
            log_file.parent.mkdir(parents=True, exist_ok=True)
            new_handlers.append(logging.FileHandler(target, encoding="utf-8"))

    formatter = JsonFormatter()
    for handler in new_handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    for handler in logger.handlers:
        handler.setLevel(level)

    logger.propagate = False
    return logger


def configure_logging(log_level: str = "INFO", log_file: Optional[Path] = None) -> None:
    """
    Apply one level and log file to every relpub logger.

    Loggers that already exist are re-leveled and moved to the new file (a
    previous file handler is closed); loggers created later pick the same
    settings up through get_logger's defaults.

    Raises:
        ValueError: If ``log_level`` is not a known level name.
    """
    global _default_level, _default_log_file

    resolve_log_level(log_level)
    _default_level = log_level
    _default_log_file = log_file

    target = os.path.abspath(log_file) if log_file is not None else None
    for name, existing in list(logging.Logger.manager.loggerDict.items()):
        if not isinstance(existing, logging.Logger):
            continue
        if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
            continue

        for handler in list(existing.handlers):
            if isinstance(handler, logging.FileHandler) and handler.baseFilename != target:
                existing.removeHandler(handler)
                handler.close()

        get_logger(name, log_level, log_file)
