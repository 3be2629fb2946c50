"""
Logger utility that writes to stderr.

Structured metadata travels on the log record and is masked by a
handler filter before the formatter renders it as JSON, so passwords
and keytab content cannot reach the log even if a caller passes them
by mistake.
"""

import json
import logging
import os
import sys
import traceback
from typing import Any, Optional

# Log level mapping
LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

REDACTED = "***"
SECRET_KEYS = frozenset({"password", "keytab_base64", "keytab", "token"})


def redact(meta: dict[str, Any]) -> dict[str, Any]:
    """Copy of ``meta`` with secret-named values masked, recursing into dicts."""
    masked: dict[str, Any] = {}
    for key, value in meta.items():
        if key.lower() in SECRET_KEYS:
            masked[key] = REDACTED
        elif isinstance(value, dict):
            masked[key] = redact(value)
        else:
            masked[key] = value
    return masked


class RedactingFilter(logging.Filter):
    """Mask secret-named keys in a record's ``meta`` dict."""

    def filter(self, record: logging.LogRecord) -> bool:
        meta = getattr(record, "meta", None)
        if isinstance(meta, dict):
            record.meta = redact(meta)
        return True


class MetaFormatter(logging.Formatter):
    """Append a record's ``meta`` to the formatted line."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        meta = getattr(record, "meta", None)
        if meta is None:
            return line

        if isinstance(meta, BaseException):
            return line + "\n" + "".join(
                traceback.format_exception(type(meta), meta, meta.__traceback__)
            )

        if isinstance(meta, dict):
            try:
                return line + " " + json.dumps(meta, sort_keys=True)
            except (TypeError, ValueError):
                pass

        return line + " " + str(meta)


class StderrHandler(logging.Handler):
    """Handler bound to whatever sys.stderr is at emit time."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            sys.stderr.write(self.format(record) + "\n")
            sys.stderr.flush()
        except Exception:
            self.handleError(record)


class Logger:
    """stderr logger with structured, redacted metadata."""

    def __init__(self, name: str = "ipa-connect", level: str = "info"):
        self._logger = logging.getLogger(name)
        self.set_level(os.environ.get("LOG_LEVEL", level))

        self._logger.handlers.clear()
        handler = StderrHandler()
        handler.addFilter(RedactingFilter())
        handler.setFormatter(
            MetaFormatter(
                "[%(asctime)s] %(levelname)-5s %(name)s: %(message)s",
                datefmt="%Y-%m-%dT%H:%M:%S",
            )
        )
        self._logger.addHandler(handler)
        self._logger.propagate = False

    def set_level(self, level: str) -> None:
        self._logger.setLevel(LOG_LEVELS.get(level.lower(), logging.INFO))

    def _log(self, level: int, message: str, meta: Optional[Any]) -> None:
        self._logger.log(level, message, extra={"meta": meta})

    def debug(self, message: str, meta: Optional[Any] = None) -> None:
        self._log(logging.DEBUG, message, meta)

    def info(self, message: str, meta: Optional[Any] = None) -> None:
        self._log(logging.INFO, message, meta)

    def warning(self, message: str, meta: Optional[Any] = None) -> None:
        self._log(logging.WARNING, message, meta)

    def error(self, message: str, meta: Optional[Any] = None) -> None:
        self._log(logging.ERROR, message, meta)


# Global logger instance
logger = Logger()
