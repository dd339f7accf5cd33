# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Logging utilities for the language-server router.

Plain-text output is coloured by default. Structured JSON records can be
enabled with ``LSPROUTER_LOG_JSON=1`` (or ``setup_logger(use_json=True)``);
they are serialized with orjson unless a custom serializer is supplied.

Stdio transports reserve stdout for protocol frames, so the managed handler
always writes to stderr.
"""

from __future__ import annotations

from collections.abc import Callable
import logging
import os
import sys
from typing import Any, ClassVar, Final

import orjson as oj


RESET: Final[str] = "\033[0m"

DEBUG_COLOR: Final[str] = "\033[36m"
INFO_COLOR: Final[str] = "\033[32m"
WARNING_COLOR: Final[str] = "\033[33m"
ERROR_COLOR: Final[str] = "\033[1;31m"
CRITICAL_COLOR: Final[str] = "\033[1;35m"
LOGGER_COLOR: Final[str] = "\033[94m"

DEFAULT_LOGGER_NAME: Final[str] = "lsprouter"
ENV_LOG_LEVEL: Final[str] = "LSPROUTER_LOG_LEVEL"
ENV_LOG_JSON: Final[str] = "LSPROUTER_LOG_JSON"
ENV_NO_COLOR: Final[str] = "NO_COLOR"
DEFAULT_FORMAT: Final[str] = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DEFAULT_DATEFMT: Final[str] = "%Y-%m-%d %H:%M:%S"

JsonSerializer = Callable[[dict[str, Any]], str]

_BUILTIN_RECORD_KEYS: frozenset[str] = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__.keys()
    | {"message", "asctime", "context", "taskName"}
)


class ColoredFormatter(logging.Formatter):
    """Formatter that colours the level and logger name."""

    LEVEL_COLORS: ClassVar[dict[str, str]] = {
        "DEBUG": DEBUG_COLOR,
        "INFO": INFO_COLOR,
        "WARNING": WARNING_COLOR,
        "ERROR": ERROR_COLOR,
        "CRITICAL": CRITICAL_COLOR,
    }

    def format(self, record: logging.LogRecord) -> str:
        orig_levelname = record.levelname
        orig_name = record.name

        record.levelname = f"{self.LEVEL_COLORS.get(orig_levelname, '')}{orig_levelname}{RESET}"
        record.name = f"{LOGGER_COLOR}{orig_name}{RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = orig_levelname
            record.name = orig_name


class LspRouterHandler(logging.StreamHandler):  # type: ignore[type-arg]
    """Stderr handler managed by :func:`setup_logger`."""

    def __init__(self) -> None:
        super().__init__(sys.stderr)


class StructuredJSONFormatter(logging.Formatter):
    """Serialize log records into one JSON object per line.

    ``extra={"context": {...}}`` is flattened into the ``context`` key together
    with any other non-builtin record attributes.
    """

    def __init__(self, serializer: JsonSerializer | None = None, *, datefmt: str | None = None) -> None:
        super().__init__(datefmt=datefmt)
        self._serializer = serializer or _default_json_serializer

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        extra: dict[str, Any] = {}
        context = getattr(record, "context", None)
        if isinstance(context, dict):
            extra.update(context)
        for key, value in record.__dict__.items():
            if key in _BUILTIN_RECORD_KEYS or key in extra:
                continue
            extra[key] = value
        if extra:
            payload["context"] = extra

        return self._serializer(payload)


def _default_json_serializer(payload: dict[str, Any]) -> str:
    return oj.dumps(payload, default=str).decode()


def _has_managed_handler(root: logging.Logger) -> bool:
    return any(isinstance(handler, LspRouterHandler) for handler in root.handlers)


def _read_bool_env(key: str) -> bool:
    value = os.getenv(key)
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _resolve_level(level: int | str | None) -> int:
    if level is None:
        level = os.getenv(ENV_LOG_LEVEL)
        if not level:
            return logging.INFO

    if isinstance(level, int):
        return level

    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logger(
    *,
    level: int | str | None = None,
    use_json: bool | None = None,
    use_color: bool | None = None,
    json_serializer: JsonSerializer | None = None,
    fmt: str | None = None,
    datefmt: str | None = DEFAULT_DATEFMT,
    force: bool = False,
) -> None:
    """Configure the root logger.

    Args:
        level: Override the log level. Falls back to ``LSPROUTER_LOG_LEVEL``
            then ``logging.INFO``.
        use_json: Enable JSON output. Defaults to ``LSPROUTER_LOG_JSON``.
        use_color: Colour plain-text output. Defaults to ``True`` unless
            ``NO_COLOR`` is set or JSON output is enabled.
        json_serializer: Callable turning the payload dict into a string.
        fmt: Format string for plain-text logging.
        datefmt: Date format for both formatters.
        force: Replace a previously installed router handler.
    """
    root = logging.getLogger()

    if _has_managed_handler(root) and not force:
        return

    for handler in list(root.handlers):
        if isinstance(handler, LspRouterHandler):
            root.removeHandler(handler)
            handler.close()

    resolved_level = _resolve_level(level)
    root.setLevel(resolved_level)

    resolved_use_json = use_json if use_json is not None else _read_bool_env(ENV_LOG_JSON)
    if use_color is not None:
        resolved_use_color = use_color
    elif os.getenv(ENV_NO_COLOR):
        resolved_use_color = False
    else:
        resolved_use_color = not resolved_use_json

    formatter: logging.Formatter
    if resolved_use_json:
        formatter = StructuredJSONFormatter(json_serializer, datefmt=datefmt)
    elif resolved_use_color:
        formatter = ColoredFormatter(fmt or DEFAULT_FORMAT, datefmt=datefmt)
    else:
        formatter = logging.Formatter(fmt or DEFAULT_FORMAT, datefmt=datefmt)

    handler = LspRouterHandler()
    handler.setLevel(resolved_level)
    handler.setFormatter(formatter)
    root.addHandler(handler)


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger, installing the router handler on first use."""
    if not _has_managed_handler(logging.getLogger()):
        setup_logger()
    return logging.getLogger(name or DEFAULT_LOGGER_NAME)


__all__ = [
    "DEFAULT_LOGGER_NAME",
    "ColoredFormatter",
    "LspRouterHandler",
    "StructuredJSONFormatter",
    "get_logger",
    "setup_logger",
]
