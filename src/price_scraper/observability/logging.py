"""Logging configuration using Loguru.

Production output is one JSON object per line; development output is
colourised text. Standard library loggers (httpx, uvicorn) are routed
through Loguru, and request-scoped fields bound with ``bind_context`` are
attached to every record emitted in the same async context.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from typing import TYPE_CHECKING

import orjson
from loguru import logger


if TYPE_CHECKING:
    from typing import Any


_log_context: ContextVar[dict[str, Any]] = ContextVar("log_context", default={})

_NOISY_LOGGERS = (
    "uvicorn",
    "uvicorn.access",
    "uvicorn.error",
    "httpx",
    "httpcore",
    "asyncio",
)


class InterceptHandler(logging.Handler):
    """Forward standard library log records to Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        """Emit a log record through Loguru at the matching level."""
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def _format_json(record: dict[str, Any]) -> str:
    """Render a record as a single JSON line."""
    record["extra"].update(_log_context.get())

    payload: dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "logger": record["extra"].get("name", record["name"]),
        "function": record["function"],
        "line": record["line"],
        **record["extra"],
    }

    exception = record["exception"]
    if exception:
        payload["exception"] = {
            "type": exception.type.__name__ if exception.type else None,
            "value": str(exception.value) if exception.value else None,
        }

    # Loguru treats the returned string as a template, so braces are escaped.
    line = orjson.dumps(payload, default=str).decode()
    return line.replace("{", "{{").replace("}", "}}") + "\n"


def _format_dev(record: dict[str, Any]) -> str:
    """Human-readable format with bound context and extra fields."""
    fields = {**_log_context.get(), **record["extra"]}
    fields.pop("name", None)
    suffix = ""
    if fields:
        rendered = " ".join(f"{k}={v}" for k, v in fields.items())
        suffix = " | " + rendered.replace("{", "{{").replace("}", "}}").replace("<", r"\<")

    fmt = (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
        f"<level>{{message}}</level>{suffix}\n"
    )
    if record["exception"]:
        fmt += "{exception}\n"
    return fmt


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    *,
    is_development: bool = False,
) -> None:
    """Configure Loguru sinks and intercept standard library logging.

    Args:
        log_level: Minimum level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: ``"json"`` or ``"text"``.
        is_development: Force the colourised text format.
    """
    logger.remove()

    if log_format == "json" and not is_development:
        logger.add(
            sys.stdout,
            format=_format_json,
            level=log_level.upper(),
            colorize=False,
            backtrace=True,
            diagnose=False,
        )
    else:
        logger.add(
            sys.stdout,
            format=_format_dev,
            level=log_level.upper(),
            colorize=True,
            backtrace=True,
            diagnose=True,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> "logger":  # type: ignore[valid-type]
    """Return a Loguru logger bound to ``name``."""
    return logger.bind(name=name)


def bind_context(**kwargs: Any) -> None:
    """Attach key/value pairs to all subsequent records in this context."""
    current = _log_context.get().copy()
    current.update(kwargs)
    _log_context.set(current)


def unbind_context(*keys: str) -> None:
    """Remove keys from the logging context."""
    current = _log_context.get().copy()
    for key in keys:
        current.pop(key, None)
    _log_context.set(current)


def clear_context() -> None:
    """Reset the logging context, typically at the start of a request."""
    _log_context.set({})


def get_context() -> dict[str, Any]:
    """Return a copy of the current logging context."""
    return _log_context.get().copy()


__all__ = [
    "bind_context",
    "clear_context",
    "get_context",
    "get_logger",
    "logger",
    "setup_logging",
    "unbind_context",
]
