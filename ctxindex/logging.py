"""Logging utilities and the execution-log sink shared by pipeline components."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Mapping

_LOGGER_NAME = "ctxindex"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the ctxindex hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Configure root logger for ctxindex with console output and optional file sink."""
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Reset handlers to avoid duplicate output when CLI is invoked multiple times.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter("[ctxindex] %(levelname)s %(message)s"))
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


class ExecutionLog:
    """Append-only execution log handed explicitly to each pipeline component.

    Every entry goes to the ``ctxindex`` logger. When ``path`` is set the entry
    is also appended to that file as one JSON line. Writing to the file is
    best effort: failures are reported through the logger and never raised to
    the caller.
    """

    def __init__(self, path: Path | None = None, *, logger: logging.Logger | None = None) -> None:
        self.path = path
        self._logger = logger or get_logger("execution")

    def record(self, component: str, event: str, **data: Any) -> None:
        """Log a successful step of ``component``."""
        self._logger.debug("%s: %s %s", component, event, _format_fields(data))
        self._append({"component": component, "event": event, **data})

    def warning(self, component: str, event: str, **data: Any) -> None:
        self._logger.warning("%s: %s %s", component, event, _format_fields(data))
        self._append({"component": component, "event": event, "level": "warning", **data})

    def error(self, component: str, exc: BaseException | str, **context: Any) -> None:
        """Log a recovered failure in ``component`` along with its context."""
        message = str(exc) if not isinstance(exc, str) else exc
        self._logger.warning("%s failed: %s %s", component, message, _format_fields(context))
        self._append(
            {
                "component": component,
                "event": "error",
                "level": "error",
                "error": message,
                "error_type": type(exc).__name__ if not isinstance(exc, str) else None,
                "context": context,
            }
        )

    def _append(self, entry: Mapping[str, Any]) -> None:
        if self.path is None:
            return
        payload = {"timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"), **entry}
        try:
            line = json.dumps(payload, default=str)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as handle:
                handle.write(line + "\n")
        except (OSError, TypeError, ValueError) as exc:
            self._logger.warning("Unable to append to execution log %s: %s", self.path, exc)


def _format_fields(data: Mapping[str, Any]) -> str:
    if not data:
        return ""
    return " ".join(f"{key}={value!r}" for key, value in data.items())


__all__ = ["ExecutionLog", "configure_logging", "get_logger"]
