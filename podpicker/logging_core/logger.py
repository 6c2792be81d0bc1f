# podpicker/logging_core/logger.py
"""
Centralized structured logging for the transcript pipeline.

Emits JSON lines with the fields:
- timestamp (ISO, UTC)
- level
- message
- run_id (one per get_transcript call)
- component (resolver, chain, strategy id, title, ...)
- event_type (start/success/failure/fallback/...)
- metadata (dict)

All pipeline logs MUST go through a logger obtained from get_logger().
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, MutableMapping, TextIO, Tuple
from uuid import UUID


BASE_LOGGER_NAME = "podpicker.transcripts"


class JSONFormatter(logging.Formatter):
    """Custom formatter that outputs structured JSON lines."""

    def format(self, record: logging.LogRecord) -> str:
        log_record: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "message": record.getMessage(),
        }

        if hasattr(record, "run_id"):
            log_record["run_id"] = str(record.run_id)

        for field in ("component", "event_type", "metadata"):
            value = getattr(record, field, None)
            if value is not None:
                log_record[field] = value

        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(log_record, ensure_ascii=False, default=str)


class RunLogger(logging.LoggerAdapter):
    """Adapter that stamps every record with the run_id and keeps per-call extras."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return msg, kwargs


class _StderrHandler(logging.StreamHandler):
    """StreamHandler that writes to whatever sys.stderr is at emit time."""

    @property
    def stream(self) -> TextIO:
        return sys.stderr

    @stream.setter
    def stream(self, value: TextIO) -> None:
        pass


def _base_logger() -> logging.Logger:
    logger = logging.getLogger(BASE_LOGGER_NAME)
    # Avoid duplicate handlers across calls
    if not logger.handlers:
        handler = _StderrHandler()
        handler.setFormatter(JSONFormatter())
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False
    return logger


def get_logger(run_id: UUID | str) -> RunLogger:
    """
    Return a logger bound to the given pipeline run.

    Logs are emitted as JSON lines to stderr, keeping stdout free for
    command output. The underlying handler is
    installed once; each run only gets a lightweight adapter, so nothing
    accumulates per call.
    """
    return RunLogger(_base_logger(), {"run_id": str(run_id)})


def log_event(
    logger: logging.Logger | logging.LoggerAdapter,
    level: int,
    message: str,
    *,
    component: str | None = None,
    event_type: str,
    metadata: Dict[str, Any] | None = None,
) -> None:
    """
    Convenience wrapper for structured logging.

    Use this everywhere in the pipeline for consistency.
    """
    extra: Dict[str, Any] = {"event_type": event_type}
    if component:
        extra["component"] = component
    if metadata:
        extra["metadata"] = metadata

    logger.log(level, message, extra=extra)


# Levels are used intentionally:
# INFO for progress, WARNING for a failed strategy or a title fallback,
# ERROR for chain exhaustion. Secrets (API keys, proxy passwords) are never
# put in metadata.
