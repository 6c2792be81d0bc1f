"""Structured JSON logging shared by the whole pipeline."""

from podpicker.logging_core.logger import JSONFormatter, get_logger, log_event

__all__ = ["JSONFormatter", "get_logger", "log_event"]
