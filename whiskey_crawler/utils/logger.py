"""
Structured logging for the whiskey product crawler.

Every entry carries the stage that wrote it and a short trace id, so one
crawl can be followed from the fetch through the locator, resolver,
extractor and assembler. Output goes to stderr; stdout is left to the CLI.
"""
import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Any, Dict, List, Optional

import structlog

from whiskey_crawler.config import config

trace_id_var: ContextVar[str] = ContextVar("trace_id", default="")


def _new_trace_id() -> str:
    return uuid.uuid4().hex[:8]


def get_trace_id() -> str:
    """Current trace id; one is created on first use in a context."""
    trace_id = trace_id_var.get()
    if not trace_id:
        trace_id = set_trace_id()
    return trace_id


def set_trace_id(trace_id: Optional[str] = None) -> str:
    """Start a new trace (one per API request) and return its id."""
    trace_id = trace_id or _new_trace_id()
    trace_id_var.set(trace_id)
    return trace_id


def add_trace_id(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    event_dict["trace_id"] = get_trace_id()
    return event_dict


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None):
    """
    Configure structlog for the crawler.

    Args:
        level: Minimum level name, defaults to LOG_LEVEL
        fmt: "json" for one JSON object per line, anything else for console output
    """
    level = (level or config.LOG_LEVEL).upper()
    fmt = fmt or config.LOG_FORMAT

    processors = [
        add_trace_id,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
    ]
    if fmt == "json":
        processors.append(structlog.processors.JSONRenderer(ensure_ascii=False))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level, logging.INFO)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name)


class LayerLogger:
    """
    Logger bound to one crawler stage.

    Each helper emits a fixed event name so runs can be filtered by kind:
    decision_made, action_<status>, fallback_triggered, error_occurred,
    page_fetch and fields_extracted.
    """

    def __init__(self, layer_name: str):
        self.layer_name = layer_name
        self.logger = get_logger(layer_name)

    def _emit(self, level: str, event: str, **fields):
        getattr(self.logger, level)(event, layer=self.layer_name, **fields)

    def log_decision(self, decision: str, reason: str, url: Optional[str] = None, **extra):
        """Log which candidate a stage settled on (pattern, probe, label)."""
        self._emit("info", "decision_made", decision=decision, reason=reason, url=url, **extra)

    def log_action(self, action: str, status: str = "started", **extra):
        self._emit("info", f"action_{status}", action=action, **extra)

    def log_fallback(self, from_source: str, to_source: str, reason: str, **extra):
        """Log fields that had to come from the secondary source."""
        self._emit("warning", "fallback_triggered", from_source=from_source, to_source=to_source, reason=reason, **extra)

    def log_error(self, error: str, error_type: str = "unknown", **extra):
        self._emit("error", "error_occurred", error=error, error_type=error_type, **extra)

    def log_fetch(self, url: str, status_code: Optional[int], result: str, **extra):
        self._emit("info", "page_fetch", url=url, status_code=status_code, result=result, **extra)

    def log_extraction(self, source: str, fields_present: List[str], fields_missing: List[str], **extra):
        """Log which record fields a source resolved and which it left empty."""
        self._emit(
            "info",
            "fields_extracted",
            source=source,
            fields_present=fields_present,
            fields_missing=fields_missing,
            **extra
        )


configure_logging()
