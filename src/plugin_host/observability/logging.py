"""Structured JSON logging with corpus context."""
import logging
import sys
from typing import Any

from pythonjsonlogger import jsonlogger

from plugin_host.config import get_settings

CONTEXT_FIELDS = ("corpus_root", "document", "doc_kind", "rule_id")


class DocContextFilter(logging.Filter):
    """Add corpus context to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Add default context fields if not present."""
        for name in CONTEXT_FIELDS:
            if not hasattr(record, name):
                setattr(record, name, None)
        return True


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with standardized field names."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        """Add custom fields to the log record."""
        super().add_fields(log_record, record, message_dict)

        if not log_record.get("timestamp"):
            log_record["timestamp"] = self.formatTime(record, self.datefmt)

        log_record["level"] = record.levelname
        log_record["logger"] = record.name

        # Context fields only when set, None defaults come from the filter
        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value:
                log_record[name] = str(value)
            else:
                log_record.pop(name, None)


def setup_logging(level: str | None = None, fmt: str | None = None) -> None:
    """
    Configure logging for the application.

    Args:
        level: Override for the configured log level
        fmt: Override for the configured format ("json" or "text")
    """
    settings = get_settings()
    fmt = (fmt or settings.log_format).lower()

    # stderr keeps CLI stdout clean for JSON reports
    handler = logging.StreamHandler(sys.stderr)

    if fmt == "json":
        formatter: logging.Formatter = CustomJsonFormatter(
            "%(timestamp)s %(level)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )
    handler.setFormatter(formatter)
    handler.addFilter(DocContextFilter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel((level or settings.log_level).upper())

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


class ContextAdapter(logging.LoggerAdapter):
    """LoggerAdapter that merges per-call extra with the adapter's own."""

    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        kwargs["extra"] = {**(self.extra or {}), **kwargs.get("extra", {})}
        return msg, kwargs


def get_logger(name: str) -> logging.LoggerAdapter:
    """
    Get a logger with corpus context support.

    Args:
        name: Logger name (typically __name__)

    Returns:
        LoggerAdapter that can accept context in extra dict
    """
    logger = logging.getLogger(name)
    return ContextAdapter(logger, extra={})


def with_doc_context(
    corpus_root: Any = None,
    document: str | None = None,
    doc_kind: str | None = None,
    rule_id: str | None = None,
    **kwargs: Any,
) -> dict[str, Any]:
    """
    Create an extra dict with corpus context for logging.

    Args:
        corpus_root: Corpus root directory
        document: Document name
        doc_kind: Document kind (agent, skill, command)
        rule_id: Lint rule id
        **kwargs: Additional context fields

    Returns:
        Dict to pass as extra parameter to logger methods
    """
    extra = kwargs.copy()
    if corpus_root:
        extra["corpus_root"] = str(corpus_root)
    if document:
        extra["document"] = document
    if doc_kind:
        extra["doc_kind"] = doc_kind
    if rule_id:
        extra["rule_id"] = rule_id
    return extra
