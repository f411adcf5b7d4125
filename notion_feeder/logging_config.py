"""Structured logging configuration for Notion Feeder."""

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

LOGGER_NAMESPACE = "notion_feeder"

COMPONENTS = [
    "main",
    "registry",
    "feed_processor",
    "deduplicator",
    "item_writer",
    "retention_pruner",
    "notion_client",
    "secrets_manager",
    "cloudwatch_metrics",
    "config",
]


class StructuredFormatter(logging.Formatter):
    """Renders each record as one JSON line with the feeder context fields."""

    CONTEXT_FIELDS = (
        "execution_id",
        "component",
        "feed_url",
        "item_title",
        "item_link",
        "page_id",
        "error",
        "metrics",
    )

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for field in self.CONTEXT_FIELDS:
            if hasattr(record, field):
                log_entry[field] = getattr(record, field)

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False, default=str)


class ExecutionLogger:
    """Component logger that stamps every record with the run ID."""

    def __init__(self, execution_id: str, component: str = "main"):
        self.execution_id = execution_id
        self.component = component
        self.logger = logging.getLogger(f"{LOGGER_NAMESPACE}.{component}")
        self.start_time: datetime | None = None

    def _log_with_context(self, level: int, message: str, **kwargs) -> None:
        extra = {
            "execution_id": self.execution_id,
            "component": self.component,
            **kwargs,
        }
        self.logger.log(level, message, extra=extra)

    def info(self, message: str, **kwargs) -> None:
        self._log_with_context(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self._log_with_context(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs) -> None:
        self._log_with_context(logging.ERROR, message, **kwargs)

    def debug(self, message: str, **kwargs) -> None:
        self._log_with_context(logging.DEBUG, message, **kwargs)

    def log_execution_start(self, **kwargs) -> None:
        """Mark the start of a run or prune pass."""
        self.start_time = datetime.now(UTC)
        self.info(
            f"Starting {self.component} execution",
            execution_start=self.start_time.isoformat(),
            **kwargs,
        )

    def log_execution_end(self, success: bool = True, **kwargs) -> None:
        """Mark the end of a pass, with its duration when the start was logged."""
        finished = datetime.now(UTC)
        duration_seconds = None
        if self.start_time:
            duration_seconds = (finished - self.start_time).total_seconds()

        self.info(
            f"Completed {self.component} execution",
            execution_end=finished.isoformat(),
            execution_duration_seconds=duration_seconds,
            execution_success=success,
            **kwargs,
        )

    def log_feed_processing(self, feed_url: str, items_count: int) -> None:
        """Record how many items a feed returned."""
        self.info(
            f"Fetched {items_count} items",
            feed_url=feed_url,
            items_count=items_count,
        )

    def log_duplicate_skipped(self, item_title: str, item_link: str) -> None:
        """Record an item left out because the reader database already has it."""
        self.info(
            f"Skipped duplicate: {item_title}",
            item_title=item_title,
            item_link=item_link,
        )

    def log_metrics(self, metrics: dict[str, Any]) -> None:
        """Record the run counters."""
        self.info("Execution metrics", metrics=metrics)


def resolve_log_level(ci: bool, override: str | None = None) -> str:
    """Pick the log level: explicit override first, then INFO on CI, else DEBUG."""
    if override:
        return override.upper()
    return "INFO" if ci else "DEBUG"


def setup_structured_logging(log_level: str = "INFO") -> None:
    """Setup structured logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    level = getattr(logging, log_level.upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(StructuredFormatter())
    root_logger.addHandler(console_handler)

    loggers = [LOGGER_NAMESPACE] + [
        f"{LOGGER_NAMESPACE}.{component}" for component in COMPONENTS
    ]
    for logger_name in loggers:
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)
        logger.propagate = True

    # urllib3 is chatty at DEBUG and would log request URLs
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def create_execution_logger(
    component: str, execution_id: str | None = None
) -> ExecutionLogger:
    """Create an execution logger for a component.

    Args:
        component: Component name
        execution_id: Optional execution ID (will generate one if not provided)

    Returns:
        ExecutionLogger instance
    """
    if not execution_id:
        execution_id = f"exec_{datetime.now(UTC).strftime('%Y%m%d_%H%M%S_%f')}"

    return ExecutionLogger(execution_id, component)
