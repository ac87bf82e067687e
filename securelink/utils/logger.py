"""structlog setup for SecureLink.

Every entry carries the current request's ULID (bound by RequestIDMiddleware) and
an ISO-8601 timestamp. Safe Browsing lookups are timed with PerformanceLogger.
The API key is never passed to a logger anywhere in the package.
"""

import logging
import sys
import time
from contextvars import ContextVar
from typing import Any, Optional

import structlog
from structlog.types import EventDict, Processor

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def add_request_id(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """Processor: copy the active request id into the event, if one is bound."""
    request_id = request_id_var.get()
    if request_id:
        event_dict["request_id"] = request_id
    return event_dict


def configure_logging(log_level: str = "INFO", json_output: bool = True) -> None:
    """Install the processor chain.

    Args:
        log_level:   Level name; unknown names fall back to INFO.
        json_output: JSON lines when True (hosted), coloured console otherwise.
    """
    renderer: Processor = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=True)
    )
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_request_id,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        renderer,
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = "securelink") -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


class PerformanceLogger:
    """Times a block and logs one entry when it exits.

    Success is logged at DEBUG, or WARNING once ``warn_ms`` is exceeded. An
    exception leaving the block is logged at WARNING and re-raised. Extra keyword
    arguments are attached to the entry.
    """

    def __init__(
        self,
        operation: str,
        logger: Optional[structlog.stdlib.BoundLogger] = None,
        warn_ms: float = 50.0,
        **fields: Any,
    ):
        self.operation = operation
        self.logger = logger or get_logger()
        self.warn_ms = warn_ms
        self.fields = fields
        self.start_time: float = 0
        self.end_time: float = 0

    def __enter__(self) -> "PerformanceLogger":
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.end_time = time.perf_counter()
        entry = dict(self.fields, operation=self.operation, duration_ms=self.duration_ms)

        if exc_type is not None:
            self.logger.warning(
                f"{self.operation} failed",
                error=str(exc_val),
                error_type=exc_type.__name__,
                **entry,
            )
            return

        slow = self.duration_ms > self.warn_ms
        log_method = self.logger.warning if slow else self.logger.debug
        log_method(f"{self.operation} completed", **entry)

    @property
    def duration_ms(self) -> float:
        """Elapsed milliseconds; still running if read inside the block."""
        end = self.end_time or time.perf_counter()
        return (end - self.start_time) * 1000


def set_request_id(request_id: str) -> None:
    """Bind ``request_id`` to every log entry in the current context."""
    request_id_var.set(request_id)


def clear_request_id() -> None:
    request_id_var.set(None)


# Defaults until securelink.main reconfigures from the environment.
configure_logging()
