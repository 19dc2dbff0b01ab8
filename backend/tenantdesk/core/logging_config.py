import contextvars
import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
from opentelemetry import trace
from ..config import settings

# Email (or token type) of the caller for the current request
logged_user: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("logged_user", default=None)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def set_logged_user(user: Optional[str]) -> None:
    logged_user.set(user)


def get_logged_user() -> Optional[str]:
    return logged_user.get()


def _current_trace_id() -> Optional[str]:
    span = trace.get_current_span()
    if span and span.is_recording():
        span_context = span.get_span_context()
        if span_context and span_context.trace_id:
            return format(span_context.trace_id, '032x')[:16]
    return None


class RequestContextFilter(logging.Filter):
    """Attach the logged user and trace id (if any) to every LogRecord"""

    def filter(self, record: logging.LogRecord) -> bool:
        record.logged_user = logged_user.get()
        record.trace_id = _current_trace_id()
        return True


class ContextFormatter(logging.Formatter):
    """
    Console formatter that appends request context

    Adds the logged user and, when an OpenTelemetry span is recording,
    the trace id so logs can be correlated with traces.
    """

    def format(self, record):
        message = super().format(record)
        suffix = []
        if getattr(record, "logged_user", None):
            suffix.append(f"user={record.logged_user}")
        if getattr(record, "trace_id", None):
            suffix.append(f"trace_id={record.trace_id}")
        if suffix:
            message = f"{message} [{' '.join(suffix)}]"
        return message


class JsonFormatter(logging.Formatter):
    """JSON lines for the rotating log files"""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "loggedUser": getattr(record, "logged_user", None),
            "traceId": getattr(record, "trace_id", None),
        }
        if record.exc_info:
            payload["stack"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def _file_handler(directory: Path, filename: str, level: int) -> logging.Handler:
    handler = logging.handlers.TimedRotatingFileHandler(
        str(directory / filename),
        when="midnight",
        backupCount=settings.log_retention_days,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(JsonFormatter())
    return handler


def setup_logging():
    """Configure logging for the application"""
    log_level = getattr(settings, "log_level", "INFO").upper()
    context_filter = RequestContextFilter()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ContextFormatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    handler.addFilter(context_filter)
    handlers = [handler]

    if settings.structured_logging:
        logs_directory = Path(settings.logs_directory)
        logs_directory.mkdir(parents=True, exist_ok=True)
        for filename, level in (("info.log", logging.INFO), ("error.log", logging.ERROR)):
            file_handler = _file_handler(logs_directory, filename, level)
            file_handler.addFilter(context_filter)
            handlers.append(file_handler)

    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        handlers=handlers,
        force=True,
    )

    # Set specific log levels for noisy libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info(f"Logging configured with level: {log_level}")
