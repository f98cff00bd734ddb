"""
Structured logging for the quotation engine.

Every record is emitted as one JSON object. Engine code passes record ids via
``extra=`` (``quotation_id``, ``room_id``, ``customer_id`` ...); those keys are
lifted to the top level so logs can be filtered per quotation. The id of the
HTTP request being served is stamped onto every record by ``RequestIdFilter``,
including records from the aggregator and services, not only the middleware.
"""
import contextvars
import json
import logging
import sys
from datetime import datetime, timezone

# Request id of the HTTP request currently being served (set by RequestTimingMiddleware).
current_request_id: contextvars.ContextVar = contextvars.ContextVar("request_id", default=None)

CONTEXT_FIELDS = (
    "request_id",
    "customer_id",
    "quotation_id",
    "room_id",
    "duration_ms",
    "http_method",
    "http_path",
    "http_status",
)

NOISY_LOGGERS = ("uvicorn.access", "httpcore", "httpx")


class RequestIdFilter(logging.Filter):
    """Copy the current request id onto records that do not carry one."""

    def filter(self, record):
        if getattr(record, "request_id", None) is None:
            request_id = current_request_id.get()
            if request_id is not None:
                record.request_id = request_id
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per record; context ids only when set."""
    def format(self, record):
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "function": record.funcName,
            "line": record.lineno,
        }
        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                log_entry[name] = value
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=str)


def setup_logging(level: str = "INFO", json_output: bool = True):
    """Install one stdout handler on the root logger (JSON or plain text)."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIdFilter())
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(name)s] %(levelname)s: %(message)s"
        ))

    root.handlers = [handler]

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
