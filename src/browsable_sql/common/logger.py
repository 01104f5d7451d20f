"""Logging setup for the gateway.

Every record emitted while a gateway request is handled carries the request
id, the HTTP method and the matched route (``/query/raw`` or ``/studio``).
"""
import contextvars
import json
import logging
from contextlib import contextmanager
from typing import NamedTuple, Optional


class RequestInfo(NamedTuple):
    request_id: str
    method: str
    route: str


_request_ctx: contextvars.ContextVar[Optional[RequestInfo]] = contextvars.ContextVar("browsable_request", default=None)

_REQUEST_FIELDS = ("request_id", "method", "route")

# Attributes every LogRecord has; anything else was passed through ``extra``.
_RECORD_ATTRS = set(logging.LogRecord("", 0, "", 0, "", None, None).__dict__) | {"message", "asctime"}


@contextmanager
def request_context(request_id: str, method: str, route: str):
    """Binds the request being handled to every record logged inside the block."""
    token = _request_ctx.set(RequestInfo(request_id, method, route))
    try:
        yield
    finally:
        _request_ctx.reset(token)


class RequestContextFilter(logging.Filter):
    """Copies the bound request onto the record; ``-`` outside a request."""

    def filter(self, record):
        info = _request_ctx.get()
        for field in _REQUEST_FIELDS:
            setattr(record, field, getattr(info, field) if info else "-")
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per record.

    The request fields are grouped under ``request`` and only present for
    records logged while a request was bound. ``extra`` values, such as the
    ``error_code`` of a failed statement, are emitted as top-level keys.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if getattr(record, "request_id", "-") != "-":
            entry["request"] = {field: getattr(record, field) for field in _REQUEST_FIELDS}

        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRS or key in _REQUEST_FIELDS or key.startswith("_"):
                continue
            entry[key] = value

        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(request_id)s %(method)s %(route)s] %(message)s"


def configure_logging(level: str = "INFO", json_format: bool = False) -> logging.Handler:
    """Replaces the root handlers with one stream handler.

    Args:
        level (str): Root log level.
        json_format (bool): Emit ``JsonFormatter`` output instead of ``TEXT_FORMAT`` lines.

    Returns:
        logging.Handler: The installed handler.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.addFilter(RequestContextFilter())
    handler.setFormatter(JsonFormatter() if json_format else logging.Formatter(TEXT_FORMAT))
    root_logger.addHandler(handler)

    # The remote cursor's client logs every request at INFO.
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)
    return handler
