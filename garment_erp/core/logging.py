from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional, Union

correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)
user_id_var: ContextVar[Optional[str]] = ContextVar("user_id", default=None)

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | cid=%(correlation_id)s | user=%(user_id)s | %(message)s"

# Library loggers that flood INFO with per-statement or per-request lines.
_NOISY_LOGGERS = ("aiosqlite", "multipart", "passlib")


class LoggingContextFilter(logging.Filter):
    """Stamp each record with the request's correlation id and user id ('-' when unset)."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        record.correlation_id = correlation_id_var.get() or "-"
        record.user_id = user_id_var.get() or "-"
        return True


# PUBLIC_INTERFACE
@contextmanager
def request_context(correlation_id: str) -> Iterator[str]:
    """Bind a correlation id (and a blank user id) for the duration of one request."""
    token_corr = correlation_id_var.set(correlation_id)
    token_user = user_id_var.set(None)
    try:
        yield correlation_id
    finally:
        correlation_id_var.reset(token_corr)
        user_id_var.reset(token_user)


# PUBLIC_INTERFACE
def configure_logging(level: Union[int, str] = logging.INFO) -> None:
    """Route all logging to one stdout handler carrying the request context."""
    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT))
    handler.addFilter(LoggingContextFilter())

    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)
    root.addHandler(handler)
    root.setLevel(level.upper() if isinstance(level, str) else level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
