"""Request ID logging context for tracing operations across modules.

Every transport-level operation runs inside its own request scope, so the
availability lookup, lock wait and ledger commit of one booking attempt
share an ID and can be picked out of interleaved concurrent requests.
The scope is reset on exit; IDs never leak into the caller's context.

Usage:
    from booking_core.logging_context import get_request_id, with_request_id

    @with_request_id
    async def post_booking(...):
        logger.info("Booking committed")  # -> [REQ-1a2b3c4d] Booking committed
        return {"request_id": get_request_id(), ...}
"""

import functools
import inspect
import logging
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Callable, Iterator, Optional, TypeVar

NO_REQUEST_ID = "NO_REQUEST_ID"

_request_id: ContextVar[str] = ContextVar("request_id", default=NO_REQUEST_ID)

F = TypeVar("F", bound=Callable[..., Any])


def new_request_id() -> str:
    return f"REQ-{uuid.uuid4().hex[:8]}"


def get_request_id() -> str:
    """Retrieve the ID of the request currently being handled."""
    return _request_id.get()


@contextmanager
def request_scope(request_id: Optional[str] = None) -> Iterator[str]:
    """Run the block under ``request_id`` (or a fresh one), restoring the previous ID after."""
    token = _request_id.set(request_id or new_request_id())
    try:
        yield _request_id.get()
    finally:
        _request_id.reset(token)


def with_request_id(func: F) -> F:
    """Decorate a sync or async operation so each call gets its own request scope."""
    if inspect.iscoroutinefunction(func):
        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            with request_scope():
                return await func(*args, **kwargs)
        return async_wrapper  # type: ignore[return-value]

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        with request_scope():
            return func(*args, **kwargs)
    return wrapper  # type: ignore[return-value]


class RequestIdFilter(logging.Filter):
    """Stamps ``request_id`` on every record passing through."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = _request_id.get()  # type: ignore[attr-defined]
        return True


def install_request_id_filter(handler: logging.Handler) -> None:
    """Attach the filter to a handler so its formatter can use ``%(request_id)s``.

    Handler-level filters see records from every logger, including ones
    that never went through :func:`get_request_logger`.
    """
    if not any(isinstance(f, RequestIdFilter) for f in handler.filters):
        handler.addFilter(RequestIdFilter())


def get_request_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if not any(isinstance(f, RequestIdFilter) for f in logger.filters):
        logger.addFilter(RequestIdFilter())
    return logger
