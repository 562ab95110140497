"""Tests for the error taxonomy and request-ID logging."""

import io
import logging

import pytest
from pydantic import ValidationError

from booking_core.config import LOG_FORMAT
from booking_core.errors import (
    InvalidArgumentError,
    InvalidRequestError,
    LockTimeoutError,
    NotFoundError,
    SchedulingError,
    SlotUnavailableError,
    from_validation_error,
)
from booking_core.logging_context import (
    NO_REQUEST_ID,
    RequestIdFilter,
    get_request_id,
    get_request_logger,
    install_request_id_filter,
    request_scope,
    with_request_id,
)
from booking_core.schemas.booking_schema import BookingRequest


class TestErrorTaxonomy:
    @pytest.mark.parametrize(
        "cls,status,retryable",
        [
            (InvalidRequestError, 400, False),
            (NotFoundError, 404, False),
            (SlotUnavailableError, 409, True),
            (LockTimeoutError, 503, True),
        ],
    )
    def test_status_and_retryable(self, cls, status, retryable):
        exc = cls("boom")
        assert exc.status_code == status
        assert exc.retryable is retryable
        assert exc.code == cls.__name__

    def test_invalid_argument_is_invalid_request(self):
        assert issubclass(InvalidArgumentError, InvalidRequestError)
        assert issubclass(InvalidRequestError, SchedulingError)

    def test_to_dict(self):
        exc = NotFoundError("missing", details={"booking_id": "BK-1"})
        assert exc.to_dict() == {
            "message": "missing",
            "code": "NotFoundError",
            "details": {"booking_id": "BK-1"},
        }

    def test_from_validation_error(self):
        with pytest.raises(ValidationError) as exc_info:
            BookingRequest(
                customer_id="", provider_id="P1", service_id="S1",
                date="2025-03-17", start_time="10:00",
            )
        converted = from_validation_error(exc_info.value)
        assert isinstance(converted, InvalidRequestError)
        assert converted.details["errors"][0]["field"] == "customer_id"


class TestRequestId:
    def test_scope_sets_and_restores(self):
        assert get_request_id() == NO_REQUEST_ID
        with request_scope() as request_id:
            assert request_id.startswith("REQ-")
            assert get_request_id() == request_id
        assert get_request_id() == NO_REQUEST_ID

    def test_nested_scope_restores_outer(self):
        with request_scope("REQ-outer"):
            with request_scope("REQ-inner"):
                assert get_request_id() == "REQ-inner"
            assert get_request_id() == "REQ-outer"

    def test_decorator_gives_each_call_its_own_id(self):
        @with_request_id
        def handler() -> str:
            return get_request_id()

        first, second = handler(), handler()
        assert first.startswith("REQ-")
        assert first != second
        assert get_request_id() == NO_REQUEST_ID

    @pytest.mark.asyncio
    async def test_decorator_wraps_coroutines(self):
        @with_request_id
        async def handler() -> str:
            return get_request_id()

        assert (await handler()).startswith("REQ-")

    def test_filter_stamps_record(self):
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
        with request_scope("REQ-fixed"):
            RequestIdFilter().filter(record)
        assert record.request_id == "REQ-fixed"

    def test_filter_attached_once(self):
        logger = get_request_logger("booking_core.test_logger")
        get_request_logger("booking_core.test_logger")
        assert sum(isinstance(f, RequestIdFilter) for f in logger.filters) == 1

    def test_handler_formats_request_id(self):
        stream = io.StringIO()
        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        install_request_id_filter(handler)
        install_request_id_filter(handler)
        assert len(handler.filters) == 1

        logger = logging.getLogger("booking_core.test_format")
        logger.addHandler(handler)
        try:
            with request_scope("REQ-abc12345"):
                logger.warning("slot rejected")
        finally:
            logger.removeHandler(handler)
        assert "[REQ-abc12345]" in stream.getvalue()
