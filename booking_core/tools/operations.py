"""
Transport-neutral operations over the scheduling core.

Each function is what an HTTP handler or agent tool would call: it runs
under a fresh request ID, calls the core, and maps typed scheduling
errors to a structured result with ``success``, ``message`` and an
HTTP-equivalent ``status_code``. Unexpected exceptions propagate.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Optional, TypedDict

from booking_core.config import settings
from booking_core.errors import InvalidRequestError, NotFoundError, SchedulingError, SlotUnavailableError
from booking_core.logging_context import get_request_id, get_request_logger, with_request_id
from booking_core.scheduling.availability import AvailabilityResolver, DateAvailability
from booking_core.scheduling.booking_service import BookingService
from booking_core.scheduling.ledger import InMemoryBookingLedger
from booking_core.scheduling.locks import KeyedLockRegistry
from booking_core.scheduling.reviews import ReviewAggregator
from booking_core.schemas.booking_schema import Booking, BookingStatus, Slot
from booking_core.tools.catalog import InMemoryCatalog, default_catalog

logger = get_request_logger(__name__)


class SlotData(TypedDict):
    start: str
    end: str


class ErrorInfo(TypedDict):
    code: str
    message: str
    details: dict[str, Any]
    retryable: bool


class OperationResult(TypedDict, total=False):
    """Fields shared by every operation result."""

    success: bool
    message: str
    status_code: int
    request_id: str
    error: ErrorInfo


class AvailabilityResult(OperationResult, total=False):
    """Result from get_availability."""

    provider_id: str
    service_id: str
    date: str
    available_slots: list[SlotData]


class AvailableDatesResult(OperationResult, total=False):
    dates: list[DateAvailability]


class BookingResult(OperationResult, total=False):
    """Result from post_booking, patch_booking_status, get_booking or delete_booking."""

    booking: dict[str, Any]
    next_available: Optional[SlotData]


class BookingListResult(OperationResult, total=False):
    bookings: list[dict[str, Any]]
    total: int
    page: int
    limit: int
    total_pages: int


class ReviewResult(OperationResult, total=False):
    review: dict[str, Any]
    provider: dict[str, Any]


class ReviewListResult(OperationResult, total=False):
    reviews: list[dict[str, Any]]
    total: int
    page: int
    limit: int
    total_pages: int


@dataclass
class BookingSystem:
    """Wires the catalog, ledger and services that operations run against."""

    catalog: InMemoryCatalog = field(default_factory=default_catalog)
    ledger: InMemoryBookingLedger = field(default_factory=InMemoryBookingLedger)
    locks: KeyedLockRegistry = field(default_factory=KeyedLockRegistry)

    def __post_init__(self) -> None:
        self.resolver = AvailabilityResolver(self.catalog, self.ledger)
        self.bookings = BookingService(
            self.catalog, self.ledger, resolver=self.resolver, locks=self.locks
        )
        self.reviews = ReviewAggregator(self.catalog, self.ledger, locks=self.locks)


_system: Optional[BookingSystem] = None


def get_system() -> BookingSystem:
    global _system
    if _system is None:
        _system = BookingSystem()
    return _system


def reset(system: Optional[BookingSystem] = None) -> BookingSystem:
    """Replace the shared system. Used by test fixtures for isolation."""
    global _system
    _system = system or BookingSystem()
    return _system


def _slot(slot: Slot) -> SlotData:
    return {"start": slot.start, "end": slot.end}


def _failure(exc: SchedulingError, request_id: str) -> dict[str, Any]:
    logger.info("Request failed with %s: %s", exc.code, exc.message)
    return {
        "success": False,
        "message": exc.message,
        "status_code": exc.status_code,
        "request_id": request_id,
        "error": {
            "code": exc.code,
            "message": exc.message,
            "details": exc.details,
            "retryable": exc.retryable,
        },
    }


def _paginate(items: list[Any], page: int, limit: Optional[int]) -> tuple[list[Any], dict[str, int]]:
    limit = limit if limit is not None else settings.default_page_size
    if page < 1 or limit < 1:
        raise InvalidRequestError(
            "page and limit must be positive integers.", details={"page": page, "limit": limit}
        )
    start = (page - 1) * limit
    meta = {
        "total": len(items),
        "page": page,
        "limit": limit,
        "total_pages": math.ceil(len(items) / limit),
    }
    return items[start:start + limit], meta


def _booking_view(system: BookingSystem, booking: Booking) -> dict[str, Any]:
    """Booking dump enriched with its service and provider, ``None`` where unknown."""
    view = booking.model_dump(mode="json")
    try:
        view["service"] = system.catalog.get_service(booking.service_id).model_dump(mode="json")
    except NotFoundError:
        view["service"] = None
    try:
        provider = system.catalog.get_provider(booking.provider_id)
    except NotFoundError:
        view["provider"] = None
    else:
        view["provider"] = provider.model_dump(mode="json", exclude={"working_hours"})
    return view


def _parse_status(status: Optional[str]) -> Optional[BookingStatus]:
    if status is None:
        return None
    try:
        return BookingStatus(status)
    except ValueError:
        valid = [s.value for s in BookingStatus]
        raise InvalidRequestError(
            f"Unknown booking status {status!r}. Valid: {valid}", details={"status": status}
        ) from None


@with_request_id
def get_availability(provider_id: str, service_id: str, date: str) -> AvailabilityResult:
    """List bookable slots for a provider's service on a date."""
    request_id = get_request_id()
    try:
        slots = get_system().resolver.available_slots(provider_id, service_id, date)
    except SchedulingError as exc:
        return _failure(exc, request_id)  # type: ignore[return-value]
    return {
        "success": True,
        "message": f"{len(slots)} time slots available on {date}.",
        "status_code": 200,
        "request_id": request_id,
        "provider_id": provider_id,
        "service_id": service_id,
        "date": date,
        "available_slots": [_slot(s) for s in slots],
    }


@with_request_id
def get_available_dates(
    provider_id: str, service_id: str, start_date: str, limit: int = 5
) -> AvailableDatesResult:
    """Get the next dates with free slots for a service."""
    request_id = get_request_id()
    try:
        dates = get_system().resolver.available_dates(
            provider_id, service_id, start_date, limit=limit
        )
    except SchedulingError as exc:
        return _failure(exc, request_id)  # type: ignore[return-value]
    return {
        "success": True,
        "message": f"{len(dates)} dates with availability.",
        "status_code": 200,
        "request_id": request_id,
        "dates": dates,
    }


@with_request_id
async def post_booking(
    customer_id: str,
    provider_id: str,
    service_id: str,
    date: str,
    start_time: str,
    notes: Optional[str] = None,
) -> BookingResult:
    """Create a pending booking. A lost slot also reports the next free start."""
    request_id = get_request_id()
    system = get_system()
    try:
        booking = await system.bookings.request_booking(
            customer_id, provider_id, service_id, date, start_time, notes
        )
    except SlotUnavailableError as exc:
        result = _failure(exc, request_id)
        fallback = system.resolver.find_next_available(
            provider_id, service_id, date, after=start_time
        )
        result["next_available"] = _slot(fallback) if fallback else None
        return result  # type: ignore[return-value]
    except SchedulingError as exc:
        return _failure(exc, request_id)  # type: ignore[return-value]
    return {
        "success": True,
        "message": (
            f"Booking {booking.id} requested for {booking.date} "
            f"{booking.start_time}-{booking.end_time}."
        ),
        "status_code": 201,
        "request_id": request_id,
        "booking": booking.model_dump(mode="json"),
    }


@with_request_id
async def patch_booking_status(booking_id: str, new_status: str) -> BookingResult:
    """Move a booking along its status lifecycle."""
    request_id = get_request_id()
    try:
        booking = await get_system().bookings.update_status(booking_id, new_status)
    except SchedulingError as exc:
        return _failure(exc, request_id)  # type: ignore[return-value]
    return {
        "success": True,
        "message": f"Booking {booking.id} is now {booking.status.value}.",
        "status_code": 200,
        "request_id": request_id,
        "booking": booking.model_dump(mode="json"),
    }


@with_request_id
async def delete_booking(booking_id: str) -> BookingResult:
    """Cancel a booking. The record is kept with status ``cancelled``."""
    request_id = get_request_id()
    try:
        booking = await get_system().bookings.cancel_booking(booking_id)
    except SchedulingError as exc:
        return _failure(exc, request_id)  # type: ignore[return-value]
    return {
        "success": True,
        "message": f"Booking {booking.id} has been cancelled.",
        "status_code": 200,
        "request_id": request_id,
        "booking": booking.model_dump(mode="json"),
    }


@with_request_id
def get_booking(booking_id: str) -> BookingResult:
    request_id = get_request_id()
    try:
        system = get_system()
        booking = system.bookings.get_booking(booking_id)
    except SchedulingError as exc:
        return _failure(exc, request_id)  # type: ignore[return-value]
    return {
        "success": True,
        "message": f"Booking {booking.id} found.",
        "status_code": 200,
        "request_id": request_id,
        "booking": _booking_view(system, booking),
    }


@with_request_id
def list_bookings(
    customer_id: Optional[str] = None,
    provider_id: Optional[str] = None,
    status: Optional[str] = None,
    page: int = 1,
    limit: Optional[int] = None,
) -> BookingListResult:
    """Bookings matching the filters, most recent first, one page at a time."""
    request_id = get_request_id()
    try:
        system = get_system()
        bookings = system.bookings.list_bookings(
            customer_id=customer_id, provider_id=provider_id, status=_parse_status(status)
        )
        page_items, meta = _paginate(bookings, page, limit)
    except SchedulingError as exc:
        return _failure(exc, request_id)  # type: ignore[return-value]
    return {
        "success": True,
        "message": f"{meta['total']} bookings found.",
        "status_code": 200,
        "request_id": request_id,
        "bookings": [_booking_view(system, b) for b in page_items],
        **meta,  # type: ignore[typeddict-item]
    }


@with_request_id
async def post_review(
    booking_id: str,
    customer_id: str,
    provider_id: str,
    service_id: str,
    rating: int,
    comment: Optional[str] = None,
) -> ReviewResult:
    """Review a completed booking and refresh the provider's rating."""
    request_id = get_request_id()
    system = get_system()
    try:
        review = await system.reviews.create_review(
            booking_id, customer_id, provider_id, service_id, rating, comment
        )
        provider = system.catalog.get_provider(review.provider_id)
    except SchedulingError as exc:
        return _failure(exc, request_id)  # type: ignore[return-value]
    return {
        "success": True,
        "message": f"Review {review.id} created.",
        "status_code": 201,
        "request_id": request_id,
        "review": review.model_dump(mode="json"),
        "provider": {
            "id": provider.id,
            "rating": provider.rating,
            "review_count": provider.review_count,
        },
    }


@with_request_id
async def put_review(
    review_id: str, rating: Optional[int] = None, comment: Optional[str] = None
) -> ReviewResult:
    request_id = get_request_id()
    try:
        review = await get_system().reviews.update_review(review_id, rating, comment)
    except SchedulingError as exc:
        return _failure(exc, request_id)  # type: ignore[return-value]
    return {
        "success": True,
        "message": f"Review {review.id} updated.",
        "status_code": 200,
        "request_id": request_id,
        "review": review.model_dump(mode="json"),
    }


@with_request_id
async def delete_review(review_id: str) -> OperationResult:
    request_id = get_request_id()
    try:
        await get_system().reviews.delete_review(review_id)
    except SchedulingError as exc:
        return _failure(exc, request_id)  # type: ignore[return-value]
    return {
        "success": True,
        "message": "Review deleted successfully.",
        "status_code": 200,
        "request_id": request_id,
    }


@with_request_id
def list_reviews(
    provider_id: Optional[str] = None,
    customer_id: Optional[str] = None,
    service_id: Optional[str] = None,
    page: int = 1,
    limit: Optional[int] = None,
) -> ReviewListResult:
    """Reviews matching the filters, newest first, one page at a time."""
    request_id = get_request_id()
    try:
        reviews = get_system().reviews.list_reviews(
            provider_id=provider_id, customer_id=customer_id, service_id=service_id
        )
        page_items, meta = _paginate(reviews, page, limit)
    except SchedulingError as exc:
        return _failure(exc, request_id)  # type: ignore[return-value]
    return {
        "success": True,
        "message": f"{meta['total']} reviews found.",
        "status_code": 200,
        "request_id": request_id,
        "reviews": [r.model_dump(mode="json") for r in page_items],
        **meta,  # type: ignore[typeddict-item]
    }
