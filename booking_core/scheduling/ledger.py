"""
Booking storage and overlap queries.

``BookingLedger`` is the persistence seam: the booking service only talks
to this interface, so a database-backed ledger with an exclusion
constraint can replace the in-memory one without touching scheduling
logic.

Overlap uses half-open ``[start, end)`` intervals everywhere: two ranges
intersect iff ``start < other_end and other_start < end``. A booking
ending at 11:00 and one starting at 11:00 do not conflict.
"""

from abc import ABC, abstractmethod
from collections import defaultdict
from datetime import datetime, timezone
from typing import Optional

from booking_core.errors import InvalidArgumentError, InvalidRequestError, NotFoundError, SlotUnavailableError
from booking_core.logging_context import get_request_logger
from booking_core.scheduling.status_machine import BookingStatusMachine
from booking_core.schemas.booking_schema import Booking, BookingStatus
from booking_core.utils import normalize_date, to_minutes

logger = get_request_logger(__name__)


def intervals_overlap(start: int, end: int, other_start: int, other_end: int) -> bool:
    """Half-open interval intersection on minutes since midnight."""
    return start < other_end and other_start < end


def _day_key(date: str) -> str:
    try:
        return normalize_date(date)
    except (ValueError, AttributeError):
        raise InvalidArgumentError(
            f"Invalid date {date!r}, expected YYYY-MM-DD.", details={"date": date}
        ) from None


def _minutes(value: str) -> int:
    try:
        return to_minutes(value)
    except (ValueError, AttributeError):
        raise InvalidArgumentError(
            f"Invalid time of day {value!r}, expected HH:MM.", details={"time": value}
        ) from None


class BookingLedger(ABC):
    """Interface for booking storage used by the scheduling core."""

    @abstractmethod
    def bookings_for(
        self, provider_id: str, date: str, include_history: bool = False
    ) -> list[Booking]:
        """Occupying bookings for a provider and date, or all of them with history."""

    @abstractmethod
    def overlaps(
        self,
        provider_id: str,
        date: str,
        start: str,
        end: str,
        exclude_booking_id: Optional[str] = None,
    ) -> bool:
        """True iff an occupying booking intersects ``[start, end)``."""

    @abstractmethod
    def insert(self, booking: Booking) -> Booking:
        """Store a new occupying booking. All-or-nothing."""

    @abstractmethod
    def update_status(self, booking_id: str, new_status: BookingStatus) -> Booking:
        """Apply a status transition from the allowed table."""

    @abstractmethod
    def get(self, booking_id: str) -> Booking:
        """Fetch one booking by id."""

    @abstractmethod
    def query(
        self,
        customer_id: Optional[str] = None,
        provider_id: Optional[str] = None,
        status: Optional[BookingStatus] = None,
    ) -> list[Booking]:
        """Filtered bookings, most recent first."""


class InMemoryBookingLedger(BookingLedger):
    """Dict-backed ledger.

    Mutations are synchronous, so under a single event loop each insert
    or status change is applied as a whole. Reads return copies of the
    last committed records.
    """

    def __init__(self, status_machine: Optional[BookingStatusMachine] = None) -> None:
        self._bookings: dict[str, Booking] = {}
        self._by_day: dict[tuple[str, str], list[str]] = defaultdict(list)
        self._status_machine = status_machine or BookingStatusMachine()

    def bookings_for(
        self, provider_id: str, date: str, include_history: bool = False
    ) -> list[Booking]:
        records = [
            self._bookings[bid] for bid in self._by_day.get((provider_id, _day_key(date)), [])
        ]
        if not include_history:
            records = [b for b in records if b.is_occupying]
        return [b.model_copy() for b in sorted(records, key=lambda b: b.start_minutes)]

    def overlaps(
        self,
        provider_id: str,
        date: str,
        start: str,
        end: str,
        exclude_booking_id: Optional[str] = None,
    ) -> bool:
        return self._first_conflict(
            provider_id, _day_key(date), _minutes(start), _minutes(end), exclude_booking_id
        ) is not None

    def insert(self, booking: Booking) -> Booking:
        if booking.id in self._bookings:
            raise InvalidRequestError(
                f"Booking {booking.id} already exists.", details={"booking_id": booking.id}
            )
        if not booking.is_occupying:
            raise InvalidRequestError(
                f"New bookings must be pending or confirmed, got '{booking.status.value}'.",
                details={"status": booking.status.value},
            )
        if booking.start_minutes >= booking.end_minutes:
            raise InvalidArgumentError(
                f"Booking {booking.start_time}-{booking.end_time} must start before it ends.",
                details={"start_time": booking.start_time, "end_time": booking.end_time},
            )

        conflict = self._first_conflict(
            booking.provider_id, booking.date, booking.start_minutes, booking.end_minutes
        )
        if conflict is not None:
            raise SlotUnavailableError(
                f"{booking.start_time}-{booking.end_time} on {booking.date} overlaps "
                f"booking {conflict.id} ({conflict.start_time}-{conflict.end_time}).",
                details={"conflicting_booking_id": conflict.id},
            )

        stored = booking.model_copy()
        self._bookings[stored.id] = stored
        self._by_day[(stored.provider_id, stored.date)].append(stored.id)
        logger.info(
            "Booking inserted: %s for provider %s on %s %s-%s",
            stored.id, stored.provider_id, stored.date, stored.start_time, stored.end_time,
        )
        return stored.model_copy()

    def update_status(self, booking_id: str, new_status: BookingStatus) -> Booking:
        current = self._require(booking_id)
        self._status_machine.transition(current.status, new_status)
        updated = current.model_copy(
            update={"status": new_status, "updated_at": datetime.now(timezone.utc)}
        )
        self._bookings[booking_id] = updated
        logger.info(
            "Booking %s status: %s -> %s", booking_id, current.status.value, new_status.value
        )
        return updated.model_copy()

    def get(self, booking_id: str) -> Booking:
        return self._require(booking_id).model_copy()

    def query(
        self,
        customer_id: Optional[str] = None,
        provider_id: Optional[str] = None,
        status: Optional[BookingStatus] = None,
    ) -> list[Booking]:
        records = [
            b for b in self._bookings.values()
            if (customer_id is None or b.customer_id == customer_id)
            and (provider_id is None or b.provider_id == provider_id)
            and (status is None or b.status == status)
        ]
        records.sort(key=lambda b: (b.date, b.start_minutes), reverse=True)
        return [b.model_copy() for b in records]

    def reset(self) -> None:
        """Clear all bookings. Used by test fixtures for isolation."""
        self._bookings.clear()
        self._by_day.clear()

    def _require(self, booking_id: str) -> Booking:
        booking = self._bookings.get(booking_id)
        if booking is None:
            raise NotFoundError(
                f"Booking {booking_id} not found.", details={"booking_id": booking_id}
            )
        return booking

    def _first_conflict(
        self,
        provider_id: str,
        date: str,
        start: int,
        end: int,
        exclude_booking_id: Optional[str] = None,
    ) -> Optional[Booking]:
        for bid in self._by_day.get((provider_id, date), []):
            booking = self._bookings[bid]
            if bid == exclude_booking_id or not booking.is_occupying:
                continue
            if intervals_overlap(start, end, booking.start_minutes, booking.end_minutes):
                return booking
        return None
