"""
Bookable slot computation for a provider, service and date.

Candidate start times come from the provider's open intervals at a fixed
granularity. A candidate survives only if the whole service window
``[start, start + duration)`` fits before the interval closes and does
not overlap an occupying booking. Queries are read-only and return the
same result until the ledger changes.
"""

import logging
from datetime import date, timedelta
from typing import Optional, Protocol, TypedDict

from booking_core.config import settings
from booking_core.errors import InvalidRequestError
from booking_core.scheduling.calendar import WorkingHoursCalendar
from booking_core.scheduling.ledger import BookingLedger
from booking_core.scheduling.slot_generator import SlotGenerator
from booking_core.schemas.booking_schema import Slot
from booking_core.schemas.catalog_schema import Provider, Service
from booking_core.utils import from_minutes, parse_date, to_minutes

logger = logging.getLogger(__name__)


class CatalogLookup(Protocol):
    def get_provider(self, provider_id: str) -> Provider: ...

    def get_service(self, service_id: str) -> Service: ...


class DateAvailability(TypedDict):
    """Summary of availability for a single date."""

    date: str
    day_name: str
    slot_count: int


def parse_day(value: str) -> date:
    """Parse a request date, mapping format errors to InvalidRequestError."""
    try:
        return parse_date(value)
    except (ValueError, AttributeError):
        raise InvalidRequestError(
            f"Invalid date {value!r}, expected YYYY-MM-DD.", details={"date": value}
        ) from None


class AvailabilityResolver:
    """Combines working hours, slot generation and the ledger into free slots."""

    def __init__(
        self,
        catalog: CatalogLookup,
        ledger: BookingLedger,
        granularity_minutes: Optional[int] = None,
        generator: Optional[SlotGenerator] = None,
    ) -> None:
        self._catalog = catalog
        self._ledger = ledger
        self._calendar = WorkingHoursCalendar(catalog)
        self._generator = generator or SlotGenerator()
        self.granularity_minutes = (
            granularity_minutes
            if granularity_minutes is not None
            else settings.scheduling.slot_granularity_minutes
        )

    def resolve_service(self, provider_id: str, service_id: str) -> Service:
        """Look up a service and check it belongs to the provider.

        Raises:
            NotFoundError: Unknown provider or service.
            InvalidRequestError: The service belongs to another provider.
        """
        self._catalog.get_provider(provider_id)
        service = self._catalog.get_service(service_id)
        if service.provider_id != provider_id:
            raise InvalidRequestError(
                f"Service {service_id} is not offered by provider {provider_id}.",
                details={"provider_id": provider_id, "service_id": service_id},
            )
        return service

    def available_slots(self, provider_id: str, service_id: str, date: str) -> list[Slot]:
        """Free candidate slots for the service on ``date``, chronologically."""
        service = self.resolve_service(provider_id, service_id)
        day = parse_day(date)
        if not service.available:
            logger.debug("Service %s is disabled; no slots offered", service_id)
            return []
        return self._free_slots(provider_id, service, day)

    def is_available(self, provider_id: str, service_id: str, date: str, start_time: str) -> bool:
        return any(
            slot.start == start_time
            for slot in self.available_slots(provider_id, service_id, date)
        )

    def find_next_available(
        self,
        provider_id: str,
        service_id: str,
        date: str,
        after: Optional[str] = None,
    ) -> Optional[Slot]:
        """First free slot on ``date`` starting at or after ``after``."""
        floor = to_minutes(after) if after else 0
        for slot in self.available_slots(provider_id, service_id, date):
            if slot.start_minutes >= floor:
                return slot
        return None

    def available_dates(
        self,
        provider_id: str,
        service_id: str,
        start_date: str,
        days: Optional[int] = None,
        limit: int = 5,
    ) -> list[DateAvailability]:
        """Get up to ``limit`` dates with free slots, scanning ``days`` ahead."""
        service = self.resolve_service(provider_id, service_id)
        first = parse_day(start_date)
        window = days if days is not None else settings.scheduling.available_dates_window_days
        results: list[DateAvailability] = []
        if not service.available:
            return results
        for offset in range(window):
            day = first + timedelta(days=offset)
            slots = self._free_slots(provider_id, service, day)
            if slots:
                results.append(
                    {
                        "date": day.isoformat(),
                        "day_name": day.strftime("%A"),
                        "slot_count": len(slots),
                    }
                )
            if len(results) >= limit:
                break
        return results

    def _free_slots(self, provider_id: str, service: Service, day: date) -> list[Slot]:
        date_str = day.isoformat()
        free: list[Slot] = []
        for interval in self._calendar.intervals_on(provider_id, day):
            for slot in self._generator.generate([interval], self.granularity_minutes):
                window_end = slot.start_minutes + service.duration
                if window_end > interval.end_minutes:
                    continue
                if self._ledger.overlaps(provider_id, date_str, slot.start, from_minutes(window_end)):
                    continue
                free.append(slot)
        logger.debug(
            "%d free slots for provider %s service %s on %s",
            len(free), provider_id, service.id, date_str,
        )
        return free
