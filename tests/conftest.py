"""Shared test fixtures and helpers."""

from typing import Optional

import pytest

from booking_core.scheduling.availability import AvailabilityResolver
from booking_core.scheduling.booking_service import BookingService
from booking_core.scheduling.ledger import InMemoryBookingLedger
from booking_core.scheduling.locks import KeyedLockRegistry
from booking_core.scheduling.reviews import ReviewAggregator
from booking_core.scheduling.status_machine import BookingStatusMachine
from booking_core.schemas.booking_schema import Booking, BookingStatus
from booking_core.schemas.catalog_schema import Provider, Service, WorkingHoursEntry
from booking_core.tools import operations
from booking_core.tools.catalog import InMemoryCatalog

SUNDAY = "2025-03-16"
MONDAY = "2025-03-17"
TUESDAY = "2025-03-18"
SATURDAY = "2025-03-22"


def open_day(*intervals: tuple[str, str]) -> WorkingHoursEntry:
    return WorkingHoursEntry(
        is_open=True, slots=[{"start": s, "end": e} for s, e in intervals]
    )


def make_catalog() -> InMemoryCatalog:
    """Catalog with one weekday salon (P1) and a one-hour morning studio (P2)."""
    catalog = InMemoryCatalog()
    weekday = open_day(("09:00", "17:00"))
    catalog.add_provider(Provider(
        id="P1",
        business_name="Test Salon",
        working_hours={
            0: WorkingHoursEntry(),
            1: weekday, 2: weekday, 3: weekday, 4: weekday, 5: weekday,
            6: open_day(("10:00", "12:00"), ("13:00", "15:00")),
        },
    ))
    catalog.add_provider(Provider(
        id="P2",
        business_name="Early Studio",
        working_hours={1: open_day(("09:00", "10:00"))},
    ))
    catalog.add_service(Service(id="S60", provider_id="P1", name="Haircut", duration=60, price=75, currency="USD"))
    catalog.add_service(Service(id="S30", provider_id="P1", name="Trim", duration=30, price=30, currency="USD"))
    catalog.add_service(Service(id="OFF", provider_id="P1", name="Retired", duration=60, price=50, available=False))
    catalog.add_service(Service(id="S45", provider_id="P2", name="Shave", duration=45, price=40, currency="AED"))
    return catalog


def make_booking(
    start_time: str,
    end_time: str,
    booking_id: str = "BK-TEST0001",
    provider_id: str = "P1",
    date: str = MONDAY,
    status: BookingStatus = BookingStatus.PENDING,
    customer_id: str = "C1",
    service_id: str = "S60",
    notes: Optional[str] = None,
) -> Booking:
    """Helper to create a Booking with sensible defaults."""
    return Booking(
        id=booking_id,
        customer_id=customer_id,
        provider_id=provider_id,
        service_id=service_id,
        date=date,
        start_time=start_time,
        end_time=end_time,
        status=status,
        total_price=75,
        currency="USD",
        notes=notes,
    )


def completed_booking(
    ledger: InMemoryBookingLedger,
    booking_id: str,
    start_time: str = "09:00",
    end_time: str = "10:00",
    customer_id: str = "C1",
) -> Booking:
    """Insert a booking and walk it to ``completed``."""
    ledger.insert(make_booking(start_time, end_time, booking_id=booking_id, customer_id=customer_id))
    ledger.update_status(booking_id, BookingStatus.CONFIRMED)
    return ledger.update_status(booking_id, BookingStatus.COMPLETED)


@pytest.fixture
def catalog():
    return make_catalog()


@pytest.fixture
def ledger():
    return InMemoryBookingLedger()


@pytest.fixture
def locks():
    return KeyedLockRegistry(timeout_sec=1.0)


@pytest.fixture
def status_machine():
    return BookingStatusMachine()


@pytest.fixture
def resolver(catalog, ledger):
    return AvailabilityResolver(catalog, ledger, granularity_minutes=30)


@pytest.fixture
def booking_service(catalog, ledger, resolver, locks):
    return BookingService(catalog, ledger, resolver=resolver, locks=locks)


@pytest.fixture
def review_aggregator(catalog, ledger, locks):
    return ReviewAggregator(catalog, ledger, locks=locks)


@pytest.fixture
def system(catalog, ledger, locks):
    system = operations.reset(operations.BookingSystem(catalog=catalog, ledger=ledger, locks=locks))
    system.resolver.granularity_minutes = 30
    return system
