from booking_core.scheduling.availability import AvailabilityResolver
from booking_core.scheduling.booking_service import BookingService
from booking_core.scheduling.calendar import WorkingHoursCalendar, weekday_index
from booking_core.scheduling.ledger import BookingLedger, InMemoryBookingLedger
from booking_core.scheduling.locks import KeyedLockRegistry
from booking_core.scheduling.reviews import ReviewAggregator
from booking_core.scheduling.slot_generator import SlotGenerator
from booking_core.scheduling.status_machine import BookingStatusMachine

__all__ = [
    "WorkingHoursCalendar",
    "weekday_index",
    "SlotGenerator",
    "BookingLedger",
    "InMemoryBookingLedger",
    "BookingStatusMachine",
    "KeyedLockRegistry",
    "AvailabilityResolver",
    "BookingService",
    "ReviewAggregator",
]
