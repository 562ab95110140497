"""Booking models and validated booking request payloads."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from booking_core.config import settings
from booking_core.schemas.catalog_schema import TimeRange
from booking_core.utils import is_valid_date, is_valid_time, normalize_date, to_minutes


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BookingStatus(str, Enum):
    """Lifecycle status of a booking."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


# Statuses that consume a slot and block new bookings.
OCCUPYING_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})


class Slot(TimeRange):
    """A candidate or booked time window. A value, never persisted on its own."""


class Booking(BaseModel):
    """A customer's reservation of a provider's time.

    ``total_price`` and ``currency`` are snapshotted from the service when
    the booking is created and never follow later price changes.
    """

    id: str
    customer_id: str
    provider_id: str
    service_id: str
    date: str
    start_time: str
    end_time: str
    status: BookingStatus = BookingStatus.PENDING
    total_price: float = Field(ge=0.0)
    currency: str
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @field_validator("date")
    @classmethod
    def _canonical_date(cls, value: str) -> str:
        if not is_valid_date(value):
            raise ValueError(f"expected YYYY-MM-DD, got {value!r}")
        return normalize_date(value)

    @field_validator("start_time", "end_time")
    @classmethod
    def _check_times(cls, value: str) -> str:
        value = value.strip()
        if not is_valid_time(value):
            raise ValueError(f"expected HH:MM, got {value!r}")
        return value

    @property
    def is_occupying(self) -> bool:
        return self.status in OCCUPYING_STATUSES

    @property
    def start_minutes(self) -> int:
        return to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        return to_minutes(self.end_time)


class BookingRequest(BaseModel):
    """Validated booking request data."""

    model_config = ConfigDict(str_strip_whitespace=True)

    customer_id: str = Field(min_length=1)
    provider_id: str = Field(min_length=1)
    service_id: str = Field(min_length=1)
    date: str
    start_time: str
    notes: Optional[str] = Field(
        default=None, max_length=settings.scheduling.max_notes_length
    )

    @field_validator("date")
    @classmethod
    def _check_date(cls, value: str) -> str:
        if not is_valid_date(value):
            raise ValueError(f"expected YYYY-MM-DD, got {value!r}")
        return normalize_date(value)

    @field_validator("start_time")
    @classmethod
    def _check_time(cls, value: str) -> str:
        if not is_valid_time(value):
            raise ValueError(f"expected HH:MM, got {value!r}")
        return value

    @field_validator("notes")
    @classmethod
    def _blank_notes_to_none(cls, value: Optional[str]) -> Optional[str]:
        return value or None


class StatusUpdateRequest(BaseModel):
    """Validated status change payload."""

    booking_id: str = Field(min_length=1)
    new_status: BookingStatus
