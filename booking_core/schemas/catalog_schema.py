"""Provider, working-hours and service models read by the scheduling core."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from booking_core.utils import is_valid_time, to_minutes


class TimeRange(BaseModel):
    """A naive ``[start, end)`` time-of-day window in ``HH:MM``."""

    model_config = ConfigDict(frozen=True)

    start: str
    end: str

    @field_validator("start", "end")
    @classmethod
    def _check_format(cls, value: str) -> str:
        value = value.strip()
        if not is_valid_time(value):
            raise ValueError(f"expected HH:MM, got {value!r}")
        return value

    @property
    def start_minutes(self) -> int:
        return to_minutes(self.start)

    @property
    def end_minutes(self) -> int:
        return to_minutes(self.end)


class WorkingHoursEntry(BaseModel):
    """One weekday's opening configuration.

    A closed day carries no intervals. An open day carries at least one,
    each with ``start < end``, sorted and pairwise non-overlapping.
    """

    is_open: bool = False
    slots: list[TimeRange] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_intervals(self) -> "WorkingHoursEntry":
        if not self.is_open:
            if self.slots:
                raise ValueError("a closed day cannot have open intervals")
            return self
        if not self.slots:
            raise ValueError("an open day needs at least one interval")
        previous_end: Optional[int] = None
        for interval in self.slots:
            if interval.start_minutes >= interval.end_minutes:
                raise ValueError(
                    f"interval {interval.start}-{interval.end} must start before it ends"
                )
            if previous_end is not None and interval.start_minutes < previous_end:
                raise ValueError(
                    f"interval {interval.start}-{interval.end} overlaps the previous one"
                )
            previous_end = interval.end_minutes
        return self


class Provider(BaseModel):
    """A service business with a weekly working-hours table.

    ``working_hours`` is keyed by weekday index, 0 = Sunday. Missing
    weekdays are treated as closed. ``rating`` and ``review_count`` are
    derived from reviews and only written by the review aggregator.
    """

    id: str
    business_name: str = ""
    working_hours: dict[int, WorkingHoursEntry] = Field(default_factory=dict)
    rating: float = Field(default=0.0, ge=0.0, le=5.0)
    review_count: int = Field(default=0, ge=0)

    @field_validator("working_hours")
    @classmethod
    def _check_weekdays(
        cls, value: dict[int, WorkingHoursEntry]
    ) -> dict[int, WorkingHoursEntry]:
        unknown = [day for day in value if not 0 <= day <= 6]
        if unknown:
            raise ValueError(f"weekday keys must be 0-6, got {unknown}")
        return value

    def hours_for(self, weekday: int) -> WorkingHoursEntry:
        return self.working_hours.get(weekday, WorkingHoursEntry())


class Service(BaseModel):
    """A bookable offering. The core only reads duration, price and availability."""

    id: str
    provider_id: str
    name: str = ""
    duration: int = Field(gt=0, description="Length of one appointment in minutes")
    price: float = Field(ge=0.0)
    currency: str = Field(default="USD", pattern=r"^[A-Z]{3}$")
    available: bool = True
