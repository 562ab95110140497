"""Tests for working-hours lookup and working-hours validation."""

from datetime import date

import pytest
from pydantic import ValidationError

from booking_core.errors import NotFoundError
from booking_core.scheduling.calendar import WorkingHoursCalendar, weekday_index
from booking_core.schemas.catalog_schema import Provider, TimeRange, WorkingHoursEntry


class TestWeekdayIndex:
    def test_sunday_is_zero(self):
        assert weekday_index(date(2025, 3, 16)) == 0

    def test_monday_is_one(self):
        assert weekday_index(date(2025, 3, 17)) == 1

    def test_saturday_is_six(self):
        assert weekday_index(date(2025, 3, 22)) == 6


class TestIntervalsFor:
    def test_open_day_returns_intervals(self, catalog):
        calendar = WorkingHoursCalendar(catalog)
        intervals = calendar.intervals_for("P1", 1)
        assert [(i.start, i.end) for i in intervals] == [("09:00", "17:00")]

    def test_split_day_keeps_interval_order(self, catalog):
        calendar = WorkingHoursCalendar(catalog)
        intervals = calendar.intervals_for("P1", 6)
        assert [i.start for i in intervals] == ["10:00", "13:00"]

    def test_closed_day_returns_empty(self, catalog):
        assert WorkingHoursCalendar(catalog).intervals_for("P1", 0) == []

    def test_missing_weekday_is_closed(self, catalog):
        assert WorkingHoursCalendar(catalog).intervals_for("P2", 3) == []

    def test_intervals_on_date(self, catalog):
        intervals = WorkingHoursCalendar(catalog).intervals_on("P2", date(2025, 3, 17))
        assert [(i.start, i.end) for i in intervals] == [("09:00", "10:00")]

    def test_unknown_provider(self, catalog):
        with pytest.raises(NotFoundError):
            WorkingHoursCalendar(catalog).intervals_for("NOPE", 1)


class TestWorkingHoursValidation:
    def test_closed_day_with_intervals_rejected(self):
        with pytest.raises(ValidationError, match="closed day"):
            WorkingHoursEntry(is_open=False, slots=[TimeRange(start="09:00", end="10:00")])

    def test_open_day_without_intervals_rejected(self):
        with pytest.raises(ValidationError, match="at least one interval"):
            WorkingHoursEntry(is_open=True, slots=[])

    def test_interval_must_start_before_end(self):
        with pytest.raises(ValidationError, match="start before it ends"):
            WorkingHoursEntry(is_open=True, slots=[TimeRange(start="12:00", end="09:00")])

    def test_overlapping_intervals_rejected(self):
        with pytest.raises(ValidationError, match="overlaps"):
            WorkingHoursEntry(
                is_open=True,
                slots=[
                    TimeRange(start="09:00", end="12:00"),
                    TimeRange(start="11:00", end="14:00"),
                ],
            )

    def test_touching_intervals_allowed(self):
        entry = WorkingHoursEntry(
            is_open=True,
            slots=[
                TimeRange(start="09:00", end="12:00"),
                TimeRange(start="12:00", end="14:00"),
            ],
        )
        assert len(entry.slots) == 2

    def test_malformed_time_rejected(self):
        with pytest.raises(ValidationError):
            TimeRange(start="9am", end="10:00")

    def test_weekday_key_out_of_range_rejected(self):
        with pytest.raises(ValidationError, match="weekday keys"):
            Provider(id="X", working_hours={7: WorkingHoursEntry()})
