"""Tests for fixed-granularity slot generation."""

import pytest

from booking_core.errors import InvalidArgumentError
from booking_core.scheduling.slot_generator import SlotGenerator
from booking_core.schemas.catalog_schema import TimeRange


def _range(start: str, end: str) -> TimeRange:
    return TimeRange(start=start, end=end)


class TestGenerate:
    def setup_method(self):
        self.generator = SlotGenerator()

    def test_full_working_day_yields_sixteen_half_hours(self):
        slots = self.generator.generate([_range("09:00", "17:00")], 30)
        assert len(slots) == 16
        assert (slots[0].start, slots[0].end) == ("09:00", "09:30")
        assert (slots[-1].start, slots[-1].end) == ("16:30", "17:00")

    def test_slots_are_contiguous_and_chronological(self):
        slots = self.generator.generate([_range("09:00", "11:00")], 30)
        for prev, nxt in zip(slots, slots[1:]):
            assert prev.end == nxt.start

    def test_partial_tail_is_dropped(self):
        slots = self.generator.generate([_range("09:00", "11:00")], 45)
        assert [s.start for s in slots] == ["09:00", "09:45"]

    def test_no_bridging_between_intervals(self):
        slots = self.generator.generate(
            [_range("09:00", "10:15"), _range("10:30", "11:00")], 30
        )
        assert [(s.start, s.end) for s in slots] == [
            ("09:00", "09:30"),
            ("09:30", "10:00"),
            ("10:30", "11:00"),
        ]

    def test_interval_shorter_than_granularity_yields_nothing(self):
        assert self.generator.generate([_range("09:00", "09:20")], 30) == []

    def test_no_intervals_yields_nothing(self):
        assert self.generator.generate([], 30) == []

    def test_zero_length_interval_yields_nothing(self):
        assert self.generator.generate([_range("12:00", "12:00")], 30) == []


class TestInvalidInput:
    def setup_method(self):
        self.generator = SlotGenerator()

    @pytest.mark.parametrize("granularity", [0, -30])
    def test_non_positive_granularity_rejected(self, granularity):
        with pytest.raises(InvalidArgumentError):
            self.generator.generate([_range("09:00", "17:00")], granularity)

    def test_interval_crossing_midnight_rejected(self):
        with pytest.raises(InvalidArgumentError, match="crosses midnight"):
            self.generator.generate([_range("22:00", "02:00")], 30)
