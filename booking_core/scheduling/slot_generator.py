"""
Fixed-granularity discretization of open intervals into candidate slots.

Each open interval ``[start, end)`` is walked in steps of the granularity,
emitting ``[t, t + g)`` whenever it fits. Intervals are handled
independently, so a slot never bridges the gap between two of them.
"""

import logging
from typing import Sequence

from booking_core.errors import InvalidArgumentError
from booking_core.schemas.booking_schema import Slot
from booking_core.schemas.catalog_schema import TimeRange
from booking_core.utils import from_minutes

logger = logging.getLogger(__name__)


class SlotGenerator:
    """Produces the full candidate slot set for a day's open intervals."""

    def generate(
        self, intervals: Sequence[TimeRange], granularity_minutes: int
    ) -> list[Slot]:
        """
        Discretize intervals into slots, in interval order then chronologically.

        Args:
            intervals: Disjoint open intervals for one day.
            granularity_minutes: Step between candidate start times.

        Raises:
            InvalidArgumentError: On a non-positive granularity or an
                interval that ends before it starts.
        """
        if granularity_minutes <= 0:
            raise InvalidArgumentError(
                f"Granularity must be a positive number of minutes, got {granularity_minutes}",
                details={"granularity_minutes": granularity_minutes},
            )

        slots: list[Slot] = []
        for interval in intervals:
            start, end = interval.start_minutes, interval.end_minutes
            if end < start:
                raise InvalidArgumentError(
                    f"Interval {interval.start}-{interval.end} crosses midnight",
                    details={"start": interval.start, "end": interval.end},
                )
            t = start
            while t + granularity_minutes <= end:
                slots.append(Slot(start=from_minutes(t), end=from_minutes(t + granularity_minutes)))
                t += granularity_minutes

        logger.debug(
            "Generated %d slots from %d intervals at %d-minute granularity",
            len(slots), len(intervals), granularity_minutes,
        )
        return slots
