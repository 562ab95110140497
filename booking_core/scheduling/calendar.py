"""Weekly working-hours lookup for providers."""

import logging
from datetime import date
from typing import Protocol

from booking_core.schemas.catalog_schema import Provider, TimeRange

logger = logging.getLogger(__name__)


class ProviderLookup(Protocol):
    def get_provider(self, provider_id: str) -> Provider: ...


def weekday_index(day: date) -> int:
    """Return the weekday index used by working-hours tables (0 = Sunday)."""
    return (day.weekday() + 1) % 7


class WorkingHoursCalendar:
    """Read-only view over providers' weekly opening intervals.

    All times are naive provider-local ``HH:MM``. A timezone-aware variant
    would only need to change this class and the time helpers.
    """

    def __init__(self, providers: ProviderLookup) -> None:
        self._providers = providers

    def intervals_for(self, provider_id: str, weekday: int) -> list[TimeRange]:
        """Open intervals for a weekday, in order. Empty when closed.

        Raises:
            NotFoundError: If the provider is unknown.
        """
        provider = self._providers.get_provider(provider_id)
        entry = provider.hours_for(weekday)
        if not entry.is_open:
            return []
        return list(entry.slots)

    def intervals_on(self, provider_id: str, day: date) -> list[TimeRange]:
        return self.intervals_for(provider_id, weekday_index(day))
