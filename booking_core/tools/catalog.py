"""
Mock provider and service directory.

In production, this would be a read-only client over the provider
management service. The scheduling core only needs working hours,
service duration, price, currency and the availability flag, plus a
way for the review aggregator to write back derived rating fields.
"""

import logging
from typing import Optional

from booking_core.errors import NotFoundError
from booking_core.schemas.catalog_schema import Provider, Service, WorkingHoursEntry

logger = logging.getLogger(__name__)


def _open(*intervals: tuple[str, str]) -> dict:
    return {"is_open": True, "slots": [{"start": s, "end": e} for s, e in intervals]}


_CLOSED: dict = {"is_open": False, "slots": []}

PROVIDER_SEED: list[dict] = [
    {
        "id": "1",
        "business_name": "Elegant Beauty Salon",
        "working_hours": {
            0: _CLOSED,
            1: _open(("09:00", "17:00")),
            2: _open(("09:00", "17:00")),
            3: _open(("09:00", "17:00")),
            4: _open(("09:00", "17:00")),
            5: _open(("09:00", "17:00")),
            6: _open(("10:00", "15:00")),
        },
        "rating": 4.8,
        "review_count": 124,
    },
    {
        "id": "2",
        "business_name": "Arabian Glow Spa",
        "working_hours": {
            0: _open(("10:00", "20:00")),
            1: _open(("10:00", "20:00")),
            2: _open(("10:00", "20:00")),
            3: _open(("10:00", "20:00")),
            4: _open(("10:00", "20:00")),
            5: _open(("14:00", "22:00")),
            6: _CLOSED,
        },
        "rating": 4.9,
        "review_count": 89,
    },
    {
        "id": "3",
        "business_name": "Modern Cuts Barbershop",
        "working_hours": {
            0: _CLOSED,
            1: _open(("10:00", "19:00")),
            2: _open(("10:00", "19:00")),
            3: _open(("10:00", "19:00")),
            4: _open(("10:00", "19:00")),
            5: _open(("10:00", "19:00")),
            6: _open(("09:00", "17:00")),
        },
        "rating": 4.7,
        "review_count": 56,
    },
]

SERVICE_SEED: list[dict] = [
    {"id": "1", "provider_id": "1", "name": "Haircut & Styling", "duration": 60, "price": 75, "currency": "USD"},
    {"id": "2", "provider_id": "1", "name": "Full Makeup Application", "duration": 75, "price": 90, "currency": "USD"},
    {"id": "3", "provider_id": "1", "name": "Manicure & Pedicure", "duration": 90, "price": 65, "currency": "USD"},
    {"id": "4", "provider_id": "1", "name": "Facial Treatment", "duration": 60, "price": 120, "currency": "USD"},
    {"id": "5", "provider_id": "2", "name": "Traditional Hammam", "duration": 90, "price": 150, "currency": "AED"},
    {"id": "6", "provider_id": "2", "name": "Aromatherapy Massage", "duration": 60, "price": 280, "currency": "AED"},
    {"id": "7", "provider_id": "2", "name": "Gold Facial", "duration": 75, "price": 350, "currency": "AED"},
    {"id": "8", "provider_id": "2", "name": "Body Scrub & Wrap", "duration": 120, "price": 320, "currency": "AED"},
    {"id": "9", "provider_id": "3", "name": "Classic Haircut", "duration": 30, "price": 35, "currency": "USD"},
    {"id": "10", "provider_id": "3", "name": "Beard Trim & Shape", "duration": 20, "price": 25, "currency": "USD"},
    {"id": "11", "provider_id": "3", "name": "Hot Towel Shave", "duration": 45, "price": 45, "currency": "USD"},
    {"id": "12", "provider_id": "3", "name": "Haircut & Beard Combo", "duration": 60, "price": 55, "currency": "USD"},
]


class InMemoryCatalog:
    """Provider/service lookup backed by plain dicts.

    Lookups hand out copies so callers cannot edit working hours or
    prices behind the catalog's back.
    """

    def __init__(self) -> None:
        self._providers: dict[str, Provider] = {}
        self._services: dict[str, Service] = {}

    def add_provider(self, provider: Provider) -> Provider:
        self._providers[provider.id] = provider.model_copy(deep=True)
        return provider

    def add_service(self, service: Service) -> Service:
        if service.provider_id not in self._providers:
            raise NotFoundError(
                f"Provider {service.provider_id} not found.",
                details={"provider_id": service.provider_id},
            )
        self._services[service.id] = service.model_copy()
        return service

    def get_provider(self, provider_id: str) -> Provider:
        provider = self._providers.get(provider_id)
        if provider is None:
            raise NotFoundError(
                f"Provider {provider_id} not found.", details={"provider_id": provider_id}
            )
        return provider.model_copy(deep=True)

    def get_service(self, service_id: str) -> Service:
        service = self._services.get(service_id)
        if service is None:
            raise NotFoundError(
                f"Service {service_id} not found.", details={"service_id": service_id}
            )
        return service.model_copy()

    def services_for(self, provider_id: str, available_only: bool = False) -> list[Service]:
        return [
            s.model_copy()
            for s in self._services.values()
            if s.provider_id == provider_id and (s.available or not available_only)
        ]

    def set_working_hours(self, provider_id: str, weekday: int, entry: WorkingHoursEntry) -> None:
        provider = self._require(provider_id)
        hours = dict(provider.working_hours)
        hours[weekday] = entry
        self._providers[provider_id] = provider.model_copy(update={"working_hours": hours})

    def update_service(self, service_id: str, **changes: object) -> Service:
        """Apply provider-side edits such as a price change or disabling a service."""
        current = self.get_service(service_id)
        updated = Service.model_validate({**current.model_dump(), **changes})
        self._services[service_id] = updated
        logger.info("Service %s updated: %s", service_id, sorted(changes))
        return updated.model_copy()

    def set_rating(self, provider_id: str, rating: Optional[float], review_count: int) -> Provider:
        """Write derived rating fields. ``rating=None`` keeps the current value."""
        provider = self._require(provider_id)
        update: dict[str, object] = {"review_count": review_count}
        if rating is not None:
            update["rating"] = rating
        self._providers[provider_id] = provider.model_copy(update=update)
        return self._providers[provider_id].model_copy(deep=True)

    def _require(self, provider_id: str) -> Provider:
        provider = self._providers.get(provider_id)
        if provider is None:
            raise NotFoundError(
                f"Provider {provider_id} not found.", details={"provider_id": provider_id}
            )
        return provider


def default_catalog() -> InMemoryCatalog:
    """Build a catalog seeded with the demo providers and services."""
    catalog = InMemoryCatalog()
    for data in PROVIDER_SEED:
        catalog.add_provider(Provider.model_validate(data))
    for data in SERVICE_SEED:
        catalog.add_service(Service.model_validate(data))
    logger.debug(
        "Catalog seeded with %d providers and %d services",
        len(PROVIDER_SEED), len(SERVICE_SEED),
    )
    return catalog
