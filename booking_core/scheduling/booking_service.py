"""
Booking request validation and commit.

A booking is accepted only if its start time is still offered by a fresh
availability computation. The service lookup, the recheck and the ledger
insert run under one lock per (provider, date), so two concurrent requests
for the same slot cannot both pass validation. Requests for other
providers or other dates use other locks and proceed in parallel.
"""

import uuid
from typing import Callable, Optional, Union

from pydantic import ValidationError

from booking_core.config import settings
from booking_core.errors import (
    SchedulingError,
    ServiceUnavailableError,
    SlotUnavailableError,
    from_validation_error,
)
from booking_core.logging_context import get_request_logger
from booking_core.scheduling.availability import AvailabilityResolver, CatalogLookup
from booking_core.scheduling.ledger import BookingLedger
from booking_core.scheduling.locks import KeyedLockRegistry, booking_lock_key
from booking_core.schemas.booking_schema import (
    Booking,
    BookingRequest,
    BookingStatus,
    StatusUpdateRequest,
)
from booking_core.utils import add_minutes

logger = get_request_logger(__name__)


def new_booking_id() -> str:
    return f"BK-{uuid.uuid4().hex[:8].upper()}"


class BookingService:
    """Validates and commits booking requests and status changes."""

    def __init__(
        self,
        catalog: CatalogLookup,
        ledger: BookingLedger,
        resolver: Optional[AvailabilityResolver] = None,
        locks: Optional[KeyedLockRegistry] = None,
        id_factory: Callable[[], str] = new_booking_id,
    ) -> None:
        self._ledger = ledger
        self._resolver = resolver or AvailabilityResolver(catalog, ledger)
        self._locks = locks or KeyedLockRegistry()
        self._id_factory = id_factory

    @property
    def resolver(self) -> AvailabilityResolver:
        return self._resolver

    async def request_booking(
        self,
        customer_id: str,
        provider_id: str,
        service_id: str,
        date: str,
        start_time: str,
        notes: Optional[str] = None,
    ) -> Booking:
        """
        Validate a booking request and commit it as a pending booking.

        Raises:
            InvalidRequestError: Malformed input or a service of another provider.
            NotFoundError: Unknown provider or service.
            ServiceUnavailableError: The service is disabled.
            SlotUnavailableError: The start time is no longer offered.
            LockTimeoutError: The (provider, date) lock stayed busy too long.
        """
        try:
            request = BookingRequest(
                customer_id=customer_id,
                provider_id=provider_id,
                service_id=service_id,
                date=date,
                start_time=start_time,
                notes=notes,
            )
        except ValidationError as exc:
            raise from_validation_error(exc) from None

        async with self._locks.hold(booking_lock_key(request.provider_id, request.date)):
            service = self._resolver.resolve_service(request.provider_id, request.service_id)
            if not service.available:
                raise ServiceUnavailableError(
                    f"Service {service.id} is not currently available for booking.",
                    details={"service_id": service.id},
                )
            if not self._resolver.is_available(
                request.provider_id, request.service_id, request.date, request.start_time
            ):
                logger.warning(
                    "Slot rejected: provider %s on %s at %s",
                    request.provider_id, request.date, request.start_time,
                )
                raise SlotUnavailableError(
                    f"{request.start_time} on {request.date} is not available. "
                    "Refresh availability and choose another time.",
                    details={"date": request.date, "start_time": request.start_time},
                )

            booking = Booking(
                id=self._id_factory(),
                customer_id=request.customer_id,
                provider_id=request.provider_id,
                service_id=service.id,
                date=request.date,
                start_time=request.start_time,
                end_time=add_minutes(request.start_time, service.duration),
                status=BookingStatus.PENDING,
                total_price=service.price,
                currency=service.currency,
                notes=request.notes,
            )
            created = self._ledger.insert(booking)

        logger.info(
            "Booking created: %s for customer %s on %s at %s",
            created.id, created.customer_id, created.date, created.start_time,
        )
        return created

    async def request_booking_with_retry(
        self,
        customer_id: str,
        provider_id: str,
        service_id: str,
        date: str,
        start_time: str,
        notes: Optional[str] = None,
        max_retries: Optional[int] = None,
    ) -> Booking:
        """Book ``start_time``, falling back to the next free slot after it.

        Retryable failures are retried at most ``max_retries`` times. A lost
        slot moves the attempt to the next offered start on the same date; a
        lock timeout retries the same start.
        """
        retries = max_retries if max_retries is not None else settings.scheduling.max_booking_retries
        attempt = 0
        current_start = start_time
        while True:
            try:
                return await self.request_booking(
                    customer_id, provider_id, service_id, date, current_start, notes
                )
            except SchedulingError as exc:
                if not exc.retryable or attempt >= retries:
                    raise
                attempt += 1
                if isinstance(exc, SlotUnavailableError):
                    fallback = self._resolver.find_next_available(
                        provider_id, service_id, date, after=current_start
                    )
                    if fallback is None:
                        raise
                    current_start = fallback.start
                logger.info(
                    "Retrying booking (attempt %d/%d) at %s", attempt, retries, current_start
                )

    async def update_status(self, booking_id: str, new_status: Union[BookingStatus, str]) -> Booking:
        """
        Move a booking to ``new_status``.

        Raises:
            InvalidRequestError: Unknown status value.
            NotFoundError: Unknown booking.
            InvalidTransitionError: The transition table forbids the change.
        """
        try:
            request = StatusUpdateRequest(booking_id=booking_id, new_status=new_status)
        except ValidationError as exc:
            raise from_validation_error(exc) from None

        current = self._ledger.get(request.booking_id)
        async with self._locks.hold(booking_lock_key(current.provider_id, current.date)):
            return self._ledger.update_status(request.booking_id, request.new_status)

    async def cancel_booking(self, booking_id: str) -> Booking:
        """Cancel a booking. History is kept; the record is never deleted."""
        return await self.update_status(booking_id, BookingStatus.CANCELLED)

    def get_booking(self, booking_id: str) -> Booking:
        return self._ledger.get(booking_id)

    def list_bookings(
        self,
        customer_id: Optional[str] = None,
        provider_id: Optional[str] = None,
        status: Optional[BookingStatus] = None,
    ) -> list[Booking]:
        return self._ledger.query(customer_id=customer_id, provider_id=provider_id, status=status)
