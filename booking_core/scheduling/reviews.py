"""
Customer reviews and the provider rating aggregate derived from them.

After every create, edit or delete, the provider's ``rating`` is
recomputed as the mean of its reviews and ``review_count`` as their
number. Mutations for one provider are serialised so concurrent writers
cannot lose each other's updates. When the last review is deleted the
count drops to zero and the rating keeps its previous value.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, Optional, Protocol

from pydantic import ValidationError

from booking_core.errors import (
    BookingNotCompletedError,
    DuplicateReviewError,
    InvalidRequestError,
    NotFoundError,
    from_validation_error,
)
from booking_core.scheduling.ledger import BookingLedger
from booking_core.scheduling.locks import KeyedLockRegistry, review_lock_key
from booking_core.schemas.booking_schema import BookingStatus
from booking_core.schemas.catalog_schema import Provider
from booking_core.schemas.review_schema import Review, ReviewRequest, ReviewUpdateRequest

logger = logging.getLogger(__name__)


class RatingSink(Protocol):
    def set_rating(
        self, provider_id: str, rating: Optional[float], review_count: int
    ) -> Provider: ...


def new_review_id() -> str:
    return f"RV-{uuid.uuid4().hex[:8].upper()}"


class ReviewAggregator:
    """Stores reviews and keeps provider rating fields consistent with them."""

    def __init__(
        self,
        providers: RatingSink,
        ledger: BookingLedger,
        locks: Optional[KeyedLockRegistry] = None,
        id_factory: Callable[[], str] = new_review_id,
    ) -> None:
        self._providers = providers
        self._ledger = ledger
        self._locks = locks or KeyedLockRegistry()
        self._id_factory = id_factory
        self._reviews: dict[str, Review] = {}

    async def create_review(
        self,
        booking_id: str,
        customer_id: str,
        provider_id: str,
        service_id: str,
        rating: int,
        comment: Optional[str] = None,
    ) -> Review:
        """
        Create the single review allowed for a completed booking.

        Raises:
            InvalidRequestError: Malformed payload or ids that do not match the booking.
            NotFoundError: Unknown booking.
            BookingNotCompletedError: The booking is not completed.
            DuplicateReviewError: The booking already has a review.
        """
        try:
            request = ReviewRequest(
                booking_id=booking_id,
                customer_id=customer_id,
                provider_id=provider_id,
                service_id=service_id,
                rating=rating,
                comment=comment,
            )
        except ValidationError as exc:
            raise from_validation_error(exc) from None

        async with self._locks.hold(review_lock_key(request.provider_id)):
            booking = self._ledger.get(request.booking_id)
            mismatched = [
                name
                for name, expected, given in [
                    ("customer_id", booking.customer_id, request.customer_id),
                    ("provider_id", booking.provider_id, request.provider_id),
                    ("service_id", booking.service_id, request.service_id),
                ]
                if expected != given
            ]
            if mismatched:
                raise InvalidRequestError(
                    f"Review does not match booking {booking.id}: {', '.join(mismatched)}.",
                    details={"fields": mismatched},
                )
            if booking.status != BookingStatus.COMPLETED:
                raise BookingNotCompletedError(
                    f"Booking {booking.id} is '{booking.status.value}'; "
                    "only completed bookings can be reviewed.",
                    details={"booking_id": booking.id, "status": booking.status.value},
                )
            if any(r.booking_id == booking.id for r in self._reviews.values()):
                raise DuplicateReviewError(
                    f"Booking {booking.id} already has a review.",
                    details={"booking_id": booking.id},
                )

            review = Review(
                id=self._id_factory(),
                booking_id=booking.id,
                customer_id=request.customer_id,
                provider_id=request.provider_id,
                service_id=request.service_id,
                rating=request.rating,
                comment=request.comment or "",
            )
            self._reviews[review.id] = review
            self._recompute(review.provider_id)

        logger.info("Review %s created for booking %s", review.id, review.booking_id)
        return review.model_copy()

    async def update_review(
        self, review_id: str, rating: Optional[int] = None, comment: Optional[str] = None
    ) -> Review:
        """Edit a review's rating and/or comment. Omitted fields are kept."""
        try:
            request = ReviewUpdateRequest(rating=rating, comment=comment)
        except ValidationError as exc:
            raise from_validation_error(exc) from None

        provider_id = self._require(review_id).provider_id
        async with self._locks.hold(review_lock_key(provider_id)):
            current = self._require(review_id)
            changes: dict[str, object] = {"updated_at": datetime.now(timezone.utc)}
            if request.rating is not None:
                changes["rating"] = request.rating
            if request.comment is not None:
                changes["comment"] = request.comment
            updated = current.model_copy(update=changes)
            self._reviews[review_id] = updated
            self._recompute(provider_id)

        logger.info("Review %s updated", review_id)
        return updated.model_copy()

    async def delete_review(self, review_id: str) -> None:
        provider_id = self._require(review_id).provider_id
        async with self._locks.hold(review_lock_key(provider_id)):
            self._require(review_id)
            del self._reviews[review_id]
            self._recompute(provider_id)
        logger.info("Review %s deleted", review_id)

    def get_review(self, review_id: str) -> Review:
        return self._require(review_id).model_copy()

    def list_reviews(
        self,
        provider_id: Optional[str] = None,
        customer_id: Optional[str] = None,
        service_id: Optional[str] = None,
    ) -> list[Review]:
        """Filtered reviews, newest first."""
        reviews = [
            r for r in self._reviews.values()
            if (provider_id is None or r.provider_id == provider_id)
            and (customer_id is None or r.customer_id == customer_id)
            and (service_id is None or r.service_id == service_id)
        ]
        reviews.sort(key=lambda r: r.created_at, reverse=True)
        return [r.model_copy() for r in reviews]

    def _recompute(self, provider_id: str) -> Provider:
        ratings = [r.rating for r in self._reviews.values() if r.provider_id == provider_id]
        mean = sum(ratings) / len(ratings) if ratings else None
        provider = self._providers.set_rating(provider_id, mean, len(ratings))
        logger.debug(
            "Provider %s rating recomputed: %.2f over %d reviews",
            provider_id, provider.rating, provider.review_count,
        )
        return provider

    def _require(self, review_id: str) -> Review:
        review = self._reviews.get(review_id)
        if review is None:
            raise NotFoundError(f"Review {review_id} not found.", details={"review_id": review_id})
        return review
