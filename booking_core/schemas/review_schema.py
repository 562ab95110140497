"""Review models and validated review payloads."""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from booking_core.config import settings

_MIN_RATING = settings.reviews.min_rating
_MAX_RATING = settings.reviews.max_rating


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Review(BaseModel):
    """A customer's rating of one completed booking."""

    id: str
    booking_id: str
    customer_id: str
    provider_id: str
    service_id: str
    rating: int = Field(ge=_MIN_RATING, le=_MAX_RATING)
    comment: str = ""
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class ReviewRequest(BaseModel):
    """Validated review creation payload."""

    model_config = ConfigDict(str_strip_whitespace=True)

    booking_id: str = Field(min_length=1)
    customer_id: str = Field(min_length=1)
    provider_id: str = Field(min_length=1)
    service_id: str = Field(min_length=1)
    rating: int = Field(ge=_MIN_RATING, le=_MAX_RATING)
    comment: Optional[str] = None


class ReviewUpdateRequest(BaseModel):
    """Partial review edit. Omitted fields keep their current value."""

    model_config = ConfigDict(str_strip_whitespace=True)

    rating: Optional[int] = Field(default=None, ge=_MIN_RATING, le=_MAX_RATING)
    comment: Optional[str] = None
