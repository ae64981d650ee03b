from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime, timezone
from enum import Enum


class BookingStatus(str, Enum):
    pending = "pending"
    accepted = "accepted"
    rejected = "rejected"
    completed = "completed"


# Statuses that block a second booking of the same service by the same customer
ACTIVE_BOOKING_STATUSES = frozenset({BookingStatus.pending, BookingStatus.accepted})


class BookingRequest(BaseModel):
    service_id: str = Field(..., description="ID of the service being booked")
    provider_id: Optional[str] = Field(
        None, description="Provider of the service; resolved from the service when omitted"
    )


class BookingDraft(BaseModel):
    """A booking row that has not been written yet."""

    service_id: str
    customer_id: str
    provider_id: str
    status: BookingStatus = BookingStatus.pending
    booking_date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class BookingResponse(BaseModel):
    id: str
    service_id: str
    customer_id: str
    provider_id: str
    status: BookingStatus = BookingStatus.pending
    booking_date: datetime
    created_at: datetime

    class Config:
        from_attributes = True
