from typing import Callable, List, Union
from pydantic import BaseModel
from marketplace.schemas.booking_schema import BookingResponse
from marketplace.logger import get_logger

logger = get_logger(__name__)


class BookingCreated(BaseModel):
    """Published once a booking insert has been acknowledged by the store."""

    booking: BookingResponse

    @property
    def customer_id(self) -> str:
        return self.booking.customer_id

    @property
    def service_id(self) -> str:
        return self.booking.service_id


class BookingOutcomeUnknown(BaseModel):
    """Published when an insert timed out and may still commit later."""

    service_id: str
    customer_id: str


BookingEvent = Union[BookingCreated, BookingOutcomeUnknown]
BookingListener = Callable[[BookingEvent], None]


class BookingEventBus:
    def __init__(self):
        self._listeners: List[BookingListener] = []

    def subscribe(self, listener: BookingListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: BookingListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def publish(self, event: BookingEvent) -> None:
        # A failing listener must not hide an already stored booking
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(
                    f"Booking listener failed for service {event.service_id} and customer {event.customer_id}"
                )


booking_events = BookingEventBus()
