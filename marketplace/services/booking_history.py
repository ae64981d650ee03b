from typing import List
from marketplace.schemas.booking_schema import BookingResponse
from marketplace.schemas.result_schema import ErrorKind, Result
from marketplace.services.booking_events import BookingEvent, BookingEventBus, booking_events
from marketplace.services.listing_store import ListingStore, StoreError, error_kind_for, listing_store
from marketplace.services.query_cache import QueryCache, query_cache
from marketplace.logger import get_logger

logger = get_logger(__name__)

HISTORY_VIEW = "customer-bookings"


class BookingHistory:
    """Cached list of a customer's bookings, dropped on every booking event."""

    def __init__(self, store: ListingStore, cache: QueryCache, events: BookingEventBus):
        self.store = store
        self.cache = cache
        events.subscribe(self.on_booking_event)

    def on_booking_event(self, event: BookingEvent) -> None:
        self.cache.invalidate((HISTORY_VIEW, event.customer_id))
        logger.debug(f"Invalidated booking history for customer {event.customer_id}")

    async def list_for_customer(self, customer_id: str) -> Result[List[BookingResponse]]:
        key = (HISTORY_VIEW, customer_id)
        if key in self.cache:
            return Result.success(self.cache.get(key))

        generation = self.cache.generation(key)
        try:
            bookings = await self.store.fetch_customer_bookings(customer_id)
        except StoreError as e:
            logger.error(f"Error fetching bookings for customer {customer_id}: {str(e)}")
            return Result.failure(error_kind_for(e, ErrorKind.fetch_failed), "Error occurred while fetching bookings")

        if not self.cache.set_if_current(key, bookings, generation):
            logger.debug(f"Booking history for customer {customer_id} changed during fetch; not cached")
        return Result.success(bookings)


booking_history = BookingHistory(listing_store, query_cache, booking_events)
