from typing import Optional
from marketplace.schemas.booking_schema import BookingDraft, BookingResponse, BookingStatus
from marketplace.schemas.result_schema import ErrorKind, Result
from marketplace.services.booking_events import (
    BookingCreated,
    BookingEventBus,
    BookingOutcomeUnknown,
    booking_events,
)
from marketplace.services.booking_guard import BookingGuard, booking_guard
from marketplace.services.listing_store import (
    ListingStore,
    StoreConflictError,
    StoreError,
    StoreTimeoutError,
    error_kind_for,
    listing_store,
)
from marketplace.logger import get_logger

logger = get_logger(__name__)


class BookingService:
    """Guard check, then insert, then ``BookingCreated``.

    Check and insert are separate store round trips. The store's unique
    index on active bookings is the enforcement point when two requests
    race; the loser gets ``already_booked``.
    """

    def __init__(self, store: ListingStore, guard: BookingGuard, events: BookingEventBus):
        self.store = store
        self.guard = guard
        self.events = events

    async def request_booking(
            self, service_id: str, customer_id: Optional[str], provider_id: Optional[str] = None
    ) -> Result[BookingResponse]:
        try:
            decision = await self.guard.check(service_id, customer_id, provider_id)
        except StoreError as e:
            logger.error(f"Booking check error for service {service_id}: {str(e)}")
            return Result.failure(
                error_kind_for(e, ErrorKind.fetch_failed), "Error occurred while checking existing bookings"
            )

        if not decision.allowed:
            logger.info(
                f"Booking rejected ({decision.reason.value}) for service {service_id} by customer {customer_id}"
            )
            return Result.failure(decision.reason, decision.message)

        draft = BookingDraft(
            service_id=service_id,
            customer_id=customer_id,
            provider_id=decision.provider_id,
            status=BookingStatus.pending,
        )
        try:
            booking = await self.store.insert_booking(draft)
        except StoreConflictError:
            return Result.failure(
                ErrorKind.already_booked, "You already have an active booking for this service"
            )
        except StoreTimeoutError:
            # The abandoned insert may still commit; views must not keep the old state
            logger.error(f"Booking insert timed out for service {service_id}; outcome unknown")
            self.events.publish(BookingOutcomeUnknown(service_id=service_id, customer_id=customer_id))
            return Result.failure(ErrorKind.timeout, "Booking request timed out. Please try again.")
        except StoreError as e:
            logger.error(f"Booking error for service {service_id}: {str(e)}")
            return Result.failure(
                error_kind_for(e, ErrorKind.insert_failed), "Failed to create booking. Please try again."
            )

        logger.info(f"Booking created: {booking.id} by customer {customer_id}")
        self.events.publish(BookingCreated(booking=booking))
        return Result.success(booking)


booking_service = BookingService(listing_store, booking_guard, booking_events)
