from fastapi import APIRouter, Depends, status
from typing import List, Optional
from marketplace.services.booking_service import booking_service
from marketplace.services.booking_history import booking_history
from marketplace.schemas.booking_schema import BookingRequest, BookingResponse
from marketplace.security.auth import get_current_user, get_optional_user
from marketplace.models.user_model import User
from marketplace.routes.errors import http_error
from marketplace.logger import get_logger

booking_router = APIRouter()
logger = get_logger(__name__)


@booking_router.post(
    "/bookings", response_model=BookingResponse, status_code=status.HTTP_201_CREATED
)
async def request_booking(
    booking: BookingRequest,
    current_user: Optional[User] = Depends(get_optional_user),
):
    """Send a booking request for a service (status starts as pending)"""
    customer_id = current_user.id if current_user else None
    logger.info(f"Customer {customer_id} requesting booking for service {booking.service_id}")
    result = await booking_service.request_booking(booking.service_id, customer_id, booking.provider_id)
    if not result.ok:
        raise http_error(result.error)
    return result.data


@booking_router.get(
    "/bookings", response_model=List[BookingResponse], status_code=status.HTTP_200_OK
)
async def get_customer_bookings(current_user: User = Depends(get_current_user)):
    """Bookings requested by the current user, newest first"""
    result = await booking_history.list_for_customer(current_user.id)
    if not result.ok:
        raise http_error(result.error)
    return result.data
