"""
Booking read endpoints. Bookings are created by /checkout/capture.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from eventbooking.db.session import get_db
from eventbooking.models.user import User
from eventbooking.schemas.booking import BookingResponse, BookingDetailResponse
from eventbooking.services.booking_service import get_booking, get_user_bookings
from eventbooking.core.security import get_current_user

router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.get("/", response_model=list[BookingResponse])
async def list_user_bookings(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get all bookings for the authenticated user."""
    return await get_user_bookings(db, current_user.id)


@router.get("/{booking_id}", response_model=BookingDetailResponse)
async def get_booking_endpoint(
    booking_id: int,
    db: AsyncSession = Depends(get_db),
):
    return await get_booking(db, booking_id)
