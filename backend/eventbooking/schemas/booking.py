"""
Pydantic schemas for booking-related request/response validation.
"""

from datetime import datetime
from pydantic import BaseModel

from eventbooking.schemas.event import EventResponse


class BookingUser(BaseModel):
    id: int
    username: str
    email: str

    model_config = {"from_attributes": True}


class BookingResponse(BaseModel):
    id: int
    user_id: int
    event_id: int
    order_id: str
    number_of_seats: int
    total_price: float
    payment_status: str
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}


class BookingDetailResponse(BookingResponse):
    event: EventResponse
    user: BookingUser
