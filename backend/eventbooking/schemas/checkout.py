"""
Pydantic schemas for the two-step checkout flow.
"""

from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field

from eventbooking.schemas.booking import BookingResponse


class CheckoutCreate(BaseModel):
    amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    quantity: int = Field(..., gt=0, le=100)
    event_name: str = Field(..., min_length=1, max_length=255, alias="eventName")
    event_id: int = Field(..., alias="eventId")

    model_config = {"populate_by_name": True}


class CheckoutCreateResponse(BaseModel):
    id: str
    approval_url: str


class CaptureRequest(BaseModel):
    order_id: str = Field(..., min_length=1, max_length=64, alias="orderId")

    model_config = {"populate_by_name": True}


class CaptureResponse(BaseModel):
    success: bool = True
    order_id: str
    status: str
    booking: BookingResponse
    already_confirmed: bool = False
    message: Optional[str] = None
