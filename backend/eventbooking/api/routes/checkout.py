"""
Checkout endpoints: create a PayPal order, then capture it into a booking.

The buyer is always the authenticated user; request bodies carry no user id.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from eventbooking.api.deps import get_payment_provider
from eventbooking.db.session import get_db
from eventbooking.infrastructure.paypal_client import PaymentProvider
from eventbooking.models.user import User
from eventbooking.schemas.booking import BookingResponse
from eventbooking.schemas.checkout import (
    CaptureRequest,
    CaptureResponse,
    CheckoutCreate,
    CheckoutCreateResponse,
)
from eventbooking.services.checkout_service import capture_checkout_order, create_checkout_order
from eventbooking.core.security import get_current_user

router = APIRouter(prefix="/checkout", tags=["Checkout"])


@router.post("", response_model=CheckoutCreateResponse)
@router.post("/", response_model=CheckoutCreateResponse, include_in_schema=False)
async def create_order(
    checkout: CheckoutCreate,
    request: Request,
    current_user: User = Depends(get_current_user),
    provider: PaymentProvider = Depends(get_payment_provider),
    db: AsyncSession = Depends(get_db),
):
    """Create a provider order; the client sends the buyer to `approval_url`."""
    order = await create_checkout_order(
        db, provider, current_user, checkout, origin=request.headers.get("origin")
    )
    return CheckoutCreateResponse(id=order.id, approval_url=order.approval_url)


@router.post("/capture", response_model=CaptureResponse)
async def capture_order(
    capture: CaptureRequest,
    current_user: User = Depends(get_current_user),
    provider: PaymentProvider = Depends(get_payment_provider),
    db: AsyncSession = Depends(get_db),
):
    """
    Capture an approved order and record the booking.
    Replays return the existing booking with `already_confirmed` set.
    """
    outcome = await capture_checkout_order(db, provider, current_user, capture.order_id)
    return CaptureResponse(
        order_id=capture.order_id,
        status=outcome.status,
        booking=BookingResponse.model_validate(outcome.booking),
        already_confirmed=outcome.already_confirmed,
        message="Booking already confirmed" if outcome.already_confirmed else None,
    )
