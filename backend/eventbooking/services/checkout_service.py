"""
Checkout: turn a PayPal order into a paid booking.

FLOW
====

1. create_checkout_order
   Checks the event still has room, asks the provider for an order and stores
   a PendingOrder (buyer, event, quantity, total) keyed by the provider order
   id. The buyer is always the authenticated user.

2. capture_checkout_order
   Looks the PendingOrder up by order id and captures it at the provider.
   On COMPLETED, in a single transaction:

     UPDATE events SET booked_seats = booked_seats + :q
      WHERE id = :event_id AND booked_seats + :q <= available_seats

     INSERT INTO bookings (..., order_id, payment_status='paid', ...)

   If the UPDATE matches no row the seat bound would be exceeded: nothing is
   booked and the order is marked `unfulfilled` (payment was taken and needs
   a manual refund). The unique bookings.order_id makes replayed and
   concurrent captures of one order resolve to the same booking.

Provider failures surface as 502 with the provider message attached. No
retries: the client decides whether to call again.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from eventbooking.core.config import get_settings
from eventbooking.core.logging import get_logger
from eventbooking.core.metrics import (
    provider_latency,
    record_booking,
    record_capture,
    record_checkout_order,
)
from eventbooking.infrastructure.paypal_client import (
    STATUS_COMPLETED,
    OrderRequest,
    PaymentProvider,
    PaymentProviderError,
    ProviderOrder,
)
from eventbooking.models.booking import BOOKING_CONFIRMED, PAYMENT_PAID, Booking
from eventbooking.models.event import Event
from eventbooking.models.pending_order import (
    ORDER_CAPTURED,
    ORDER_CREATED,
    ORDER_FAILED,
    ORDER_UNFULFILLED,
    PendingOrder,
)
from eventbooking.models.user import User
from eventbooking.schemas.checkout import CheckoutCreate
from eventbooking.services.cache_service import invalidate_event_cache
from eventbooking.services.event_service import get_event

logger = get_logger(__name__)

CENTS = Decimal("0.01")


@dataclass
class CaptureOutcome:
    booking: Booking
    status: str
    already_confirmed: bool = False


def _upstream_error(message: str, error: Exception) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail={"error": message, "details": str(error)},
    )


def order_total(amount: Decimal, quantity: int) -> Decimal:
    return (amount * quantity).quantize(CENTS)


async def create_checkout_order(
    db: AsyncSession,
    provider: PaymentProvider,
    user: User,
    checkout: CheckoutCreate,
    origin: Optional[str] = None,
) -> ProviderOrder:
    settings = get_settings()
    event = await get_event(db, checkout.event_id)

    if event.booked_seats + checkout.quantity > event.available_seats:
        logger.warning(
            "checkout_rejected_no_seats",
            event_id=event.id,
            requested=checkout.quantity,
            remaining=event.remaining_seats,
        )
        record_checkout_order("rejected")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Not enough seats. Requested: {checkout.quantity}, Remaining: {event.remaining_seats}",
        )

    total = order_total(checkout.amount, checkout.quantity)
    base_url = (origin or settings.FRONTEND_URL).rstrip("/")
    order_request = OrderRequest(
        reference_id=str(event.id),
        description=f"Event Ticket - {checkout.event_name}",
        total=total,
        currency=settings.PAYPAL_CURRENCY,
        return_url=f"{base_url}/success",
        cancel_url=f"{base_url}/cancel",
    )

    try:
        with provider_latency.labels(operation="create_order").time():
            order = await provider.create_order(order_request)
    except PaymentProviderError as e:
        logger.error("checkout_order_failed", event_id=event.id, user_id=user.id, error=str(e))
        record_checkout_order("provider_error")
        raise _upstream_error("Failed to create PayPal order", e)

    if not order.approval_url:
        logger.error("checkout_order_without_approval_link", order_id=order.id)
        record_checkout_order("provider_error")
        raise _upstream_error(
            "Failed to create PayPal order",
            PaymentProviderError("No approval link in provider response"),
        )

    db.add(
        PendingOrder(
            order_id=order.id,
            user_id=user.id,
            event_id=event.id,
            quantity=checkout.quantity,
            amount=total,
            currency=settings.PAYPAL_CURRENCY,
            status=ORDER_CREATED,
        )
    )
    await db.commit()

    logger.info(
        "checkout_order_created",
        order_id=order.id,
        event_id=event.id,
        user_id=user.id,
        quantity=checkout.quantity,
        total=str(total),
    )
    record_checkout_order("created")
    return order


async def _find_order_booking(
    db: AsyncSession, event_id: int, user_id: int, order_id: str
) -> Optional[Booking]:
    """Most recent booking for the (event, user) pair made from this order."""
    result = await db.execute(
        select(Booking)
        .where(
            Booking.event_id == event_id,
            Booking.user_id == user_id,
            Booking.order_id == order_id,
        )
        .order_by(Booking.created_at.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def capture_checkout_order(
    db: AsyncSession,
    provider: PaymentProvider,
    user: User,
    order_id: str,
) -> CaptureOutcome:
    result = await db.execute(select(PendingOrder).where(PendingOrder.order_id == order_id))
    pending = result.scalar_one_or_none()

    # Another user's order is indistinguishable from a missing one
    if pending is None or pending.user_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Order not found",
        )

    if pending.status == ORDER_CAPTURED:
        booking = await _find_order_booking(db, pending.event_id, pending.user_id, order_id)
        if booking is not None:
            logger.info("capture_replayed", order_id=order_id, booking_id=booking.id)
            record_capture("replayed")
            return CaptureOutcome(booking=booking, status=STATUS_COMPLETED, already_confirmed=True)

    if pending.status == ORDER_UNFULFILLED:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "error": "Order was paid but no seats were left",
                "order_id": order_id,
            },
        )

    try:
        with provider_latency.labels(operation="capture_order").time():
            capture = await provider.capture_order(order_id)
    except PaymentProviderError as e:
        logger.error("capture_failed", order_id=order_id, error=str(e))
        record_capture("provider_error")
        raise _upstream_error("Failed to capture payment", e)

    if capture.status != STATUS_COMPLETED:
        logger.warning("capture_not_completed", order_id=order_id, status=capture.status)
        pending.status = ORDER_FAILED
        await db.commit()
        record_capture("not_completed")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "Payment not completed", "status": capture.status},
        )

    record_capture("completed")
    return await _materialize_booking(db, pending, capture.status, capture.amount)


async def _materialize_booking(
    db: AsyncSession,
    pending: PendingOrder,
    capture_status: str,
    captured_amount: Decimal,
) -> CaptureOutcome:
    # Plain copies: a rollback below expires the ORM instance
    order_id = pending.order_id
    event_id = pending.event_id
    user_id = pending.user_id
    quantity = pending.quantity

    existing = await _find_order_booking(db, event_id, user_id, order_id)
    if existing is not None and existing.payment_status == PAYMENT_PAID:
        logger.info("booking_already_confirmed", order_id=order_id, booking_id=existing.id)
        return CaptureOutcome(booking=existing, status=capture_status, already_confirmed=True)

    seat_update = await db.execute(
        update(Event)
        .where(
            Event.id == event_id,
            Event.booked_seats + quantity <= Event.available_seats,
        )
        .values(booked_seats=Event.booked_seats + quantity)
        .execution_options(synchronize_session=False)
    )

    if seat_update.rowcount == 0:
        pending.status = ORDER_UNFULFILLED
        await db.commit()
        logger.error(
            "booking_unfulfilled_after_capture",
            order_id=order_id,
            event_id=event_id,
            user_id=user_id,
            quantity=quantity,
            captured_amount=str(captured_amount),
        )
        record_capture("unfulfilled")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "error": "Order was paid but no seats were left",
                "order_id": order_id,
            },
        )

    booking = Booking(
        event_id=event_id,
        user_id=user_id,
        order_id=order_id,
        number_of_seats=quantity,
        total_price=captured_amount,
        payment_status=PAYMENT_PAID,
        status=BOOKING_CONFIRMED,
    )
    db.add(booking)
    pending.status = ORDER_CAPTURED

    try:
        await db.commit()
    except IntegrityError:
        # A concurrent capture of the same order committed first; our seat
        # increment is rolled back with the duplicate insert.
        await db.rollback()
        winner = await _find_order_booking(db, event_id, user_id, order_id)
        if winner is None:
            raise
        logger.info("capture_race_resolved", order_id=order_id, booking_id=winner.id)
        return CaptureOutcome(booking=winner, status=capture_status, already_confirmed=True)

    logger.info(
        "booking_created",
        booking_id=booking.id,
        order_id=order_id,
        event_id=event_id,
        user_id=user_id,
        seats=quantity,
        total_price=str(captured_amount),
    )
    record_booking(quantity)
    await invalidate_event_cache()
    return CaptureOutcome(booking=booking, status=capture_status)
