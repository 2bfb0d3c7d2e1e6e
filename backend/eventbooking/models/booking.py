"""
Booking model: a paid seat reservation produced by a payment capture.

Key design decisions:
- Unique `order_id` ties each booking to exactly one captured provider order,
  so a replayed or concurrent capture cannot create a second booking
- Multiple bookings per (user, event) are allowed, one per order
"""

from sqlalchemy import Column, Integer, Numeric, String, ForeignKey, Index, CheckConstraint
from sqlalchemy.orm import relationship

from eventbooking.db.base import Base, TimestampMixin

PAYMENT_PENDING = "pending"
PAYMENT_PAID = "paid"

BOOKING_CONFIRMED = "confirmed"
BOOKING_CANCELLED = "cancelled"


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    order_id = Column(String(64), unique=True, nullable=False)
    number_of_seats = Column(Integer, nullable=False, default=1)
    total_price = Column(Numeric(10, 2), nullable=False)
    payment_status = Column(String(20), nullable=False, default=PAYMENT_PENDING)
    status = Column(String(20), nullable=False, default=BOOKING_CONFIRMED)

    user = relationship("User", lazy="selectin")
    event = relationship("Event", lazy="selectin")

    __table_args__ = (
        CheckConstraint("number_of_seats > 0", name="check_booking_seats_positive"),
        CheckConstraint("payment_status IN ('pending', 'paid')", name="check_booking_payment_status"),
        CheckConstraint("status IN ('confirmed', 'cancelled')", name="check_booking_status"),
        Index("ix_bookings_event_user", "event_id", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, user={self.user_id}, event={self.event_id}, order={self.order_id})>"
