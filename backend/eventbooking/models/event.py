"""
Event model with seat inventory tracking.

Key design decisions:
- `booked_seats` only ever grows, through a conditional UPDATE that keeps it
  within `available_seats` (see checkout_service)
- CHECK constraints are the final safety net for the seat bound
- Index on `date` for range filters, on `created_at` for newest-first listing
"""

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from eventbooking.db.base import Base, TimestampMixin

ADDRESS_NOT_SPECIFIED = "Address not specified"
CITY_NOT_SPECIFIED = "City not specified"
ADDRESS_NOT_AVAILABLE = "Address not available"
CITY_NOT_AVAILABLE = "City not available"


class Event(Base, TimestampMixin):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(100), nullable=False, index=True)
    address = Column(String(500), nullable=False, default=ADDRESS_NOT_SPECIFIED)
    city = Column(String(255), nullable=False, default=CITY_NOT_SPECIFIED)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    date = Column(DateTime(timezone=True), nullable=False)
    available_seats = Column(Integer, nullable=False)
    booked_seats = Column(Integer, nullable=False, default=0)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    image_url = Column(String(500), nullable=False)
    organizer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    organizer = relationship("User", lazy="selectin")
    reviews = relationship(
        "Review",
        back_populates="event",
        order_by="Review.created_at",
        lazy="raise",
    )

    __table_args__ = (
        CheckConstraint("available_seats > 0", name="check_available_seats_positive"),
        CheckConstraint("booked_seats >= 0", name="check_booked_seats_non_negative"),
        CheckConstraint("booked_seats <= available_seats", name="check_booked_lte_available"),
        Index("ix_events_date", "date"),
    )

    @property
    def remaining_seats(self) -> int:
        return self.available_seats - self.booked_seats

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, title={self.title}, booked={self.booked_seats}/{self.available_seats})>"
