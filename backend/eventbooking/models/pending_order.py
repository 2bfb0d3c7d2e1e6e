"""
Local record of a payment-provider order between creation and capture.

Holds what the capture step needs (buyer, event, quantity) so nothing has to
round-trip through provider-side metadata.
"""

from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, Numeric, String

from eventbooking.db.base import Base, TimestampMixin

ORDER_CREATED = "created"
ORDER_CAPTURED = "captured"
# Payment taken but the seat bound would have been exceeded
ORDER_UNFULFILLED = "unfulfilled"
ORDER_FAILED = "failed"


class PendingOrder(Base, TimestampMixin):
    __tablename__ = "pending_orders"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(String(64), unique=True, index=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    status = Column(String(20), nullable=False, default=ORDER_CREATED)

    __table_args__ = (
        CheckConstraint("quantity > 0", name="check_pending_order_quantity_positive"),
        CheckConstraint(
            "status IN ('created', 'captured', 'unfulfilled', 'failed')",
            name="check_pending_order_status",
        ),
    )

    def __repr__(self) -> str:
        return f"<PendingOrder(order_id={self.order_id}, event={self.event_id}, status={self.status})>"
