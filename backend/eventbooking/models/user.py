"""
User model with secure password storage.
"""

from sqlalchemy import Column, Integer, Numeric, String

from eventbooking.db.base import Base, TimestampMixin


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    username = Column(String(100), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="user")
    profile_picture = Column(String(500), nullable=False, default="")
    # Not mutated by any booking flow yet
    balance = Column(Numeric(12, 2), nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username})>"
