"""
Pydantic schemas for event-related request/response validation.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from eventbooking.schemas.review import ReviewResponse
from eventbooking.schemas.user import OrganizerSummary


class LatLng(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class EventCreate(BaseModel):
    """Validated form of the multipart create-event request."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1, max_length=100)
    date: datetime
    available_seats: int = Field(..., gt=0, le=100000)
    price: float = Field(default=0, ge=0)
    location: Optional[LatLng] = None


class EventFilters(BaseModel):
    category: Optional[str] = None
    location: Optional[str] = None
    name: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None

    def cache_key(self) -> str:
        return "&".join(
            f"{field}={value.isoformat() if isinstance(value, datetime) else value}"
            for field, value in self.model_dump().items()
            if value is not None
        )


class EventResponse(BaseModel):
    id: int
    title: str
    description: str
    category: str
    address: str
    city: str
    latitude: Optional[float]
    longitude: Optional[float]
    date: datetime
    available_seats: int
    booked_seats: int
    price: float
    image_url: str
    organizer_id: int
    organizer: Optional[OrganizerSummary] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class EventDetailResponse(EventResponse):
    reviews: list[ReviewResponse] = []


class EventListResponse(BaseModel):
    events: list[EventResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
    cached: bool = False


class UserEventsResponse(BaseModel):
    events: list[EventResponse]
