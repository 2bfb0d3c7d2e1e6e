"""
Pydantic schemas for event reviews.
"""

from datetime import datetime
from pydantic import BaseModel, Field

from eventbooking.schemas.user import UserSummary


class ReviewCreate(BaseModel):
    rating: float = Field(..., ge=1, le=5)
    review_text: str = Field(default="", max_length=5000, alias="reviewText")

    model_config = {"populate_by_name": True}


class ReviewResponse(BaseModel):
    id: int
    event_id: int
    user_id: int
    rating: float
    review_text: str
    user: UserSummary
    created_at: datetime

    model_config = {"from_attributes": True}


class ReviewListResponse(BaseModel):
    reviews: list[ReviewResponse]
