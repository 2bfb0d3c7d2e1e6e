"""
Event review endpoints.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from eventbooking.db.session import get_db
from eventbooking.models.user import User
from eventbooking.schemas.review import ReviewCreate, ReviewListResponse, ReviewResponse
from eventbooking.services.review_service import create_review, list_reviews
from eventbooking.core.security import get_current_user

router = APIRouter(prefix="/rating", tags=["Reviews"])


@router.get("/{event_id}", response_model=ReviewListResponse)
async def list_event_reviews(event_id: int, db: AsyncSession = Depends(get_db)):
    return ReviewListResponse(reviews=await list_reviews(db, event_id))


@router.post("/{event_id}", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
async def create_event_review(
    event_id: int,
    review_data: ReviewCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await create_review(db, current_user, event_id, review_data)
