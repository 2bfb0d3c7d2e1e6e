"""
Event reviews. Ratings are bounded to 1-5; repeat reviews are allowed.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException, status

from eventbooking.models.event import Event
from eventbooking.models.review import Review
from eventbooking.models.user import User
from eventbooking.schemas.review import ReviewCreate
from eventbooking.core.logging import get_logger

logger = get_logger(__name__)


async def list_reviews(db: AsyncSession, event_id: int) -> list[Review]:
    result = await db.execute(
        select(Review)
        .where(Review.event_id == event_id)
        .order_by(Review.created_at.asc(), Review.id.asc())
    )
    return list(result.scalars().all())


async def create_review(
    db: AsyncSession,
    user: User,
    event_id: int,
    review_data: ReviewCreate,
) -> Review:
    if await db.get(Event, event_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Event not found",
        )

    review = Review(
        event_id=event_id,
        user_id=user.id,
        rating=review_data.rating,
        review_text=review_data.review_text,
    )
    db.add(review)
    await db.commit()
    await db.refresh(review, attribute_names=["user"])

    logger.info("review_created", review_id=review.id, event_id=event_id, user_id=user.id, rating=review.rating)
    return review
