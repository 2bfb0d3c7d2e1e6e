"""
User profile endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from eventbooking.db.session import get_db
from eventbooking.models.user import User
from eventbooking.schemas.event import UserEventsResponse
from eventbooking.schemas.user import BalanceResponse, UserPublicProfile
from eventbooking.services.event_service import list_events_by_organizer
from eventbooking.services.user_service import get_user
from eventbooking.core.security import get_current_user

router = APIRouter(prefix="/user", tags=["Users"])


@router.get("/balance", response_model=BalanceResponse)
async def get_balance(current_user: User = Depends(get_current_user)):
    return BalanceResponse(balance=current_user.balance or 0)


@router.get("/events", response_model=UserEventsResponse)
async def get_organized_events(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Events organized by the caller, newest first."""
    return UserEventsResponse(events=await list_events_by_organizer(db, current_user.id))


@router.get("/{user_id}", response_model=UserPublicProfile)
async def get_user_profile(user_id: int, db: AsyncSession = Depends(get_db)):
    return await get_user(db, user_id)
