"""
Authentication endpoints: register, login and current identity.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from eventbooking.db.session import get_db
from eventbooking.models.user import User
from eventbooking.schemas.user import UserCreate, UserResponse, UserLogin, Token
from eventbooking.services.auth_service import register_user, authenticate_user
from eventbooking.core.security import get_current_user

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserCreate, db: AsyncSession = Depends(get_db)):
    """Register a new user account."""
    return await register_user(db, user_data)


@router.post("/login", response_model=Token)
async def login(login_data: UserLogin, db: AsyncSession = Depends(get_db)):
    """Authenticate with a username or email and receive a JWT access token."""
    user, token = await authenticate_user(db, login_data)
    return Token(access_token=token, user=UserResponse.model_validate(user))


@router.get("/me", response_model=UserResponse)
async def me(current_user: User = Depends(get_current_user)):
    return current_user
