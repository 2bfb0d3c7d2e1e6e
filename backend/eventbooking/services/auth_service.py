"""
Authentication service handling user registration and login.
"""

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException, status

from eventbooking.models.user import User
from eventbooking.schemas.user import UserCreate, UserLogin
from eventbooking.core.security import hash_password, verify_password, create_user_token
from eventbooking.core.logging import get_logger

logger = get_logger(__name__)

DUPLICATE_ACCOUNT_MESSAGE = "There is already an account with this username or email"
INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"


def _duplicate_account() -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_ACCOUNT_MESSAGE)


async def register_user(db: AsyncSession, user_data: UserCreate) -> User:
    """
    Register a new user with a bcrypt-hashed password.
    Raises 409 if the username or the email is already taken.
    """
    result = await db.execute(
        select(User).where(
            or_(User.username == user_data.username, User.email == user_data.email)
        )
    )
    if result.scalars().first():
        logger.warning(
            "registration_failed",
            reason="account_exists",
            username=user_data.username,
            email=user_data.email,
        )
        raise _duplicate_account()

    user = User(
        username=user_data.username,
        email=user_data.email,
        hashed_password=hash_password(user_data.password),
        role="user",
        profile_picture="",
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        # Lost a race against a concurrent registration
        await db.rollback()
        raise _duplicate_account()
    await db.refresh(user)

    logger.info("user_registered", user_id=user.id, username=user.username)
    return user


async def authenticate_user(db: AsyncSession, login_data: UserLogin) -> tuple[User, str]:
    """
    Authenticate by username or email and return the user with a JWT.
    Unknown identifiers and wrong passwords get the same 401.
    """
    result = await db.execute(
        select(User).where(
            or_(User.email == login_data.identifier, User.username == login_data.identifier)
        )
    )
    user = result.scalars().first()

    if not user or not verify_password(login_data.password, user.hashed_password):
        logger.warning("login_failed", identifier=login_data.identifier)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=INVALID_CREDENTIALS_MESSAGE,
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = create_user_token(user)
    logger.info("user_logged_in", user_id=user.id)
    return user, token
