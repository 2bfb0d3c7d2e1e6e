"""
Pydantic schemas for user-related request/response validation.
"""

from datetime import datetime
from pydantic import BaseModel, EmailStr, Field


class UserCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class UserLogin(BaseModel):
    # Either a username or an email address
    identifier: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserSummary(BaseModel):
    id: int
    username: str
    profile_picture: str = ""

    model_config = {"from_attributes": True}


class OrganizerSummary(UserSummary):
    email: str


class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    role: str
    profile_picture: str
    balance: float
    created_at: datetime

    model_config = {"from_attributes": True}


class UserPublicProfile(BaseModel):
    id: int
    username: str
    role: str
    profile_picture: str
    created_at: datetime

    model_config = {"from_attributes": True}


class BalanceResponse(BaseModel):
    balance: float


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
