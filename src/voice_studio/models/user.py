"""User authentication models."""

from pydantic import EmailStr, Field

from .base import CamelModel


class UserCreate(CamelModel):
    """Request model for user registration."""
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=8, max_length=100)


class UserLogin(CamelModel):
    """Request model for user login."""
    email: EmailStr
    password: str


class UserResponse(CamelModel):
    """Response model for user data."""
    user_id: str
    email: str
    name: str
    created_at: str | None = None


class TokenResponse(CamelModel):
    """Response model for authentication token."""
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
