"""Authentication API endpoints."""

import uuid

from fastapi import APIRouter, Depends, HTTPException

from ...config import Settings, get_settings
from ...models.base import utc_now
from ...models.user import TokenResponse, UserCreate, UserLogin, UserResponse
from ...services.auth import create_token, hash_password, verify_password
from ...services.storage import UserStore
from ..dependencies import get_current_user, get_user_store

router = APIRouter()


def _token_response(user_id: str, user_data: dict, settings: Settings) -> TokenResponse:
    return TokenResponse(
        access_token=create_token(user_id, settings.token_secret, settings.token_expiry_hours),
        user=UserResponse(
            user_id=user_id,
            email=user_data["email"],
            name=user_data["name"],
            created_at=user_data.get("created_at"),
        ),
    )


@router.post("/register", response_model=TokenResponse, status_code=201)
async def register(
    user: UserCreate,
    users: UserStore = Depends(get_user_store),
    settings: Settings = Depends(get_settings),
):
    """Register a new user."""
    if users.find_by_email(user.email):
        raise HTTPException(status_code=400, detail="Email already registered")

    all_users = users.load()
    user_id = str(uuid.uuid4())
    user_data = {
        "email": user.email.lower(),
        "name": user.name,
        "password_hash": hash_password(user.password),
        "created_at": utc_now(),
    }
    all_users[user_id] = user_data
    users.save(all_users)

    return _token_response(user_id, user_data, settings)


@router.post("/login", response_model=TokenResponse)
async def login(
    credentials: UserLogin,
    users: UserStore = Depends(get_user_store),
    settings: Settings = Depends(get_settings),
):
    """Login with email and password."""
    found = users.find_by_email(credentials.email)
    if not found or not verify_password(credentials.password, found[1]["password_hash"]):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    user_id, user_data = found
    return _token_response(user_id, user_data, settings)


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    user_id: str = Depends(get_current_user),
    users: UserStore = Depends(get_user_store),
):
    """Get current user information."""
    user_data = users.load()[user_id]
    return UserResponse(
        user_id=user_id,
        email=user_data["email"],
        name=user_data["name"],
        created_at=user_data.get("created_at"),
    )
