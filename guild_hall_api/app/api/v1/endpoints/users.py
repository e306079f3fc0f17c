"""
User endpoints for API v1.

Registration, login and the caller's own profile.  Login returns a
bearer token to send in the ``Authorization`` header.
"""

from fastapi import APIRouter, Depends, status

from guild_hall_api.app.core.security import get_current_user
from guild_hall_api.app.schemas.user import Token, UserCreate, UserLogin, UserRead
from guild_hall_api.app.services.user_service import UserService


router = APIRouter()


@router.post("/", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def register_user(user: UserCreate) -> UserRead:
    """Зарегистрировать нового пользователя.

    Новый пользователь начинает с нулевым балансом и без приглашений.
    """
    return await UserService.create_user(user)


@router.post("/login", response_model=Token)
async def login_user(credentials: UserLogin) -> Token:
    return await UserService.login(credentials)


@router.get("/me", response_model=UserRead)
async def read_me(current_user: dict = Depends(get_current_user)) -> UserRead:
    """Own profile, including balance and pending invitations."""
    return await UserService.get_me(current_user)
