from typing import Optional

from fastapi import Cookie, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from favset.config import settings
from favset.database import get_db
from favset.models.user import User
from favset.services.metadata import MetadataService
from favset.utils.security import create_session_token, decode_session_token


async def get_session(session: AsyncSession = Depends(get_db)) -> AsyncSession:
    return session


def get_metadata_service() -> MetadataService:
    return MetadataService()


async def get_current_user(
    auth_token: Optional[str] = Cookie(default=None, alias=settings.session_cookie_name),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Get the current user from the session cookie."""
    user_id = decode_session_token(auth_token) if auth_token else None
    user = await db.get(User, user_id) if user_id else None
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )
    return user


def set_session_cookie(response: Response, user: User) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=create_session_token(user.id),
        max_age=settings.session_max_age_days * 24 * 60 * 60,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.session_cookie_name,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )
