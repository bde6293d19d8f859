from typing import Annotated

from fastapi import APIRouter, Depends

from favset.api.deps import get_current_user
from favset.models.user import User
from favset.schemas.user import UserRead

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserRead)
async def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
) -> UserRead:
    """Get the current authenticated user."""
    return UserRead.model_validate(current_user)
