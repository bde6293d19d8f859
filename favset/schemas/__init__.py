from favset.schemas.favorite import (
    DomainGroup,
    FavoriteCreate,
    FavoriteRead,
    FavoriteUpdate,
)
from favset.schemas.tag import TagCreate, TagRead, TagUpdate, TagWithCount
from favset.schemas.user import (
    ChangePasswordRequest,
    LoginRequest,
    UserCreate,
    UserRead,
)

__all__ = [
    "ChangePasswordRequest",
    "DomainGroup",
    "FavoriteCreate",
    "FavoriteRead",
    "FavoriteUpdate",
    "LoginRequest",
    "TagCreate",
    "TagRead",
    "TagUpdate",
    "TagWithCount",
    "UserCreate",
    "UserRead",
]
