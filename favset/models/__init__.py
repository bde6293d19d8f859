from favset.models.base import Base
from favset.models.favorite import Favorite
from favset.models.tag import Tag, favorite_tags
from favset.models.user import User

__all__ = ["Base", "Favorite", "Tag", "User", "favorite_tags"]
