from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, HttpUrl

from favset.schemas.tag import TagRead


class FavoriteCreate(BaseModel):
    url: HttpUrl
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    tags: list[str] = Field(default_factory=list)


class FavoriteUpdate(BaseModel):
    """Partial update. An explicit ``"rating": null`` clears the rating."""

    rating: Optional[int] = Field(default=None, ge=1, le=5)
    tags: Optional[list[str]] = None


class FavoriteRead(BaseModel):
    id: UUID
    url: str
    domain: str
    title: Optional[str] = None
    description: Optional[str] = None
    rating: Optional[int] = None
    tags: list[TagRead] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class DomainGroup(BaseModel):
    domain: str
    count: int
    favorites: list[FavoriteRead]
