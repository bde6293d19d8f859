from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _clean_tag_name(value: str) -> str:
    name = value.strip()
    if not name:
        raise ValueError("Tag name cannot be empty")
    return name


class TagBase(BaseModel):
    name: str = Field(max_length=64)
    color: Optional[str] = Field(default=None, max_length=32)


class TagCreate(TagBase):
    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        return _clean_tag_name(value)


class TagUpdate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=64)
    color: Optional[str] = Field(default=None, max_length=32)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return _clean_tag_name(value)


class TagRead(TagBase):
    id: UUID

    model_config = ConfigDict(from_attributes=True)


class TagWithCount(TagRead):
    favorite_count: int = 0
