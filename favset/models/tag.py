from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional
from uuid import UUID, uuid4

from sqlalchemy import Column, ForeignKey, Table, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from favset.models.base import Base, utcnow

if TYPE_CHECKING:
    from favset.models.favorite import Favorite
    from favset.models.user import User


favorite_tags = Table(
    "favorite_tags",
    Base.metadata,
    Column(
        "favorite_id",
        ForeignKey("favorites.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "tag_id",
        ForeignKey("tags.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    ),
)


class Tag(Base):
    __tablename__ = "tags"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    name: Mapped[str]
    color: Mapped[Optional[str]]
    created_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), onupdate=utcnow
    )

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="tags")
    favorites: Mapped[list["Favorite"]] = relationship(
        "Favorite", secondary=favorite_tags, back_populates="tags"
    )

    # Constraints
    __table_args__ = (UniqueConstraint("user_id", "name", name="unique_user_tag"),)
