from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from favset.models.base import Base, utcnow
from favset.models.tag import favorite_tags

if TYPE_CHECKING:
    from favset.models.tag import Tag
    from favset.models.user import User


class Favorite(Base):
    __tablename__ = "favorites"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    url: Mapped[str]
    domain: Mapped[str] = mapped_column(index=True)
    title: Mapped[Optional[str]]
    description: Mapped[Optional[str]]
    rating: Mapped[Optional[int]]
    created_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), onupdate=utcnow
    )

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="favorites")
    tags: Mapped[list["Tag"]] = relationship(
        "Tag",
        secondary=favorite_tags,
        back_populates="favorites",
        lazy="selectin",
        order_by="Tag.name",
    )

    # Constraints
    __table_args__ = (
        UniqueConstraint("user_id", "url", name="unique_user_url"),
        CheckConstraint(
            "rating IS NULL OR (rating >= 1 AND rating <= 5)",
            name="favorite_rating_range",
        ),
    )
