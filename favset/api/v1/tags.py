from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from favset.api.deps import get_current_user, get_session
from favset.models import Tag, User, favorite_tags
from favset.schemas import TagCreate, TagRead, TagUpdate, TagWithCount

router = APIRouter(prefix="/tags", tags=["tags"])


async def _get_owned(
    db: AsyncSession, tag_id: UUID, user: User, *, with_favorites: bool = False
) -> Tag:
    stmt = select(Tag).where(Tag.id == tag_id, Tag.user_id == user.id)
    if with_favorites:
        stmt = stmt.options(selectinload(Tag.favorites))
    result = await db.execute(stmt.execution_options(populate_existing=True))
    tag = result.scalar_one_or_none()
    if not tag:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tag not found")
    return tag


async def _find_by_name(db: AsyncSession, user: User, name: str) -> Tag | None:
    result = await db.execute(
        select(Tag).where(Tag.user_id == user.id, Tag.name == name)
    )
    return result.scalar_one_or_none()


@router.get("", response_model=list[TagWithCount])
async def list_tags(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_session)],
    q: Optional[str] = None,
) -> list[TagWithCount]:
    """List the current user's tags by name, with how many favorites use each."""
    stmt = (
        select(Tag, func.count(favorite_tags.c.favorite_id))
        .outerjoin(favorite_tags, favorite_tags.c.tag_id == Tag.id)
        .where(Tag.user_id == current_user.id)
        .group_by(Tag.id)
        .order_by(Tag.name)
    )
    if q and q.strip():
        stmt = stmt.where(
            func.lower(Tag.name).contains(q.strip().lower(), autoescape=True)
        )

    result = await db.execute(stmt)
    return [
        TagWithCount(id=tag.id, name=tag.name, color=tag.color, favorite_count=count)
        for tag, count in result.all()
    ]


@router.post("", response_model=TagRead, status_code=status.HTTP_201_CREATED)
async def create_tag(
    payload: TagCreate,
    response: Response,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_session)],
) -> TagRead:
    """Create a tag, or return the existing one with the same name."""
    existing = await _find_by_name(db, current_user, payload.name)
    if existing:
        response.status_code = status.HTTP_200_OK
        return TagRead.model_validate(existing)

    tag = Tag(user_id=current_user.id, name=payload.name, color=payload.color or None)
    db.add(tag)
    await db.commit()
    return TagRead.model_validate(tag)


@router.patch("/{tag_id}", response_model=TagRead)
async def update_tag(
    tag_id: UUID,
    payload: TagUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_session)],
) -> TagRead:
    """Rename and/or recolor a tag (must belong to current user)."""
    tag = await _get_owned(db, tag_id, current_user)

    if payload.name is not None and payload.name != tag.name:
        if await _find_by_name(db, current_user, payload.name):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="A tag with this name already exists",
            )
        tag.name = payload.name
    if "color" in payload.model_fields_set:
        tag.color = payload.color or None

    await db.commit()
    return TagRead.model_validate(await _get_owned(db, tag_id, current_user))


@router.delete("/{tag_id}")
async def delete_tag(
    tag_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_session)],
) -> dict[str, bool]:
    """Delete a tag and detach it from every favorite."""
    tag = await _get_owned(db, tag_id, current_user, with_favorites=True)
    await db.delete(tag)
    await db.commit()
    return {"success": True}
