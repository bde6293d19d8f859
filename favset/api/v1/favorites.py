import logging
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from favset.api.deps import get_current_user, get_metadata_service, get_session
from favset.models import Favorite, User
from favset.schemas import DomainGroup, FavoriteCreate, FavoriteRead, FavoriteUpdate
from favset.services.favorites import filter_favorites, get_or_create_tags, group_by_domain
from favset.services.metadata import MetadataService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/favorites", tags=["favorites"])

DUPLICATE_URL_DETAIL = "This URL is already in your favorites"
CONFLICT_DETAIL = "This change conflicts with another update, please retry"


def conflict_detail(exc: IntegrityError) -> str:
    """Name the duplicate URL only when that constraint is the one that failed."""
    message = str(exc.orig)
    if "unique_user_url" in message or "favorites.user_id, favorites.url" in message:
        return DUPLICATE_URL_DETAIL
    return CONFLICT_DETAIL


async def _list_for_user(db: AsyncSession, user: User) -> list[Favorite]:
    result = await db.execute(
        select(Favorite)
        .where(Favorite.user_id == user.id)
        .order_by(Favorite.created_at.desc(), Favorite.id)
    )
    return list(result.scalars().all())


async def _get_owned(db: AsyncSession, favorite_id: UUID, user: User) -> Favorite:
    result = await db.execute(
        select(Favorite)
        .where(Favorite.id == favorite_id, Favorite.user_id == user.id)
        .execution_options(populate_existing=True)
    )
    favorite = result.scalar_one_or_none()
    if not favorite:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Favorite not found"
        )
    return favorite


@router.get("", response_model=list[FavoriteRead])
async def list_favorites(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_session)],
    q: Optional[str] = None,
    tag: Annotated[list[str], Query()] = [],
) -> list[FavoriteRead]:
    """List the current user's favorites, newest first, optionally filtered."""
    favorites = filter_favorites(await _list_for_user(db, current_user), q=q, tags=tag)
    return [FavoriteRead.model_validate(favorite) for favorite in favorites]


@router.get("/grouped", response_model=list[DomainGroup])
async def list_favorites_by_domain(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_session)],
    q: Optional[str] = None,
    tag: Annotated[list[str], Query()] = [],
) -> list[DomainGroup]:
    """List the current user's favorites grouped by domain, largest group first."""
    favorites = filter_favorites(await _list_for_user(db, current_user), q=q, tags=tag)
    return [
        DomainGroup(
            domain=domain,
            count=len(members),
            favorites=[FavoriteRead.model_validate(favorite) for favorite in members],
        )
        for domain, members in group_by_domain(favorites)
    ]


@router.post("", response_model=FavoriteRead, status_code=status.HTTP_201_CREATED)
async def create_favorite(
    payload: FavoriteCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_session)],
    metadata_service: Annotated[MetadataService, Depends(get_metadata_service)],
) -> FavoriteRead:
    """Save a URL for the current user, fetching its page metadata once."""
    url = str(payload.url)
    result = await db.execute(
        select(Favorite.id).where(
            Favorite.user_id == current_user.id, Favorite.url == url
        )
    )
    if result.first() is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_URL_DETAIL)

    metadata = await metadata_service.resolve(url)

    favorite = Favorite(
        user_id=current_user.id,
        url=url,
        domain=metadata.domain,
        title=metadata.title,
        description=metadata.description,
        rating=payload.rating,
        tags=await get_or_create_tags(db, current_user.id, payload.tags),
    )
    db.add(favorite)
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=conflict_detail(exc))

    logger.info("User %s saved favorite %s (%s)", current_user.id, favorite.id, metadata.domain)
    return FavoriteRead.model_validate(await _get_owned(db, favorite.id, current_user))


@router.get("/{favorite_id}", response_model=FavoriteRead)
async def get_favorite(
    favorite_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_session)],
) -> FavoriteRead:
    """Get a specific favorite by ID (must belong to current user)."""
    return FavoriteRead.model_validate(await _get_owned(db, favorite_id, current_user))


@router.patch("/{favorite_id}", response_model=FavoriteRead)
async def update_favorite(
    favorite_id: UUID,
    payload: FavoriteUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_session)],
) -> FavoriteRead:
    """Update a favorite's rating and/or replace its tags (must belong to current user)."""
    favorite = await _get_owned(db, favorite_id, current_user)

    # Only fields present in the request body are touched
    if "rating" in payload.model_fields_set:
        favorite.rating = payload.rating
    if payload.tags is not None:
        favorite.tags = await get_or_create_tags(db, current_user.id, payload.tags)

    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=conflict_detail(exc))
    return FavoriteRead.model_validate(await _get_owned(db, favorite_id, current_user))


@router.delete("/{favorite_id}")
async def delete_favorite(
    favorite_id: UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_session)],
) -> dict[str, bool]:
    favorite = await _get_owned(db, favorite_id, current_user)
    await db.delete(favorite)
    await db.commit()
    return {"success": True}
