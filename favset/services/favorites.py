"""Query helpers for favorites: tag resolution, search, tag filters and domain grouping."""

from collections.abc import Iterable, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from favset.models import Favorite, Tag


def normalize_tag_names(names: Iterable[str]) -> list[str]:
    """Trim names, drop blanks and duplicates while keeping the first-seen order."""
    seen: set[str] = set()
    cleaned: list[str] = []
    for name in names:
        name = name.strip()
        if name and name not in seen:
            seen.add(name)
            cleaned.append(name)
    return cleaned


async def get_or_create_tags(
    db: AsyncSession, user_id: UUID, names: Iterable[str]
) -> list[Tag]:
    """Return the user's tags for ``names``, adding the missing ones to the session."""
    wanted = normalize_tag_names(names)
    if not wanted:
        return []

    result = await db.execute(
        select(Tag).where(Tag.user_id == user_id, Tag.name.in_(wanted))
    )
    by_name = {tag.name: tag for tag in result.scalars()}

    tags = []
    for name in wanted:
        tag = by_name.get(name)
        if tag is None:
            tag = Tag(user_id=user_id, name=name, color=None)
            db.add(tag)
            by_name[name] = tag
        tags.append(tag)
    return tags


def matches_search(favorite: Favorite, query: str) -> bool:
    needle = query.strip().lower()
    if not needle:
        return True
    haystacks = [favorite.title or "", favorite.domain, favorite.url]
    haystacks.extend(tag.name for tag in favorite.tags)
    return any(needle in value.lower() for value in haystacks)


def has_all_tags(favorite: Favorite, tag_names: Sequence[str]) -> bool:
    names = {tag.name for tag in favorite.tags}
    return all(name in names for name in tag_names)


def filter_favorites(
    favorites: Iterable[Favorite],
    q: str | None = None,
    tags: Sequence[str] | None = None,
) -> list[Favorite]:
    """Keep favorites matching the search text and carrying every requested tag."""
    tag_names = normalize_tag_names(tags or [])
    return [
        favorite
        for favorite in favorites
        if (not q or matches_search(favorite, q)) and has_all_tags(favorite, tag_names)
    ]


def group_by_domain(favorites: Iterable[Favorite]) -> list[tuple[str, list[Favorite]]]:
    """Group favorites by domain, largest group first, ties by domain name.

    Favorites keep their incoming order within a group.
    """
    groups: dict[str, list[Favorite]] = {}
    for favorite in favorites:
        groups.setdefault(favorite.domain, []).append(favorite)
    return sorted(groups.items(), key=lambda item: (-len(item[1]), item[0]))
