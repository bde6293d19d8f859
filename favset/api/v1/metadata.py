from typing import Annotated

from fastapi import APIRouter, Depends, Query

from favset.api.deps import get_current_user, get_metadata_service
from favset.models import User
from favset.services.metadata import MetadataService, UrlMetadata

router = APIRouter(prefix="/metadata", tags=["metadata"])


@router.get("", response_model=UrlMetadata)
async def preview_metadata(
    url: Annotated[str, Query(description="The URL to fetch metadata from")],
    current_user: Annotated[User, Depends(get_current_user)],
    metadata_service: Annotated[MetadataService, Depends(get_metadata_service)],
) -> UrlMetadata:
    """Preview the domain, title and description a favorite for ``url`` would get."""
    return await metadata_service.resolve(url)
