from fastapi import APIRouter

from favset.api.v1 import auth, favorites, metadata, tags, users

api_router = APIRouter(prefix="/api")
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(favorites.router)
api_router.include_router(tags.router)
api_router.include_router(metadata.router)

__all__ = ["api_router"]
