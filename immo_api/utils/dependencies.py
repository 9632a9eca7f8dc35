"""
FastAPI dependency injection utilities for authentication, storage and services.
Provides reusable dependencies for route protection and actor extraction.
"""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from immo_api.config import get_settings
from immo_api.database import get_db
from immo_api.services.image import ImageService
from immo_api.services.property import PropertyService
from immo_api.utils.auth import Actor, decode_access_token
from immo_api.utils.exceptions import UnauthorizedError
from immo_api.utils.file_utils import FileStorage


# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


def get_file_storage() -> FileStorage:
    """
    Get the image storage adapter for the configured upload directory.

    Returns:
        FileStorage instance
    """
    settings = get_settings()
    return FileStorage(settings.upload_dir, settings.upload_url_prefix)


async def get_image_service(
    db: AsyncSession = Depends(get_db),
    storage: FileStorage = Depends(get_file_storage)
) -> ImageService:
    """
    Get image service instance.

    Args:
        db: Database session
        storage: Image storage adapter

    Returns:
        ImageService instance
    """
    return ImageService(db, storage)


async def get_property_service(
    db: AsyncSession = Depends(get_db),
    image_service: ImageService = Depends(get_image_service)
) -> PropertyService:
    """
    Get property service instance sharing the request's session.

    Args:
        db: Database session
        image_service: Image service bound to the same session

    Returns:
        PropertyService instance
    """
    return PropertyService(db, image_service.storage, image_service)


async def get_current_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Actor:
    """
    Get the authenticated actor from the bearer token.

    Args:
        credentials: HTTP Bearer credentials

    Returns:
        Actor with the token's user id and role

    Raises:
        UnauthorizedError: If no token provided
        InvalidTokenError: If token is invalid
        TokenExpiredError: If token is expired
    """
    if not credentials:
        raise UnauthorizedError("Authentication token required")

    return decode_access_token(credentials.credentials)
