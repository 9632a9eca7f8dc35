"""
Repository for PropertyImage model operations.
Handles database queries and operations for property images.
"""

import uuid
import logging
from typing import List, Optional
from sqlalchemy import select, delete, func, and_
from sqlalchemy.ext.asyncio import AsyncSession

from immo_api.models.image import PropertyImage
from immo_api.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class ImageRepository(BaseRepository[PropertyImage]):
    """Repository for PropertyImage database operations."""

    def __init__(self, db: AsyncSession):
        super().__init__(PropertyImage, db)

    async def get_by_property_id(self, property_id: uuid.UUID) -> List[PropertyImage]:
        """
        Get all images for a specific property.

        Args:
            property_id: ID of the property

        Returns:
            List of property images ordered by display order then upload time
        """
        query = (
            select(PropertyImage)
            .where(PropertyImage.property_id == property_id)
            .order_by(PropertyImage.order.asc(), PropertyImage.created_at.asc())
        )

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_for_property(self, property_id: uuid.UUID, image_id: uuid.UUID) -> Optional[PropertyImage]:
        """
        Get an image only if it belongs to the given property.

        Args:
            property_id: ID of the owning property
            image_id: ID of the image

        Returns:
            Property image or None if absent or attached elsewhere
        """
        query = select(PropertyImage).where(
            and_(
                PropertyImage.id == image_id,
                PropertyImage.property_id == property_id
            )
        )

        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def count_by_property_id(self, property_id: uuid.UUID) -> int:
        """
        Count images for a specific property.

        Args:
            property_id: ID of the property

        Returns:
            Number of images for the property
        """
        query = select(func.count(PropertyImage.id)).where(
            PropertyImage.property_id == property_id
        )

        result = await self.db.execute(query)
        return result.scalar() or 0

    async def delete_by_property_id(self, property_id: uuid.UUID, commit: bool = True) -> int:
        """
        Delete all images for a property.

        Args:
            property_id: ID of the property
            commit: Whether to commit the transaction

        Returns:
            Number of deleted images
        """
        try:
            delete_query = delete(PropertyImage).where(
                PropertyImage.property_id == property_id
            )

            result = await self.db.execute(delete_query)
            await self._finish(commit)

            deleted_count = result.rowcount or 0
            logger.debug(f"Deleted {deleted_count} images of property {property_id}")
            return deleted_count
        except Exception as e:
            await self._abort(commit)
            logger.error(f"Failed to delete images of property {property_id}: {e}")
            raise
