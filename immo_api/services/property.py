"""
Property service for managing property listings.
Handles CRUD operations, ownership validation and the public search.
"""

from typing import List, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from immo_api.repositories.property import PropertyRepository, PropertySearchFilters
from immo_api.models.property import Property, PropertyStatus
from immo_api.schemas.property import PropertyCreate, PropertyUpdate, PropertyListParams
from immo_api.services.authorization import get_manageable_property
from immo_api.services.image import ImageService
from immo_api.utils.auth import Actor
from immo_api.utils.exceptions import PropertyNotFoundError
from immo_api.utils.file_utils import FileStorage
import uuid
import logging

logger = logging.getLogger(__name__)


class PropertyService:
    """
    Property service for managing property listings.
    Every mutation resets the listing to ``pending`` until it is moderated again.
    """

    def __init__(self, db_session: AsyncSession, storage: FileStorage, image_service: Optional[ImageService] = None):
        self.db = db_session
        self.storage = storage
        self.property_repo = PropertyRepository(db_session)
        self.image_service = image_service or ImageService(db_session, storage)

    async def list_properties(self, params: PropertyListParams) -> Tuple[List[Property], int]:
        """
        Search publicly visible properties.

        Args:
            params: Filters and pagination

        Returns:
            Tuple of (page of active properties newest first, total count)
        """
        filters = PropertySearchFilters(
            property_type=params.type,
            min_price=params.min_price,
            max_price=params.max_price,
            min_area=params.min_area,
            max_area=params.max_area,
            location=params.location,
            status=PropertyStatus.ACTIVE
        )

        properties, total = await self.property_repo.search_properties(
            filters, skip=params.offset, limit=params.limit
        )
        logger.debug(f"Listed page {params.page} ({len(properties)} of {total}) of active properties")
        return properties, total

    async def get_property(self, property_id: uuid.UUID) -> Property:
        """
        Get property by ID regardless of its status.

        Raises:
            PropertyNotFoundError: If property doesn't exist
        """
        property_obj = await self.property_repo.get_property_with_images(property_id)
        if not property_obj:
            raise PropertyNotFoundError(str(property_id))
        return property_obj

    async def create_property(self, actor: Actor, property_data: PropertyCreate) -> Property:
        """
        Create a new property listing owned by the actor.

        Args:
            actor: Authenticated caller, becomes the owner
            property_data: Validated property fields

        Returns:
            Created property in ``pending`` status
        """
        create_data = property_data.model_dump()
        create_data["user_id"] = actor.id
        create_data["status"] = PropertyStatus.PENDING

        property_obj = await self.property_repo.create(create_data)

        logger.info(f"Property created by actor {actor.id}: {property_obj.title} (ID: {property_obj.id})")
        return property_obj

    async def update_property(
        self,
        property_id: uuid.UUID,
        actor: Actor,
        property_data: PropertyUpdate
    ) -> Property:
        """
        Replace the fields of a property and send it back to moderation.

        Args:
            property_id: UUID of the property to update
            actor: Authenticated caller
            property_data: Validated property fields

        Returns:
            Updated property in ``pending`` status

        Raises:
            PropertyNotFoundError: If property doesn't exist
            PropertyOwnershipError: If actor is neither owner nor admin
        """
        await get_manageable_property(self.property_repo, property_id, actor, "update this property")

        update_data = property_data.model_dump()
        update_data["status"] = PropertyStatus.PENDING

        property_obj = await self.property_repo.update(property_id, update_data)
        if not property_obj:
            raise PropertyNotFoundError(str(property_id))

        logger.info(f"Property {property_id} updated by actor {actor.id}")
        return property_obj

    async def delete_property(self, property_id: uuid.UUID, actor: Actor) -> int:
        """
        Delete a property together with its images.

        Image records and the property record are removed in one transaction;
        the stored files are removed best-effort after it commits.

        Returns:
            Number of images removed with the property

        Raises:
            PropertyNotFoundError: If property doesn't exist
            PropertyOwnershipError: If actor is neither owner nor admin
        """
        await get_manageable_property(self.property_repo, property_id, actor, "delete this property")

        try:
            urls = await self.image_service.delete_property_images(property_id, commit=False)
            await self.property_repo.delete(property_id, commit=False)
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to delete property {property_id}: {e}")
            raise

        self.image_service.remove_files(urls)
        self.storage.cleanup_empty_directory(ImageService.property_subdirectory(property_id))

        logger.info(f"Property {property_id} deleted with {len(urls)} images by actor {actor.id}")
        return len(urls)
