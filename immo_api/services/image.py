"""
Image service for handling property image uploads, storage, and deletion.
Keeps database records and stored files consistent around every mutation.
"""

import logging
import uuid
from typing import Iterable, List, Optional, Tuple

from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from immo_api.config import get_settings
from immo_api.models.image import PropertyImage
from immo_api.repositories.image import ImageRepository
from immo_api.repositories.property import PropertyRepository
from immo_api.services.authorization import get_manageable_property
from immo_api.utils.auth import Actor
from immo_api.utils.exceptions import (
    ImageNotFoundError,
    StorageError,
    ValidationError,
    FileSizeExceededError
)
from immo_api.utils.file_utils import FileStorage, FileValidator, ImageInfo

logger = logging.getLogger(__name__)
settings = get_settings()


class ImageService:
    """Service for managing property image uploads and storage."""

    def __init__(
        self,
        db_session: AsyncSession,
        storage: FileStorage,
        validator: Optional[FileValidator] = None,
        max_images_per_upload: Optional[int] = None
    ):
        self.db = db_session
        self.storage = storage
        self.validator = validator or FileValidator()
        self.max_images_per_upload = max_images_per_upload or settings.max_images_per_upload
        self.image_repo = ImageRepository(db_session)
        self.property_repo = PropertyRepository(db_session)

    @staticmethod
    def property_subdirectory(property_id: uuid.UUID) -> str:
        """Storage subdirectory holding one property's files."""
        return f"properties/{property_id}"

    async def _read_and_validate(self, files: List[UploadFile]) -> List[Tuple[ImageInfo, bytes]]:
        """
        Validate a whole batch before anything is stored.

        Raises:
            ValidationError: On the first invalid file
        """
        if not files:
            raise ValidationError(
                "No images uploaded",
                field_errors=[{"field": "images", "message": "At least one image is required"}]
            )

        if len(files) > self.max_images_per_upload:
            raise ValidationError(
                f"Too many files: at most {self.max_images_per_upload} images per upload",
                field_errors=[{"field": "images", "message": f"{len(files)} files sent"}]
            )

        accepted = []
        for file in files:
            filename = file.filename or ""
            # Reject oversized parts without reading them when the size is known
            if file.size is not None and file.size > self.validator.max_file_size:
                raise FileSizeExceededError(filename, file.size, self.validator.max_file_size)

            await file.seek(0)
            content = await file.read()
            info = self.validator.validate(filename, file.content_type, content)
            accepted.append((info, content))

        return accepted

    async def upload_images(
        self,
        property_id: uuid.UUID,
        actor: Actor,
        files: List[UploadFile]
    ) -> List[PropertyImage]:
        """
        Attach a batch of images to a property.

        The batch is all-or-nothing: every file is validated first, the
        records are created in a single transaction, and on any failure the
        transaction is rolled back and the files already written are removed.

        Args:
            property_id: ID of the property
            actor: Authenticated caller
            files: Uploaded files, 1 to ``max_images_per_upload``

        Returns:
            Created images with ``order`` equal to their batch index

        Raises:
            PropertyNotFoundError: If property doesn't exist
            PropertyOwnershipError: If actor may not manage the property
            ValidationError: If any file is invalid or the batch size is wrong
            StorageError: If a file cannot be written
        """
        await get_manageable_property(self.property_repo, property_id, actor, "upload images to this property")

        accepted = await self._read_and_validate(files)
        subdirectory = self.property_subdirectory(property_id)

        stored_urls: List[str] = []
        try:
            records = []
            for index, (info, content) in enumerate(accepted):
                url = await self.storage.store(content, info.filename, subdirectory)
                stored_urls.append(url)
                records.append({
                    "property_id": property_id,
                    "url": url,
                    "order": index,
                    "filename": info.filename,
                    "file_size": info.file_size,
                    "mime_type": info.mime_type,
                    "width": info.width,
                    "height": info.height
                })

            images = await self.image_repo.bulk_create(records, commit=False)
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            removed = self.remove_files(stored_urls)
            logger.error(f"Image upload for property {property_id} failed, removed {removed} stored files: {e}")
            raise

        logger.info(f"Uploaded {len(images)} images to property {property_id} by actor {actor.id}")
        return images

    async def get_property_images(self, property_id: uuid.UUID) -> List[PropertyImage]:
        """Images of a property in display order."""
        return await self.image_repo.get_by_property_id(property_id)

    async def delete_image(self, property_id: uuid.UUID, image_id: uuid.UUID, actor: Actor) -> None:
        """
        Delete one image of a property.

        The record is deleted and committed first; the backing file is then
        removed best-effort, so a missing or undeletable file never blocks.
        The outcome matches removing the file first: the record is always
        gone, and a file left behind is logged and never referenced again.

        Raises:
            PropertyNotFoundError: If property doesn't exist
            PropertyOwnershipError: If actor may not manage the property
            ImageNotFoundError: If the image doesn't belong to the property
        """
        await get_manageable_property(self.property_repo, property_id, actor, "delete images of this property")

        image = await self.image_repo.get_for_property(property_id, image_id)
        if not image:
            raise ImageNotFoundError(str(image_id))

        url = image.url
        await self.image_repo.delete(image.id)
        self.remove_files([url])

        logger.info(f"Deleted image {image_id} of property {property_id} by actor {actor.id}")

    async def delete_property_images(self, property_id: uuid.UUID, commit: bool = True) -> List[str]:
        """
        Delete every image record of a property.

        With ``commit=False`` the deletion joins the caller's transaction and
        the returned URLs must be passed to ``remove_files`` once it commits.

        Returns:
            URLs of the deleted images
        """
        images = await self.image_repo.get_by_property_id(property_id)
        urls = [image.url for image in images]

        await self.image_repo.delete_by_property_id(property_id, commit=commit)

        if commit:
            self.remove_files(urls)

        return urls

    def remove_files(self, urls: Iterable[str]) -> int:
        """
        Remove stored files best-effort.

        Returns:
            Number of files actually deleted
        """
        removed = 0
        for url in urls:
            try:
                if self.storage.remove(url):
                    removed += 1
            except StorageError as e:
                logger.warning(f"Could not remove stored file {url}: {e.detail}")
        return removed
