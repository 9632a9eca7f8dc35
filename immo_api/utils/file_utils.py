"""
File upload utilities for image validation and storage.
Provides the upload checks and the local-directory storage adapter used by the image service.
"""

import io
import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional
from PIL import Image, UnidentifiedImageError
import aiofiles
import logging

from immo_api.config import get_settings
from immo_api.utils.exceptions import (
    StorageError,
    UnsupportedFileTypeError,
    FileSizeExceededError,
    ValidationError
)
from immo_api.utils.validators import sanitize_filename

logger = logging.getLogger(__name__)
settings = get_settings()


@dataclass
class ImageInfo:
    """Metadata gathered while validating an upload."""

    filename: str
    mime_type: str
    file_size: int
    width: Optional[int] = None
    height: Optional[int] = None


class FileValidator:
    """Validation of uploaded image files."""

    # Supported image formats and their extensions
    SUPPORTED_FORMATS: Dict[str, List[str]] = {
        'image/jpeg': ['.jpg', '.jpeg'],
        'image/jpg': ['.jpg', '.jpeg'],
        'image/png': ['.png'],
        'image/webp': ['.webp']
    }

    # Pillow format names per MIME type
    PIL_FORMATS: Dict[str, str] = {
        'image/jpeg': 'jpeg',
        'image/jpg': 'jpeg',
        'image/png': 'png',
        'image/webp': 'webp'
    }

    def __init__(
        self,
        max_file_size: Optional[int] = None,
        allowed_types: Optional[List[str]] = None,
        verify_content: bool = True
    ):
        self.max_file_size = max_file_size or settings.max_file_size
        self.allowed_types = [t for t in (allowed_types or settings.allowed_file_types) if t in self.SUPPORTED_FORMATS]
        self.verify_content = verify_content

    @property
    def allowed_extensions(self) -> List[str]:
        """Extensions accepted for the configured MIME types."""
        extensions = []
        for mime_type in self.allowed_types:
            for extension in self.SUPPORTED_FORMATS[mime_type]:
                if extension not in extensions:
                    extensions.append(extension)
        return extensions

    def validate_file_extension(self, filename: str) -> str:
        """
        Validate file extension.

        Args:
            filename: Name of the file

        Returns:
            Lowercase file extension

        Raises:
            ValidationError: If extension is missing or not supported
        """
        if not filename:
            raise ValidationError("Filename is required")

        extension = Path(filename).suffix.lower()
        if extension not in self.allowed_extensions:
            raise UnsupportedFileTypeError(filename, extension or "<none>", self.allowed_extensions)

        return extension

    def validate_mime_type(self, filename: str, mime_type: Optional[str]) -> str:
        """
        Validate the declared MIME type.

        Raises:
            ValidationError: If MIME type is not supported
        """
        mime_type = (mime_type or "").split(";")[0].strip().lower()
        if mime_type not in self.allowed_types:
            raise UnsupportedFileTypeError(filename, mime_type or "<none>", self.allowed_types)
        return mime_type

    def validate_file_size(self, filename: str, file_size: int) -> int:
        """
        Validate file size.

        Raises:
            ValidationError: If file is empty or exceeds the limit
        """
        if file_size <= 0:
            raise ValidationError(
                f"File '{filename}' is empty",
                field_errors=[{"field": "images", "message": "Empty file", "input": filename}]
            )

        if file_size > self.max_file_size:
            raise FileSizeExceededError(filename, file_size, self.max_file_size)

        return file_size

    def validate(self, filename: str, mime_type: Optional[str], content: bytes) -> ImageInfo:
        """
        Run every check on one uploaded file.

        Args:
            filename: Original filename as sent by the client
            mime_type: Declared content type
            content: Raw file bytes

        Returns:
            ImageInfo for the accepted file

        Raises:
            ValidationError: If any check fails
        """
        self.validate_file_extension(filename)
        mime_type = self.validate_mime_type(filename, mime_type)
        file_size = self.validate_file_size(filename, len(content))

        info = ImageInfo(filename=filename, mime_type=mime_type, file_size=file_size)
        if not self.verify_content:
            return info

        try:
            with Image.open(io.BytesIO(content)) as img:
                pil_format = (img.format or "").lower()
                info.width, info.height = img.size
        except (UnidentifiedImageError, OSError) as e:
            raise ValidationError(
                f"Invalid image file '{filename}': {e}",
                field_errors=[{"field": "images", "message": "File is not a readable image", "input": filename}]
            )

        if pil_format != self.PIL_FORMATS[mime_type]:
            raise ValidationError(
                f"Image format '{pil_format}' of '{filename}' doesn't match MIME type '{mime_type}'",
                field_errors=[{"field": "images", "message": "Content does not match declared type", "input": filename}]
            )

        return info


class FileStorage:
    """Local-directory storage for uploaded images."""

    def __init__(self, base_dir: Optional[Path] = None, url_prefix: Optional[str] = None):
        self.base_dir = Path(base_dir or settings.upload_dir)
        self.url_prefix = "/" + (url_prefix or settings.upload_url_prefix).strip("/")

    def generate_unique_filename(self, original_filename: str) -> str:
        """
        Derive the stored filename.

        Format is ``<millisecond-timestamp>_<random-token>_<sanitized-basename>``;
        the random token keeps same-millisecond uploads of one name apart.
        """
        timestamp = int(time.time() * 1000)
        token = uuid.uuid4().hex[:12]
        return f"{timestamp}_{token}_{sanitize_filename(original_filename)}"

    def to_url(self, path: Path) -> str:
        """Public relative URL for a stored file."""
        return f"{self.url_prefix}/{path.relative_to(self.base_dir).as_posix()}"

    def resolve(self, relative_path: str) -> Path:
        """
        Map a public relative URL back to a path under the storage root.

        Raises:
            StorageError: If the URL does not point inside the storage root
        """
        relative = relative_path.lstrip("/")
        prefix = self.url_prefix.lstrip("/")
        if prefix and (relative == prefix or relative.startswith(prefix + "/")):
            relative = relative[len(prefix) + 1:]

        root = self.base_dir.resolve()
        candidate = (root / relative).resolve()
        if candidate == root or root not in candidate.parents:
            raise StorageError(f"Refusing to access '{relative_path}' outside the upload directory")
        return candidate

    async def store(self, content: bytes, original_filename: str, subdirectory: str = "") -> str:
        """
        Write a file under the storage root.

        Args:
            content: File bytes
            original_filename: Client-supplied filename
            subdirectory: Directory below the root, created if absent

        Returns:
            Relative public path of the stored file

        Raises:
            StorageError: If the file cannot be written
        """
        directory = self.base_dir / subdirectory if subdirectory else self.base_dir
        file_path = directory / self.generate_unique_filename(original_filename)

        try:
            directory.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(file_path, 'wb') as f:
                await f.write(content)
        except OSError as e:
            logger.error(f"Failed to write {file_path}: {e}")
            if file_path.exists():
                file_path.unlink()
            raise StorageError("Failed to store uploaded file")

        logger.debug(f"Stored {len(content)} bytes at {file_path}")
        return self.to_url(file_path)

    def remove(self, relative_path: str) -> bool:
        """
        Delete a stored file.

        Returns:
            True if a file was deleted, False if it was already absent

        Raises:
            StorageError: If the file exists but cannot be deleted
        """
        file_path = self.resolve(relative_path)
        try:
            file_path.unlink()
        except FileNotFoundError:
            logger.debug(f"File already absent: {file_path}")
            return False
        except OSError as e:
            logger.error(f"Failed to delete {file_path}: {e}")
            raise StorageError("Failed to delete stored file")

        logger.debug(f"Deleted {file_path}")
        return True

    def cleanup_empty_directory(self, subdirectory: str) -> bool:
        """
        Remove a subdirectory if it is empty.

        Returns:
            True if the directory was removed
        """
        directory = self.base_dir / subdirectory
        try:
            if directory.is_dir() and not any(directory.iterdir()):
                directory.rmdir()
                return True
        except OSError as e:
            logger.warning(f"Could not remove directory {directory}: {e}")
        return False
