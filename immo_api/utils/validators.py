"""
Validation helpers shared by the HTTP layer.
"""

import re
import uuid
from typing import Any

from immo_api.utils.exceptions import NotFoundError


FILENAME_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def parse_resource_id(value: Any, resource: str) -> uuid.UUID:
    """
    Parse a path identifier.

    An identifier that is not a UUID cannot resolve to any row, so it is
    reported as a missing resource rather than a malformed request.

    Raises:
        NotFoundError: If the value is not a valid UUID
    """
    try:
        return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value).strip())
    except (ValueError, AttributeError):
        raise NotFoundError(resource, str(value))


def sanitize_filename(filename: str, default: str = "image") -> str:
    """
    Reduce an uploaded filename to a safe basename.

    Directory components are dropped and every run of characters outside
    ``[A-Za-z0-9._-]`` becomes a single underscore.
    """
    basename = re.split(r"[\\/]", filename or "")[-1]
    cleaned = FILENAME_UNSAFE_CHARS.sub("_", basename).strip("._")
    return cleaned[:100] or default
