"""
Utility modules for the Immo Listing API.
"""

from .auth import (
    Actor,
    ActorRole,
    create_access_token,
    decode_access_token
)

from .exceptions import (
    APIException,
    ValidationError,
    NotFoundError,
    UnauthorizedError,
    ForbiddenError,
    StorageError,
    InternalServerError,
    TokenExpiredError,
    InvalidTokenError,
    PropertyNotFoundError,
    ImageNotFoundError,
    PropertyOwnershipError
)

# Dependencies are imported directly where needed to avoid circular imports

__all__ = [
    # Auth utilities
    "Actor",
    "ActorRole",
    "create_access_token",
    "decode_access_token",

    # Exceptions
    "APIException",
    "ValidationError",
    "NotFoundError",
    "UnauthorizedError",
    "ForbiddenError",
    "StorageError",
    "InternalServerError",
    "TokenExpiredError",
    "InvalidTokenError",
    "PropertyNotFoundError",
    "ImageNotFoundError",
    "PropertyOwnershipError",
]
