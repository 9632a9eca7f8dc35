"""
Pydantic schemas for request and response validation.
"""

from immo_api.schemas.base import APIModel
from immo_api.schemas.image import (
    ImageSummary,
    ImageUploadResponse
)
from immo_api.schemas.property import (
    PropertyCreate,
    PropertyUpdate,
    PropertyListParams,
    PropertyResponse,
    PropertyListResponse,
    PropertyMutationResponse,
    MessageResponse
)

__all__ = [
    "APIModel",
    "ImageSummary",
    "ImageUploadResponse",
    "PropertyCreate",
    "PropertyUpdate",
    "PropertyListParams",
    "PropertyResponse",
    "PropertyListResponse",
    "PropertyMutationResponse",
    "MessageResponse",
]
