"""
Pydantic schemas for property image responses.
"""

from pydantic import Field
from typing import List
from immo_api.schemas.base import APIModel


class ImageSummary(APIModel):
    """Minimal image representation embedded in property responses."""

    id: str = Field(
        ...,
        description="Image unique identifier",
        examples=["123e4567-e89b-12d3-a456-426614174002"]
    )

    url: str = Field(
        ...,
        description="Relative public path of the stored file",
        examples=["/uploads/properties/123e4567-e89b-12d3-a456-426614174000/1700000000000_a1b2c3d4e5f6_front.jpg"]
    )


class ImageUploadResponse(APIModel):
    """Response of a successful batch upload."""

    message: str = Field(..., examples=["Images uploaded successfully"])

    images: List[ImageSummary] = Field(
        ...,
        description="Created images in upload order"
    )
