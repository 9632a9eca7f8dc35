"""
Pydantic schemas for property requests and responses.
Handles property create/update bodies, list filters and response shaping.
"""

from pydantic import ConfigDict, Field, model_validator
from typing import Optional, List
from decimal import Decimal
from immo_api.models.property import PropertyType
from immo_api.schemas.base import APIModel
from immo_api.schemas.image import ImageSummary


class PropertyBase(APIModel):
    """
    Base property schema with common fields.

    Unknown keys such as ``status`` or ``userId`` are dropped: the moderation
    status and the owner are always set by the server.
    """

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    type: PropertyType = Field(
        ...,
        description="Property classification",
        examples=["apartment"]
    )

    title: str = Field(
        ...,
        min_length=5,
        max_length=100,
        description="Property listing title",
        examples=["Bright two-room flat near the canal"]
    )

    description: str = Field(
        ...,
        min_length=10,
        description="Detailed property description",
        examples=["Renovated flat with balcony, close to shops and transport."]
    )

    price: Decimal = Field(
        ...,
        ge=0,
        le=Decimal("99999999.99"),
        description="Listing price",
        examples=[350000.00]
    )

    area: Decimal = Field(
        ...,
        ge=0,
        le=Decimal("99999999.99"),
        description="Surface area",
        examples=[54.5]
    )

    rooms: int = Field(..., ge=0, description="Number of rooms", examples=[2])

    bathrooms: int = Field(..., ge=0, description="Number of bathrooms", examples=[1])

    address: str = Field(
        ...,
        max_length=255,
        description="Street address",
        examples=["12 Rue de la Paix"]
    )

    city: str = Field(..., max_length=255, examples=["Paris"])

    postal_code: str = Field(..., max_length=20, examples=["75002"])

    latitude: Decimal = Field(
        ...,
        ge=-90,
        le=90,
        description="Latitude coordinate",
        examples=[48.8698]
    )

    longitude: Decimal = Field(
        ...,
        ge=-180,
        le=180,
        description="Longitude coordinate",
        examples=[2.3311]
    )

    features: List[str] = Field(
        default_factory=list,
        description="Ordered list of free-form tags; duplicates are kept",
        examples=[["balcony", "elevator"]]
    )


class PropertyCreate(PropertyBase):
    """Schema for creating a new property."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "type": "apartment",
                "title": "Bright two-room flat near the canal",
                "description": "Renovated flat with balcony, close to shops and transport.",
                "price": 350000.00,
                "area": 54.5,
                "rooms": 2,
                "bathrooms": 1,
                "address": "12 Rue de la Paix",
                "city": "Paris",
                "postalCode": "75002",
                "latitude": 48.8698,
                "longitude": 2.3311,
                "features": ["balcony", "elevator"]
            }
        }
    )


class PropertyUpdate(PropertyBase):
    """
    Schema for updating an existing property.
    Updates replace the whole listing, so the same fields are required as on create.
    """


# Keeps (page - 1) * limit well inside a signed 64-bit OFFSET
MAX_PAGE = 1_000_000


class PropertyListParams(APIModel):
    """Filters and pagination for the public listing."""

    type: Optional[PropertyType] = Field(None, description="Exact property type")

    min_price: Optional[Decimal] = Field(None, ge=0, description="Minimum price (inclusive)")

    max_price: Optional[Decimal] = Field(None, ge=0, description="Maximum price (inclusive)")

    min_area: Optional[Decimal] = Field(None, ge=0, description="Minimum area (inclusive)")

    max_area: Optional[Decimal] = Field(None, ge=0, description="Maximum area (inclusive)")

    location: Optional[str] = Field(
        None,
        max_length=255,
        description="Case-insensitive match on city, postal code or address"
    )

    page: int = Field(1, ge=1, le=MAX_PAGE, description="Page number (starts from 1)")

    limit: int = Field(20, ge=1, le=100, description="Number of properties per page (max 100)")

    @model_validator(mode='after')
    def validate_ranges(self):
        """Validate price and area ranges."""
        if self.min_price is not None and self.max_price is not None:
            if self.min_price > self.max_price:
                raise ValueError("Minimum price cannot be greater than maximum price")

        if self.min_area is not None and self.max_area is not None:
            if self.min_area > self.max_area:
                raise ValueError("Minimum area cannot be greater than maximum area")

        return self

    @property
    def offset(self) -> int:
        """Rows skipped before the requested page."""
        return (self.page - 1) * self.limit


class PropertyResponse(APIModel):
    """Property with its image summaries."""

    id: str = Field(..., examples=["123e4567-e89b-12d3-a456-426614174000"])
    user_id: str = Field(..., description="ID of the user who created this listing")
    type: PropertyType
    title: str
    description: str
    price: float
    area: float
    rooms: int
    bathrooms: int
    address: str
    city: str
    postal_code: str
    latitude: float
    longitude: float
    features: List[str]
    status: str = Field(..., description="Moderation status", examples=["pending"])
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    images: List[ImageSummary] = Field(default_factory=list)


class PropertyListResponse(APIModel):
    """Schema for paginated property list response."""

    total: int = Field(..., description="Number of matching properties ignoring pagination", examples=[42])
    page: int = Field(..., examples=[1])
    limit: int = Field(..., examples=[20])
    properties: List[PropertyResponse]


class PropertyMutationResponse(APIModel):
    """Result of a create or update."""

    id: str
    status: str = Field(..., examples=["pending"])
    message: str = Field(..., examples=["Property created and pending validation"])


class MessageResponse(APIModel):
    """Plain confirmation message."""

    message: str
