"""
Property model for real-estate listings.
Handles listing data with location, pricing, moderation status and images.
"""

from sqlalchemy import String, Text, Integer, Numeric, JSON, Uuid, Enum as SQLEnum, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import JSONB
from immo_api.database import Base
from decimal import Decimal
import enum
import uuid
from typing import List, TYPE_CHECKING

if TYPE_CHECKING:
    from immo_api.models.image import PropertyImage


class PropertyType(str, enum.Enum):
    """Kind of real-estate unit being advertised."""
    APARTMENT = "apartment"
    HOUSE = "house"
    LAND = "land"
    COMMERCIAL = "commercial"
    OTHER = "other"


class PropertyStatus(str, enum.Enum):
    """Moderation status controlling public visibility."""
    PENDING = "pending"
    ACTIVE = "active"
    SOLD = "sold"
    ARCHIVED = "archived"


class Property(Base):
    """
    Property listing owned by the user who created it.
    Only listings in the ``active`` status are publicly listable.
    """

    __tablename__ = "properties"

    # Owner reference, not checked against a user table
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        nullable=False,
        index=True,
        comment="ID of the user who created this listing"
    )

    type: Mapped[PropertyType] = mapped_column(
        SQLEnum(PropertyType, name="property_type", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        index=True,
        comment="Property classification"
    )

    title: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        comment="Listing title"
    )

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Detailed listing description"
    )

    # Pricing and specifications
    price: Mapped[Decimal] = mapped_column(
        Numeric(precision=10, scale=2),
        nullable=False,
        index=True,
        comment="Listing price"
    )

    area: Mapped[Decimal] = mapped_column(
        Numeric(precision=10, scale=2),
        nullable=False,
        index=True,
        comment="Surface area"
    )

    rooms: Mapped[int] = mapped_column(Integer, nullable=False)

    bathrooms: Mapped[int] = mapped_column(Integer, nullable=False)

    # Location information
    address: Mapped[str] = mapped_column(String(255), nullable=False)

    city: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    postal_code: Mapped[str] = mapped_column(String(20), nullable=False, index=True)

    latitude: Mapped[Decimal] = mapped_column(
        Numeric(precision=10, scale=8),
        nullable=False,
        comment="Latitude coordinate"
    )

    longitude: Mapped[Decimal] = mapped_column(
        Numeric(precision=11, scale=8),
        nullable=False,
        comment="Longitude coordinate"
    )

    features: Mapped[List[str]] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"),
        nullable=False,
        default=list,
        comment="Ordered list of free-form tags"
    )

    status: Mapped[PropertyStatus] = mapped_column(
        SQLEnum(PropertyStatus, name="property_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=PropertyStatus.PENDING,
        index=True,
        comment="Moderation status"
    )

    images: Mapped[List["PropertyImage"]] = relationship(
        "PropertyImage",
        back_populates="property_rel",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by="PropertyImage.order.asc()"
    )

    def __repr__(self) -> str:
        """String representation of the property."""
        return f"<Property(id={self.id}, title={self.title[:30]}, status={self.status})>"

    @property
    def is_public(self) -> bool:
        """Whether the listing may appear in public search results."""
        return self.status == PropertyStatus.ACTIVE

    def to_dict(self, include_images: bool = True) -> dict:
        """
        Convert property to its public JSON representation.

        Args:
            include_images: Whether to include the ``images`` summary list

        Returns:
            Dictionary representation of property
        """
        result = {
            "id": str(self.id),
            "userId": str(self.user_id),
            "type": self.type.value,
            "title": self.title,
            "description": self.description,
            "price": float(self.price),
            "area": float(self.area),
            "rooms": self.rooms,
            "bathrooms": self.bathrooms,
            "address": self.address,
            "city": self.city,
            "postalCode": self.postal_code,
            "latitude": float(self.latitude),
            "longitude": float(self.longitude),
            "features": list(self.features or []),
            "status": self.status.value,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }

        if include_images:
            result["images"] = [image.to_summary() for image in self.images]

        return result


# Composite index for the public listing query
status_created_index = Index(
    'idx_properties_status_created',
    Property.status,
    Property.created_at.desc()
)

# Composite index for type filtering on active listings
type_status_index = Index(
    'idx_properties_type_status',
    Property.type,
    Property.status
)
