"""
PropertyImage model for images attached to a listing.
Stores the public URL of the stored file plus upload metadata.
"""

from sqlalchemy import String, Integer, ForeignKey, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from immo_api.database import Base
import uuid
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from immo_api.models.property import Property


class PropertyImage(Base):
    """
    Image record belonging to exactly one property.
    Removed together with its property (database cascade and service cascade).
    """

    __tablename__ = "property_images"

    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="ID of the property this image belongs to"
    )

    url: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
        comment="Relative public path of the stored file"
    )

    # Position inside the upload batch; not re-compacted after deletions
    order: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Display order"
    )

    filename: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        comment="Original filename of the uploaded image"
    )

    file_size: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    mime_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    width: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    height: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    property_rel: Mapped["Property"] = relationship(
        "Property",
        back_populates="images"
    )

    def __repr__(self) -> str:
        """String representation of the property image."""
        return f"<PropertyImage(id={self.id}, property_id={self.property_id}, url={self.url})>"

    def to_summary(self) -> dict:
        """Minimal representation embedded in property responses."""
        return {"id": str(self.id), "url": self.url}

    def to_dict(self) -> dict:
        """Full representation of the image record."""
        return {
            "id": str(self.id),
            "propertyId": str(self.property_id),
            "url": self.url,
            "order": self.order,
            "filename": self.filename,
            "fileSize": self.file_size,
            "mimeType": self.mime_type,
            "width": self.width,
            "height": self.height,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


property_images_order_index = Index(
    'idx_property_images_property_order',
    PropertyImage.property_id,
    PropertyImage.order.asc()
)
