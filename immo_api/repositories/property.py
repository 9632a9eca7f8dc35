"""
Property repository for listing search and retrieval.
Builds the filtered, paginated listing query and loads properties with their images.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_, or_, func, desc
from sqlalchemy.orm import selectinload
from immo_api.repositories.base import BaseRepository
from immo_api.models.property import Property, PropertyType, PropertyStatus
from typing import Optional, List, Tuple
from decimal import Decimal
import uuid
import logging

logger = logging.getLogger(__name__)


def escape_like(value: str) -> str:
    """Make LIKE wildcards in user input match literally (escape character is a backslash)."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class PropertySearchFilters:
    """Data class for property search filters."""

    def __init__(
        self,
        property_type: Optional[PropertyType] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        min_area: Optional[Decimal] = None,
        max_area: Optional[Decimal] = None,
        location: Optional[str] = None,
        status: Optional[PropertyStatus] = PropertyStatus.ACTIVE
    ):
        self.property_type = property_type
        self.min_price = min_price
        self.max_price = max_price
        self.min_area = min_area
        self.max_area = max_area
        self.location = location
        self.status = status


class PropertyRepository(BaseRepository[Property]):
    """
    Repository for property listings.
    Search results are always restricted by the filters' status, which defaults to ``active``.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Property, db)

    async def get_property_with_images(self, property_id: uuid.UUID) -> Optional[Property]:
        """
        Get property with its images loaded.

        Args:
            property_id: UUID of the property

        Returns:
            Property with loaded images or None if not found
        """
        try:
            query = (
                select(Property)
                .options(selectinload(Property.images))
                .where(Property.id == property_id)
                .execution_options(populate_existing=True)
            )

            result = await self.db.execute(query)
            property_obj = result.scalar_one_or_none()

            if property_obj:
                logger.debug(f"Retrieved property with images: {property_id}")

            return property_obj
        except Exception as e:
            logger.error(f"Failed to get property with images {property_id}: {e}")
            raise

    async def search_properties(
        self,
        filters: PropertySearchFilters,
        skip: int = 0,
        limit: int = 20
    ) -> Tuple[List[Property], int]:
        """
        Search properties with filtering and pagination.

        Args:
            filters: PropertySearchFilters instance with search criteria
            skip: Number of records to skip for pagination
            limit: Maximum number of records to return

        Returns:
            Tuple of (properties list newest first, total count ignoring pagination)
        """
        try:
            query = select(Property).options(selectinload(Property.images))
            count_query = select(func.count(Property.id))

            conditions = self._build_filter_conditions(filters)
            if conditions:
                query = query.where(and_(*conditions))
                count_query = count_query.where(and_(*conditions))

            count_result = await self.db.execute(count_query)
            total_count = count_result.scalar() or 0

            query = (
                query
                .order_by(desc(Property.created_at), desc(Property.id))
                .offset(skip)
                .limit(limit)
                .execution_options(populate_existing=True)
            )

            result = await self.db.execute(query)
            properties = result.scalars().all()

            logger.debug(f"Property search returned {len(properties)} of {total_count} total results")
            return list(properties), total_count
        except Exception as e:
            logger.error(f"Failed to search properties: {e}")
            raise

    def _build_filter_conditions(self, filters: PropertySearchFilters) -> List:
        """
        Build SQLAlchemy filter conditions from search filters.

        Args:
            filters: PropertySearchFilters instance

        Returns:
            List of SQLAlchemy conditions
        """
        conditions = []

        if filters.status is not None:
            conditions.append(Property.status == filters.status)

        if filters.property_type is not None:
            conditions.append(Property.type == filters.property_type)

        # Price range filters (inclusive)
        if filters.min_price is not None:
            conditions.append(Property.price >= filters.min_price)
        if filters.max_price is not None:
            conditions.append(Property.price <= filters.max_price)

        # Area range filters (inclusive)
        if filters.min_area is not None:
            conditions.append(Property.area >= filters.min_area)
        if filters.max_area is not None:
            conditions.append(Property.area <= filters.max_area)

        # Location matches city, postal code or address (case-insensitive substring)
        if filters.location:
            pattern = f"%{escape_like(filters.location)}%"
            conditions.append(
                or_(
                    Property.city.ilike(pattern, escape="\\"),
                    Property.postal_code.ilike(pattern, escape="\\"),
                    Property.address.ilike(pattern, escape="\\")
                )
            )

        return conditions
