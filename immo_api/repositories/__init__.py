"""
Repository layer for data access operations.
Wraps the async SQLAlchemy session with per-model query helpers.
"""

from immo_api.repositories.base import BaseRepository
from immo_api.repositories.property import PropertyRepository, PropertySearchFilters
from immo_api.repositories.image import ImageRepository

__all__ = [
    "BaseRepository",
    "PropertyRepository",
    "PropertySearchFilters",
    "ImageRepository"
]
