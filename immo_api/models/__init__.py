"""
Database models for the Immo Listing API.
Includes Property and PropertyImage models with their relationship.
"""

from immo_api.models.property import Property, PropertyType, PropertyStatus
from immo_api.models.image import PropertyImage

__all__ = [
    "Property",
    "PropertyType",
    "PropertyStatus",
    "PropertyImage",
]
