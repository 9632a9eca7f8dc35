"""
Service layer for business logic.
"""

from immo_api.services.image import ImageService
from immo_api.services.property import PropertyService
from immo_api.services.error_handler import ErrorHandlerService

__all__ = [
    "ImageService",
    "PropertyService",
    "ErrorHandlerService"
]
