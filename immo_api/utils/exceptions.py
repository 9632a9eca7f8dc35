"""
Custom exception classes for the Immo Listing API.
Provides structured error handling with appropriate HTTP status codes.
"""

from typing import Any, Dict, Optional, List
from fastapi import HTTPException, status


class APIException(HTTPException):
    """Base API exception class."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code


class ValidationError(APIException):
    """Malformed or out-of-range input, with optional field-level failures."""

    def __init__(
        self,
        detail: str,
        field_errors: Optional[List[Dict[str, Any]]] = None
    ):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code="VALIDATION_ERROR"
        )
        self.field_errors = field_errors or []


class NotFoundError(APIException):
    """Resource not found exception."""

    def __init__(self, resource: str, resource_id: Optional[str] = None):
        detail = f"{resource} not found"
        if resource_id:
            detail += f" with ID: {resource_id}"

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            error_code="NOT_FOUND"
        )


class UnauthorizedError(APIException):
    """Authentication required exception."""

    def __init__(self, detail: str = "Authentication required"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code="UNAUTHORIZED",
            headers={"WWW-Authenticate": "Bearer"}
        )


class ForbiddenError(APIException):
    """Access forbidden exception."""

    def __init__(self, detail: str = "Access forbidden"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            error_code="FORBIDDEN"
        )


class StorageError(APIException):
    """File write, read or delete failure on the image storage."""

    def __init__(self, detail: str = "Image storage operation failed"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            error_code="STORAGE_ERROR"
        )


class InternalServerError(APIException):
    """Internal server error exception."""

    def __init__(self, detail: str = "Internal server error"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            error_code="INTERNAL_SERVER_ERROR"
        )


class InvalidTokenError(UnauthorizedError):
    """Invalid JWT token exception."""

    def __init__(self, detail: str = "Invalid token"):
        super().__init__(detail)


class TokenExpiredError(UnauthorizedError):
    """JWT token expired exception."""

    def __init__(self, detail: str = "Token has expired"):
        super().__init__(detail)


class PropertyNotFoundError(NotFoundError):
    """Property not found exception."""

    def __init__(self, property_id: str):
        super().__init__("Property", property_id)


class ImageNotFoundError(NotFoundError):
    """Image not found, or not attached to the given property."""

    def __init__(self, image_id: str):
        super().__init__("Image", image_id)


class PropertyOwnershipError(ForbiddenError):
    """Actor is neither the listing owner nor an administrator."""

    def __init__(self, action: str):
        super().__init__(f"Not authorized to {action}")


class UnsupportedFileTypeError(ValidationError):
    """Unsupported file type exception."""

    def __init__(self, filename: str, file_type: str, supported_types: List[str]):
        supported = ", ".join(supported_types)
        super().__init__(
            f"Unsupported file type '{file_type}' for '{filename}'. Allowed formats: {supported}",
            field_errors=[{"field": "images", "message": f"Unsupported file type '{file_type}'", "input": filename}]
        )


class FileSizeExceededError(ValidationError):
    """File size exceeded exception."""

    def __init__(self, filename: str, size: int, max_size: int):
        super().__init__(
            f"File '{filename}' is {size} bytes, maximum allowed size is {max_size} bytes",
            field_errors=[{"field": "images", "message": "File too large", "input": filename}]
        )
