"""
Property listing API endpoints for CRUD operations, search and image management.
Read endpoints are public; mutations require a bearer token.
"""

from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile, status

from immo_api.config import get_settings
from immo_api.models.property import PropertyType
from immo_api.schemas.image import ImageSummary, ImageUploadResponse
from immo_api.schemas.property import (
    MAX_PAGE,
    MessageResponse,
    PropertyCreate,
    PropertyListParams,
    PropertyListResponse,
    PropertyMutationResponse,
    PropertyResponse,
    PropertyUpdate
)
from immo_api.services.error_handler import ERROR_RESPONSES
from immo_api.services.image import ImageService
from immo_api.services.property import PropertyService
from immo_api.utils.auth import Actor
from immo_api.utils.dependencies import (
    get_current_actor,
    get_image_service,
    get_property_service
)
from immo_api.utils.validators import parse_resource_id

settings = get_settings()

router = APIRouter(prefix="/properties", tags=["Properties"])

CREATED_MESSAGE = "Your listing has been created and is pending validation."
UPDATED_MESSAGE = "Your listing has been updated and is pending validation."


def _responses(*codes: int) -> dict:
    return {code: ERROR_RESPONSES[code] for code in codes}


@router.get(
    "",
    response_model=PropertyListResponse,
    summary="List active properties",
    description="Paginated list of active properties, newest first, with optional filters",
    responses=_responses(400, 500)
)
async def list_properties(
    type: Optional[PropertyType] = Query(None, description="Exact property type"),
    min_price: Optional[Decimal] = Query(None, alias="minPrice", ge=0, description="Minimum price (inclusive)"),
    max_price: Optional[Decimal] = Query(None, alias="maxPrice", ge=0, description="Maximum price (inclusive)"),
    min_area: Optional[Decimal] = Query(None, alias="minArea", ge=0, description="Minimum area (inclusive)"),
    max_area: Optional[Decimal] = Query(None, alias="maxArea", ge=0, description="Maximum area (inclusive)"),
    location: Optional[str] = Query(None, description="Matches city, postal code or address"),
    page: int = Query(1, ge=1, le=MAX_PAGE, description="Page number (starts from 1)"),
    limit: int = Query(
        settings.default_page_size,
        ge=1,
        le=settings.max_page_size,
        description="Number of properties per page"
    ),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyListResponse:
    """
    Get paginated list of active properties.

    Raises:
        ValidationError: If a range has its minimum above its maximum
    """
    params = PropertyListParams(
        type=type,
        min_price=min_price,
        max_price=max_price,
        min_area=min_area,
        max_area=max_area,
        location=location,
        page=page,
        limit=limit
    )

    properties, total = await property_service.list_properties(params)

    return PropertyListResponse(
        total=total,
        page=params.page,
        limit=params.limit,
        properties=[PropertyResponse.model_validate(prop.to_dict()) for prop in properties]
    )


@router.get(
    "/{property_id}",
    response_model=PropertyResponse,
    summary="Get property by ID",
    description="Get one property with its images, whatever its status",
    responses=_responses(404, 500)
)
async def get_property(
    property_id: str,
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyResponse:
    """
    Get property details by ID.

    Raises:
        PropertyNotFoundError: If property doesn't exist
    """
    property_obj = await property_service.get_property(parse_resource_id(property_id, "Property"))
    return PropertyResponse.model_validate(property_obj.to_dict())


@router.post(
    "",
    response_model=PropertyMutationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create new property",
    description="Create a listing owned by the caller; it starts in pending status",
    responses=_responses(400, 401, 500)
)
async def create_property(
    property_data: PropertyCreate,
    actor: Actor = Depends(get_current_actor),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyMutationResponse:
    """
    Create a new property listing.

    Raises:
        ValidationError: If property data is invalid
    """
    property_obj = await property_service.create_property(actor, property_data)
    return PropertyMutationResponse(
        id=str(property_obj.id),
        status=property_obj.status.value,
        message=CREATED_MESSAGE
    )


@router.put(
    "/{property_id}",
    response_model=PropertyMutationResponse,
    summary="Update property",
    description="Replace a listing's fields; only the owner or an admin may update, and the listing returns to pending",
    responses=_responses(400, 401, 403, 404, 500)
)
async def update_property(
    property_id: str,
    property_data: PropertyUpdate,
    actor: Actor = Depends(get_current_actor),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyMutationResponse:
    """
    Update property.

    Raises:
        PropertyNotFoundError: If property doesn't exist
        PropertyOwnershipError: If actor is neither owner nor admin
    """
    property_obj = await property_service.update_property(
        parse_resource_id(property_id, "Property"), actor, property_data
    )
    return PropertyMutationResponse(
        id=str(property_obj.id),
        status=property_obj.status.value,
        message=UPDATED_MESSAGE
    )


@router.delete(
    "/{property_id}",
    response_model=MessageResponse,
    summary="Delete property",
    description="Delete a listing with all its images; only the owner or an admin may delete",
    responses=_responses(401, 403, 404, 500)
)
async def delete_property(
    property_id: str,
    actor: Actor = Depends(get_current_actor),
    property_service: PropertyService = Depends(get_property_service)
) -> MessageResponse:
    """
    Delete property.

    Raises:
        PropertyNotFoundError: If property doesn't exist
        PropertyOwnershipError: If actor is neither owner nor admin
    """
    await property_service.delete_property(parse_resource_id(property_id, "Property"), actor)
    return MessageResponse(message="Property deleted successfully")


@router.post(
    "/{property_id}/images",
    response_model=ImageUploadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload property images",
    description="Attach up to 10 JPEG, PNG or WebP images (5MB each) sent in the multipart field 'images'",
    responses=_responses(400, 401, 403, 404, 500)
)
async def upload_images(
    property_id: str,
    images: List[UploadFile] = File(..., description="Image files"),
    actor: Actor = Depends(get_current_actor),
    image_service: ImageService = Depends(get_image_service)
) -> ImageUploadResponse:
    """
    Upload a batch of images to a property.

    Raises:
        PropertyNotFoundError: If property doesn't exist
        PropertyOwnershipError: If actor is neither owner nor admin
        ValidationError: If any file is invalid; nothing is stored in that case
    """
    created = await image_service.upload_images(
        parse_resource_id(property_id, "Property"), actor, images
    )
    return ImageUploadResponse(
        message="Images uploaded successfully",
        images=[ImageSummary.model_validate(image.to_summary()) for image in created]
    )


@router.delete(
    "/{property_id}/images/{image_id}",
    response_model=MessageResponse,
    summary="Delete property image",
    description="Delete one image and its stored file",
    responses=_responses(401, 403, 404, 500)
)
async def delete_image(
    property_id: str,
    image_id: str,
    actor: Actor = Depends(get_current_actor),
    image_service: ImageService = Depends(get_image_service)
) -> MessageResponse:
    """
    Delete an image of a property.

    Raises:
        PropertyNotFoundError: If property doesn't exist
        PropertyOwnershipError: If actor is neither owner nor admin
        ImageNotFoundError: If the image doesn't belong to the property
    """
    await image_service.delete_image(
        parse_resource_id(property_id, "Property"),
        parse_resource_id(image_id, "Image"),
        actor
    )
    return MessageResponse(message="Image deleted successfully")
