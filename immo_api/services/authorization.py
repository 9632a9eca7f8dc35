"""
Ownership checks shared by the property and image services.
"""

import logging
import uuid

from immo_api.models.property import Property
from immo_api.repositories.property import PropertyRepository
from immo_api.utils.auth import Actor
from immo_api.utils.exceptions import PropertyNotFoundError, PropertyOwnershipError

logger = logging.getLogger(__name__)


async def get_manageable_property(
    property_repo: PropertyRepository,
    property_id: uuid.UUID,
    actor: Actor,
    action: str
) -> Property:
    """
    Load a property the actor is allowed to mutate.

    Args:
        property_repo: Repository bound to the current session
        property_id: UUID of the property
        actor: Authenticated caller
        action: Verb phrase used in the Forbidden message

    Returns:
        Property with its images loaded

    Raises:
        PropertyNotFoundError: If the property doesn't exist
        PropertyOwnershipError: If the actor is neither owner nor admin
    """
    property_obj = await property_repo.get_property_with_images(property_id)
    if not property_obj:
        raise PropertyNotFoundError(str(property_id))

    if not actor.can_manage(property_obj.user_id):
        logger.warning(f"Actor {actor.id} ({actor.role}) denied: {action} on property {property_id}")
        raise PropertyOwnershipError(action)

    return property_obj
