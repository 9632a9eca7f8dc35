"""
Authentication utilities for JWT bearer tokens.
Tokens are issued by the platform's authentication service; this module only
turns a verified token into an explicit actor capability object.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import ExpiredSignatureError, JWTError, jwt
from immo_api.config import settings
from immo_api.utils.exceptions import InvalidTokenError, TokenExpiredError
import enum
import uuid


class ActorRole(str, enum.Enum):
    """Roles known to the listing service."""
    USER = "user"
    ADMIN = "admin"


@dataclass(frozen=True)
class Actor:
    """Authenticated caller passed into every mutating service call."""

    id: uuid.UUID
    role: str = ActorRole.USER.value

    @property
    def is_admin(self) -> bool:
        """Elevated role bypassing ownership checks."""
        return self.role == ActorRole.ADMIN.value

    def can_manage(self, owner_id: uuid.UUID) -> bool:
        """
        Check if the actor may mutate a resource owned by ``owner_id``.

        Args:
            owner_id: UUID of the resource owner

        Returns:
            True for the owner or an administrator
        """
        return self.is_admin or self.id == owner_id


def create_access_token(
    user_id: uuid.UUID,
    role: str = ActorRole.USER.value,
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create JWT access token with actor claims.

    Args:
        user_id: User's UUID
        role: User's role
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))

    to_encode = {
        "sub": str(user_id),
        "role": role,
        "exp": expire,
        "iat": now,
        "type": "access"
    }

    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Actor:
    """
    Verify a JWT access token and build the actor it represents.

    Args:
        token: JWT token string

    Returns:
        Actor with the token's subject and role

    Raises:
        TokenExpiredError: If token is expired
        InvalidTokenError: If signature, type or claims are invalid
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError:
        raise TokenExpiredError()
    except JWTError as e:
        raise InvalidTokenError(f"Invalid token: {e}")

    if payload.get("type", "access") != "access":
        raise InvalidTokenError("Invalid token type. Expected access")

    subject = payload.get("sub")
    try:
        user_id = uuid.UUID(str(subject))
    except ValueError:
        raise InvalidTokenError("Invalid token payload")

    return Actor(id=user_id, role=payload.get("role") or ActorRole.USER.value)
