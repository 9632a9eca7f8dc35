"""
Test configuration and fixtures for the Immo Listing API.
Provides database fixtures, storage fixtures, test data factories, and common test utilities.
"""

import os

# Settings are read at import time
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import io
import uuid
from datetime import datetime, timedelta
from decimal import Decimal
from pathlib import Path
from typing import AsyncGenerator, Dict, Optional

import pytest
from fastapi import UploadFile
from httpx import ASGITransport, AsyncClient
from PIL import Image
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import Headers

from immo_api.database import Database
from immo_api.main import app
from immo_api.models.image import PropertyImage
from immo_api.models.property import Property, PropertyStatus, PropertyType
from immo_api.repositories.image import ImageRepository
from immo_api.repositories.property import PropertyRepository
from immo_api.services.image import ImageService
from immo_api.services.property import PropertyService
from immo_api.utils.auth import Actor, ActorRole, create_access_token
from immo_api.utils.dependencies import get_file_storage
from immo_api.utils.file_utils import FileStorage


TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")


@pytest.fixture
async def database() -> AsyncGenerator[Database, None]:
    """Create a fresh database handle with the schema installed."""
    handle = Database(TEST_DATABASE_URL)
    await handle.create_tables()
    yield handle
    await handle.drop_tables()
    await handle.dispose()


@pytest.fixture
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with database.session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()


@pytest.fixture
def upload_root(tmp_path: Path) -> Path:
    """Directory receiving uploaded files during a test."""
    return tmp_path / "uploads"


@pytest.fixture
def storage(upload_root: Path) -> FileStorage:
    """Create an image storage adapter rooted in a temporary directory."""
    return FileStorage(upload_root, "/uploads")


@pytest.fixture
async def async_client(database: Database, storage: FileStorage) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client bound to the test database and storage."""
    app.state.database = database
    app.dependency_overrides[get_file_storage] = lambda: storage

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
    app.state.database = None


# Repository fixtures
@pytest.fixture
def property_repository(db_session: AsyncSession) -> PropertyRepository:
    """Create a property repository instance."""
    return PropertyRepository(db_session)


@pytest.fixture
def image_repository(db_session: AsyncSession) -> ImageRepository:
    """Create an image repository instance."""
    return ImageRepository(db_session)


# Service fixtures
@pytest.fixture
def image_service(db_session: AsyncSession, storage: FileStorage) -> ImageService:
    """Create an image service instance."""
    return ImageService(db_session, storage)


@pytest.fixture
def property_service(db_session: AsyncSession, storage: FileStorage, image_service: ImageService) -> PropertyService:
    """Create a property service instance."""
    return PropertyService(db_session, storage, image_service)


# Actors
@pytest.fixture
def owner() -> Actor:
    """Regular user owning the test listings."""
    return Actor(id=uuid.uuid4(), role=ActorRole.USER.value)


@pytest.fixture
def other_user() -> Actor:
    """Regular user owning nothing."""
    return Actor(id=uuid.uuid4(), role=ActorRole.USER.value)


@pytest.fixture
def admin() -> Actor:
    """Administrator allowed to manage any listing."""
    return Actor(id=uuid.uuid4(), role=ActorRole.ADMIN.value)


def auth_headers(actor: Actor) -> Dict[str, str]:
    """Authorization header carrying a token for the actor."""
    token = create_access_token(actor.id, actor.role)
    return {"Authorization": f"Bearer {token}"}


# Test data factories
class PropertyFactory:
    """Factory for creating test properties."""

    @staticmethod
    def create_property_data(**overrides) -> dict:
        """Create property data dictionary with snake_case keys."""
        data = {
            "type": PropertyType.APARTMENT,
            "title": "Bright flat near the park",
            "description": "Two bedrooms, renovated kitchen, quiet street.",
            "price": Decimal("150.00"),
            "area": Decimal("55.00"),
            "rooms": 3,
            "bathrooms": 1,
            "address": "1 Rue de Test",
            "city": "Paris",
            "postal_code": "75011",
            "latitude": Decimal("48.85660000"),
            "longitude": Decimal("2.35220000"),
            "features": ["balcony", "elevator"],
        }
        data.update(overrides)
        return data

    @staticmethod
    def create_payload(**overrides) -> dict:
        """Create a JSON request body as a client would send it."""
        payload = {
            "type": "apartment",
            "title": "Bright flat near the park",
            "description": "Two bedrooms, renovated kitchen, quiet street.",
            "price": 150.0,
            "area": 55.0,
            "rooms": 3,
            "bathrooms": 1,
            "address": "1 Rue de Test",
            "city": "Paris",
            "postalCode": "75011",
            "latitude": 48.8566,
            "longitude": 2.3522,
            "features": ["balcony", "elevator"],
        }
        payload.update(overrides)
        return payload

    @staticmethod
    async def create_property(
        property_repo: PropertyRepository,
        user_id: uuid.UUID,
        status: PropertyStatus = PropertyStatus.ACTIVE,
        created_at: Optional[datetime] = None,
        **overrides
    ) -> Property:
        """Create a test property in the database."""
        data = PropertyFactory.create_property_data(**overrides)
        data["user_id"] = user_id
        data["status"] = status
        if created_at is not None:
            data["created_at"] = created_at
        return await property_repo.create(data)


class ImageFactory:
    """Factory for creating test property images."""

    @staticmethod
    def create_image_bytes(width: int = 8, height: int = 6, format: str = "JPEG") -> bytes:
        """Create a test image in memory."""
        img = Image.new("RGB", (width, height), color="red")
        img_bytes = io.BytesIO()
        img.save(img_bytes, format=format)
        return img_bytes.getvalue()

    @staticmethod
    def create_upload(
        filename: str = "photo.jpg",
        content_type: str = "image/jpeg",
        content: Optional[bytes] = None
    ) -> UploadFile:
        """Create an upload as the framework hands it to a route."""
        if content is None:
            content = ImageFactory.create_image_bytes()
        return UploadFile(
            file=io.BytesIO(content),
            filename=filename,
            headers=Headers({"content-type": content_type})
        )

    @staticmethod
    async def create_image(
        image_repo: ImageRepository,
        property_id: uuid.UUID,
        url: Optional[str] = None,
        order: int = 0
    ) -> PropertyImage:
        """Create a test property image record without a stored file."""
        return await image_repo.create({
            "property_id": property_id,
            "url": url or f"/uploads/properties/{property_id}/{uuid.uuid4().hex}_photo.jpg",
            "order": order,
            "filename": "photo.jpg",
            "file_size": 1024,
            "mime_type": "image/jpeg",
            "width": 8,
            "height": 6
        })


def minutes_ago(minutes: int) -> datetime:
    """Timestamp used to give test listings a deterministic creation order."""
    return datetime(2024, 1, 1, 12, 0, 0) - timedelta(minutes=minutes)


# Common test fixtures
@pytest.fixture
async def active_property(property_repository: PropertyRepository, owner: Actor) -> Property:
    """Create an active property owned by ``owner``."""
    return await PropertyFactory.create_property(property_repository, user_id=owner.id)


@pytest.fixture
async def pending_property(property_repository: PropertyRepository, owner: Actor) -> Property:
    """Create a pending property owned by ``owner``."""
    return await PropertyFactory.create_property(
        property_repository,
        user_id=owner.id,
        status=PropertyStatus.PENDING,
        title="Pending listing awaiting review"
    )
