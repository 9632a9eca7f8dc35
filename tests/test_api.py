"""
HTTP tests for the property listing endpoints.
Exercises routing, authentication, status codes and response shapes end to end.
"""

import uuid
from pathlib import Path

import pytest
from httpx import AsyncClient

from immo_api.models.property import Property, PropertyStatus, PropertyType
from immo_api.repositories.image import ImageRepository
from immo_api.repositories.property import PropertyRepository
from immo_api.schemas.property import MAX_PAGE
from immo_api.utils.auth import Actor
from tests.conftest import ImageFactory, PropertyFactory, auth_headers, minutes_ago

API = "/api/properties"


def image_part(name: str = "photo.jpg", content_type: str = "image/jpeg", format: str = "JPEG"):
    return ("images", (name, ImageFactory.create_image_bytes(format=format), content_type))


class TestListProperties:
    """GET /api/properties"""

    @pytest.mark.asyncio
    async def test_list_shape_and_visibility(
        self,
        async_client: AsyncClient,
        property_repository: PropertyRepository,
        owner: Actor
    ):
        visible = await PropertyFactory.create_property(property_repository, user_id=owner.id)
        await PropertyFactory.create_property(property_repository, user_id=owner.id, status=PropertyStatus.PENDING)
        await PropertyFactory.create_property(property_repository, user_id=owner.id, status=PropertyStatus.ARCHIVED)

        response = await async_client.get(API)

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 1
        assert body["page"] == 1
        assert body["limit"] == 20
        assert [p["id"] for p in body["properties"]] == [str(visible.id)]
        listing = body["properties"][0]
        assert listing["postalCode"] == "75011"
        assert listing["userId"] == str(owner.id)
        assert listing["images"] == []

    @pytest.mark.asyncio
    async def test_filters_and_pagination(
        self,
        async_client: AsyncClient,
        property_repository: PropertyRepository,
        owner: Actor
    ):
        prices = [50, 100, 150, 200, 250]
        for age, price in enumerate(prices):
            await PropertyFactory.create_property(
                property_repository, user_id=owner.id, price=price, created_at=minutes_ago(age)
            )

        response = await async_client.get(API, params={"minPrice": 100, "maxPrice": 200, "limit": 2})

        body = response.json()
        assert response.status_code == 200
        assert body["total"] == 3
        assert [p["price"] for p in body["properties"]] == [100.0, 150.0]

        response = await async_client.get(API, params={"minPrice": 100, "maxPrice": 200, "limit": 2, "page": 2})
        assert [p["price"] for p in response.json()["properties"]] == [200.0]

    @pytest.mark.asyncio
    async def test_location_filter(
        self,
        async_client: AsyncClient,
        property_repository: PropertyRepository,
        owner: Actor
    ):
        by_postal = await PropertyFactory.create_property(property_repository, user_id=owner.id, postal_code="75000")
        by_address = await PropertyFactory.create_property(
            property_repository, user_id=owner.id, address="Résidence 75000 bis", postal_code="92100"
        )
        await PropertyFactory.create_property(property_repository, user_id=owner.id, postal_code="33000", city="Bordeaux")

        response = await async_client.get(API, params={"location": "75000"})

        assert {p["id"] for p in response.json()["properties"]} == {str(by_postal.id), str(by_address.id)}

    @pytest.mark.asyncio
    async def test_location_wildcard_is_literal(
        self,
        async_client: AsyncClient,
        property_repository: PropertyRepository,
        owner: Actor
    ):
        await PropertyFactory.create_property(property_repository, user_id=owner.id, postal_code="69001", city="Lyon")

        response = await async_client.get(API, params={"location": "%"})

        assert response.status_code == 200
        assert response.json()["total"] == 0

    @pytest.mark.asyncio
    async def test_type_filter(self, async_client: AsyncClient, property_repository: PropertyRepository, owner: Actor):
        house = await PropertyFactory.create_property(property_repository, user_id=owner.id, type=PropertyType.HOUSE)
        await PropertyFactory.create_property(property_repository, user_id=owner.id, type=PropertyType.LAND)

        response = await async_client.get(API, params={"type": "house"})

        assert [p["id"] for p in response.json()["properties"]] == [str(house.id)]

    @pytest.mark.parametrize("params", [
        {"minPrice": 300, "maxPrice": 100},
        {"minArea": 90, "maxArea": 10},
        {"limit": 101},
        {"page": 0},
        {"type": "castle"},
        {"minPrice": "cheap"},
        {"page": 10_000_000_000_000_000_000},
    ])
    @pytest.mark.asyncio
    async def test_invalid_query_is_400(self, async_client: AsyncClient, params: dict):
        response = await async_client.get(API, params=params)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_last_allowed_page_is_empty(self, async_client: AsyncClient):
        response = await async_client.get(API, params={"page": MAX_PAGE, "limit": 100})

        assert response.status_code == 200
        assert response.json()["properties"] == []


class TestGetProperty:
    """GET /api/properties/{id}"""

    @pytest.mark.asyncio
    async def test_get_with_images(
        self,
        async_client: AsyncClient,
        image_repository: ImageRepository,
        pending_property: Property
    ):
        image = await ImageFactory.create_image(image_repository, pending_property.id)

        response = await async_client.get(f"{API}/{pending_property.id}")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "pending"
        assert body["images"] == [{"id": str(image.id), "url": image.url}]

    @pytest.mark.asyncio
    async def test_get_missing(self, async_client: AsyncClient):
        response = await async_client.get(f"{API}/{uuid.uuid4()}")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    @pytest.mark.asyncio
    async def test_get_non_uuid_is_404(self, async_client: AsyncClient):
        response = await async_client.get(f"{API}/42")
        assert response.status_code == 404


class TestCreateProperty:
    """POST /api/properties"""

    @pytest.mark.asyncio
    async def test_create(self, async_client: AsyncClient, owner: Actor):
        payload = PropertyFactory.create_payload(status="active", userId=str(uuid.uuid4()))

        response = await async_client.post(API, json=payload, headers=auth_headers(owner))

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "pending"
        assert "pending validation" in body["message"]

        fetched = (await async_client.get(f"{API}/{body['id']}")).json()
        assert fetched["userId"] == str(owner.id)
        assert fetched["status"] == "pending"

    @pytest.mark.asyncio
    async def test_features_round_trip(self, async_client: AsyncClient, owner: Actor):
        features = ["terrace", "cellar", "terrace", "lift"]
        payload = PropertyFactory.create_payload(features=features)

        created = await async_client.post(API, json=payload, headers=auth_headers(owner))
        fetched = await async_client.get(f"{API}/{created.json()['id']}")

        assert fetched.json()["features"] == features

    @pytest.mark.asyncio
    async def test_snake_case_body_is_accepted(self, async_client: AsyncClient, owner: Actor):
        payload = PropertyFactory.create_payload()
        payload["postal_code"] = payload.pop("postalCode")

        response = await async_client.post(API, json=payload, headers=auth_headers(owner))

        assert response.status_code == 201

    @pytest.mark.asyncio
    async def test_create_requires_token(self, async_client: AsyncClient):
        response = await async_client.post(API, json=PropertyFactory.create_payload())

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"

    @pytest.mark.parametrize("override", [
        {"title": "Tiny"},
        {"title": "x" * 101},
        {"description": "Too short"},
        {"price": -1},
        {"area": -0.5},
        {"rooms": -1},
        {"bathrooms": 1.5},
        {"type": "castle"},
        {"latitude": 91},
        {"longitude": -181},
        {"features": "balcony"},
    ])
    @pytest.mark.asyncio
    async def test_invalid_body_is_400(self, async_client: AsyncClient, owner: Actor, override: dict):
        payload = PropertyFactory.create_payload(**override)

        response = await async_client.post(API, json=payload, headers=auth_headers(owner))

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["details"]

    @pytest.mark.asyncio
    async def test_missing_field_is_400(self, async_client: AsyncClient, owner: Actor):
        payload = PropertyFactory.create_payload()
        del payload["city"]

        response = await async_client.post(API, json=payload, headers=auth_headers(owner))

        assert response.status_code == 400
        assert response.json()["error"]["details"][0]["field"] == "city"


class TestUpdateProperty:
    """PUT /api/properties/{id}"""

    @pytest.mark.asyncio
    async def test_owner_update_resets_status(
        self,
        async_client: AsyncClient,
        active_property: Property,
        owner: Actor
    ):
        payload = PropertyFactory.create_payload(title="New title for listing", status="active")

        response = await async_client.put(f"{API}/{active_property.id}", json=payload, headers=auth_headers(owner))

        assert response.status_code == 200
        body = response.json()
        assert body == {
            "id": str(active_property.id),
            "status": "pending",
            "message": "Your listing has been updated and is pending validation."
        }

        fetched = (await async_client.get(f"{API}/{active_property.id}")).json()
        assert fetched["title"] == "New title for listing"
        assert fetched["status"] == "pending"

    @pytest.mark.asyncio
    async def test_non_owner_is_403(self, async_client: AsyncClient, active_property: Property, other_user: Actor):
        response = await async_client.put(
            f"{API}/{active_property.id}",
            json=PropertyFactory.create_payload(),
            headers=auth_headers(other_user)
        )

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "FORBIDDEN"

    @pytest.mark.asyncio
    async def test_admin_can_update(self, async_client: AsyncClient, active_property: Property, admin: Actor):
        response = await async_client.put(
            f"{API}/{active_property.id}",
            json=PropertyFactory.create_payload(),
            headers=auth_headers(admin)
        )

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_missing_is_404(self, async_client: AsyncClient, owner: Actor):
        response = await async_client.put(
            f"{API}/{uuid.uuid4()}",
            json=PropertyFactory.create_payload(),
            headers=auth_headers(owner)
        )

        assert response.status_code == 404


class TestDeleteProperty:
    """DELETE /api/properties/{id}"""

    @pytest.mark.asyncio
    async def test_delete_cascades_to_images(
        self,
        async_client: AsyncClient,
        image_repository: ImageRepository,
        active_property: Property,
        owner: Actor,
        upload_root: Path
    ):
        headers = auth_headers(owner)
        upload = await async_client.post(
            f"{API}/{active_property.id}/images",
            files=[image_part("a.jpg"), image_part("b.jpg")],
            headers=headers
        )
        assert upload.status_code == 201

        response = await async_client.delete(f"{API}/{active_property.id}", headers=headers)

        assert response.status_code == 200
        assert response.json() == {"message": "Property deleted successfully"}
        assert await image_repository.count_by_property_id(active_property.id) == 0
        assert not any(p.is_file() for p in upload_root.rglob("*"))
        assert (await async_client.get(f"{API}/{active_property.id}")).status_code == 404

    @pytest.mark.asyncio
    async def test_non_owner_is_403(self, async_client: AsyncClient, active_property: Property, other_user: Actor):
        response = await async_client.delete(f"{API}/{active_property.id}", headers=auth_headers(other_user))
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_admin_can_delete(self, async_client: AsyncClient, active_property: Property, admin: Actor):
        response = await async_client.delete(f"{API}/{active_property.id}", headers=auth_headers(admin))
        assert response.status_code == 200


class TestPropertyImages:
    """POST and DELETE /api/properties/{id}/images"""

    @pytest.mark.asyncio
    async def test_upload(self, async_client: AsyncClient, active_property: Property, owner: Actor, upload_root: Path):
        response = await async_client.post(
            f"{API}/{active_property.id}/images",
            files=[image_part("front.jpg"), image_part("garden.png", "image/png", "PNG")],
            headers=auth_headers(owner)
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Images uploaded successfully"
        assert len(body["images"]) == 2
        for image in body["images"]:
            assert set(image) == {"id", "url"}
            assert (upload_root / image["url"][len("/uploads/"):]).is_file()

        fetched = (await async_client.get(f"{API}/{active_property.id}")).json()
        assert fetched["images"] == body["images"]

    @pytest.mark.asyncio
    async def test_eleven_files_rejected(
        self,
        async_client: AsyncClient,
        image_repository: ImageRepository,
        active_property: Property,
        owner: Actor
    ):
        response = await async_client.post(
            f"{API}/{active_property.id}/images",
            files=[image_part(f"p{i}.jpg") for i in range(11)],
            headers=auth_headers(owner)
        )

        assert response.status_code == 400
        assert await image_repository.count_by_property_id(active_property.id) == 0

    @pytest.mark.asyncio
    async def test_unsupported_extension_rejected(
        self,
        async_client: AsyncClient,
        image_repository: ImageRepository,
        active_property: Property,
        owner: Actor
    ):
        response = await async_client.post(
            f"{API}/{active_property.id}/images",
            files=[image_part("notes.txt", "image/jpeg")],
            headers=auth_headers(owner)
        )

        assert response.status_code == 400
        assert await image_repository.count_by_property_id(active_property.id) == 0

    @pytest.mark.asyncio
    async def test_no_files_is_400(self, async_client: AsyncClient, active_property: Property, owner: Actor):
        response = await async_client.post(f"{API}/{active_property.id}/images", headers=auth_headers(owner))
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_upload_non_owner_is_403(
        self,
        async_client: AsyncClient,
        active_property: Property,
        other_user: Actor
    ):
        response = await async_client.post(
            f"{API}/{active_property.id}/images",
            files=[image_part()],
            headers=auth_headers(other_user)
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_delete_image(
        self,
        async_client: AsyncClient,
        active_property: Property,
        owner: Actor,
        upload_root: Path
    ):
        headers = auth_headers(owner)
        upload = await async_client.post(
            f"{API}/{active_property.id}/images", files=[image_part()], headers=headers
        )
        image = upload.json()["images"][0]

        response = await async_client.delete(f"{API}/{active_property.id}/images/{image['id']}", headers=headers)

        assert response.status_code == 200
        assert response.json() == {"message": "Image deleted successfully"}
        assert not (upload_root / image["url"][len("/uploads/"):]).exists()
        assert (await async_client.get(f"{API}/{active_property.id}")).json()["images"] == []

    @pytest.mark.asyncio
    async def test_delete_image_with_missing_file(
        self,
        async_client: AsyncClient,
        image_repository: ImageRepository,
        active_property: Property,
        owner: Actor
    ):
        image = await ImageFactory.create_image(image_repository, active_property.id)

        response = await async_client.delete(
            f"{API}/{active_property.id}/images/{image.id}", headers=auth_headers(owner)
        )

        assert response.status_code == 200
        assert await image_repository.count_by_property_id(active_property.id) == 0

    @pytest.mark.asyncio
    async def test_delete_unknown_image_is_404(
        self,
        async_client: AsyncClient,
        active_property: Property,
        owner: Actor
    ):
        response = await async_client.delete(
            f"{API}/{active_property.id}/images/{uuid.uuid4()}", headers=auth_headers(owner)
        )

        assert response.status_code == 404
        assert "Image not found" in response.json()["error"]["message"]
