"""
Tests for permission routes
"""

from app.models.item import ItemKind
from conftest import make_item


class TestPermissionRoutes:
    async def test_grant_list_and_revoke(self, client, async_db_session, test_user, other_user, user_headers):
        folder = await make_item(async_db_session, test_user, "Shared", ItemKind.FOLDER)
        url = f"/api/v1/permissions/items/{folder.id}"

        response = await client.put(
            url, json={"target_user_id": other_user.id, "can_view": True, "can_upload": True}, headers=user_headers
        )
        assert response.status_code == 200
        assert response.json() == {"message": "Permission updated successfully"}

        response = await client.get(url, headers=user_headers)
        assert response.status_code == 200
        permissions = response.json()["permissions"]
        assert len(permissions) == 1
        assert permissions[0]["user_id"] == other_user.id
        assert permissions[0]["can_view"] is True
        assert permissions[0]["can_upload"] is True
        assert permissions[0]["can_delete"] is False

        response = await client.delete(f"{url}/{other_user.id}", headers=user_headers)
        assert response.status_code == 200
        assert response.json()["message"] == "Permission removed successfully"

        response = await client.get(url, headers=user_headers)
        assert response.json()["permissions"] == []

    async def test_grant_requires_owner(self, client, async_db_session, test_user, stranger, other_headers):
        folder = await make_item(async_db_session, test_user, "Shared", ItemKind.FOLDER)

        response = await client.put(
            f"/api/v1/permissions/items/{folder.id}",
            json={"target_user_id": stranger.id, "can_view": True},
            headers=other_headers,
        )

        assert response.status_code == 404

    async def test_grant_unknown_target(self, client, async_db_session, test_user, user_headers):
        folder = await make_item(async_db_session, test_user, "Shared", ItemKind.FOLDER)

        response = await client.put(
            f"/api/v1/permissions/items/{folder.id}", json={"target_user_id": 999, "can_view": True}, headers=user_headers
        )

        assert response.status_code == 404
        assert response.json()["error"]["error_code"] == "RESOURCE_USER_NOT_FOUND"

    async def test_granted_overview(self, client, async_db_session, test_user, other_user, user_headers):
        folder = await make_item(async_db_session, test_user, "Shared", ItemKind.FOLDER)
        await client.put(
            f"/api/v1/permissions/items/{folder.id}",
            json={"target_user_id": other_user.id, "can_view": True},
            headers=user_headers,
        )

        response = await client.get("/api/v1/permissions", headers=user_headers)

        assert response.status_code == 200
        [entry] = response.json()["permissions"]
        assert entry["item_name"] == "Shared"
        assert entry["granted_to"] == "Victor Viewer"

    async def test_shareable_users(self, client, test_user, other_user, stranger, user_headers):
        response = await client.get("/api/v1/permissions/users", headers=user_headers)

        assert response.status_code == 200
        emails = [user["email"] for user in response.json()["users"]]
        assert emails == ["stranger@example.com", "viewer@example.com"]

    async def test_my_capabilities(self, client, async_db_session, test_user, other_user, user_headers, other_headers):
        root = await make_item(async_db_session, test_user, "Root", ItemKind.FOLDER)
        inner = await make_item(async_db_session, test_user, "Inner", ItemKind.FOLDER, root)
        await client.put(
            f"/api/v1/permissions/items/{inner.id}",
            json={"target_user_id": other_user.id, "can_view": True},
            headers=user_headers,
        )

        response = await client.get(f"/api/v1/permissions/items/{root.id}/me", headers=other_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["is_owner"] is False
        assert body["can_view_path"] is True
        assert body["can_view"] is False
