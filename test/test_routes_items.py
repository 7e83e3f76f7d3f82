"""
Tests for item routes
"""

from app.models.item import ItemKind
from app.services.permission_service import PermissionService
from conftest import make_item


class TestCreateItemRoute:
    async def test_create_folder_and_file(self, client, user_headers):
        response = await client.post("/api/v1/items", json={"name": "src", "kind": "folder"}, headers=user_headers)
        assert response.status_code == 201
        folder = response.json()
        assert folder["kind"] == "folder"

        response = await client.post(
            "/api/v1/items",
            json={"name": "app.min.js", "kind": "file", "parent_id": folder["id"]},
            headers=user_headers,
        )
        assert response.status_code == 201
        assert response.json()["extension"] == ".min.js"
        assert response.json()["parent_id"] == folder["id"]

    async def test_invalid_extension(self, client, user_headers):
        response = await client.post("/api/v1/items", json={"name": "notes", "kind": "file"}, headers=user_headers)
        assert response.status_code == 400
        error = response.json()["error"]
        assert error["error_code"] == "VALIDATION_INVALID_EXTENSION"
        assert error["message"].startswith("Invalid file extension. Examples:")

    async def test_missing_parent(self, client, user_headers):
        response = await client.post(
            "/api/v1/items", json={"name": "x", "kind": "folder", "parent_id": 999}, headers=user_headers
        )
        assert response.status_code == 404
        assert response.json()["error"]["error_code"] == "RESOURCE_PARENT_NOT_FOUND"

    async def test_bad_payload(self, client, user_headers):
        response = await client.post("/api/v1/items", json={"name": "x", "kind": "link"}, headers=user_headers)
        assert response.status_code == 422
        assert "validation_errors" in response.json()["error"]["details"]

    async def test_blank_name(self, client, user_headers):
        response = await client.post("/api/v1/items", json={"name": "   ", "kind": "folder"}, headers=user_headers)
        assert response.status_code == 422


class TestReadRoutes:
    async def test_structure_and_children(self, client, async_db_session, test_user, other_user, other_headers):
        a = await make_item(async_db_session, test_user, "A", ItemKind.FOLDER)
        b = await make_item(async_db_session, test_user, "B", ItemKind.FOLDER, a)
        await make_item(async_db_session, test_user, "D", ItemKind.FOLDER, a)
        await PermissionService(async_db_session).grant_permission(test_user.id, b.id, other_user.id, can_view=True)

        response = await client.get("/api/v1/items/structure", headers=other_headers)
        assert response.status_code == 200
        assert [f["name"] for f in response.json()["folders"]] == ["A"]

        response = await client.get(f"/api/v1/items/{a.id}/children", headers=other_headers)
        assert response.status_code == 200
        assert [f["name"] for f in response.json()["folders"]] == ["B"]

    async def test_list_root_with_query(self, client, async_db_session, test_user, user_headers):
        a = await make_item(async_db_session, test_user, "A", ItemKind.FOLDER)
        await make_item(async_db_session, test_user, "readme.md", ItemKind.FILE, a)

        response = await client.get("/api/v1/items", params={"parent_id": a.id}, headers=user_headers)

        assert response.status_code == 200
        files = response.json()["files"]
        assert [f["name"] for f in files] == ["readme.md"]
        assert files[0]["kind"] == "file"

    async def test_get_item(self, client, async_db_session, test_user, user_headers, stranger_headers):
        a = await make_item(async_db_session, test_user, "A", ItemKind.FOLDER)

        response = await client.get(f"/api/v1/items/{a.id}", headers=user_headers)
        assert response.status_code == 200
        assert response.json()["name"] == "A"

        response = await client.get(f"/api/v1/items/{a.id}", headers=stranger_headers)
        assert response.status_code == 403

        response = await client.get("/api/v1/items/999", headers=user_headers)
        assert response.status_code == 404

    async def test_children_unauthorized(self, client, async_db_session, test_user, stranger_headers):
        a = await make_item(async_db_session, test_user, "A", ItemKind.FOLDER)
        response = await client.get(f"/api/v1/items/{a.id}/children", headers=stranger_headers)
        assert response.status_code == 403
        assert response.json()["error"]["error_code"] == "AUTH_PERMISSION_DENIED"


class TestMutationRoutes:
    async def test_rename(self, client, async_db_session, test_user, user_headers):
        file = await make_item(async_db_session, test_user, "a.txt", ItemKind.FILE)

        response = await client.patch(f"/api/v1/items/{file.id}", json={"name": "b.py"}, headers=user_headers)

        assert response.status_code == 200
        assert response.json()["name"] == "b.py"
        assert response.json()["extension"] == ".py"

    async def test_rename_by_grantee_is_not_found(self, client, async_db_session, test_user, other_user, other_headers):
        folder = await make_item(async_db_session, test_user, "A", ItemKind.FOLDER)
        await PermissionService(async_db_session).grant_permission(
            test_user.id, folder.id, other_user.id, can_view=True, can_edit=True
        )

        response = await client.patch(f"/api/v1/items/{folder.id}", json={"name": "B"}, headers=other_headers)
        assert response.status_code == 404

    async def test_delete(self, client, async_db_session, test_user, user_headers):
        a = await make_item(async_db_session, test_user, "A", ItemKind.FOLDER)
        await make_item(async_db_session, test_user, "B", ItemKind.FOLDER, a)

        response = await client.delete(f"/api/v1/items/{a.id}", headers=user_headers)
        assert response.status_code == 204

        response = await client.get("/api/v1/items/structure", headers=user_headers)
        assert response.json() == {"folders": [], "files": []}

    async def test_delete_twice(self, client, async_db_session, test_user, user_headers):
        a = await make_item(async_db_session, test_user, "A", ItemKind.FOLDER)
        assert (await client.delete(f"/api/v1/items/{a.id}", headers=user_headers)).status_code == 204
        assert (await client.delete(f"/api/v1/items/{a.id}", headers=user_headers)).status_code == 404
