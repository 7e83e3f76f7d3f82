"""
Tests for UploadService

Uploads are streamed into a temporary blob directory.
"""

import io

import pytest
from fastapi import UploadFile
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from starlette.datastructures import Headers

from app.exceptions import (
    BinaryFileNotFoundError,
    InternalError,
    ParentNotFoundError,
    PayloadTooLargeError,
    ValidationError,
)
from app.models.binary_file import BinaryFile
from app.models.item import Item, ItemKind
from app.services.permission_service import PermissionService
from app.services.upload_service import UploadService
from conftest import make_item


def make_upload(filename: str, content: bytes = b"hello", content_type: str = "text/plain") -> UploadFile:
    return UploadFile(
        file=io.BytesIO(content),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


@pytest.fixture
def service(async_db_session, blob_store):
    return UploadService(async_db_session, blob_store)


class TestValidateFile:
    def test_valid(self):
        assert UploadService.validate_file(make_upload("notes.txt")) == "notes.txt"

    def test_missing_filename(self):
        with pytest.raises(ValidationError, match="No file uploaded"):
            UploadService.validate_file(make_upload(""))

    def test_type_not_allowed(self):
        with pytest.raises(ValidationError, match="File type not allowed"):
            UploadService.validate_file(make_upload("clip.mp4", content_type="video/mp4"))

    def test_stored_name_keeps_suffix(self):
        first = UploadService.generate_stored_name("Report.PDF")
        second = UploadService.generate_stored_name("Report.PDF")
        assert first.endswith(".pdf")
        assert first != second


class TestUploadFile:
    async def test_upload_to_root(self, service, blob_store, test_user):
        binary_file = await service.upload_file(test_user.id, make_upload("notes.txt", b"twelve bytes"))

        assert binary_file.id is not None
        assert binary_file.original_name == "notes.txt"
        assert binary_file.size_bytes == 12
        assert binary_file.parent_id is None
        assert binary_file.url == f"/api/v1/files/{binary_file.id}/download"
        assert blob_store.path(binary_file.stored_name).read_bytes() == b"twelve bytes"

    async def test_upload_into_folder(self, service, async_db_session, test_user):
        folder = await make_item(async_db_session, test_user, "docs", ItemKind.FOLDER)
        binary_file = await service.upload_file(test_user.id, make_upload("a.csv"), folder.id)
        assert binary_file.parent_id == folder.id

    async def test_upload_into_foreign_folder(self, service, async_db_session, blob_store, test_user, other_user):
        folder = await make_item(async_db_session, other_user, "theirs", ItemKind.FOLDER)

        with pytest.raises(ParentNotFoundError):
            await service.upload_file(test_user.id, make_upload("a.csv"), folder.id)
        assert list(blob_store.root.iterdir()) == []

    async def test_too_large(self, async_db_session, blob_store, test_user):
        service = UploadService(async_db_session, blob_store, max_size=10)

        with pytest.raises(PayloadTooLargeError):
            await service.upload_file(test_user.id, make_upload("big.txt", b"x" * 100))

        assert await async_db_session.scalar(select(func.count()).select_from(BinaryFile)) == 0
        assert list(blob_store.root.iterdir()) == []


    async def test_store_failure_removes_blob(self, service, async_db_session, blob_store, test_user, monkeypatch):
        async def broken_commit():
            raise OperationalError("COMMIT", {}, Exception("database is locked"))

        monkeypatch.setattr(async_db_session, "commit", broken_commit)
        with pytest.raises(InternalError):
            await service.upload_file(test_user.id, make_upload("notes.txt"))
        monkeypatch.undo()

        assert list(blob_store.root.iterdir()) == []
        assert await async_db_session.scalar(select(func.count()).select_from(BinaryFile)) == 0

    async def test_cleanup_failure_keeps_store_error(
        self, service, async_db_session, blob_store, test_user, monkeypatch
    ):
        async def broken_commit():
            raise OperationalError("COMMIT", {}, Exception("database is locked"))

        def broken_delete(name):
            raise PermissionError(f"cannot remove {name}")

        monkeypatch.setattr(async_db_session, "commit", broken_commit)
        monkeypatch.setattr(blob_store, "delete", broken_delete)

        with pytest.raises(InternalError):
            await service.upload_file(test_user.id, make_upload("notes.txt"))

        # The blob is left behind and the original failure still surfaces
        assert len(list(blob_store.root.iterdir())) == 1


class TestListFiles:
    async def test_list_by_folder(self, service, async_db_session, test_user, other_user):
        folder = await make_item(async_db_session, test_user, "docs", ItemKind.FOLDER)
        await service.upload_file(test_user.id, make_upload("root.txt"))
        await service.upload_file(test_user.id, make_upload("inner.txt"), folder.id)
        await service.upload_file(other_user.id, make_upload("other.txt"))

        assert [f.original_name for f in await service.list_files(test_user.id)] == ["root.txt"]
        assert [f.original_name for f in await service.list_files(test_user.id, folder.id)] == ["inner.txt"]

    async def test_list_all_newest_first(self, service, test_user):
        await service.upload_file(test_user.id, make_upload("first.txt"))
        await service.upload_file(test_user.id, make_upload("second.txt"))

        names = [f.original_name for f in await service.list_all_files(test_user.id)]
        assert names == ["second.txt", "first.txt"]


class TestOpenFile:
    async def test_owner(self, service, test_user):
        uploaded = await service.upload_file(test_user.id, make_upload("notes.txt", b"abc"))
        path, binary_file = await service.open_file(test_user.id, uploaded.id)
        assert path.read_bytes() == b"abc"
        assert binary_file.id == uploaded.id

    async def test_viewer_of_folder(self, service, async_db_session, test_user, other_user):
        folder = await make_item(async_db_session, test_user, "shared", ItemKind.FOLDER)
        uploaded = await service.upload_file(test_user.id, make_upload("notes.txt"), folder.id)
        await PermissionService(async_db_session).grant_permission(
            test_user.id, folder.id, other_user.id, can_view=True
        )

        path, _ = await service.open_file(other_user.id, uploaded.id)
        assert path.is_file()

    async def test_stranger(self, service, test_user, stranger):
        uploaded = await service.upload_file(test_user.id, make_upload("notes.txt"))
        with pytest.raises(BinaryFileNotFoundError):
            await service.open_file(stranger.id, uploaded.id)

    async def test_missing_blob(self, service, blob_store, test_user):
        uploaded = await service.upload_file(test_user.id, make_upload("notes.txt"))
        blob_store.delete(uploaded.stored_name)

        with pytest.raises(BinaryFileNotFoundError, match="on server"):
            await service.open_file(test_user.id, uploaded.id)


class TestDeleteFile:
    async def test_delete_upload(self, service, async_db_session, blob_store, test_user):
        uploaded = await service.upload_file(test_user.id, make_upload("notes.txt"))
        stored_name = uploaded.stored_name

        await service.delete_file(test_user.id, uploaded.id)

        assert await async_db_session.scalar(select(func.count()).select_from(BinaryFile)) == 0
        assert not blob_store.exists(stored_name)

    async def test_falls_back_to_created_file(self, service, async_db_session, test_user):
        file = await make_item(async_db_session, test_user, "draft.md", ItemKind.FILE)

        await service.delete_file(test_user.id, file.id)

        assert await async_db_session.scalar(select(func.count()).select_from(Item)) == 0

    async def test_not_owned(self, service, test_user, other_user):
        uploaded = await service.upload_file(test_user.id, make_upload("notes.txt"))
        with pytest.raises(BinaryFileNotFoundError):
            await service.delete_file(other_user.id, uploaded.id)

    async def test_folder_is_not_a_file(self, service, async_db_session, test_user):
        folder = await make_item(async_db_session, test_user, "docs", ItemKind.FOLDER)
        with pytest.raises(BinaryFileNotFoundError):
            await service.delete_file(test_user.id, folder.id)
