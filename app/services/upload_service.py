"""
Upload Service

Stores uploaded files in the blob store and their metadata in the
binary_files table, attached to a folder of the uploader (or the root).
"""

import logging
import uuid
from pathlib import Path

from fastapi import UploadFile
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.constants.extensions import is_uploadable
from app.exceptions import BinaryFileNotFoundError, InternalError, ParentNotFoundError, ValidationError
from app.models.binary_file import BinaryFile
from app.models.item import Item, ItemKind
from app.services.item_service import ItemService
from app.services.permission_service import PermissionService
from app.storage.base import BlobStore

logger = logging.getLogger(__name__)


class UploadService:
    """Service for uploaded files"""

    def __init__(self, db: AsyncSession, blob_store: BlobStore, max_size: int | None = None):
        self.db = db
        self.blob_store = blob_store
        self.max_size = max_size or settings.max_upload_size
        self.permissions = PermissionService(db)

    @staticmethod
    def validate_file(file: UploadFile) -> str:
        """
        Validate an uploaded file before anything is written.

        Returns:
            The original filename

        Raises:
            ValidationError: If there is no file or its type is not allowed
        """
        if not file or not file.filename:
            raise ValidationError("No file uploaded", field="file")
        if not is_uploadable(file.filename, file.content_type):
            raise ValidationError("File type not allowed", field="file", details={"mime_type": file.content_type})
        return file.filename

    @staticmethod
    def generate_stored_name(original_filename: str) -> str:
        """UUID name keeping the original suffix, so stored names never collide."""
        return f"{uuid.uuid4()}{Path(original_filename).suffix.lower()}"

    async def upload_file(self, owner_id: int, file: UploadFile, parent_id: int | None = None) -> BinaryFile:
        original_name = self.validate_file(file)

        if parent_id is not None:
            parent = await self.db.execute(
                select(Item.id).where(Item.id == parent_id, Item.owner_id == owner_id, Item.kind == ItemKind.FOLDER)
            )
            if parent.scalar_one_or_none() is None:
                raise ParentNotFoundError("Parent folder not found or unauthorized")

        stored_name = self.generate_stored_name(original_name)
        size = await self.blob_store.save(file, stored_name, self.max_size)

        binary_file = BinaryFile(
            stored_name=stored_name,
            original_name=original_name,
            size_bytes=size,
            mime_type=file.content_type,
            owner_id=owner_id,
            parent_id=parent_id,
        )
        self.db.add(binary_file)
        try:
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            try:
                self.blob_store.delete(stored_name)
            except OSError as cleanup_exc:
                logger.warning("Could not remove blob %s after failed upload: %s", stored_name, cleanup_exc)
            raise InternalError("Error uploading file", operation="upload_file") from exc

        await self.db.refresh(binary_file)
        logger.info("Uploaded file id=%s owner=%s parent=%s size=%s", binary_file.id, owner_id, parent_id, size)
        return binary_file

    async def list_files(self, owner_id: int, parent_id: int | None = None) -> list[BinaryFile]:
        """The caller's uploads directly under ``parent_id`` (root when None), newest first."""
        stmt = select(BinaryFile).where(BinaryFile.owner_id == owner_id)
        if parent_id is None:
            stmt = stmt.where(BinaryFile.parent_id.is_(None))
        else:
            stmt = stmt.where(BinaryFile.parent_id == parent_id)
        result = await self.db.execute(stmt.order_by(BinaryFile.created_at.desc(), BinaryFile.id.desc()))
        return list(result.scalars().all())

    async def list_all_files(self, owner_id: int) -> list[BinaryFile]:
        result = await self.db.execute(
            select(BinaryFile)
            .where(BinaryFile.owner_id == owner_id)
            .order_by(BinaryFile.created_at.desc(), BinaryFile.id.desc())
        )
        return list(result.scalars().all())

    async def open_file(self, user_id: int, file_id: int) -> tuple[Path, BinaryFile]:
        """Resolve an upload for download by its owner or by a viewer of its folder."""
        binary_file = await self.db.get(BinaryFile, file_id)
        if binary_file is None:
            raise BinaryFileNotFoundError()

        if binary_file.owner_id != user_id:
            parent = await self.db.get(Item, binary_file.parent_id) if binary_file.parent_id else None
            if not await self.permissions.can_read_contents(user_id, parent):
                raise BinaryFileNotFoundError()

        if not self.blob_store.exists(binary_file.stored_name):
            logger.warning("Blob missing for file id=%s", file_id)
            raise BinaryFileNotFoundError("File not found on server")

        return self.blob_store.path(binary_file.stored_name), binary_file

    async def delete_file(self, user_id: int, file_id: int) -> None:
        """
        Delete one of the caller's uploads; when no upload has that id,
        fall back to a created file item of the caller.
        """
        result = await self.db.execute(
            select(BinaryFile).where(BinaryFile.id == file_id, BinaryFile.owner_id == user_id).with_for_update()
        )
        binary_file = result.scalar_one_or_none()

        if binary_file is None:
            item = await self.db.execute(
                select(Item.id).where(Item.id == file_id, Item.owner_id == user_id, Item.kind == ItemKind.FILE)
            )
            if item.scalar_one_or_none() is None:
                raise BinaryFileNotFoundError("File not found or unauthorized")
            await ItemService(self.db, self.blob_store).delete_item(user_id, file_id)
            return

        stored_name = binary_file.stored_name
        try:
            await self.db.delete(binary_file)
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            raise InternalError("Error deleting file", operation="delete_file") from exc

        try:
            self.blob_store.delete(stored_name)
        except OSError as exc:
            logger.warning("Could not remove blob %s: %s", stored_name, exc)
        logger.info("Deleted file id=%s owner=%s", file_id, user_id)
