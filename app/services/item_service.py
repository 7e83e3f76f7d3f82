"""
Item Service

Creates, renames, lists and deletes folders and files. Input is
validated before anything is written; structural changes are limited to
the item's owner.
"""

import logging
from dataclasses import dataclass, field

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.constants.extensions import extension_examples, resolve_extension
from app.exceptions import (
    InternalError,
    InvalidExtensionError,
    ItemNotFoundError,
    ParentNotFoundError,
    UnauthorizedError,
    ValidationError,
)
from app.models.binary_file import BinaryFile
from app.models.item import Item, ItemKind
from app.models.item_permission import ItemPermission
from app.services.permission_service import PermissionService, ancestry_cte, subtree_cte
from app.storage.base import BlobStore

logger = logging.getLogger(__name__)


def _sort_key(entry: Item | BinaryFile) -> tuple[str, int]:
    # Case-insensitive, so "apricot" sorts before "Zed"
    return entry.name.casefold(), entry.id


@dataclass
class Listing:
    """Children of one level of the tree, folders before files"""

    folders: list[Item] = field(default_factory=list)
    files: list[Item | BinaryFile] = field(default_factory=list)

    @classmethod
    def build(cls, items: list[Item], uploads: list[BinaryFile] = ()) -> "Listing":
        folders = sorted((i for i in items if i.is_folder), key=_sort_key)
        files = sorted(
            [*(i for i in items if not i.is_folder), *uploads],
            key=_sort_key,
        )
        return cls(folders=folders, files=files)


def _clean_name(name: str | None) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Name is required", field="name")
    return cleaned


def _validated_extension(name: str) -> str:
    extension = resolve_extension(name)
    if extension is None:
        raise InvalidExtensionError(name, extension_examples())
    return extension


class ItemService:
    def __init__(self, db: AsyncSession, blob_store: BlobStore | None = None, max_depth: int | None = None) -> None:
        self.db = db
        self.blob_store = blob_store
        self.max_depth = max_depth or settings.max_tree_depth
        self.permissions = PermissionService(db)

    async def create_item(self, owner_id: int, name: str, kind: ItemKind | str, parent_id: int | None = None) -> Item:
        """
        Create a folder or file for ``owner_id``.

        Files must carry an allow-listed extension. A parent must be a
        folder of the same owner and the new item may not exceed the
        configured tree depth.
        """
        name = _clean_name(name)
        try:
            kind = ItemKind(kind)
        except ValueError:
            raise ValidationError("Type must be 'folder' or 'file'", field="kind") from None

        extension = _validated_extension(name) if kind == ItemKind.FILE else None

        if parent_id is not None:
            parent = await self._owned_folder(owner_id, parent_id)
            if parent is None:
                raise ParentNotFoundError("Parent folder not found or unauthorized")
            chain = ancestry_cte(parent_id)
            depth = await self.db.scalar(select(func.count()).select_from(chain))
            if depth + 1 > self.max_depth:
                raise ValidationError(f"Folders cannot be nested more than {self.max_depth} levels deep")

        item = Item(name=name, kind=kind, owner_id=owner_id, parent_id=parent_id, extension=extension)
        self.db.add(item)
        try:
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            raise InternalError("Failed to create item", operation="create_item") from exc

        await self.db.refresh(item)
        logger.info("Created %s id=%s owner=%s parent=%s", kind.value, item.id, owner_id, parent_id)
        return item

    async def rename_item(self, user_id: int, item_id: int, new_name: str) -> Item:
        """Rename in place; files get their extension re-validated."""
        new_name = _clean_name(new_name)
        item = await self._owned_item(user_id, item_id, lock=True)

        extension = _validated_extension(new_name) if item.kind == ItemKind.FILE else None
        item.name = new_name
        item.extension = extension

        try:
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            raise InternalError("Failed to rename item", operation="rename_item") from exc

        await self.db.refresh(item)
        logger.info("Renamed item id=%s", item_id)
        return item

    async def delete_item(self, user_id: int, item_id: int) -> dict[str, int]:
        """
        Delete an item and, for a folder, its whole subtree: descendant
        items, uploads inside any of those folders, and every grant on a
        removed item. One transaction; blobs are unlinked once it commits.
        """
        item = await self._owned_item(user_id, item_id, lock=True)

        try:
            if item.is_folder:
                tree = subtree_cte(item_id)
                locked = await self.db.execute(
                    select(Item.id).where(Item.id.in_(select(tree.c.id))).with_for_update()
                )
                item_ids = [row[0] for row in locked.all()]
            else:
                item_ids = [item_id]

            uploads = await self.db.execute(
                select(BinaryFile.id, BinaryFile.stored_name)
                .where(BinaryFile.parent_id.in_(item_ids))
                .with_for_update()
            )
            upload_rows = uploads.all()
            stored_names = [row.stored_name for row in upload_rows]

            await self.db.execute(delete(ItemPermission).where(ItemPermission.item_id.in_(item_ids)))
            if upload_rows:
                await self.db.execute(delete(BinaryFile).where(BinaryFile.id.in_([row.id for row in upload_rows])))
            await self.db.execute(delete(Item).where(Item.id.in_(item_ids)))
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            raise InternalError("Failed to delete item", operation="delete_item") from exc

        self._discard_blobs(stored_names)
        logger.info(
            "Deleted item id=%s owner=%s (%d items, %d uploads)",
            item_id,
            user_id,
            len(item_ids),
            len(stored_names),
        )
        return {"items": len(item_ids), "files": len(stored_names)}

    async def get_item(self, user_id: int, item_id: int) -> Item:
        item = await self.db.get(Item, item_id)
        if item is None:
            raise ItemNotFoundError()
        if not await self.permissions.can_view(user_id, item):
            raise UnauthorizedError()
        return item

    async def list_children(self, user_id: int, parent_id: int | None = None) -> Listing:
        """
        Root listing (``parent_id`` None) shows the caller's own top level.
        Inside a folder, owners and inherited viewers see everything;
        someone reaching it only as a ghost ancestor sees just the
        children that lead to what was shared with them.
        """
        if parent_id is None:
            items = await self.db.execute(
                select(Item)
                .where(Item.owner_id == user_id, Item.parent_id.is_(None))
                .order_by(func.lower(Item.name), Item.id)
            )
            uploads = await self.db.execute(
                select(BinaryFile).where(BinaryFile.owner_id == user_id, BinaryFile.parent_id.is_(None))
            )
            return Listing.build(list(items.scalars().all()), list(uploads.scalars().all()))

        parent = await self.db.get(Item, parent_id)
        if parent is None:
            raise ItemNotFoundError("Folder not found")
        if not await self.permissions.can_view(user_id, parent):
            raise UnauthorizedError("You do not have permission to view this folder")
        if not parent.is_folder:
            raise ValidationError("Only folders have children", field="parent_id")

        if await self.permissions.can_read_contents(user_id, parent):
            items = await self.db.execute(
                select(Item).where(Item.parent_id == parent_id).order_by(func.lower(Item.name), Item.id)
            )
            uploads = await self.db.execute(select(BinaryFile).where(BinaryFile.parent_id == parent_id))
            return Listing.build(list(items.scalars().all()), list(uploads.scalars().all()))

        visible_ids = await self.permissions.shared_child_ids(user_id, parent_id)
        if not visible_ids:
            return Listing()
        items = await self.db.execute(
            select(Item).where(Item.id.in_(visible_ids)).order_by(func.lower(Item.name), Item.id)
        )
        return Listing.build(list(items.scalars().all()))

    # ── Private helpers ─────────────────────────────────────────────────────

    async def _owned_item(self, user_id: int, item_id: int, lock: bool = False) -> Item:
        stmt = select(Item).where(Item.id == item_id, Item.owner_id == user_id)
        if lock:
            stmt = stmt.with_for_update()
        item = (await self.db.execute(stmt)).scalar_one_or_none()
        if item is None:
            raise ItemNotFoundError("Item not found or unauthorized")
        return item

    async def _owned_folder(self, owner_id: int, folder_id: int) -> Item | None:
        result = await self.db.execute(
            select(Item).where(Item.id == folder_id, Item.owner_id == owner_id, Item.kind == ItemKind.FOLDER)
        )
        return result.scalar_one_or_none()

    def _discard_blobs(self, stored_names: list[str]) -> None:
        if not stored_names or self.blob_store is None:
            return
        for stored_name in stored_names:
            try:
                self.blob_store.delete(stored_name)
            except OSError as exc:
                # Metadata is already gone; an orphaned blob is harmless
                logger.warning("Could not remove blob %s: %s", stored_name, exc)
