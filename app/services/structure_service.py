"""
Structure Service

Assembles what a user sees when opening the file manager: their own top
level plus the roots of other users' trees that lead to something shared
with them. Those foreign roots are path skeletons; their contents are
permission-checked again when expanded.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.binary_file import BinaryFile
from app.models.item import Item
from app.services.item_service import ItemService, Listing
from app.services.permission_service import PermissionService

logger = logging.getLogger(__name__)


class StructureService:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self.items = ItemService(db)
        self.permissions = PermissionService(db)

    async def get_root_structure(self, user_id: int) -> Listing:
        own = await self.items.list_children(user_id, None)

        shared_ids = await self.permissions.shared_root_ids(user_id)
        if not shared_ids:
            return own

        result = await self.db.execute(
            select(Item)
            .where(Item.id.in_(shared_ids), Item.owner_id != user_id)
            .order_by(func.lower(Item.name), Item.id)
        )
        shared_roots = list(result.scalars().all())
        logger.debug("User %s sees %d shared roots", user_id, len(shared_roots))
        created = [entry for entry in own.files if isinstance(entry, Item)]
        uploads = [entry for entry in own.files if isinstance(entry, BinaryFile)]
        return Listing.build([*own.folders, *created, *shared_roots], uploads)

    async def get_children(self, user_id: int, parent_id: int) -> Listing:
        return await self.items.list_children(user_id, parent_id)
