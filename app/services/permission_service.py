"""
PermissionService

Resolves what a user may do with an item and manages the per-item grant
list. Ownership implies every capability; anyone else holds exactly the
flags of their direct grant row.

Visibility is wider than the direct flags:
  - a ``can_view`` grant on a folder lets the grantee read the whole
    subtree under it (inherited view);
  - a ``can_view`` grant anywhere below an item reveals that item as a
    "ghost ancestor", so the path from the root down to the shared item
    can be displayed.

Both walks are recursive CTEs bounded by the tree depth. Trees are
acyclic because a parent must exist before its child and items are never
re-parented.
"""

import logging

from sqlalchemy import exists, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from app.exceptions import ConflictError, InternalError, ItemNotFoundError, UserNotFoundError, ValidationError
from app.models.item import Item
from app.models.item_permission import CAPABILITIES, ItemPermission
from app.models.user import User

logger = logging.getLogger(__name__)


def full_capabilities() -> dict[str, bool]:
    return {name: True for name in CAPABILITIES}


def no_capabilities() -> dict[str, bool]:
    return {name: False for name in CAPABILITIES}


def subtree_cte(item_id: int, name: str = "subtree"):
    """The item and every descendant."""
    tree = select(Item.id).where(Item.id == item_id).cte(name, recursive=True)
    child = aliased(Item)
    return tree.union_all(select(child.id).where(child.parent_id == tree.c.id))


def ancestry_cte(item_id: int, name: str = "ancestry"):
    """The item and every ancestor up to its root."""
    chain = select(Item.id, Item.parent_id).where(Item.id == item_id).cte(name, recursive=True)
    parent = aliased(Item)
    return chain.union(select(parent.id, parent.parent_id).where(parent.id == chain.c.parent_id))


def shared_paths_cte(user_id: int, name: str = "shared_paths"):
    """Every item shared with ``user_id`` for viewing, plus all of their ancestors."""
    shared = (
        select(Item.id, Item.parent_id)
        .join(ItemPermission, ItemPermission.item_id == Item.id)
        .where(ItemPermission.user_id == user_id, ItemPermission.can_view.is_(True))
        .cte(name, recursive=True)
    )
    parent = aliased(Item)
    return shared.union(select(parent.id, parent.parent_id).where(parent.id == shared.c.parent_id))


class PermissionService:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # ── Resolution ──────────────────────────────────────────────────────────

    @staticmethod
    def is_owner(user_id: int, item: Item | None) -> bool:
        return item is not None and item.owner_id == user_id

    async def effective_capabilities(self, user_id: int, item_id: int) -> dict[str, bool]:
        """
        Owner -> all true; otherwise the flags of the direct grant on
        exactly this item; otherwise (no row, no item) all false.
        """
        item = await self.db.get(Item, item_id)
        if item is None:
            return no_capabilities()
        if self.is_owner(user_id, item):
            return full_capabilities()

        grant = await self._find_grant(item_id, user_id)
        return grant.capabilities() if grant else no_capabilities()

    async def has_ancestor_visibility(self, user_id: int, item_id: int) -> bool:
        """
        True when the item itself or any descendant carries a direct
        ``can_view`` grant for ``user_id``. Stops at the first match.
        """
        tree = subtree_cte(item_id)
        stmt = select(
            exists().where(
                ItemPermission.item_id.in_(select(tree.c.id)),
                ItemPermission.user_id == user_id,
                ItemPermission.can_view.is_(True),
            )
        )
        return bool(await self.db.scalar(stmt))

    async def has_inherited_view(self, user_id: int, item_id: int) -> bool:
        """True when the item or one of its ancestors is shared with ``can_view``."""
        chain = ancestry_cte(item_id)
        stmt = select(
            exists().where(
                ItemPermission.item_id.in_(select(chain.c.id)),
                ItemPermission.user_id == user_id,
                ItemPermission.can_view.is_(True),
            )
        )
        return bool(await self.db.scalar(stmt))

    async def can_view(self, user_id: int, item: Item | None) -> bool:
        if item is None:
            return False
        if self.is_owner(user_id, item):
            return True
        if await self.has_inherited_view(user_id, item.id):
            return True
        return await self.has_ancestor_visibility(user_id, item.id)

    async def can_read_contents(self, user_id: int, item: Item | None) -> bool:
        """Owner or inherited view: everything inside the folder is readable."""
        if item is None:
            return False
        return self.is_owner(user_id, item) or await self.has_inherited_view(user_id, item.id)

    async def shared_root_ids(self, user_id: int) -> list[int]:
        """Roots of trees holding at least one item shared with ``user_id``."""
        shared = shared_paths_cte(user_id)
        result = await self.db.execute(select(shared.c.id).where(shared.c.parent_id.is_(None)))
        return [row[0] for row in result.all()]

    async def shared_child_ids(self, user_id: int, parent_id: int) -> list[int]:
        """Children of ``parent_id`` lying on a path to something shared with ``user_id``."""
        shared = shared_paths_cte(user_id)
        result = await self.db.execute(select(shared.c.id).where(shared.c.parent_id == parent_id))
        return [row[0] for row in result.all()]

    async def get_my_capabilities(self, user_id: int, item_id: int) -> dict:
        item = await self.db.get(Item, item_id)
        if item is None:
            raise ItemNotFoundError()

        capabilities = await self.effective_capabilities(user_id, item_id)
        return {
            "item_id": item_id,
            "is_owner": self.is_owner(user_id, item),
            "can_view_path": await self.can_view(user_id, item),
            **capabilities,
        }

    # ── Grant management (owner only) ───────────────────────────────────────

    async def grant_permission(self, owner_id: int, item_id: int, target_user_id: int, **flags: bool) -> ItemPermission:
        """
        Create or update the grant for (item, target user). Calling twice
        leaves one row holding the latest flags.
        """
        unknown = set(flags) - set(CAPABILITIES)
        if unknown:
            raise ValueError(f"Unknown capabilities: {sorted(unknown)}")

        await self._require_owned_item(owner_id, item_id, lock=True)
        if target_user_id == owner_id:
            raise ValidationError("The owner already has full access to this item", field="target_user_id")
        if await self.db.get(User, target_user_id) is None:
            raise UserNotFoundError("Target user not found")

        values = {name: bool(flags.get(name, False)) for name in CAPABILITIES}
        grant = await self._find_grant(item_id, target_user_id, lock=True)
        if grant is None:
            grant = ItemPermission(item_id=item_id, user_id=target_user_id, **values)
            self.db.add(grant)
        else:
            for name, value in values.items():
                setattr(grant, name, value)

        try:
            await self.db.commit()
        except IntegrityError as exc:
            await self.db.rollback()
            logger.warning("Concurrent grant on item=%s user=%s", item_id, target_user_id)
            raise ConflictError() from exc
        except SQLAlchemyError as exc:
            await self.db.rollback()
            raise InternalError("Failed to update permission", operation="grant_permission") from exc

        await self.db.refresh(grant)
        logger.info(
            "Permission set: item=%s user=%s flags=%s",
            item_id,
            target_user_id,
            ",".join(name for name, value in values.items() if value) or "none",
        )
        return grant

    async def revoke_permission(self, owner_id: int, item_id: int, target_user_id: int) -> bool:
        """Remove the grant; returns False when there was none."""
        await self._require_owned_item(owner_id, item_id)
        grant = await self._find_grant(item_id, target_user_id, lock=True)
        if grant is None:
            return False

        try:
            await self.db.delete(grant)
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            raise InternalError("Failed to remove permission", operation="revoke_permission") from exc

        logger.info("Permission revoked: item=%s user=%s", item_id, target_user_id)
        return True

    async def list_item_permissions(self, owner_id: int, item_id: int) -> list[dict]:
        await self._require_owned_item(owner_id, item_id)
        result = await self.db.execute(
            select(ItemPermission, User)
            .join(User, User.id == ItemPermission.user_id)
            .where(ItemPermission.item_id == item_id)
            .order_by(User.first_name, User.last_name, User.id)
        )
        return [
            {
                "user_id": user.id,
                "first_name": user.first_name,
                "last_name": user.last_name,
                "email": user.email,
                **grant.capabilities(),
            }
            for grant, user in result.all()
        ]

    async def list_granted_permissions(self, owner_id: int) -> list[dict]:
        """Every grant the owner has handed out, across all their items."""
        result = await self.db.execute(
            select(ItemPermission, Item.name, User)
            .join(Item, Item.id == ItemPermission.item_id)
            .join(User, User.id == ItemPermission.user_id)
            .where(Item.owner_id == owner_id)
            .order_by(Item.name, User.first_name, ItemPermission.id)
        )
        return [
            {
                "id": grant.id,
                "item_id": grant.item_id,
                "item_name": item_name,
                "user_id": user.id,
                "granted_to": f"{user.first_name} {user.last_name}",
                **grant.capabilities(),
            }
            for grant, item_name, user in result.all()
        ]

    async def list_shareable_users(self, user_id: int) -> list[User]:
        result = await self.db.execute(
            select(User).where(User.id != user_id).order_by(User.first_name, User.last_name, User.id)
        )
        return list(result.scalars().all())

    # ── Private helpers ─────────────────────────────────────────────────────

    async def _require_owned_item(self, owner_id: int, item_id: int, lock: bool = False) -> Item:
        # Missing and not-yours are reported the same way
        stmt = select(Item).where(Item.id == item_id, Item.owner_id == owner_id)
        if lock:
            stmt = stmt.with_for_update()
        item = (await self.db.execute(stmt)).scalar_one_or_none()
        if item is None:
            raise ItemNotFoundError()
        return item

    async def _find_grant(self, item_id: int, user_id: int, lock: bool = False) -> ItemPermission | None:
        stmt = select(ItemPermission).where(ItemPermission.item_id == item_id, ItemPermission.user_id == user_id)
        if lock:
            stmt = stmt.with_for_update()
        return (await self.db.execute(stmt)).scalars().first()
