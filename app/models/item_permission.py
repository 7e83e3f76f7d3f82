"""
ItemPermission Model

A grant from an item's owner to one other user for one item. At most one
row exists per (item, user); grants are upserted. Owners never appear
here, they hold every capability implicitly.
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, UniqueConstraint
from sqlalchemy.orm import relationship

from app.database import Base

CAPABILITIES = ("can_view", "can_create", "can_upload", "can_edit", "can_delete")


class ItemPermission(Base):
    __tablename__ = "item_permissions"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    item_id = Column(Integer, ForeignKey("items.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    can_view = Column(Boolean, nullable=False, default=False)
    can_create = Column(Boolean, nullable=False, default=False)
    can_upload = Column(Boolean, nullable=False, default=False)
    can_edit = Column(Boolean, nullable=False, default=False)
    can_delete = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = Column(
        DateTime, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc)
    )

    item = relationship("Item", back_populates="permissions")
    user = relationship("User")

    __table_args__ = (
        UniqueConstraint("item_id", "user_id", name="uq_item_permissions_item_user"),
        Index("ix_item_permissions_user_id", "user_id"),
        Index("ix_item_permissions_item_id", "item_id"),
    )

    def capabilities(self) -> dict[str, bool]:
        return {name: bool(getattr(self, name)) for name in CAPABILITIES}

    def __repr__(self) -> str:
        return f"<ItemPermission(id={self.id}, item={self.item_id}, user={self.user_id}, view={self.can_view})>"
