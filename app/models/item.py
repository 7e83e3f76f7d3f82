"""
Item Model

A node of the file manager hierarchy: a folder, or a file whose content
is metadata only. Every item of one tree shares the root's owner.
"""

import enum
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from app.database import Base


class ItemKind(str, enum.Enum):
    FOLDER = "folder"
    FILE = "file"


class Item(Base):
    """Folder or file node"""

    __tablename__ = "items"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    kind = Column(
        Enum(ItemKind, name="item_kind", native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    parent_id = Column(Integer, ForeignKey("items.id", ondelete="CASCADE"), nullable=True)
    extension = Column(String(50), nullable=True)  # files only
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    # Relationships
    owner = relationship("User", back_populates="items")
    parent = relationship("Item", remote_side=[id], back_populates="children")
    children = relationship("Item", back_populates="parent", passive_deletes=True)
    binary_files = relationship("BinaryFile", back_populates="parent", passive_deletes=True)
    permissions = relationship("ItemPermission", back_populates="item", passive_deletes=True)

    __table_args__ = (
        Index("ix_items_owner_parent", "owner_id", "parent_id"),
        Index("ix_items_owner_kind", "owner_id", "kind"),
        Index("ix_items_parent_id", "parent_id"),
    )

    @property
    def is_folder(self) -> bool:
        return self.kind == ItemKind.FOLDER

    def __repr__(self):
        return f"<Item(id={self.id}, name={self.name}, kind={self.kind}, owner_id={self.owner_id})>"
