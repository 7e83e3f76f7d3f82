"""
BinaryFile Model

Metadata of an uploaded blob. The bytes live in the blob store under
``stored_name``; the row is logically a child of the folder in
``parent_id`` and goes away with it.
"""

from datetime import datetime, timezone

from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from app.database import Base


class BinaryFile(Base):
    __tablename__ = "binary_files"

    id = Column(Integer, primary_key=True, index=True)
    stored_name = Column(String(255), nullable=False, unique=True)
    original_name = Column(String(255), nullable=False)
    size_bytes = Column(BigInteger, nullable=False)
    mime_type = Column(String(100), nullable=True)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    parent_id = Column(Integer, ForeignKey("items.id", ondelete="CASCADE"), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)

    owner = relationship("User", back_populates="binary_files")
    parent = relationship("Item", back_populates="binary_files")

    __table_args__ = (
        Index("ix_binary_files_owner_parent", "owner_id", "parent_id"),
        Index("ix_binary_files_parent_id", "parent_id"),
    )

    @property
    def name(self) -> str:
        return self.original_name

    @property
    def url(self) -> str:
        return f"/api/v1/files/{self.id}/download"

    def __repr__(self):
        return f"<BinaryFile(id={self.id}, original_name={self.original_name}, owner_id={self.owner_id})>"
