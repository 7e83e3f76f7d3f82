"""
User Model

Accounts are managed by the account service; the item store only needs
identity and display fields for sharing dialogs.
"""

import enum
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Enum, Integer, String
from sqlalchemy.orm import relationship

from app.database import Base


class RoleEnum(str, enum.Enum):
    user = "user"
    admin = "admin"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    role = Column(
        Enum(RoleEnum, name="user_role", native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=RoleEnum.user,
    )
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = Column(
        DateTime, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc)
    )

    items = relationship("Item", back_populates="owner", passive_deletes=True)
    binary_files = relationship("BinaryFile", back_populates="owner", passive_deletes=True)

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email})>"
