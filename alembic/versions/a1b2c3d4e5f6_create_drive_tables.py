"""create_drive_tables

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-19

Creates users, items (folders and files), binary_files (uploads) and
item_permissions (per-item grants).
"""

import sqlalchemy as sa

from alembic import op

# revision identifiers
revision = "a1b2c3d4e5f6"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=5), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_index("ix_users_id", "users", ["id"], unique=False)

    op.create_table(
        "items",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("kind", sa.String(length=6), nullable=False),
        sa.Column("owner_id", sa.Integer(), nullable=False),
        sa.Column("parent_id", sa.Integer(), nullable=True),
        sa.Column("extension", sa.String(length=50), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["parent_id"], ["items.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_items_id", "items", ["id"], unique=False)
    op.create_index("ix_items_owner_parent", "items", ["owner_id", "parent_id"], unique=False)
    op.create_index("ix_items_owner_kind", "items", ["owner_id", "kind"], unique=False)
    op.create_index("ix_items_parent_id", "items", ["parent_id"], unique=False)

    op.create_table(
        "binary_files",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("stored_name", sa.String(length=255), nullable=False),
        sa.Column("original_name", sa.String(length=255), nullable=False),
        sa.Column("size_bytes", sa.BigInteger(), nullable=False),
        sa.Column("mime_type", sa.String(length=100), nullable=True),
        sa.Column("owner_id", sa.Integer(), nullable=False),
        sa.Column("parent_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["parent_id"], ["items.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("stored_name"),
    )
    op.create_index("ix_binary_files_id", "binary_files", ["id"], unique=False)
    op.create_index("ix_binary_files_owner_parent", "binary_files", ["owner_id", "parent_id"], unique=False)
    op.create_index("ix_binary_files_parent_id", "binary_files", ["parent_id"], unique=False)

    op.create_table(
        "item_permissions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("item_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("can_view", sa.Boolean(), nullable=False),
        sa.Column("can_create", sa.Boolean(), nullable=False),
        sa.Column("can_upload", sa.Boolean(), nullable=False),
        sa.Column("can_edit", sa.Boolean(), nullable=False),
        sa.Column("can_delete", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["item_id"], ["items.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("item_id", "user_id", name="uq_item_permissions_item_user"),
    )
    op.create_index("ix_item_permissions_id", "item_permissions", ["id"], unique=False)
    op.create_index("ix_item_permissions_user_id", "item_permissions", ["user_id"], unique=False)
    op.create_index("ix_item_permissions_item_id", "item_permissions", ["item_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_item_permissions_item_id", table_name="item_permissions")
    op.drop_index("ix_item_permissions_user_id", table_name="item_permissions")
    op.drop_index("ix_item_permissions_id", table_name="item_permissions")
    op.drop_table("item_permissions")
    op.drop_index("ix_binary_files_parent_id", table_name="binary_files")
    op.drop_index("ix_binary_files_owner_parent", table_name="binary_files")
    op.drop_index("ix_binary_files_id", table_name="binary_files")
    op.drop_table("binary_files")
    op.drop_index("ix_items_parent_id", table_name="items")
    op.drop_index("ix_items_owner_kind", table_name="items")
    op.drop_index("ix_items_owner_parent", table_name="items")
    op.drop_index("ix_items_id", table_name="items")
    op.drop_table("items")
    op.drop_index("ix_users_id", table_name="users")
    op.drop_table("users")
