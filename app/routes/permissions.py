"""
Permission Management Routes

Owners share items with other users through per-item grants.

Route table (all under /api/v1/permissions prefix):
  GET    /                          grants the caller has handed out
  GET    /users                     users the caller can share with
  GET    /items/{item_id}           grantees of an item (owner)
  PUT    /items/{item_id}           create or update a grant (owner)
  DELETE /items/{item_id}/{user_id} revoke a grant (owner)
  GET    /items/{item_id}/me        the caller's own capabilities on an item
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import get_current_user
from app.database import get_db
from app.models.user import User
from app.schemas.permission import (
    GrantedPermissionListResponse,
    ItemPermissionListResponse,
    MyCapabilitiesResponse,
    PermissionGrant,
    PermissionMessage,
)
from app.schemas.user import ShareableUserListResponse
from app.services.permission_service import PermissionService

router = APIRouter(tags=["Permissions"])


@router.get("", response_model=GrantedPermissionListResponse)
async def list_granted_permissions(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    permissions = await PermissionService(db).list_granted_permissions(current_user.id)
    return {"permissions": permissions}


@router.get("/users", response_model=ShareableUserListResponse)
async def list_shareable_users(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    users = await PermissionService(db).list_shareable_users(current_user.id)
    return {"users": users}


@router.get("/items/{item_id}", response_model=ItemPermissionListResponse)
async def list_item_permissions(
    item_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    permissions = await PermissionService(db).list_item_permissions(current_user.id, item_id)
    return {"permissions": permissions}


@router.put("/items/{item_id}", response_model=PermissionMessage)
async def set_item_permission(
    item_id: int,
    data: PermissionGrant,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Grant capabilities on an item; granting again replaces the previous flags."""
    flags = data.model_dump(exclude={"target_user_id"})
    await PermissionService(db).grant_permission(current_user.id, item_id, data.target_user_id, **flags)
    return {"message": "Permission updated successfully"}


@router.delete("/items/{item_id}/{user_id}", response_model=PermissionMessage)
async def remove_item_permission(
    item_id: int,
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    removed = await PermissionService(db).revoke_permission(current_user.id, item_id, user_id)
    message = "Permission removed successfully" if removed else "No permission to remove"
    return {"message": message}


@router.get("/items/{item_id}/me", response_model=MyCapabilitiesResponse)
async def get_my_capabilities(
    item_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await PermissionService(db).get_my_capabilities(current_user.id, item_id)
