"""
Permission Schemas

Grants are a bitset of five independent capabilities per (item, user).
"""

from pydantic import BaseModel, ConfigDict, Field


class Capabilities(BaseModel):
    can_view: bool = False
    can_create: bool = False
    can_upload: bool = False
    can_edit: bool = False
    can_delete: bool = False


class PermissionGrant(Capabilities):
    """Request to create or update a grant on an item"""

    target_user_id: int = Field(..., ge=1)


class ItemPermissionResponse(Capabilities):
    """One grantee of an item, with display fields"""

    model_config = ConfigDict(from_attributes=True)

    user_id: int
    first_name: str
    last_name: str
    email: str


class ItemPermissionListResponse(BaseModel):
    permissions: list[ItemPermissionResponse]


class GrantedPermissionResponse(Capabilities):
    id: int
    item_id: int
    item_name: str
    user_id: int
    granted_to: str


class GrantedPermissionListResponse(BaseModel):
    permissions: list[GrantedPermissionResponse]


class MyCapabilitiesResponse(Capabilities):
    item_id: int
    is_owner: bool
    can_view_path: bool


class PermissionMessage(BaseModel):
    message: str
