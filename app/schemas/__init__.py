from .binary_file import BinaryFileListResponse, BinaryFileResponse
from .item import ItemCreate, ItemRename, ItemResponse, StructureResponse, UploadEntry
from .permission import (
    Capabilities,
    GrantedPermissionListResponse,
    GrantedPermissionResponse,
    ItemPermissionListResponse,
    ItemPermissionResponse,
    MyCapabilitiesResponse,
    PermissionGrant,
    PermissionMessage,
)
from .user import ShareableUser, ShareableUserListResponse

__all__ = [
    "BinaryFileListResponse",
    "BinaryFileResponse",
    "ItemCreate",
    "ItemRename",
    "ItemResponse",
    "StructureResponse",
    "UploadEntry",
    "Capabilities",
    "GrantedPermissionListResponse",
    "GrantedPermissionResponse",
    "ItemPermissionListResponse",
    "ItemPermissionResponse",
    "MyCapabilitiesResponse",
    "PermissionGrant",
    "PermissionMessage",
    "ShareableUser",
    "ShareableUserListResponse",
]
