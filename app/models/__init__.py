from .user import RoleEnum, User
from .item import Item, ItemKind
from .binary_file import BinaryFile
from .item_permission import CAPABILITIES, ItemPermission

__all__ = [
    "RoleEnum",
    "User",
    "Item",
    "ItemKind",
    "BinaryFile",
    "CAPABILITIES",
    "ItemPermission",
]
