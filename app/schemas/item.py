"""
Item Schemas

Pydantic models for the folder/file tree and its listings.
"""

from datetime import datetime
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.binary_file import BinaryFile
from app.models.item import ItemKind
from app.schemas.binary_file import BinaryFileResponse


class ItemCreate(BaseModel):
    """Request to create a folder or file"""

    name: str = Field(..., min_length=1, max_length=255)
    kind: ItemKind
    parent_id: int | None = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            msg = "Name must not be blank"
            raise ValueError(msg)
        return v


class ItemRename(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


class ItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    kind: ItemKind
    owner_id: int
    parent_id: int | None
    extension: str | None = None
    created_at: datetime
    updated_at: datetime


class UploadEntry(BinaryFileResponse):
    """An uploaded file shown alongside created files in a listing"""

    kind: Literal["upload"] = "upload"


FileEntry = Union[ItemResponse, UploadEntry]


class StructureResponse(BaseModel):
    """Folders first, then created and uploaded files"""

    folders: list[ItemResponse] = Field(default_factory=list)
    files: list[FileEntry] = Field(default_factory=list)

    @classmethod
    def from_listing(cls, listing) -> "StructureResponse":
        return cls(
            folders=[ItemResponse.model_validate(folder) for folder in listing.folders],
            files=[
                UploadEntry.model_validate(entry) if isinstance(entry, BinaryFile) else ItemResponse.model_validate(entry)
                for entry in listing.files
            ],
        )
