from datetime import datetime

from pydantic import BaseModel, ConfigDict


class BinaryFileResponse(BaseModel):
    """Uploaded file metadata"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    original_name: str
    stored_name: str
    size_bytes: int
    mime_type: str | None = None
    owner_id: int
    parent_id: int | None
    url: str
    created_at: datetime


class BinaryFileListResponse(BaseModel):
    files: list[BinaryFileResponse]
