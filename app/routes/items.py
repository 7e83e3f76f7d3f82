"""
Item Routes

API endpoints for the folder/file tree.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import get_current_user
from app.database import get_db
from app.models.user import User
from app.schemas.item import ItemCreate, ItemRename, ItemResponse, StructureResponse
from app.services.item_service import ItemService
from app.services.structure_service import StructureService
from app.storage import BlobStore, get_blob_store

router = APIRouter(tags=["Items"])


@router.post("", response_model=ItemResponse, status_code=status.HTTP_201_CREATED)
async def create_item(
    data: ItemCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Create a folder or a file."""
    return await ItemService(db).create_item(current_user.id, data.name, data.kind, data.parent_id)


@router.get("", response_model=StructureResponse)
async def list_children(
    parent_id: int | None = Query(None, description="Folder to list; the caller's top level when omitted"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    listing = await ItemService(db).list_children(current_user.id, parent_id)
    return StructureResponse.from_listing(listing)


@router.get("/structure", response_model=StructureResponse)
async def get_root_structure(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Own top level plus the roots of trees shared with the caller."""
    listing = await StructureService(db).get_root_structure(current_user.id)
    return StructureResponse.from_listing(listing)


@router.get("/{item_id}", response_model=ItemResponse)
async def get_item(
    item_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await ItemService(db).get_item(current_user.id, item_id)


@router.get("/{item_id}/children", response_model=StructureResponse)
async def get_children(
    item_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    listing = await StructureService(db).get_children(current_user.id, item_id)
    return StructureResponse.from_listing(listing)


@router.patch("/{item_id}", response_model=ItemResponse)
async def rename_item(
    item_id: int,
    data: ItemRename,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await ItemService(db).rename_item(current_user.id, item_id, data.name)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(
    item_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
):
    """
    Delete an item.

    Deleting a folder removes everything beneath it, uploads included,
    along with every permission granted on the removed items.
    """
    await ItemService(db, blob_store).delete_item(current_user.id, item_id)
    return None
