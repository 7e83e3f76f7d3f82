from functools import lru_cache

from app.config import settings
from app.storage.base import BlobStore
from app.storage.local import LocalBlobStore


@lru_cache
def get_blob_store() -> BlobStore:
    return LocalBlobStore(settings.upload_dir)


__all__ = ["BlobStore", "LocalBlobStore", "get_blob_store"]
