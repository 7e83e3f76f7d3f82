import logging
from pathlib import Path

from app.exceptions import PayloadTooLargeError
from app.storage.base import AsyncReadable, BlobStore

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192


class LocalBlobStore(BlobStore):
    """Blobs as plain files in one directory on the local disk."""

    def __init__(self, root: str | Path):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def path(self, name: str) -> Path:
        # Stored names are generated server side; basename keeps lookups inside root
        return self.root / Path(name).name

    def exists(self, name: str) -> bool:
        return self.path(name).is_file()

    async def save(self, source: AsyncReadable, name: str, max_size: int | None = None) -> int:
        file_path = self.path(name)
        size = 0
        try:
            with file_path.open("wb") as buffer:
                while chunk := await source.read(CHUNK_SIZE):
                    size += len(chunk)
                    if max_size is not None and size > max_size:
                        raise PayloadTooLargeError(max_size)
                    buffer.write(chunk)
        except BaseException:
            file_path.unlink(missing_ok=True)
            raise
        return size

    def delete(self, name: str) -> bool:
        file_path = self.path(name)
        try:
            file_path.unlink()
        except FileNotFoundError:
            logger.debug("Blob %s already gone", name)
            return False
        return True
