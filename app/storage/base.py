from abc import ABC, abstractmethod
from pathlib import Path
from typing import Protocol


class AsyncReadable(Protocol):
    async def read(self, size: int = -1) -> bytes: ...


class BlobStore(ABC):
    """Where uploaded bytes live, addressed by their stored name."""

    @abstractmethod
    async def save(self, source: AsyncReadable, name: str, max_size: int | None = None) -> int:
        """
        Stream ``source`` into the store under ``name``.

        Returns the number of bytes written. Raises PayloadTooLargeError
        (leaving nothing behind) when ``max_size`` is exceeded.
        """

    @abstractmethod
    def path(self, name: str) -> Path:
        """Local path serving the blob's content."""

    @abstractmethod
    def exists(self, name: str) -> bool: ...

    @abstractmethod
    def delete(self, name: str) -> bool:
        """Remove the blob. A missing blob is not an error; returns whether one was removed."""
