"""Asset storage interface."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class AssetStorage(Protocol):
    """Protocol for binary image storage.

    Assets are immutable once uploaded: a replacement is an upload of a new
    object followed by deletion of the old one.
    """

    async def upload(self, data: bytes, path: str, content_type: str) -> str:
        """Upload ``data`` under ``path`` and return its URL."""
        ...

    async def delete(self, url: str) -> None:
        """Delete the asset behind ``url``."""
        ...
