"""Local in-memory implementation of asset storage."""

import logging
from typing import Dict, Optional

from ..domain.errors import InvalidAssetError
from ..domain.interfaces.asset_storage import AssetStorage

logger = logging.getLogger(__name__)

LOCAL_URL_PREFIX = "memory://"


class LocalAssetStorage(AssetStorage):
    """Keeps uploaded assets in a dictionary keyed by path.

    ``fail_deletes_for`` lets tests simulate a storage outage for specific URLs.
    """

    def __init__(self, fail_deletes_for: Optional[set[str]] = None):
        self._assets: Dict[str, tuple[bytes, str]] = {}
        self.fail_deletes_for = set(fail_deletes_for or ())

    async def upload(self, data: bytes, path: str, content_type: str) -> str:
        return self.put(path, data, content_type)

    async def delete(self, url: str) -> None:
        """Delete an asset.

        Raises:
            InvalidAssetError: If the URL is not a local asset URL.
            FileNotFoundError: If no asset is stored at the URL.
        """
        if url in self.fail_deletes_for:
            raise ConnectionError(f"Simulated storage failure deleting {url}")
        if not url.startswith(LOCAL_URL_PREFIX):
            raise InvalidAssetError(f"Not a local asset URL: {url}")
        path = url[len(LOCAL_URL_PREFIX):]
        if path not in self._assets:
            raise FileNotFoundError(f"Asset not found: {url}")
        del self._assets[path]
        logger.debug(f"Deleted local asset {path}")

    def put(self, path: str, data: bytes, content_type: str) -> str:
        """Store an asset synchronously and return its URL."""
        self._assets[path] = (data, content_type)
        return f"{LOCAL_URL_PREFIX}{path}"

    def contains(self, url: str) -> bool:
        return url.startswith(LOCAL_URL_PREFIX) and url[len(LOCAL_URL_PREFIX):] in self._assets

    def get_all_paths(self) -> list[str]:
        return sorted(self._assets)
