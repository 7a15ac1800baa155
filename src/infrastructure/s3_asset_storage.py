"""S3 implementation of asset storage."""

import logging

import aioboto3

from ..domain.errors import InvalidAssetError
from ..domain.interfaces.asset_storage import AssetStorage

logger = logging.getLogger(__name__)

CACHE_CONTROL = "max-age=31536000"


class S3AssetStorage(AssetStorage):
    """Stores storybook images in an S3 bucket.

    Asset URLs use the ``s3://{bucket}/{key}`` form.
    """

    def __init__(self, bucket_name: str, region_name: str = "us-east-1"):
        """Initialize the S3 asset storage.

        Args:
            bucket_name: The name of the S3 bucket holding storybook assets.
            region_name: AWS region name (default: us-east-1).
        """
        self.bucket_name = bucket_name
        self.region_name = region_name
        self._session = aioboto3.Session()

    async def upload(self, data: bytes, path: str, content_type: str) -> str:
        async with self._session.client("s3", region_name=self.region_name) as s3:
            await s3.put_object(
                Bucket=self.bucket_name,
                Key=path,
                Body=data,
                ContentType=content_type,
                CacheControl=CACHE_CONTROL,
            )
        logger.info(f"Uploaded {len(data)} bytes to s3://{self.bucket_name}/{path}")
        return f"s3://{self.bucket_name}/{path}"

    async def delete(self, url: str) -> None:
        """Delete the object behind ``url``.

        Raises:
            InvalidAssetError: If the URL does not point into this bucket.
        """
        key = self.key_for(url)
        async with self._session.client("s3", region_name=self.region_name) as s3:
            await s3.delete_object(Bucket=self.bucket_name, Key=key)
        logger.info(f"Deleted {url}")

    def key_for(self, url: str) -> str:
        prefix = f"s3://{self.bucket_name}/"
        if not url.startswith(prefix) or len(url) == len(prefix):
            raise InvalidAssetError(f"Asset URL {url} is not in bucket {self.bucket_name}")
        return url[len(prefix):]
