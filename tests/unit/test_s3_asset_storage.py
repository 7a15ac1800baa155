"""Tests for S3 asset storage."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.domain.errors import InvalidAssetError
from src.infrastructure.s3_asset_storage import CACHE_CONTROL, S3AssetStorage


@pytest.fixture
def mock_s3_client():
    """Create a mock S3 client."""
    return AsyncMock()


@pytest.fixture
def storage(mock_s3_client):
    """Create an S3 asset storage whose client is mocked."""
    with patch("src.infrastructure.s3_asset_storage.aioboto3.Session") as mock_session_class:
        mock_session_instance = MagicMock()
        mock_session_class.return_value = mock_session_instance
        mock_session_instance.client.return_value.__aenter__ = AsyncMock(return_value=mock_s3_client)
        mock_session_instance.client.return_value.__aexit__ = AsyncMock(return_value=None)
        yield S3AssetStorage(bucket_name="storybook-assets", region_name="us-east-1")


@pytest.mark.asyncio
async def test_upload(storage, mock_s3_client):
    url = await storage.upload(b"img", "storybooks/b1/covers/x.jpg", "image/jpeg")

    assert url == "s3://storybook-assets/storybooks/b1/covers/x.jpg"
    mock_s3_client.put_object.assert_called_once_with(
        Bucket="storybook-assets",
        Key="storybooks/b1/covers/x.jpg",
        Body=b"img",
        ContentType="image/jpeg",
        CacheControl=CACHE_CONTROL,
    )


@pytest.mark.asyncio
async def test_delete(storage, mock_s3_client):
    await storage.delete("s3://storybook-assets/storybooks/b1/pages/p.png")

    mock_s3_client.delete_object.assert_called_once_with(
        Bucket="storybook-assets", Key="storybooks/b1/pages/p.png"
    )


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "url",
    ["s3://other-bucket/storybooks/b1/pages/p.png", "s3://storybook-assets/", "https://example.com/p.png"],
)
async def test_delete_foreign_url(storage, mock_s3_client, url):
    with pytest.raises(InvalidAssetError):
        await storage.delete(url)

    mock_s3_client.delete_object.assert_not_called()
