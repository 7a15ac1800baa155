"""Infrastructure layer components."""

from .dynamodb_storybook_repository import DynamoDBStorybookRepository
from .dynamodb_user_repository import DynamoDBUserRepository
from .litellm_translation_provider import LiteLLMTranslationProvider
from .local_asset_storage import LocalAssetStorage
from .local_storybook_repository import LocalStorybookRepository
from .local_user_repository import LocalUserRepository
from .mock_translation_provider import MockTranslationProvider
from .s3_asset_storage import S3AssetStorage

__all__ = [
    "DynamoDBStorybookRepository",
    "DynamoDBUserRepository",
    "LiteLLMTranslationProvider",
    "LocalAssetStorage",
    "LocalStorybookRepository",
    "LocalUserRepository",
    "MockTranslationProvider",
    "S3AssetStorage",
]
