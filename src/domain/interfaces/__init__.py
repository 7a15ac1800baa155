"""Domain interfaces for the storybook library."""

from .asset_storage import AssetStorage
from .storybook_repository import StorybookRepository
from .translation_provider import TranslationProvider
from .user_repository import UserRepository

__all__ = ["AssetStorage", "StorybookRepository", "TranslationProvider", "UserRepository"]
