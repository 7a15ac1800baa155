"""Application configuration using Pydantic Settings."""

from typing import Literal, Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_JWT_SECRET = "change-me"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application settings
    app_name: str = "storybook-library"
    app_version: str = "0.1.0"
    debug: bool = False

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_allow_origins: list[str] = ["*"]

    # Logging
    log_level: str = "INFO"

    # Storage backend: in-memory for development, DynamoDB + S3 for deployment
    backend: Literal["local", "aws"] = "local"

    # AWS settings
    aws_region: str = "us-east-1"
    storybooks_table_name: str = "storybooks"
    users_table_name: str = "users"
    assets_bucket_name: str = "storybook-assets"

    # Translation provider: "litellm" or "mock"
    translation_provider: Literal["litellm", "mock"] = "mock"
    llm_model: str = "gpt-3.5-turbo"
    llm_api_key: Optional[str] = None
    llm_timeout_seconds: Optional[float] = 60.0

    # Library and page limits
    library_page_size: int = 20
    max_pages_per_book: int = 50
    translation_interval_seconds: float = 0.5
    max_write_attempts: int = 3

    # Auth token verification
    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    jwt_audience: Optional[str] = None

    @model_validator(mode="after")
    def _require_secret_outside_local(self) -> "Settings":
        if self.backend != "local" and self.jwt_secret == DEFAULT_JWT_SECRET:
            raise ValueError("JWT_SECRET must be set when backend is not local")
        return self


# Create a singleton instance
settings = Settings()
