"""Tests for application settings."""

import pytest
from pydantic import ValidationError

from src.application.config import DEFAULT_JWT_SECRET, Settings


def test_local_backend_allows_default_secret():
    config = Settings(backend="local", jwt_secret=DEFAULT_JWT_SECRET)

    assert config.jwt_secret == DEFAULT_JWT_SECRET


def test_aws_backend_requires_secret():
    with pytest.raises(ValidationError, match="JWT_SECRET"):
        Settings(backend="aws", jwt_secret=DEFAULT_JWT_SECRET)


def test_aws_backend_with_secret():
    config = Settings(backend="aws", jwt_secret="a-real-secret")

    assert config.backend == "aws"
    assert config.library_page_size == 20
    assert config.translation_interval_seconds == 0.5
