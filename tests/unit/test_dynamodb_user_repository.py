"""Tests for DynamoDB user repository."""

from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.domain.entities.user import User
from src.domain.errors import UserNotFoundError
from src.infrastructure.dynamodb_user_repository import DynamoDBUserRepository


@pytest.fixture
def mock_dynamodb_table():
    """Create a mock DynamoDB table."""
    return AsyncMock()


@pytest.fixture
def mock_aioboto3_session(mock_dynamodb_table):
    """Create a mock aioboto3 session whose resource yields the mock table."""
    mock_resource = MagicMock()
    mock_resource.Table = AsyncMock(return_value=mock_dynamodb_table)
    with patch("src.infrastructure.dynamodb_user_repository.aioboto3.Session") as mock_session_class:
        mock_session_instance = MagicMock()
        mock_session_class.return_value = mock_session_instance
        mock_session_instance.resource.return_value.__aenter__ = AsyncMock(return_value=mock_resource)
        mock_session_instance.resource.return_value.__aexit__ = AsyncMock(return_value=None)
        yield mock_session_instance


@pytest.fixture
def users(mock_aioboto3_session):
    return DynamoDBUserRepository(table_name="test-users", region_name="eu-west-1")


@pytest.mark.asyncio
async def test_get_user(users, mock_dynamodb_table, mock_aioboto3_session):
    mock_dynamodb_table.get_item.return_value = {"Item": {
        "id": "uid-123",
        "email": "reader@example.com",
        "displayName": "Sam",
        "photoURL": "https://example.com/sam.png",
        "createdAt": "2026-01-13T10:00:00+00:00",
        "storybookCount": Decimal("3"),
    }}

    user = await users.get_user("uid-123")

    mock_aioboto3_session.resource.assert_called_with("dynamodb", region_name="eu-west-1")
    assert user.display_name == "Sam"
    assert user.photo_url == "https://example.com/sam.png"
    assert user.storybook_count == 3
    assert user.created_at == datetime(2026, 1, 13, 10, 0, 0, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_get_user_not_found(users, mock_dynamodb_table):
    mock_dynamodb_table.get_item.return_value = {}

    with pytest.raises(UserNotFoundError):
        await users.get_user("missing")


@pytest.mark.asyncio
async def test_negative_count_is_clamped(users, mock_dynamodb_table):
    """Test that an over-decremented counter still loads as a valid user."""
    mock_dynamodb_table.get_item.return_value = {"Item": {
        "id": "uid-123",
        "createdAt": "2026-01-13T10:00:00+00:00",
        "storybookCount": Decimal("-1"),
    }}

    user = await users.get_user("uid-123")

    assert user.storybook_count == 0
    assert user.email == ""


@pytest.mark.asyncio
async def test_save_user_omits_unset_fields(users, mock_dynamodb_table):
    user = User(id="uid-123", email="reader@example.com", created_at=datetime(2026, 1, 13, tzinfo=timezone.utc))

    await users.save_user(user)

    item = mock_dynamodb_table.put_item.call_args.kwargs["Item"]
    assert item == {
        "id": "uid-123",
        "email": "reader@example.com",
        "createdAt": "2026-01-13T00:00:00+00:00",
        "storybookCount": 0,
    }


@pytest.mark.asyncio
async def test_adjust_storybook_count(users, mock_dynamodb_table):
    await users.adjust_storybook_count("uid-123", -1)

    mock_dynamodb_table.update_item.assert_called_once_with(
        Key={"id": "uid-123"},
        UpdateExpression="ADD storybookCount :delta",
        ExpressionAttributeValues={":delta": -1},
    )
