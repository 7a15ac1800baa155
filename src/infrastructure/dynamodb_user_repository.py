"""DynamoDB implementation of the user repository."""

from datetime import datetime
from typing import Any, Dict

import aioboto3

from ..domain.entities.user import User
from ..domain.errors import UserNotFoundError
from ..domain.interfaces.user_repository import UserRepository


class DynamoDBUserRepository(UserRepository):
    """DynamoDB repository for user documents."""

    def __init__(self, table_name: str, region_name: str = "us-east-1"):
        """Initialize the DynamoDB user repository.

        Args:
            table_name: The name of the DynamoDB table.
            region_name: AWS region name (default: us-east-1).
        """
        self.table_name = table_name
        self.region_name = region_name
        self._session = aioboto3.Session()

    async def get_user(self, user_id: str) -> User:
        """Retrieve a user by ID from DynamoDB.

        Raises:
            UserNotFoundError: If the user is not found.
        """
        async with self._session.resource("dynamodb", region_name=self.region_name) as dynamodb:
            table = await dynamodb.Table(self.table_name)
            response = await table.get_item(Key={"id": user_id})

            if "Item" not in response:
                raise UserNotFoundError(user_id)

            return self._item_to_user(response["Item"])

    async def save_user(self, user: User) -> None:
        async with self._session.resource("dynamodb", region_name=self.region_name) as dynamodb:
            table = await dynamodb.Table(self.table_name)
            await table.put_item(Item=self._user_to_item(user))

    async def adjust_storybook_count(self, user_id: str, delta: int) -> None:
        async with self._session.resource("dynamodb", region_name=self.region_name) as dynamodb:
            table = await dynamodb.Table(self.table_name)
            await table.update_item(
                Key={"id": user_id},
                UpdateExpression="ADD storybookCount :delta",
                ExpressionAttributeValues={":delta": delta},
            )

    def _user_to_item(self, user: User) -> Dict[str, Any]:
        """Convert a User entity to a DynamoDB item."""
        item: Dict[str, Any] = {
            "id": user.id,
            "email": user.email,
            "createdAt": user.created_at.isoformat(),
            "storybookCount": user.storybook_count,
        }
        if user.display_name is not None:
            item["displayName"] = user.display_name
        if user.photo_url is not None:
            item["photoURL"] = user.photo_url
        return item

    def _item_to_user(self, item: Dict[str, Any]) -> User:
        """Convert a DynamoDB item to a User entity."""
        return User(
            id=item["id"],
            email=item.get("email", ""),
            display_name=item.get("displayName"),
            photo_url=item.get("photoURL"),
            created_at=datetime.fromisoformat(item["createdAt"]),
            storybook_count=max(0, int(item.get("storybookCount", 0))),
        )
