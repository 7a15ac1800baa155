"""DynamoDB implementation of the storybook repository."""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

import aioboto3
from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import ClientError

from ..domain.entities.library import LibraryCursor, SortBy, order_library, sort_value
from ..domain.entities.storybook import Storybook, StorybookPage
from ..domain.errors import ConflictError, StorybookNotFoundError
from ..domain.interfaces.storybook_repository import StorybookRepository

logger = logging.getLogger(__name__)

# Sort order -> (GSI name, sort key attribute, descending)
LIBRARY_INDEXES = {
    SortBy.RECENT: ("userId-updatedAt-index", "updatedAt", True),
    SortBy.TITLE: ("userId-titleLower-index", "titleLower", False),
    SortBy.POPULAR: ("userId-readCount-index", "readCount", True),
}


class DynamoDBStorybookRepository(StorybookRepository):
    """DynamoDB repository for storybook documents.

    Pages are stored as a list attribute on the storybook item. Every write
    is conditional on the stored ``version``.
    """

    def __init__(self, table_name: str, region_name: str = "us-east-1"):
        """Initialize the DynamoDB storybook repository.

        Args:
            table_name: The name of the DynamoDB table.
            region_name: AWS region name (default: us-east-1).
        """
        self.table_name = table_name
        self.region_name = region_name
        self._session = aioboto3.Session()

    async def get_storybook(self, storybook_id: str) -> Storybook:
        """Retrieve a storybook by ID from DynamoDB.

        Raises:
            StorybookNotFoundError: If the storybook is not found.
        """
        async with self._session.resource("dynamodb", region_name=self.region_name) as dynamodb:
            table = await dynamodb.Table(self.table_name)
            response = await table.get_item(Key={"id": storybook_id})

            if "Item" not in response:
                raise StorybookNotFoundError(storybook_id)

            return self._item_to_storybook(response["Item"])

    async def create_storybook(self, storybook: Storybook) -> None:
        async with self._session.resource("dynamodb", region_name=self.region_name) as dynamodb:
            table = await dynamodb.Table(self.table_name)
            await table.put_item(
                Item=self._storybook_to_item(storybook),
                ConditionExpression=Attr("id").not_exists(),
            )

    async def save_storybook(self, storybook: Storybook, expected_version: int) -> Storybook:
        """Write a storybook if the stored version still equals ``expected_version``.

        Raises:
            ConflictError: If the condition check fails.
        """
        saved = storybook.model_copy(deep=True, update={"version": expected_version + 1})
        async with self._session.resource("dynamodb", region_name=self.region_name) as dynamodb:
            table = await dynamodb.Table(self.table_name)
            try:
                await table.put_item(
                    Item=self._storybook_to_item(saved),
                    ConditionExpression=Attr("version").eq(expected_version),
                )
            except ClientError as e:
                if _is_condition_failure(e):
                    raise ConflictError(storybook.id) from e
                raise
        return saved

    async def delete_storybook(self, storybook_id: str) -> None:
        """Delete a storybook from DynamoDB.

        Raises:
            StorybookNotFoundError: If the storybook does not exist.
        """
        async with self._session.resource("dynamodb", region_name=self.region_name) as dynamodb:
            table = await dynamodb.Table(self.table_name)
            try:
                await table.delete_item(
                    Key={"id": storybook_id},
                    ConditionExpression=Attr("id").exists(),
                )
            except ClientError as e:
                if _is_condition_failure(e):
                    raise StorybookNotFoundError(storybook_id) from e
                raise

    async def query_storybooks(
        self,
        user_id: str,
        sort_by: SortBy,
        limit: int,
        search_query: str = "",
        after: Optional[LibraryCursor] = None,
    ) -> list[Storybook]:
        """Query the user's storybooks through the GSI matching ``sort_by``.

        The index narrows the read to items at or beyond the cursor's sort
        value; ties on that value are resolved by storybook id in memory.
        Reading stops once ``limit`` rows are known and the boundary value's
        ties have all been seen.
        """
        index_name, sort_attribute, descending = LIBRARY_INDEXES[sort_by]
        condition = Key("userId").eq(user_id)
        if after is not None:
            boundary = after.sort_value
            if descending:
                condition = condition & Key(sort_attribute).lte(boundary)
            else:
                condition = condition & Key(sort_attribute).gte(boundary)

        query_kwargs: Dict[str, Any] = {
            "IndexName": index_name,
            "KeyConditionExpression": condition,
            "ScanIndexForward": not descending,
        }
        if search_query:
            query_kwargs["FilterExpression"] = Attr("titleLower").contains(search_query.casefold())

        collected: list[Storybook] = []
        async with self._session.resource("dynamodb", region_name=self.region_name) as dynamodb:
            table = await dynamodb.Table(self.table_name)
            while True:
                response = await table.query(**query_kwargs)
                collected.extend(self._item_to_storybook(item) for item in response.get("Items", []))

                ordered = order_library(collected, sort_by, search_query, after)
                last_key = response.get("LastEvaluatedKey")
                if last_key is None:
                    break
                if len(ordered) >= limit and collected:
                    boundary_value = sort_value(ordered[limit - 1], sort_by)
                    if sort_value(collected[-1], sort_by) != boundary_value:
                        break
                query_kwargs["ExclusiveStartKey"] = last_key

        logger.debug(f"Library query for {user_id} read {len(collected)} items from {index_name}")
        return order_library(collected, sort_by, search_query, after)[:limit]

    def _storybook_to_item(self, storybook: Storybook) -> Dict[str, Any]:
        """Convert a Storybook entity to a DynamoDB item."""
        item: Dict[str, Any] = {
            "id": storybook.id,
            "userId": storybook.user_id,
            "title": storybook.title,
            "titleLower": storybook.title.casefold(),
            "pages": [self._page_to_item(page) for page in storybook.pages],
            "pageCount": storybook.page_count,
            "language": storybook.language,
            "createdAt": storybook.created_at.isoformat(),
            "updatedAt": storybook.updated_at.isoformat(),
            "isPublished": storybook.is_published,
            "readCount": storybook.read_count,
            "version": storybook.version,
        }
        if storybook.description is not None:
            item["description"] = storybook.description
        if storybook.cover_image is not None:
            item["coverImage"] = storybook.cover_image
        return item

    def _page_to_item(self, page: StorybookPage) -> Dict[str, Any]:
        item: Dict[str, Any] = {
            "id": page.id,
            "storybookId": page.storybook_id,
            "order": page.order,
            "imageUrl": page.image_url,
            "text": page.text,
            "translations": dict(page.translations),
            "createdAt": page.created_at.isoformat(),
            "updatedAt": page.updated_at.isoformat(),
        }
        if page.audio_url is not None:
            item["audioUrl"] = page.audio_url
        return item

    def _item_to_storybook(self, item: Dict[str, Any]) -> Storybook:
        """Convert a DynamoDB item to a Storybook entity."""
        return Storybook(
            id=item["id"],
            user_id=item["userId"],
            title=item["title"],
            description=item.get("description"),
            cover_image=item.get("coverImage"),
            pages=[self._item_to_page(page) for page in item.get("pages", [])],
            page_count=_as_int(item.get("pageCount", 0)),
            language=item.get("language", "en"),
            created_at=datetime.fromisoformat(item["createdAt"]),
            updated_at=datetime.fromisoformat(item["updatedAt"]),
            is_published=bool(item.get("isPublished", False)),
            read_count=_as_int(item.get("readCount", 0)),
            version=_as_int(item.get("version", 0)),
        )

    def _item_to_page(self, item: Dict[str, Any]) -> StorybookPage:
        return StorybookPage(
            id=item["id"],
            storybook_id=item["storybookId"],
            order=_as_int(item["order"]),
            image_url=item.get("imageUrl", ""),
            text=item.get("text", ""),
            translations=dict(item.get("translations") or {}),
            audio_url=item.get("audioUrl"),
            created_at=datetime.fromisoformat(item["createdAt"]),
            updated_at=datetime.fromisoformat(item["updatedAt"]),
        )


def _as_int(value: Any) -> int:
    # DynamoDB returns numbers as Decimal
    return int(value)


def _is_condition_failure(error: ClientError) -> bool:
    return error.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException"
