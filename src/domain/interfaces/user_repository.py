"""User repository interface."""

from typing import Protocol, runtime_checkable

from ..entities.user import User


@runtime_checkable
class UserRepository(Protocol):
    """Protocol for user document storage."""

    async def get_user(self, user_id: str) -> User:
        """Retrieve a user by ID.

        Raises:
            UserNotFoundError: If the user does not exist.
        """
        ...

    async def save_user(self, user: User) -> None:
        """Create or replace a user document."""
        ...

    async def adjust_storybook_count(self, user_id: str, delta: int) -> None:
        """Atomically add ``delta`` to the user's storybook count."""
        ...
