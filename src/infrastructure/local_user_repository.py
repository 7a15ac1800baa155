"""Local in-memory implementation of the user repository."""

from typing import Dict

from ..domain.entities.user import User
from ..domain.errors import UserNotFoundError
from ..domain.interfaces.user_repository import UserRepository


class LocalUserRepository(UserRepository):
    """Stores user documents in a dictionary for testing and development purposes."""

    def __init__(self):
        self._users: Dict[str, User] = {}

    async def get_user(self, user_id: str) -> User:
        """Retrieve a user by ID from the in-memory dictionary.

        Raises:
            UserNotFoundError: If the user is not found.
        """
        if user_id not in self._users:
            raise UserNotFoundError(user_id)
        return self._users[user_id].model_copy()

    async def save_user(self, user: User) -> None:
        self._users[user.id] = user.model_copy()

    async def adjust_storybook_count(self, user_id: str, delta: int) -> None:
        if user_id not in self._users:
            raise UserNotFoundError(user_id)
        user = self._users[user_id]
        self._users[user_id] = user.model_copy(update={"storybook_count": max(0, user.storybook_count + delta)})

    def add_user(self, user: User) -> None:
        self._users[user.id] = user.model_copy()

    def clear(self) -> None:
        """Clear all users from the dictionary."""
        self._users.clear()
