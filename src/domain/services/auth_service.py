"""Sign-in and sign-out lifecycle for user sessions."""

import logging
from typing import Optional, Union

from ..entities.session import UserSession
from ..entities.user import User, UserProfileUpdate, utcnow
from ..errors import UserNotFoundError
from ..interfaces.user_repository import UserRepository

logger = logging.getLogger(__name__)


class AuthService:
    """Turns an authenticated identity into an explicit ``UserSession``.

    Authentication itself happens upstream; this service only loads or
    creates the user document on first sign-in.
    """

    def __init__(self, user_repository: UserRepository):
        self.user_repository = user_repository

    async def sign_in(
        self,
        user_id: str,
        email: str = "",
        display_name: Optional[str] = None,
        photo_url: Optional[str] = None,
    ) -> UserSession:
        try:
            user = await self.user_repository.get_user(user_id)
        except UserNotFoundError:
            user = User(id=user_id, email=email, display_name=display_name, photo_url=photo_url)
            await self.user_repository.save_user(user)
            logger.info(f"Created user document for {user_id}")
        return UserSession(user=user)

    def sign_out(self, session: UserSession) -> None:
        if session.is_active:
            session.signed_out_at = utcnow()
            logger.debug(f"Signed out user {session.user_id}")

    async def update_profile(self, session: UserSession, fields: Union[UserProfileUpdate, dict]) -> User:
        """Merge profile changes into the stored user and the session."""
        session.ensure_active()
        update = fields if isinstance(fields, UserProfileUpdate) else UserProfileUpdate.model_validate(fields)
        current = await self.user_repository.get_user(session.user_id)
        user = current.model_copy(update=update.model_dump(exclude_unset=True))
        await self.user_repository.save_user(user)
        session.user = user
        return user
