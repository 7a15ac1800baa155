"""Explicit user session passed into every service call."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from ..errors import SessionClosedError
from .user import User, utcnow


class UserSession(BaseModel):
    """The signed-in user context.

    Created by ``AuthService.sign_in`` and closed by ``AuthService.sign_out``.
    Services read ``user_id`` from here instead of from ambient global state.
    """

    user: User
    signed_in_at: datetime = Field(default_factory=utcnow)
    signed_out_at: Optional[datetime] = None

    @property
    def user_id(self) -> str:
        return self.user.id

    @property
    def is_active(self) -> bool:
        return self.signed_out_at is None

    def ensure_active(self) -> None:
        """Raise ``SessionClosedError`` once the session has been signed out."""
        if not self.is_active:
            raise SessionClosedError()
