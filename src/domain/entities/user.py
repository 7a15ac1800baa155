"""User entity for the storybook library."""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    """Timezone-aware current UTC time used for every timestamp."""
    return datetime.now(timezone.utc)


class User(BaseModel):
    """A signed-in author, keyed by the external auth identifier."""

    id: str = Field(min_length=1, description="Stable external auth identifier")
    email: str = Field(default="", description="Email address reported by the auth provider")
    display_name: Optional[str] = Field(None, max_length=100)
    photo_url: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    storybook_count: int = Field(default=0, ge=0)

    class Config:
        """Pydantic model configuration."""

        json_schema_extra = {
            "example": {
                "id": "uid-123",
                "email": "reader@example.com",
                "display_name": "Sam",
                "storybook_count": 3,
            }
        }


class UserProfileUpdate(BaseModel):
    """Fields a user may change on their own profile."""

    display_name: Optional[str] = Field(None, max_length=100)
    photo_url: Optional[str] = None
