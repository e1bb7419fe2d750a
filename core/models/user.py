# =============================================================================
# core/models/user.py - User Schemas
# =============================================================================
# These models define the API contract for user operations:
# - UserRegister / UserLogin / UserUpsert: identity bootstrap payloads
# - UserProfileUpdate: PUT /api/users/profile
# - User: what clients receive back
#
# A user's uid is issued by the identity provider and never changes.
# =============================================================================

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from lib.utils import parse_timestamp

EMAIL_PATTERN = r"^\S+@\S+\.\S+$"
DEFAULT_SESSION_TIMEOUT_MINUTES = 30


def _normalize_email(value: str | None) -> str | None:
    return value.strip().lower() if value is not None else None


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserRegister(_CamelModel):
    """
    Payload for POST /api/users/register.

    Example:
        {"uid": "Xh3k...", "name": "Ada", "email": "ada@example.com", "photoURL": ""}
    """

    uid: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., pattern=EMAIL_PATTERN)
    photo_url: str = Field(default="", alias="photoURL")

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return _normalize_email(value)

    @field_validator("uid", "name")
    @classmethod
    def strip_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class UserLogin(_CamelModel):
    """
    Optional payload for POST /api/users/login.

    The session always belongs to the bearer token's subject; a uid sent here
    must name that same user.
    """

    uid: str | None = Field(default=None, min_length=1)


class UserUpsert(_CamelModel):
    """
    Payload for POST /api/users/create-or-update.

    name and email are only required when the user doesn't exist yet.
    """

    uid: str = Field(..., min_length=1)
    name: str | None = Field(default=None, min_length=1, max_length=100)
    email: str | None = Field(default=None, pattern=EMAIL_PATTERN)
    photo_url: str | None = Field(default=None, alias="photoURL")

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: str | None) -> str | None:
        return _normalize_email(value)


class UserProfileUpdate(_CamelModel):
    """Payload for PUT /api/users/profile. Omitted fields are untouched."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    bio: str | None = Field(default=None, max_length=500)
    photo_url: str | None = Field(default=None, alias="photoURL")
    specialties: list[str] | None = None
    session_timeout_minutes: int | None = Field(default=None, ge=1, le=1440)

    def to_row_updates(self) -> dict[str, Any]:
        updates: dict[str, Any] = {}
        if self.name:
            updates["name"] = self.name.strip()
        if self.bio is not None:
            updates["bio"] = self.bio
        if self.photo_url:
            updates["photo_url"] = self.photo_url
        if self.specialties is not None:
            updates["specialties"] = [s.strip() for s in self.specialties if s.strip()]
        if self.session_timeout_minutes is not None:
            updates["session_timeout_minutes"] = self.session_timeout_minutes
        return updates


class User(_CamelModel):
    """
    Schema for returning a user to clients.

    likedRecipes holds recipe ids; followers/following hold uids.
    """

    uid: str
    name: str
    email: str
    photo_url: str = Field(default="", alias="photoURL")
    bio: str = ""
    specialties: list[str] = Field(default_factory=list)
    achievements: list[str] = Field(default_factory=list)
    liked_recipes: list[str] = Field(default_factory=list)
    followers: list[str] = Field(default_factory=list)
    following: list[str] = Field(default_factory=list)
    last_active: datetime | None = None
    session_timeout_minutes: int = DEFAULT_SESSION_TIMEOUT_MINUTES
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "User":
        """Create User from a database row."""
        return cls(
            uid=row["uid"],
            name=row.get("name") or "",
            email=row.get("email") or "",
            photo_url=row.get("photo_url") or "",
            bio=row.get("bio") or "",
            specialties=row.get("specialties") or [],
            achievements=row.get("achievements") or [],
            liked_recipes=[str(r) for r in row.get("liked_recipes") or []],
            followers=row.get("followers") or [],
            following=row.get("following") or [],
            last_active=parse_timestamp(row.get("last_active")),
            session_timeout_minutes=(
                row.get("session_timeout_minutes") or DEFAULT_SESSION_TIMEOUT_MINUTES
            ),
            created_at=parse_timestamp(row.get("created_at")),
            updated_at=parse_timestamp(row.get("updated_at")),
        )

    def to_api(self) -> dict[str, Any]:
        """JSON-ready dict with camelCase keys."""
        return self.model_dump(by_alias=True, mode="json")
