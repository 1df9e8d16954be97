"""User schemas: API projection, credential projection and request bodies."""
import uuid
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import EmailStr, Field, field_validator

from ..core.auth import BCRYPT_MAX_BYTES
from .common import BaseSchema

Role = Literal["user", "admin"]

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 30


def _check_name(v: Optional[str]) -> Optional[str]:
    """Trim a display name and enforce its length on the trimmed value."""
    if v is None:
        return v
    v = v.strip()
    if len(v) < NAME_MIN_LENGTH:
        raise ValueError("User name should have at least 2 characters.")
    if len(v) > NAME_MAX_LENGTH:
        raise ValueError("User name cannot exceed 30 characters.")
    return v


def _check_password_bytes(v: Optional[str]) -> Optional[str]:
    if v is not None and len(v.encode("utf-8")) > BCRYPT_MAX_BYTES:
        raise ValueError(f"Password cannot be longer than {BCRYPT_MAX_BYTES} bytes.")
    return v


class ProfileImage(BaseSchema):
    public_id: str
    url: str


class PublicUser(BaseSchema):
    """The only user shape that is ever serialized to a client."""

    id: uuid.UUID
    name: str
    email: str
    role: Role
    profile_img: ProfileImage
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_user(cls, user) -> "PublicUser":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            profile_img=ProfileImage(
                public_id=user.profile_img_public_id,
                url=user.profile_img_url,
            ),
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class CredentialRecord(BaseSchema):
    """Identity plus secrets, for the auth layer only.

    Immutable: the ``with_*``/``without_*`` helpers return a new record and
    the repository persists it.
    """

    model_config = {"from_attributes": True, "frozen": True}

    id: uuid.UUID
    name: str
    email: str
    role: Role
    hashed_password: str
    reset_token_hash: Optional[str] = None
    reset_token_expiry: Optional[datetime] = None

    def with_password_hash(self, hashed_password: str) -> "CredentialRecord":
        return self.model_copy(update={"hashed_password": hashed_password})

    def with_reset_token(self, token_hash: str, expiry: datetime) -> "CredentialRecord":
        return self.model_copy(
            update={"reset_token_hash": token_hash, "reset_token_expiry": expiry}
        )

    def without_reset_token(self) -> "CredentialRecord":
        return self.model_copy(update={"reset_token_hash": None, "reset_token_expiry": None})


class SignupRequest(BaseSchema):
    """User registration body."""

    name: str = Field(..., description="Display name")
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=6, description="User password")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v):
        return _check_name(v)

    @field_validator("password")
    @classmethod
    def limit_password(cls, v: str) -> str:
        return _check_password_bytes(v)


class LoginRequest(BaseSchema):
    """Login request schema."""

    email: str = Field(..., min_length=1, description="User email")
    password: str = Field(..., min_length=1, description="User password")


class ForgotPasswordRequest(BaseSchema):
    """Start a password reset."""

    email: str = Field(..., min_length=1, description="Account email")


class ResetPasswordRequest(BaseSchema):
    """Finish a password reset with the emailed secret."""

    new_password: str = Field(..., alias="newPassword")
    confirm_password: str = Field(..., alias="confirmPassword")


class PasswordUpdateRequest(BaseSchema):
    """Change password while logged in."""

    current_password: str = Field(..., alias="currentPassword")
    new_password: str = Field(..., alias="newPassword")
    confirm_password: str = Field(..., alias="confirmPassword")


class ProfileUpdateRequest(BaseSchema):
    """Self-service profile update; credentials and role are not accepted."""

    name: Optional[str] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v):
        return _check_name(v)


class AdminUserUpdateRequest(BaseSchema):
    """Admin update of another user's profile and/or role."""

    name: Optional[str] = None
    email: Optional[EmailStr] = None
    role: Optional[str] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v):
        return _check_name(v)


class UserEnvelope(BaseSchema):
    success: bool = True
    user: PublicUser


class UserMessageEnvelope(UserEnvelope):
    message: str


class UsersEnvelope(BaseSchema):
    success: bool = True
    users: List[PublicUser]
