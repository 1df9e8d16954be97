"""User model."""
from datetime import datetime
from typing import Optional

from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base

USER_ROLES = ("user", "admin")

DEFAULT_PROFILE_IMG_PUBLIC_ID = "default_profile_public_id"
DEFAULT_PROFILE_IMG_URL = "https://via.placeholder.com/150/0000FF/808080?Text=User"


class User(Base):
    """User model for authentication and authorization."""

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(30), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), default="user", nullable=False)
    profile_img_public_id: Mapped[str] = mapped_column(
        String(255), default=DEFAULT_PROFILE_IMG_PUBLIC_ID, nullable=False
    )
    profile_img_url: Mapped[str] = mapped_column(
        String(512), default=DEFAULT_PROFILE_IMG_URL, nullable=False
    )

    # Password reset flow: both set together or both cleared
    reset_token_hash: Mapped[Optional[str]] = mapped_column(String(64), index=True)
    reset_token_expiry: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    def __repr__(self) -> str:
        return f"<User(email={self.email}, role={self.role})>"
