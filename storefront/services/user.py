"""User persistence and account flows (signup, login, password lifecycle)."""
import asyncio
import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.auth import BCRYPT_MAX_BYTES, PasswordHasher, password_hasher
from ..core.exceptions import (
    AuthenticationError,
    ConflictError,
    EmailDeliveryError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from ..core.logging import BusinessLogger, SecurityLogger
from ..core.reset_tokens import ResetTokenManager, reset_token_manager
from ..models.user import USER_ROLES, User
from ..schemas.user import CredentialRecord, PublicUser
from .email import EmailService

MIN_PASSWORD_LENGTH = 6

business_logger = BusinessLogger()
security_logger = SecurityLogger()


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserRepository:
    """Credential store keyed by id and email.

    Reads return ``PublicUser`` unless the credential projection is asked for
    explicitly. Passwords are hashed here, on the way in, and nowhere else.
    """

    def __init__(self, db: AsyncSession, hasher: PasswordHasher = password_hasher):
        self.db = db
        self.hasher = hasher

    async def _get(self, user_id: uuid.UUID) -> Optional[User]:
        stmt = select(User).where(User.id == user_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def _get_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(User.email == normalize_email(email))
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def _commit(self, conflict_message: str) -> None:
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError(conflict_message)

    async def create(self, name: str, email: str, password: str, role: str = "user") -> PublicUser:
        """Create new user, hashing the password before the first write."""
        conflict_message = "Email already exists. Please try a different email."
        if await self._get_by_email(email):
            raise ConflictError(conflict_message)

        hashed_password = await asyncio.to_thread(self.hasher.hash, password)
        db_user = User(
            name=name.strip(),
            email=normalize_email(email),
            hashed_password=hashed_password,
            role=role,
        )

        self.db.add(db_user)
        await self._commit(conflict_message)
        await self.db.refresh(db_user)

        business_logger.log_user_created(str(db_user.id), db_user.role)
        return PublicUser.from_user(db_user)

    async def get_by_id(self, user_id: uuid.UUID) -> Optional[PublicUser]:
        user = await self._get(user_id)
        return PublicUser.from_user(user) if user else None

    async def get_by_email(self, email: str) -> Optional[PublicUser]:
        user = await self._get_by_email(email)
        return PublicUser.from_user(user) if user else None

    async def get_credentials_by_id(self, user_id: uuid.UUID) -> Optional[CredentialRecord]:
        user = await self._get(user_id)
        return CredentialRecord.model_validate(user) if user else None

    async def get_credentials_by_email(self, email: str) -> Optional[CredentialRecord]:
        user = await self._get_by_email(email)
        return CredentialRecord.model_validate(user) if user else None

    async def find_by_reset_token(self, token_hash: str, now: datetime) -> Optional[CredentialRecord]:
        """Account whose reset hash matches and whose expiry is after ``now``."""
        stmt = select(User).where(
            User.reset_token_hash == token_hash,
            User.reset_token_expiry > now,
        )
        result = await self.db.execute(stmt)
        user = result.scalars().first()
        return CredentialRecord.model_validate(user) if user else None

    async def save_credentials(self, record: CredentialRecord) -> CredentialRecord:
        """Persist the credential fields of ``record`` and nothing else."""
        user = await self._get(record.id)
        if user is None:
            raise NotFoundError("User not found.")

        user.hashed_password = record.hashed_password
        user.reset_token_hash = record.reset_token_hash
        user.reset_token_expiry = record.reset_token_expiry
        await self.db.commit()
        await self.db.refresh(user)
        return CredentialRecord.model_validate(user)

    async def change_password(self, record: CredentialRecord, new_password: str) -> CredentialRecord:
        """Rehash and persist ``record`` with ``new_password``."""
        hashed_password = await asyncio.to_thread(self.hasher.hash, new_password)
        return await self.save_credentials(record.with_password_hash(hashed_password))

    async def update_profile(self, user_id: uuid.UUID, name: str) -> Optional[PublicUser]:
        """Update non-credential profile fields."""
        user = await self._get(user_id)
        if user is None:
            return None

        user.name = name.strip()
        await self.db.commit()
        await self.db.refresh(user)
        return PublicUser.from_user(user)

    async def update_profile_and_role(
        self,
        user_id: uuid.UUID,
        name: Optional[str] = None,
        email: Optional[str] = None,
        role: Optional[str] = None
    ) -> Optional[PublicUser]:
        """Admin update of name, email and role. Never touches the password."""
        user = await self._get(user_id)
        if user is None:
            return None

        if name:
            user.name = name.strip()
        if email:
            user.email = normalize_email(email)
        if role:
            user.role = role

        await self._commit("Email already exists. Please use a different email.")
        await self.db.refresh(user)
        return PublicUser.from_user(user)

    async def list_all(self) -> List[PublicUser]:
        stmt = select(User).order_by(User.created_at.desc())
        result = await self.db.execute(stmt)
        return [PublicUser.from_user(user) for user in result.scalars().all()]

    async def delete(self, user_id: uuid.UUID) -> Optional[PublicUser]:
        user = await self._get(user_id)
        if user is None:
            return None

        deleted = PublicUser.from_user(user)
        await self.db.delete(user)
        await self.db.commit()
        return deleted


class AccountService:
    """Account flows built on the repository, hasher and reset manager."""

    # Shared across instances; compared against when the email is unknown
    _dummy_hash: Optional[str] = None

    def __init__(
        self,
        repository: UserRepository,
        email_service: EmailService,
        resets: ResetTokenManager = reset_token_manager
    ):
        self.repository = repository
        self.email_service = email_service
        self.resets = resets

    @staticmethod
    def _check_new_password(new_password: str, confirm_password: str) -> None:
        if not new_password or not confirm_password:
            raise ValidationError("New password and confirm password are required.")
        if new_password != confirm_password:
            raise ValidationError("New password and confirm password do not match.")
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long."
            )
        if len(new_password.encode("utf-8")) > BCRYPT_MAX_BYTES:
            raise ValidationError(f"Password cannot be longer than {BCRYPT_MAX_BYTES} bytes.")

    async def signup(self, name: str, email: str, password: str) -> PublicUser:
        """Register a user. The welcome email is best-effort."""
        user = await self.repository.create(name, email, password)

        try:
            await self.email_service.send_welcome_email(user)
        except EmailDeliveryError as e:
            # signup already committed; a missing welcome email is not fatal
            business_logger.log_email_event("welcome", user.email, sent=False, error_message=str(e))

        return user

    async def login(self, email: str, password: str, ip_address: str = None) -> PublicUser:
        """Check credentials. Unknown email and wrong password look the same."""
        record = await self.repository.get_credentials_by_email(email)

        if record is None:
            # Spend the same bcrypt effort as a real check
            if AccountService._dummy_hash is None:
                AccountService._dummy_hash = await asyncio.to_thread(
                    self.repository.hasher.hash, "storefront-dummy-password"
                )
            await asyncio.to_thread(self.repository.hasher.verify, password, self._dummy_hash)
            security_logger.log_login_attempt(
                email=normalize_email(email),
                success=False,
                ip_address=ip_address,
                failure_reason="unknown_email",
            )
            raise AuthenticationError("Invalid email or password.")

        matches = await asyncio.to_thread(
            self.repository.hasher.verify, password, record.hashed_password
        )
        if not matches:
            security_logger.log_login_attempt(
                email=record.email,
                success=False,
                ip_address=ip_address,
                failure_reason="wrong_password",
            )
            raise AuthenticationError("Invalid email or password.")

        security_logger.log_login_attempt(email=record.email, success=True, ip_address=ip_address)
        return await self.repository.get_by_id(record.id)

    async def forgot_password(self, email: str, now: Optional[datetime] = None) -> None:
        """Issue and deliver a reset secret if the email is registered.

        Returns quietly for unknown emails. If delivery fails the stored
        hash and expiry are cleared again before ``InternalError`` is raised.
        """
        record = await self.repository.get_credentials_by_email(email)
        security_logger.log_password_reset_requested(
            email=normalize_email(email),
            user_found=record is not None,
        )
        if record is None:
            return

        plain_secret, record = self.resets.generate(record, now=now)
        record = await self.repository.save_credentials(record)

        try:
            await self.email_service.send_password_reset_email(
                name=record.name,
                email=record.email,
                plain_secret=plain_secret,
            )
        except EmailDeliveryError as e:
            business_logger.log_email_event(
                "password_reset", record.email, sent=False, error_message=str(e)
            )
            await self.repository.save_credentials(self.resets.clear(record))
            raise InternalError("Failed to send password reset email. Please try again.")

    async def reset_password(
        self,
        plain_secret: str,
        new_password: str,
        confirm_password: str,
        now: Optional[datetime] = None
    ) -> PublicUser:
        """Consume a reset secret and set a new password."""
        self._check_new_password(new_password, confirm_password)

        record = await self.resets.consume(self.repository, plain_secret, now=now)
        record = await self.repository.change_password(self.resets.clear(record), new_password)

        security_logger.log_password_changed(str(record.id), via="reset")
        return await self.repository.get_by_id(record.id)

    async def update_password(
        self,
        user_id: uuid.UUID,
        current_password: str,
        new_password: str,
        confirm_password: str
    ) -> PublicUser:
        """Change password for a logged-in user."""
        if not current_password:
            raise ValidationError("All password fields are required.")
        self._check_new_password(new_password, confirm_password)

        record = await self.repository.get_credentials_by_id(user_id)
        if record is None:
            raise NotFoundError("User not found.")

        matches = await asyncio.to_thread(
            self.repository.hasher.verify, current_password, record.hashed_password
        )
        if not matches:
            raise AuthenticationError("Incorrect current password.")

        record = await self.repository.change_password(record, new_password)
        security_logger.log_password_changed(str(record.id), via="update")
        return await self.repository.get_by_id(record.id)

    @staticmethod
    def check_role(role: str) -> str:
        if role not in USER_ROLES:
            raise ValidationError("Invalid role specified. Allowed roles are 'user' or 'admin'.")
        return role
