"""Password reset secrets: single use, ten minutes, stored only as a hash."""
import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Optional, Tuple

from ..schemas.user import CredentialRecord
from .exceptions import InvalidOrExpiredTokenError

if TYPE_CHECKING:
    from ..services.user import UserRepository

RESET_TOKEN_BYTES = 20
RESET_TOKEN_TTL = timedelta(minutes=10)


class ResetTokenManager:
    """Generates and consumes password reset secrets."""

    def __init__(self, ttl: timedelta = RESET_TOKEN_TTL, token_bytes: int = RESET_TOKEN_BYTES):
        self.ttl = ttl
        self.token_bytes = token_bytes

    @staticmethod
    def hash_secret(plain_secret: str) -> str:
        """SHA-256 hex digest of a reset secret."""
        return hashlib.sha256(plain_secret.encode("utf-8")).hexdigest()

    def generate(
        self,
        record: CredentialRecord,
        now: Optional[datetime] = None
    ) -> Tuple[str, CredentialRecord]:
        """Return the plaintext secret and ``record`` carrying its hash and expiry.

        The plaintext goes out-of-band to the user and must not be stored.
        """
        now = now or datetime.now(timezone.utc)
        plain_secret = secrets.token_hex(self.token_bytes)
        updated = record.with_reset_token(self.hash_secret(plain_secret), now + self.ttl)
        return plain_secret, updated

    @staticmethod
    def clear(record: CredentialRecord) -> CredentialRecord:
        return record.without_reset_token()

    async def consume(
        self,
        repository: "UserRepository",
        plain_secret: str,
        now: Optional[datetime] = None
    ) -> CredentialRecord:
        """Find the account holding an unexpired reset secret.

        Wrong and expired secrets raise the same error. The caller sets the
        new password and clears the reset fields before persisting.
        """
        if not plain_secret:
            raise InvalidOrExpiredTokenError()

        now = now or datetime.now(timezone.utc)
        record = await repository.find_by_reset_token(self.hash_secret(plain_secret), now)
        if record is None:
            raise InvalidOrExpiredTokenError()
        return record


# Global reset token manager instance
reset_token_manager = ResetTokenManager()
