"""Password hashing and session credential (JWT) encoding."""
import re
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt

from ..config.settings import AuthSettings
from .exceptions import ConfigurationError, ExpiredCredentialError, MalformedCredentialError

# bcrypt work factor
BCRYPT_ROUNDS = 10

# Longest secret bcrypt hashes in full; longer ones are refused
BCRYPT_MAX_BYTES = 72

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhdw]?)\s*$", re.IGNORECASE)
_DURATION_UNITS = {
    "": "seconds",
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
    "d": "days",
    "w": "weeks",
}


def parse_duration(value: Optional[str]) -> timedelta:
    """Parse ``"5d"``, ``"12h"``, ``"30m"``, ``"45s"`` or plain seconds."""
    if value is None:
        raise ValueError("duration is not set")
    match = _DURATION_RE.match(str(value))
    if not match:
        raise ValueError(f"unrecognised duration: {value!r}")
    amount, unit = match.groups()
    delta = timedelta(**{_DURATION_UNITS[unit.lower()]: int(amount)})
    if delta <= timedelta(0):
        raise ValueError("duration must be positive")
    return delta


class PasswordHasher:
    """Salted one-way password hashing with bcrypt."""

    def __init__(self, rounds: int = BCRYPT_ROUNDS):
        self.rounds = rounds

    def hash(self, plain_password: str) -> str:
        """Hash password using bcrypt."""
        pw_bytes = plain_password.encode("utf-8")
        if len(pw_bytes) > BCRYPT_MAX_BYTES:
            raise ValueError(f"password exceeds {BCRYPT_MAX_BYTES} bytes")
        return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, plain_password: Optional[str], hashed_password: Optional[str]) -> bool:
        """Verify password against hash. Never raises."""
        if not plain_password or not hashed_password:
            return False
        pw_bytes = plain_password.encode("utf-8")
        if len(pw_bytes) > BCRYPT_MAX_BYTES:
            return False
        try:
            return bcrypt.checkpw(pw_bytes, hashed_password.encode("utf-8"))
        except (ValueError, TypeError):
            return False


@dataclass(frozen=True)
class TokenClaims:
    """Identity asserted by a verified session credential."""

    id: uuid.UUID
    role: str


class TokenCodec:
    """Signs and verifies session credentials.

    Built once at startup from the auth settings; a missing secret or expiry
    is a server misconfiguration and raises ``ConfigurationError`` here
    rather than on the first request.
    """

    def __init__(self, auth_settings: AuthSettings):
        if not auth_settings.secret_key or not auth_settings.secret_key.strip():
            raise ConfigurationError("JWT secret is not configured")
        if not auth_settings.algorithm:
            raise ConfigurationError("JWT algorithm is not configured")
        try:
            self.expires_in = parse_duration(auth_settings.token_expire)
        except ValueError as e:
            raise ConfigurationError(f"JWT expiry is not configured correctly: {e}")

        self._secret_key = auth_settings.secret_key
        self.algorithm = auth_settings.algorithm

    def issue(self, user_id: uuid.UUID, role: str, now: Optional[datetime] = None) -> str:
        """Create a signed session credential for ``user_id``."""
        issued_at = now or datetime.now(timezone.utc)
        to_encode = {
            "id": str(user_id),
            "role": role,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.expires_in).timestamp()),
        }
        return jwt.encode(to_encode, self._secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        """Verify and decode a session credential."""
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise ExpiredCredentialError()
        except JWTError:
            raise MalformedCredentialError()

        user_id = payload.get("id")
        role = payload.get("role")
        if not user_id or not role:
            raise MalformedCredentialError()

        try:
            return TokenClaims(id=uuid.UUID(str(user_id)), role=str(role))
        except ValueError:
            raise MalformedCredentialError()


# Global password hasher instance
password_hasher = PasswordHasher()
