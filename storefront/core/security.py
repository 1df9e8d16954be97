"""Auth and role gates plus the FastAPI dependencies that wire them."""
from typing import List, Optional, Sequence

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..schemas.user import PublicUser
from ..services.email import EmailService, get_email_service
from ..services.user import AccountService, UserRepository
from .auth import TokenCodec
from .exceptions import (
    ExpiredCredentialError,
    ForbiddenError,
    InvalidCredentialError,
    LoginRequiredError,
    MalformedCredentialError,
    RoleUnavailableError,
)
from .logging import SecurityLogger
from .session import SessionIssuer

# Security scheme; a missing header falls back to the session cookie
security = HTTPBearer(auto_error=False)

security_logger = SecurityLogger()


def get_token_codec(request: Request) -> TokenCodec:
    """Token codec built by ``create_app``."""
    return request.app.state.token_codec


def get_session_issuer(request: Request) -> SessionIssuer:
    """Session issuer built by ``create_app``."""
    return request.app.state.session_issuer


def get_user_repository(db: AsyncSession = Depends(get_db)) -> UserRepository:
    return UserRepository(db)


def get_account_service(
    repository: UserRepository = Depends(get_user_repository),
    email_service: EmailService = Depends(get_email_service)
) -> AccountService:
    return AccountService(repository, email_service)


def _client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    repository: UserRepository = Depends(get_user_repository),
    codec: TokenCodec = Depends(get_token_codec),
    issuer: SessionIssuer = Depends(get_session_issuer)
) -> PublicUser:
    """Resolve the caller from the bearer header or the session cookie."""
    path = str(request.url.path)

    token = credentials.credentials if credentials else request.cookies.get(issuer.cookie_name)
    if not token:
        security_logger.log_unauthorized_access(
            path, request.method, _client_ip(request), reason="missing"
        )
        raise LoginRequiredError()

    try:
        claims = codec.verify(token)
    except ExpiredCredentialError:
        security_logger.log_unauthorized_access(
            path, request.method, _client_ip(request), reason="expired"
        )
        raise InvalidCredentialError()
    except MalformedCredentialError:
        security_logger.log_unauthorized_access(
            path, request.method, _client_ip(request), reason="malformed"
        )
        raise InvalidCredentialError()

    user = await repository.get_by_id(claims.id)
    if user is None:
        # Signed for an account that has since been deleted
        security_logger.log_unauthorized_access(
            path, request.method, _client_ip(request), reason="dangling"
        )
        raise InvalidCredentialError(clear_session=True)

    request.state.user = user
    return user


def authorize_role(identity: Optional[PublicUser], allowed_roles: Sequence[str]) -> PublicUser:
    """Return ``identity`` if its role is one of ``allowed_roles``."""
    role = getattr(identity, "role", None)
    if identity is None or not role:
        raise RoleUnavailableError()

    if role not in allowed_roles:
        raise ForbiddenError(
            f"Access Denied: Role '{role}' is not authorized to access this resource. "
            f"Required: {', '.join(allowed_roles)}"
        )
    return identity


class RoleChecker:
    """Role gate dependency. Runs after ``get_current_user`` has set the identity."""

    def __init__(self, allowed_roles: List[str]):
        self.allowed_roles = allowed_roles

    def __call__(self, request: Request) -> PublicUser:
        identity = getattr(request.state, "user", None)
        try:
            return authorize_role(identity, self.allowed_roles)
        except ForbiddenError:
            security_logger.log_access_denied(
                path=str(request.url.path),
                user_id=str(identity.id),
                role=identity.role,
                required_roles=self.allowed_roles,
            )
            raise


# Common role checkers
admin_required = RoleChecker(["admin"])
