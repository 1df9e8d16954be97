"""Session issuance: signed credential in a cookie and in the response body."""
from datetime import datetime, timedelta, timezone

from fastapi import Response
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from ..config.settings import AuthSettings
from ..schemas.user import PublicUser
from .auth import TokenCodec


class SessionIssuer:
    """The only place a session is created or cleared."""

    def __init__(self, auth_settings: AuthSettings, token_codec: TokenCodec, secure_cookies: bool):
        self.cookie_name = auth_settings.cookie_name
        self.cookie_lifetime = timedelta(days=auth_settings.cookie_expire_days)
        self.secure_cookies = secure_cookies
        self.token_codec = token_codec

    def issue_session(self, user: PublicUser, status_code: int = 200) -> JSONResponse:
        """Mint a credential for ``user`` and return it as cookie plus body."""
        token = self.token_codec.issue(user.id, user.role)
        response = JSONResponse(
            status_code=status_code,
            content=jsonable_encoder({"success": True, "token": token, "user": user}),
        )
        self._set_cookie(
            response,
            token,
            expires=datetime.now(timezone.utc) + self.cookie_lifetime,
        )
        return response

    def clear_session(self, response: Response) -> Response:
        """Expire the session cookie on ``response``."""
        self._set_cookie(response, "", expires=datetime.now(timezone.utc))
        return response

    def _set_cookie(self, response: Response, value: str, expires: datetime) -> None:
        response.set_cookie(
            key=self.cookie_name,
            value=value,
            expires=expires,
            httponly=True,
            secure=self.secure_cookies,
            samesite="strict",
        )
