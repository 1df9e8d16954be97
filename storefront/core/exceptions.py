"""Custom exceptions for the application."""


class BaseAPIException(Exception):
    """Base exception for API errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = None,
        details: dict = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(BaseAPIException):
    """Missing or malformed input."""

    def __init__(self, message: str = "Validation failed", details: dict = None):
        super().__init__(
            message=message,
            status_code=400,
            error_code="VALIDATION_ERROR",
            details=details
        )


class ConflictError(BaseAPIException):
    """Unique constraint violation (duplicate email)."""

    def __init__(self, message: str = "Resource conflict", details: dict = None):
        super().__init__(
            message=message,
            status_code=400,
            error_code="CONFLICT_ERROR",
            details=details
        )


class InvalidOrExpiredTokenError(BaseAPIException):
    """Password reset secret is unknown or past its expiry.

    The two cases share one message so callers cannot tell them apart.
    """

    def __init__(
        self,
        message: str = "Password reset token is invalid or has expired. Please request a new one.",
        details: dict = None
    ):
        super().__init__(
            message=message,
            status_code=400,
            error_code="INVALID_OR_EXPIRED_TOKEN",
            details=details
        )


class AuthenticationError(BaseAPIException):
    """Authentication error."""

    def __init__(
        self,
        message: str = "Authentication failed",
        error_code: str = "AUTHENTICATION_ERROR",
        details: dict = None
    ):
        super().__init__(
            message=message,
            status_code=401,
            error_code=error_code,
            details=details
        )


class LoginRequiredError(AuthenticationError):
    """No session credential was presented."""

    def __init__(
        self,
        message: str = "Login required to access this resource. Please login.",
        details: dict = None
    ):
        super().__init__(message=message, error_code="LOGIN_REQUIRED", details=details)


class InvalidCredentialError(AuthenticationError):
    """Session credential rejected.

    ``clear_session`` asks the error handler to expire the session cookie on
    the outgoing response.
    """

    def __init__(
        self,
        message: str = "Invalid or expired session. Please login again.",
        clear_session: bool = False,
        details: dict = None
    ):
        super().__init__(message=message, error_code="INVALID_CREDENTIAL", details=details)
        self.clear_session = clear_session


class ExpiredCredentialError(AuthenticationError):
    """Session credential is past its expiry."""

    def __init__(self, message: str = "Token expired. Please login again.", details: dict = None):
        super().__init__(message=message, error_code="EXPIRED_CREDENTIAL", details=details)


class MalformedCredentialError(AuthenticationError):
    """Session credential has a bad signature or structure."""

    def __init__(self, message: str = "Invalid token. Please login again.", details: dict = None):
        super().__init__(message=message, error_code="MALFORMED_CREDENTIAL", details=details)


class AuthorizationError(BaseAPIException):
    """Authorization error."""

    def __init__(
        self,
        message: str = "Insufficient permissions",
        error_code: str = "AUTHORIZATION_ERROR",
        details: dict = None
    ):
        super().__init__(
            message=message,
            status_code=403,
            error_code=error_code,
            details=details
        )


class ForbiddenError(AuthorizationError):
    """Identity is known but its role is not allowed."""

    def __init__(self, message: str = "Access denied.", details: dict = None):
        super().__init__(message=message, error_code="FORBIDDEN", details=details)


class RoleUnavailableError(AuthorizationError):
    """Role gate ran without an authenticated identity."""

    def __init__(
        self,
        message: str = "Authentication error: User role not available. Access denied.",
        details: dict = None
    ):
        super().__init__(message=message, error_code="ROLE_UNAVAILABLE", details=details)


class NotFoundError(BaseAPIException):
    """Resource not found error."""

    def __init__(self, message: str = "Resource not found", details: dict = None):
        super().__init__(
            message=message,
            status_code=404,
            error_code="NOT_FOUND_ERROR",
            details=details
        )


class InternalError(BaseAPIException):
    """Operation failed on the server side."""

    def __init__(self, message: str = "Internal server error", details: dict = None):
        super().__init__(
            message=message,
            status_code=500,
            error_code="INTERNAL_ERROR",
            details=details
        )


class ConfigurationError(BaseAPIException):
    """Configuration error."""

    def __init__(self, message: str = "Server configuration error", details: dict = None):
        super().__init__(
            message=message,
            status_code=500,
            error_code="CONFIGURATION_ERROR",
            details=details
        )


class EmailDeliveryError(Exception):
    """Outbound email could not be handed to the mail server."""
