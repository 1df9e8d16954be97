"""Pydantic schemas module."""
from .user import (
    PublicUser,
    CredentialRecord,
    SignupRequest,
    LoginRequest,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    PasswordUpdateRequest,
    ProfileUpdateRequest,
    AdminUserUpdateRequest,
)
from .product import (
    ProductFilters,
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    ReviewRequest,
    ReviewResponse,
)
from .order import (
    OrderCreate,
    OrderResponse,
)
from .common import (
    SuccessResponse,
    ErrorResponse,
    PaginationMeta,
)

__all__ = [
    # User
    "PublicUser",
    "CredentialRecord",
    "SignupRequest",
    "LoginRequest",
    "ForgotPasswordRequest",
    "ResetPasswordRequest",
    "PasswordUpdateRequest",
    "ProfileUpdateRequest",
    "AdminUserUpdateRequest",
    # Product
    "ProductFilters",
    "ProductCreate",
    "ProductUpdate",
    "ProductResponse",
    "ReviewRequest",
    "ReviewResponse",
    # Order
    "OrderCreate",
    "OrderResponse",
    # Common
    "SuccessResponse",
    "ErrorResponse",
    "PaginationMeta",
]
