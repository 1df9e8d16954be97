"""User account, password and admin routes."""
import uuid

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from ...core.exceptions import NotFoundError, ValidationError
from ...core.logging import BusinessLogger
from ...core.security import (
    admin_required,
    get_account_service,
    get_current_user,
    get_session_issuer,
    get_user_repository,
)
from ...core.session import SessionIssuer
from ...schemas.common import SuccessResponse
from ...schemas.user import (
    AdminUserUpdateRequest,
    ForgotPasswordRequest,
    LoginRequest,
    PasswordUpdateRequest,
    ProfileUpdateRequest,
    PublicUser,
    ResetPasswordRequest,
    SignupRequest,
    UserEnvelope,
    UserMessageEnvelope,
    UsersEnvelope,
)
from ...services.user import AccountService, UserRepository

router = APIRouter(prefix="/user", tags=["User"])

business_logger = BusinessLogger()

FORGOT_PASSWORD_MESSAGE = (
    "If your email address is registered, you will receive a password reset token shortly."
)


@router.post("/signup", status_code=status.HTTP_201_CREATED)
async def signup(
    signup_request: SignupRequest,
    accounts: AccountService = Depends(get_account_service),
    issuer: SessionIssuer = Depends(get_session_issuer)
) -> JSONResponse:
    """Register a new user and start a session."""
    user = await accounts.signup(
        signup_request.name, signup_request.email, signup_request.password
    )
    return issuer.issue_session(user, status_code=status.HTTP_201_CREATED)


@router.post("/login")
async def login(
    login_request: LoginRequest,
    request: Request,
    accounts: AccountService = Depends(get_account_service),
    issuer: SessionIssuer = Depends(get_session_issuer)
) -> JSONResponse:
    """Login user and start a session."""
    user = await accounts.login(
        login_request.email,
        login_request.password,
        ip_address=request.client.host if request.client else None,
    )
    return issuer.issue_session(user)


@router.get("/logout", response_model=SuccessResponse)
async def logout(
    current_user: PublicUser = Depends(get_current_user),
    issuer: SessionIssuer = Depends(get_session_issuer)
) -> JSONResponse:
    """Clear the session cookie."""
    response = JSONResponse(content={"success": True, "message": "Logout successful."})
    return issuer.clear_session(response)


@router.get("/details", response_model=UserEnvelope)
async def get_user_details(current_user: PublicUser = Depends(get_current_user)):
    """Get current user information."""
    return UserEnvelope(user=current_user)


@router.put("/profile/update", response_model=UserMessageEnvelope)
async def update_profile(
    profile_update: ProfileUpdateRequest,
    current_user: PublicUser = Depends(get_current_user),
    repository: UserRepository = Depends(get_user_repository)
):
    """Update own profile. Email, password and role are not changeable here."""
    if not profile_update.name:
        raise ValidationError("No valid fields provided for update. Only name can be updated.")

    user = await repository.update_profile(current_user.id, profile_update.name)
    if user is None:
        raise NotFoundError("User not found.")
    return UserMessageEnvelope(user=user, message="Profile updated successfully.")


@router.post("/password/forget", response_model=SuccessResponse)
async def forgot_password(
    forgot_request: ForgotPasswordRequest,
    accounts: AccountService = Depends(get_account_service)
):
    """Email a reset token. The response does not reveal whether the email exists."""
    await accounts.forgot_password(forgot_request.email)
    return SuccessResponse(message=FORGOT_PASSWORD_MESSAGE)


@router.put("/password/reset/{token}")
async def reset_password(
    token: str,
    reset_request: ResetPasswordRequest,
    accounts: AccountService = Depends(get_account_service),
    issuer: SessionIssuer = Depends(get_session_issuer)
) -> JSONResponse:
    """Set a new password with an emailed reset token and start a session."""
    user = await accounts.reset_password(
        token, reset_request.new_password, reset_request.confirm_password
    )
    return issuer.issue_session(user)


@router.put("/password/update")
async def update_password(
    password_update: PasswordUpdateRequest,
    current_user: PublicUser = Depends(get_current_user),
    accounts: AccountService = Depends(get_account_service),
    issuer: SessionIssuer = Depends(get_session_issuer)
) -> JSONResponse:
    """Change own password and refresh the session."""
    user = await accounts.update_password(
        current_user.id,
        password_update.current_password,
        password_update.new_password,
        password_update.confirm_password,
    )
    return issuer.issue_session(user)


# Admin routes

@router.get(
    "/admin/users",
    response_model=UsersEnvelope,
    dependencies=[Depends(get_current_user), Depends(admin_required)]
)
async def list_users(repository: UserRepository = Depends(get_user_repository)):
    """List all users (admin only)."""
    return UsersEnvelope(users=await repository.list_all())


@router.get(
    "/admin/users/{user_id}",
    response_model=UserEnvelope,
    dependencies=[Depends(get_current_user), Depends(admin_required)]
)
async def get_user(
    user_id: uuid.UUID,
    repository: UserRepository = Depends(get_user_repository)
):
    """Get one user (admin only)."""
    user = await repository.get_by_id(user_id)
    if user is None:
        raise NotFoundError(f"User not found with ID: {user_id}")
    return UserEnvelope(user=user)


@router.delete(
    "/admin/users/{user_id}",
    response_model=UserMessageEnvelope,
    dependencies=[Depends(get_current_user), Depends(admin_required)]
)
async def delete_user(
    user_id: uuid.UUID,
    current_user: PublicUser = Depends(get_current_user),
    repository: UserRepository = Depends(get_user_repository)
):
    """Delete a user (admin only)."""
    user = await repository.delete(user_id)
    if user is None:
        raise NotFoundError(f"User not found with ID: {user_id}")

    business_logger.log_user_deleted(str(user_id), deleted_by=str(current_user.id))
    return UserMessageEnvelope(user=user, message="User deleted successfully.")


@router.put(
    "/admin/update/{user_id}",
    response_model=UserMessageEnvelope,
    dependencies=[Depends(get_current_user), Depends(admin_required)]
)
async def update_user_profile_and_role(
    user_id: uuid.UUID,
    admin_update: AdminUserUpdateRequest,
    repository: UserRepository = Depends(get_user_repository)
):
    """Update another user's name, email or role (admin only)."""
    if not (admin_update.name or admin_update.email or admin_update.role):
        raise ValidationError("No data provided for update.")
    if admin_update.role:
        AccountService.check_role(admin_update.role)

    user = await repository.update_profile_and_role(
        user_id,
        name=admin_update.name,
        email=admin_update.email,
        role=admin_update.role,
    )
    if user is None:
        raise NotFoundError(f"User not found with ID: {user_id}")
    return UserMessageEnvelope(user=user, message="User updated successfully.")
