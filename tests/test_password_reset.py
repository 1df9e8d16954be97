"""Tests for the forgot/reset password flow."""
from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient

from storefront.core.exceptions import InternalError, InvalidOrExpiredTokenError
from storefront.core.reset_tokens import RESET_TOKEN_TTL, ResetTokenManager
from storefront.services.user import AccountService, UserRepository

USER_API = "/api/storefleet/user"


@pytest.fixture
def accounts(async_session, email_service):
    return AccountService(UserRepository(async_session), email_service)


async def test_full_signup_login_forget_reset_scenario(client: AsyncClient, email_service):
    signup = await client.post(
        f"{USER_API}/signup",
        json={"name": "Scenario", "email": "scenario@example.com", "password": "secret12"}
    )
    assert signup.status_code == 201

    login = await client.post(
        f"{USER_API}/login",
        json={"email": "scenario@example.com", "password": "secret12"}
    )
    assert login.status_code == 200

    forget = await client.post(
        f"{USER_API}/password/forget",
        json={"email": "scenario@example.com"}
    )
    assert forget.status_code == 200

    secret = email_service.reset_secrets[-1]
    assert len(secret) == 40
    reset_mail = email_service.outbox[-1]
    assert reset_mail["kind"] == "password_reset"
    assert secret in reset_mail["html"]

    reset = await client.put(
        f"{USER_API}/password/reset/{secret}",
        json={"newPassword": "newsecret12", "confirmPassword": "newsecret12"}
    )
    assert reset.status_code == 200
    assert reset.json()["token"]
    assert reset.headers["set-cookie"].startswith("token=")

    old = await client.post(
        f"{USER_API}/login",
        json={"email": "scenario@example.com", "password": "secret12"}
    )
    new = await client.post(
        f"{USER_API}/login",
        json={"email": "scenario@example.com", "password": "newsecret12"}
    )
    assert old.status_code == 401
    assert new.status_code == 200

    # Existing sessions survive a password reset
    details = await client.get(
        f"{USER_API}/details",
        headers={"Authorization": f"Bearer {signup.json()['token']}"}
    )
    assert details.status_code == 200


async def test_forget_response_is_identical_for_unknown_email(client: AsyncClient, test_user, email_service):
    known = await client.post(f"{USER_API}/password/forget", json={"email": test_user.email})
    unknown = await client.post(f"{USER_API}/password/forget", json={"email": "ghost@example.com"})

    assert known.status_code == unknown.status_code == 200
    assert known.json() == unknown.json()
    assert len(email_service.reset_secrets) == 1


async def test_reset_secret_is_single_use(client: AsyncClient, test_user, email_service):
    await client.post(f"{USER_API}/password/forget", json={"email": test_user.email})
    secret = email_service.reset_secrets[-1]
    body = {"newPassword": "another123", "confirmPassword": "another123"}

    first = await client.put(f"{USER_API}/password/reset/{secret}", json=body)
    second = await client.put(f"{USER_API}/password/reset/{secret}", json=body)

    assert first.status_code == 200
    assert second.status_code == 400
    assert second.json()["error_code"] == "INVALID_OR_EXPIRED_TOKEN"


async def test_reset_with_unknown_secret(client: AsyncClient):
    response = await client.put(
        f"{USER_API}/password/reset/{'0' * 40}",
        json={"newPassword": "another123", "confirmPassword": "another123"}
    )

    assert response.status_code == 400
    assert response.json()["message"] == (
        "Password reset token is invalid or has expired. Please request a new one."
    )


async def test_reset_rejects_mismatched_passwords(client: AsyncClient, test_user, email_service):
    await client.post(f"{USER_API}/password/forget", json={"email": test_user.email})
    secret = email_service.reset_secrets[-1]

    response = await client.put(
        f"{USER_API}/password/reset/{secret}",
        json={"newPassword": "another123", "confirmPassword": "another456"}
    )

    assert response.status_code == 400
    assert response.json()["message"] == "New password and confirm password do not match."


async def test_reset_just_before_expiry(accounts, async_session, test_user, email_service):
    issued = datetime.now(timezone.utc)
    await accounts.forgot_password(test_user.email, now=issued)
    secret = email_service.reset_secrets[-1]

    user = await accounts.reset_password(
        secret,
        "beforeexpiry1",
        "beforeexpiry1",
        now=issued + RESET_TOKEN_TTL - timedelta(milliseconds=1),
    )

    assert user.id == test_user.id
    record = await UserRepository(async_session).get_credentials_by_id(test_user.id)
    assert record.reset_token_hash is None
    assert record.reset_token_expiry is None


async def test_reset_just_after_expiry(accounts, test_user, email_service):
    issued = datetime.now(timezone.utc)
    await accounts.forgot_password(test_user.email, now=issued)
    secret = email_service.reset_secrets[-1]

    with pytest.raises(InvalidOrExpiredTokenError):
        await accounts.reset_password(
            secret,
            "afterexpiry1",
            "afterexpiry1",
            now=issued + RESET_TOKEN_TTL + timedelta(milliseconds=1),
        )


async def test_only_hash_of_secret_is_stored(accounts, async_session, test_user, email_service):
    issued = datetime.now(timezone.utc)
    await accounts.forgot_password(test_user.email, now=issued)
    secret = email_service.reset_secrets[-1]

    record = await UserRepository(async_session).get_credentials_by_id(test_user.id)
    assert record.reset_token_hash == ResetTokenManager.hash_secret(secret)
    assert record.reset_token_hash != secret
    assert record.reset_token_expiry is not None


async def test_new_request_replaces_previous_secret(accounts, test_user, email_service):
    await accounts.forgot_password(test_user.email)
    await accounts.forgot_password(test_user.email)
    first, second = email_service.reset_secrets

    with pytest.raises(InvalidOrExpiredTokenError):
        await accounts.reset_password(first, "replaced123", "replaced123")

    user = await accounts.reset_password(second, "replaced123", "replaced123")
    assert user.id == test_user.id


async def test_delivery_failure_clears_reset_state(accounts, async_session, test_user, email_service):
    email_service.fail = True

    with pytest.raises(InternalError):
        await accounts.forgot_password(test_user.email)

    record = await UserRepository(async_session).get_credentials_by_id(test_user.id)
    assert record.reset_token_hash is None
    assert record.reset_token_expiry is None


async def test_delivery_failure_is_a_server_error(client: AsyncClient, test_user, email_service):
    email_service.fail = True

    response = await client.post(f"{USER_API}/password/forget", json={"email": test_user.email})

    assert response.status_code == 500
    assert response.json()["message"] == "Failed to send password reset email. Please try again."
