"""
Auth Service

Sign-up, login, logout, password reset and onboarding on top of the hosted
identity provider (Supabase Auth). The SDK is synchronous, so every call
runs in a worker thread.

Handlers return AuthActionResult. Input validation failures carry
per-field messages in ``field_errors``; provider failures carry a single
Korean message in ``error``.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError

from ai_memo.core.auth import AuthUser, create_auth_client, get_supabase_admin_client
from ai_memo.core.config import settings
from ai_memo.schemas.auth import (
    MSG_INVALID_EMAIL,
    AuthActionResult,
    AuthSession,
    PasswordForm,
    SignUpForm,
)
from ai_memo.services.auth_errors import log_auth_error, parse_auth_error

logger = logging.getLogger(__name__)

PROFILES_TABLE = "user_profiles"

MSG_AUTH_REQUIRED = "인증이 필요합니다"
MSG_EMAIL_IN_USE = "이미 사용 중인 이메일 주소입니다"
MSG_SIGNUP_FAILED = "회원가입에 실패했습니다"
MSG_SIGNUP_INVALID_EMAIL = "유효하지 않은 이메일 주소입니다"
MSG_SIGNUP_BAD_PASSWORD = "비밀번호 형식이 올바르지 않습니다"
MSG_SIGNUP_NETWORK = "네트워크 연결을 확인해주세요"
MSG_PASSWORD_REQUIRED = "비밀번호를 입력해주세요"
MSG_LOGOUT_FAILED = "로그아웃에 실패했습니다"
MSG_ONBOARDING_FAILED = "온보딩 완료 처리에 실패했습니다"
MSG_INVALID_CODE = "유효하지 않은 인증 코드입니다"

DUPLICATE_MARKERS = ("already registered", "already been registered")


def _field_errors(exc: ValidationError) -> dict[str, list[str]]:
    """Collect validation messages per field (custom rule text when available)."""
    errors: dict[str, list[str]] = {}
    for err in exc.errors():
        field = str(err["loc"][0]) if err["loc"] else "form"
        if field == "email":
            message = MSG_INVALID_EMAIL
        else:
            ctx_error = err.get("ctx", {}).get("error")
            message = str(ctx_error) if ctx_error else err["msg"]
        errors.setdefault(field, []).append(message)
    return errors


def _validation_failure(exc: ValidationError) -> AuthActionResult:
    field_errors = _field_errors(exc)
    first = next(iter(field_errors.values()))[0]
    return AuthActionResult(success=False, error=first, field_errors=field_errors)


def _session_from(response: Any) -> AuthSession | None:
    session = getattr(response, "session", None)
    if session is None:
        return None
    return AuthSession(
        access_token=session.access_token,
        refresh_token=getattr(session, "refresh_token", None),
        expires_at=getattr(session, "expires_at", None),
    )


def _error_message(error: Exception) -> str:
    return str(getattr(error, "message", None) or error)


async def _email_registered(email: str) -> bool:
    """
    Check the provider's user list for ``email``.

    Returns False when the admin client is unavailable (no service-role key)
    or the lookup fails, so sign-up proceeds normally.
    """
    try:
        admin = get_supabase_admin_client()
        users = await asyncio.to_thread(admin.auth.admin.list_users)
    except Exception as e:
        logger.info(f"Admin duplicate check skipped: {e}")
        return False
    return any(getattr(user, "email", None) == email for user in users or [])


def _signup_error_message(error: Exception) -> str:
    message = _error_message(error)
    if any(marker in message for marker in DUPLICATE_MARKERS) or getattr(
        error, "status", None
    ) == 422:
        return MSG_EMAIL_IN_USE

    prefix = MSG_SIGNUP_FAILED
    if "Invalid email" in message:
        prefix = MSG_SIGNUP_INVALID_EMAIL
    elif "Password" in message:
        prefix = MSG_SIGNUP_BAD_PASSWORD
    elif "network" in message:
        prefix = MSG_SIGNUP_NETWORK
    return f"{prefix} ({message})"


async def sign_up_with_email(email: str, password: str) -> AuthActionResult:
    """
    Register a new account.

    Args:
        email: Address to register (must be a valid email).
        password: At least 8 characters including one special character.

    Returns:
        AuthActionResult; ``requires_email_verification`` is True when the
        provider created the user but issued no session yet.
    """
    try:
        form = SignUpForm(email=email, password=password)
    except ValidationError as e:
        return _validation_failure(e)

    email = str(form.email)
    if await _email_registered(email):
        return AuthActionResult(success=False, error=MSG_EMAIL_IN_USE)

    client = create_auth_client()
    try:
        response = await asyncio.to_thread(
            client.auth.sign_up,
            {
                "email": email,
                "password": form.password,
                "options": {"email_redirect_to": f"{settings.SITE_URL}/auth/callback"},
            },
        )
    except Exception as e:
        log_auth_error(e, {"action": "sign_up"})
        return AuthActionResult(success=False, error=_signup_error_message(e))

    session = _session_from(response)
    user = getattr(response, "user", None)
    logger.info(f"User signed up (verification pending: {session is None})")
    return AuthActionResult(
        success=True,
        requires_email_verification=session is None and user is not None,
        session=session,
        user_id=str(user.id) if user is not None else None,
    )


async def sign_in_with_email(email: str, password: str) -> AuthActionResult:
    """Log in with email and password and return the issued session."""
    field_errors: dict[str, list[str]] = {}
    if not email or "@" not in email:
        field_errors["email"] = [MSG_INVALID_EMAIL]
    if not password:
        field_errors["password"] = [MSG_PASSWORD_REQUIRED]
    if field_errors:
        first = next(iter(field_errors.values()))[0]
        return AuthActionResult(success=False, error=first, field_errors=field_errors)

    client = create_auth_client()
    try:
        response = await asyncio.to_thread(
            client.auth.sign_in_with_password,
            {"email": email.strip(), "password": password},
        )
    except Exception as e:
        log_auth_error(e, {"action": "sign_in"})
        return AuthActionResult(success=False, error=parse_auth_error(e))

    user = getattr(response, "user", None)
    return AuthActionResult(
        success=True,
        session=_session_from(response),
        user_id=str(user.id) if user is not None else None,
    )


async def sign_out(access_token: str | None, scope: str = "local") -> AuthActionResult:
    """
    Revoke the session behind ``access_token``.

    Args:
        scope: "local" ends this session only, "global" ends every session
            of the user.
    """
    if not access_token:
        return AuthActionResult(success=True)

    try:
        admin = get_supabase_admin_client()
        await asyncio.to_thread(admin.auth.admin.sign_out, access_token, scope)
    except Exception as e:
        log_auth_error(e, {"action": "sign_out", "scope": scope})
        return AuthActionResult(success=False, error=MSG_LOGOUT_FAILED)

    return AuthActionResult(success=True)


async def send_password_reset(email: str) -> AuthActionResult:
    """Email a password reset link that lands on /auth/reset-password."""
    if not email or "@" not in email:
        return AuthActionResult(
            success=False,
            error=MSG_INVALID_EMAIL,
            field_errors={"email": [MSG_INVALID_EMAIL]},
        )

    client = create_auth_client()
    try:
        await asyncio.to_thread(
            client.auth.reset_password_for_email,
            email.strip(),
            {"redirect_to": f"{settings.SITE_URL}/auth/reset-password"},
        )
    except Exception as e:
        log_auth_error(e, {"action": "reset_password_email"})
        return AuthActionResult(success=False, error=parse_auth_error(e))

    return AuthActionResult(success=True)


async def update_password(user: AuthUser | None, password: str) -> AuthActionResult:
    """Set a new password for the signed-in user (same rules as sign-up)."""
    if user is None:
        return AuthActionResult(success=False, error=MSG_AUTH_REQUIRED)

    try:
        form = PasswordForm(password=password)
    except ValidationError as e:
        return _validation_failure(e)

    try:
        admin = get_supabase_admin_client()
        await asyncio.to_thread(
            admin.auth.admin.update_user_by_id,
            user.id,
            {"password": form.password},
        )
    except Exception as e:
        log_auth_error(e, {"action": "update_password"})
        return AuthActionResult(success=False, error=parse_auth_error(e))

    logger.info(f"Password updated for user {user.id}")
    return AuthActionResult(success=True)


async def complete_onboarding(user: AuthUser | None) -> AuthActionResult:
    """Mark the user's profile as onboarded."""
    if user is None:
        return AuthActionResult(success=False, error=MSG_AUTH_REQUIRED)

    values = {
        "onboarding_completed": True,
        "onboarding_completed_at": datetime.now(UTC).isoformat(),
    }
    try:
        admin = get_supabase_admin_client()
        query = admin.table(PROFILES_TABLE).update(values).eq("user_id", user.id)
        await asyncio.to_thread(query.execute)
    except Exception:
        logger.exception(f"Onboarding update failed for user {user.id}")
        return AuthActionResult(success=False, error=MSG_ONBOARDING_FAILED)

    return AuthActionResult(success=True)


async def exchange_code(code: str | None) -> AuthActionResult:
    """Exchange an email-link code for a session."""
    if not code:
        return AuthActionResult(success=False, error=MSG_INVALID_CODE)

    client = create_auth_client()
    try:
        response = await asyncio.to_thread(
            client.auth.exchange_code_for_session,
            {"auth_code": code},
        )
    except Exception as e:
        log_auth_error(e, {"action": "exchange_code"})
        return AuthActionResult(success=False, error=parse_auth_error(e))

    return AuthActionResult(success=True, session=_session_from(response))
