"""
Auth API Router

JSON endpoints for sign-up, login, logout, password reset and onboarding,
plus the browser redirect routes that email links land on.

On login the access token is also set as the ``sb-access-token`` cookie so
browser clients authenticate without an Authorization header.
"""

from urllib.parse import quote

from fastapi import APIRouter, Depends, Response
from fastapi.responses import RedirectResponse

from ai_memo.core.auth import ACCESS_TOKEN_COOKIE, AuthUser, get_access_token, get_current_user
from ai_memo.core.config import settings
from ai_memo.schemas.auth import (
    AuthActionResult,
    AuthSession,
    Credentials,
    EmailRequest,
    PasswordRequest,
    SignOutRequest,
)
from ai_memo.services import auth as auth_service

MSG_CALLBACK_EXPIRED = (
    "이메일 확인 링크가 만료되었거나 이미 사용되었습니다. 다시 회원가입해주세요."
)
MSG_RESET_LINK_EXPIRED = "재설정 링크가 만료되었거나 유효하지 않습니다"
MSG_RESET_LINK_INVALID = "유효하지 않은 재설정 링크입니다"

# Mounted under /api/v1/auth
router = APIRouter()

# Mounted under /auth (email link targets)
redirect_router = APIRouter()


def _set_session_cookie(response: Response, session: AuthSession | None) -> None:
    if session is None:
        return
    response.set_cookie(
        ACCESS_TOKEN_COOKIE,
        session.access_token,
        httponly=True,
        samesite="lax",
    )


def _site_redirect(path: str, error: str | None = None) -> RedirectResponse:
    url = f"{settings.SITE_URL}{path}"
    if error:
        url = f"{url}?error={quote(error)}"
    return RedirectResponse(url, status_code=303)


@router.post("/signup", response_model=AuthActionResult)
async def signup(credentials: Credentials, response: Response):
    """Create an account; the result says whether email verification is pending."""
    result = await auth_service.sign_up_with_email(credentials.email, credentials.password)
    _set_session_cookie(response, result.session)
    return result


@router.post("/login", response_model=AuthActionResult)
async def login(credentials: Credentials, response: Response):
    result = await auth_service.sign_in_with_email(credentials.email, credentials.password)
    _set_session_cookie(response, result.session)
    return result


@router.post("/logout", response_model=AuthActionResult)
async def logout(
    response: Response,
    request: SignOutRequest | None = None,
    token: str | None = Depends(get_access_token),
):
    """End the current session ("local") or every session of the user ("global")."""
    scope = request.scope if request else "local"
    result = await auth_service.sign_out(token, scope)
    if result.success:
        response.delete_cookie(ACCESS_TOKEN_COOKIE)
    return result


@router.post("/forgot-password", response_model=AuthActionResult)
async def forgot_password(request: EmailRequest):
    """Send a password reset email."""
    return await auth_service.send_password_reset(request.email)


@router.post("/reset-password", response_model=AuthActionResult)
async def reset_password(
    request: PasswordRequest,
    user: AuthUser | None = Depends(get_current_user),
):
    """Set a new password for the session established by the reset link."""
    return await auth_service.update_password(user, request.password)


@router.post("/onboarding", response_model=AuthActionResult)
async def complete_onboarding(user: AuthUser | None = Depends(get_current_user)):
    return await auth_service.complete_onboarding(user)


@redirect_router.get("/callback")
async def email_callback(
    code: str | None = None,
    error: str | None = None,
    error_description: str | None = None,
):
    """Sign-up confirmation link: exchange the code and continue to /notes."""
    if error:
        return _site_redirect("/signup", error_description or error)
    if not code:
        return _site_redirect("/signup")

    result = await auth_service.exchange_code(code)
    if not result.success:
        return _site_redirect("/signup", MSG_CALLBACK_EXPIRED)

    redirect = _site_redirect("/notes")
    _set_session_cookie(redirect, result.session)
    return redirect


@redirect_router.get("/reset-password")
async def password_reset_callback(code: str | None = None):
    """Password reset link: exchange the code and continue to the reset form."""
    if not code:
        return _site_redirect("/login", MSG_RESET_LINK_INVALID)

    result = await auth_service.exchange_code(code)
    if not result.success:
        return _site_redirect("/login", MSG_RESET_LINK_EXPIRED)

    redirect = _site_redirect("/reset-password")
    _set_session_cookie(redirect, result.session)
    return redirect
