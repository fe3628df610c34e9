"""
Auth Schemas

Credential validation and auth handler results.

Password rules: at least 8 characters and at least one special character.
Validation messages are the Korean strings surfaced per field by the
sign-up and password forms.
"""

import re

from pydantic import BaseModel, EmailStr, Field, field_validator

from ai_memo.schemas.common import ActionResult

PASSWORD_MIN_LENGTH = 8
SPECIAL_CHAR_PATTERN = re.compile(r"[!@#$%^&*()_+\-=\[\]{}|;:,.<>?]")

MSG_INVALID_EMAIL = "유효한 이메일 주소를 입력해주세요"
MSG_PASSWORD_TOO_SHORT = "비밀번호는 최소 8자 이상이어야 합니다"
MSG_PASSWORD_NO_SPECIAL = "비밀번호는 특수문자를 1개 이상 포함해야 합니다"


def check_password_rules(password: str) -> str:
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValueError(MSG_PASSWORD_TOO_SHORT)
    if not SPECIAL_CHAR_PATTERN.search(password):
        raise ValueError(MSG_PASSWORD_NO_SPECIAL)
    return password


class PasswordForm(BaseModel):
    password: str

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str) -> str:
        return check_password_rules(value)


class SignUpForm(PasswordForm):
    email: EmailStr


class Credentials(BaseModel):
    """Request schema for POST /auth/signup and /auth/login."""

    email: str = Field(default="")
    password: str = Field(default="")


class EmailRequest(BaseModel):
    """Request schema for POST /auth/forgot-password."""

    email: str = Field(default="")


class PasswordRequest(BaseModel):
    """Request schema for POST /auth/reset-password."""

    password: str = Field(default="")


class SignOutRequest(BaseModel):
    scope: str = Field(default="local", pattern="^(local|global)$")


class AuthSession(BaseModel):
    access_token: str
    refresh_token: str | None = None
    expires_at: int | None = None


class AuthActionResult(ActionResult):
    """
    Result of an auth handler.

    Attributes:
        field_errors: Per-field validation messages (``{"password": [...]}``).
        requires_email_verification: Sign-up succeeded but no session was
            issued until the address is confirmed.
        session: Tokens issued on login (or on sign-up without confirmation).
    """

    field_errors: dict[str, list[str]] | None = None
    requires_email_verification: bool | None = None
    session: AuthSession | None = None
    user_id: str | None = None
