"""
Auth Error Handling

Maps identity provider (Supabase Auth) errors to user-facing Korean
messages. Errors carrying a ``code`` are looked up directly; otherwise the
lowercased message is matched against known phrases.
"""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)

AUTH_ERROR_MESSAGES: dict[str, str] = {
    # Credentials
    "invalid_credentials": "이메일 또는 비밀번호가 올바르지 않습니다",
    "email_exists": "이미 사용 중인 이메일입니다",
    "user_already_registered": "이미 사용 중인 이메일입니다",
    # Password
    "weak_password": "비밀번호가 너무 약합니다. 8자 이상, 특수문자 포함 필수",
    "password_too_short": "비밀번호는 최소 8자 이상이어야 합니다",
    # Email
    "invalid_email": "유효하지 않은 이메일 형식입니다",
    "email_not_confirmed": "이메일 인증이 완료되지 않았습니다. 이메일을 확인해주세요",
    # Session
    "session_expired": "세션이 만료되었습니다. 다시 로그인해주세요",
    "invalid_session": "유효하지 않은 세션입니다. 다시 로그인해주세요",
    # Provider
    "email_provider_disabled": "이메일 로그인이 비활성화되었습니다. 관리자에게 문의하세요",
    # Network
    "network_error": "네트워크 연결을 확인해주세요",
    "timeout": "요청 시간이 초과되었습니다. 다시 시도해주세요",
    "unknown_error": "오류가 발생했습니다. 잠시 후 다시 시도해주세요",
}


def get_auth_error_message(code: str | None) -> str:
    """Korean message for an error code (unknown codes get the generic message)."""
    return AUTH_ERROR_MESSAGES.get(code or "", AUTH_ERROR_MESSAGES["unknown_error"])


def parse_auth_error(error: Any) -> str:
    """
    Convert an auth error (exception or error-like object) to a message.

    Args:
        error: Supabase ``AuthApiError`` or anything with ``code``/``message``.

    Returns:
        A message from AUTH_ERROR_MESSAGES.
    """
    code = getattr(error, "code", None)
    if code:
        return get_auth_error_message(code)

    message = str(getattr(error, "message", None) or error or "").lower()

    if "invalid" in message and "credentials" in message:
        return AUTH_ERROR_MESSAGES["invalid_credentials"]
    if "already" in message and ("registered" in message or "exists" in message):
        return AUTH_ERROR_MESSAGES["email_exists"]
    if "email" in message and "confirmed" in message:
        return AUTH_ERROR_MESSAGES["email_not_confirmed"]
    if "email" in message and ("disabled" in message or "provider" in message):
        return AUTH_ERROR_MESSAGES["email_provider_disabled"]
    if "weak" in message and "password" in message:
        return AUTH_ERROR_MESSAGES["weak_password"]
    if "invalid" in message and "email" in message:
        return AUTH_ERROR_MESSAGES["invalid_email"]
    if "session" in message and "expired" in message:
        return AUTH_ERROR_MESSAGES["session_expired"]
    if "network" in message:
        return AUTH_ERROR_MESSAGES["network_error"]
    if "timeout" in message:
        return AUTH_ERROR_MESSAGES["timeout"]

    return AUTH_ERROR_MESSAGES["unknown_error"]


def log_auth_error(error: Any, context: dict[str, Any] | None = None) -> None:
    logger.error(
        f"[Auth Error] code={getattr(error, 'code', None) or 'unknown'} "
        f"status={getattr(error, 'status', None)} "
        f"message={getattr(error, 'message', None) or error} context={context or {}}"
    )
