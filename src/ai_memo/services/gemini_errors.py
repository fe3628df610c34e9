"""
Gemini Error Handling

Custom exceptions for the Gemini integration and a parser that turns any
exception raised during a generation call into a user-facing Korean
message.

Classification order:
    1. Our own exception classes.
    2. OpenAI SDK exception classes (the client talks to Gemini through
       its OpenAI-compatible endpoint).
    3. Substring matching on the lowercased error message.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

import openai

logger = logging.getLogger(__name__)


class GeminiErrorType(str, Enum):
    API_KEY_MISSING = "API_KEY_MISSING"
    API_KEY_INVALID = "API_KEY_INVALID"
    NETWORK_ERROR = "NETWORK_ERROR"
    RATE_LIMIT_ERROR = "RATE_LIMIT_ERROR"
    TOKEN_LIMIT_ERROR = "TOKEN_LIMIT_ERROR"
    TIMEOUT_ERROR = "TIMEOUT_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class GeminiError(Exception):
    """Base class for Gemini integration errors."""

    default_message = "알 수 없는 에러가 발생했습니다."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class GeminiAPIKeyMissingError(GeminiError):
    default_message = "Gemini API 키가 설정되지 않았습니다."


class GeminiNetworkError(GeminiError):
    default_message = "네트워크 연결에 실패했습니다."


class GeminiRateLimitError(GeminiError):
    default_message = "API 요청 한도를 초과했습니다. 잠시 후 다시 시도해주세요."


class GeminiTokenLimitError(GeminiError):
    default_message = "토큰 제한을 초과했습니다. 입력 텍스트를 줄여주세요."


class GeminiTimeoutError(GeminiError):
    default_message = "요청 시간이 초과되었습니다. 다시 시도해주세요."


MSG_API_KEY_MISSING = (
    "GEMINI_API_KEY 환경변수가 설정되지 않았습니다. .env 파일을 확인해주세요."
)
MSG_API_KEY_INVALID = "API 키가 유효하지 않습니다. GEMINI_API_KEY를 확인해주세요."
MSG_NETWORK = "네트워크 연결에 실패했습니다. 인터넷 연결을 확인해주세요."
MSG_RATE_LIMIT = "API 요청 한도를 초과했습니다. 잠시 후 다시 시도해주세요."
MSG_TOKEN_LIMIT = "입력 텍스트가 너무 깁니다. 8,000 토큰 이하로 줄여주세요."
MSG_TIMEOUT = "요청 시간이 초과되었습니다. 다시 시도해주세요."
MSG_UNKNOWN = "알 수 없는 에러가 발생했습니다. 잠시 후 다시 시도해주세요."


@dataclass
class ParsedGeminiError:
    """User-facing view of a failed Gemini call."""

    type: GeminiErrorType
    message: str
    original_error: BaseException | None = None
    status_code: int | None = None


def _classify_message(error: BaseException) -> ParsedGeminiError:
    text = str(error).lower()

    if "api key" in text or "apikey" in text or "unauthorized" in text:
        return ParsedGeminiError(
            GeminiErrorType.API_KEY_INVALID, MSG_API_KEY_INVALID, error, 401
        )
    if "rate limit" in text or "quota" in text or "429" in text:
        return ParsedGeminiError(
            GeminiErrorType.RATE_LIMIT_ERROR, MSG_RATE_LIMIT, error, 429
        )
    if "token" in text and ("limit" in text or "exceed" in text):
        return ParsedGeminiError(GeminiErrorType.TOKEN_LIMIT_ERROR, MSG_TOKEN_LIMIT, error)
    if "timeout" in text or "timed out" in text:
        return ParsedGeminiError(GeminiErrorType.TIMEOUT_ERROR, MSG_TIMEOUT, error)
    if any(
        marker in text for marker in ("network", "fetch", "econnrefused", "enotfound")
    ):
        return ParsedGeminiError(GeminiErrorType.NETWORK_ERROR, MSG_NETWORK, error)

    return ParsedGeminiError(
        GeminiErrorType.UNKNOWN_ERROR,
        f"알 수 없는 에러가 발생했습니다: {error}",
        error,
    )


def parse_gemini_error(error: object) -> ParsedGeminiError:
    """
    Convert an exception from a Gemini call into a ParsedGeminiError.

    Args:
        error: Anything caught by a handler's ``except`` block.

    Returns:
        ParsedGeminiError whose ``message`` is safe to show to the user.
    """
    # Own exception classes
    if isinstance(error, GeminiAPIKeyMissingError):
        return ParsedGeminiError(GeminiErrorType.API_KEY_MISSING, MSG_API_KEY_MISSING, error)
    if isinstance(error, GeminiNetworkError):
        return ParsedGeminiError(GeminiErrorType.NETWORK_ERROR, MSG_NETWORK, error)
    if isinstance(error, GeminiRateLimitError):
        return ParsedGeminiError(GeminiErrorType.RATE_LIMIT_ERROR, MSG_RATE_LIMIT, error, 429)
    if isinstance(error, GeminiTokenLimitError):
        return ParsedGeminiError(GeminiErrorType.TOKEN_LIMIT_ERROR, MSG_TOKEN_LIMIT, error)
    if isinstance(error, GeminiTimeoutError):
        return ParsedGeminiError(GeminiErrorType.TIMEOUT_ERROR, MSG_TIMEOUT, error)

    # OpenAI SDK exceptions (APITimeoutError subclasses APIConnectionError)
    if isinstance(error, openai.AuthenticationError):
        return ParsedGeminiError(
            GeminiErrorType.API_KEY_INVALID, MSG_API_KEY_INVALID, error, 401
        )
    if isinstance(error, openai.RateLimitError):
        return ParsedGeminiError(GeminiErrorType.RATE_LIMIT_ERROR, MSG_RATE_LIMIT, error, 429)
    if isinstance(error, openai.APITimeoutError):
        return ParsedGeminiError(GeminiErrorType.TIMEOUT_ERROR, MSG_TIMEOUT, error)
    if isinstance(error, openai.APIConnectionError):
        return ParsedGeminiError(GeminiErrorType.NETWORK_ERROR, MSG_NETWORK, error)

    if isinstance(error, BaseException):
        return _classify_message(error)

    return ParsedGeminiError(GeminiErrorType.UNKNOWN_ERROR, MSG_UNKNOWN)


def log_gemini_error(parsed: ParsedGeminiError, context: str | None = None) -> None:
    """Log a parsed error with an optional context label."""
    prefix = f"[Gemini API - {context}]" if context else "[Gemini API]"
    logger.error(
        "%s %s: %s",
        prefix,
        parsed.type.value,
        parsed.message,
        exc_info=parsed.original_error,
    )
