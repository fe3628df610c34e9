"""
Gemini Service

Text generation through Gemini's OpenAI-compatible endpoint using the
``openai`` async SDK. A single request/response call per generation: no
retries, batching or streaming.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass

from openai import AsyncOpenAI

from ai_memo.core.config import settings
from ai_memo.services.gemini_errors import (
    GeminiAPIKeyMissingError,
    GeminiTimeoutError,
    log_gemini_error,
    parse_gemini_error,
)

logger = logging.getLogger(__name__)

DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_OUTPUT_TOKENS = 2048
CONNECTION_TEST_PROMPT = "Hello"


@dataclass
class GenerationConfig:
    """
    Sampling configuration for a generation call.

    Attributes:
        temperature: 0.0-2.0, higher is more creative.
        max_output_tokens: Upper bound on generated tokens.
        top_p: Nucleus sampling (optional).
    """

    temperature: float = DEFAULT_TEMPERATURE
    max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS
    top_p: float | None = None


@dataclass
class GeminiResponse:
    """Generated text with optional usage counters."""

    text: str
    model: str
    input_tokens: int | None = None
    output_tokens: int | None = None
    total_tokens: int | None = None
    generation_time_ms: int | None = None


@dataclass
class ConnectionTestResult:
    success: bool
    error: str | None = None
    response_time_ms: int | None = None
    test_response: str | None = None


_client: AsyncOpenAI | None = None


def has_api_key() -> bool:
    return bool(settings.gemini_api_key)


def get_client() -> AsyncOpenAI:
    """
    Get or create the shared async client (singleton).

    Raises:
        GeminiAPIKeyMissingError: If neither GEMINI_API_KEY nor GOOGLE_API_KEY is set.
    """
    global _client  # noqa: PLW0603
    if _client is None:
        api_key = settings.gemini_api_key
        if not api_key:
            raise GeminiAPIKeyMissingError(
                "GEMINI_API_KEY 환경변수가 설정되지 않았습니다. .env 파일에 API 키를 추가해주세요."
            )
        _client = AsyncOpenAI(
            api_key=api_key,
            base_url=settings.GEMINI_BASE_URL,
            timeout=settings.gemini_timeout_seconds,
            max_retries=0,
        )
    return _client


def reset_client() -> None:
    """Drop the cached client (used by tests and after key rotation)."""
    global _client  # noqa: PLW0603
    _client = None


async def generate_text(
    prompt: str,
    config: GenerationConfig | None = None,
) -> GeminiResponse:
    """
    Generate text for a single prompt.

    Args:
        prompt: Full prompt text.
        config: Sampling configuration (defaults: temperature 0.7, 2048 tokens).

    Returns:
        GeminiResponse with the generated text (empty string if the model
        returned no content) and usage counters when reported.

    Raises:
        GeminiAPIKeyMissingError: If no API key is configured.
        openai.OpenAIError: On any API failure (classified by parse_gemini_error).
    """
    config = config or GenerationConfig()
    client = get_client()
    model = settings.GEMINI_MODEL
    start = time.perf_counter()

    kwargs: dict = {
        "model": model,
        "messages": [{"role": "user", "content": prompt}],
        "temperature": config.temperature,
        "max_tokens": config.max_output_tokens,
    }
    if config.top_p is not None:
        kwargs["top_p"] = config.top_p

    response = await client.chat.completions.create(**kwargs)

    elapsed_ms = int((time.perf_counter() - start) * 1000)
    text = ""
    if response.choices:
        text = response.choices[0].message.content or ""

    usage = response.usage
    logger.info(
        "Gemini response generated (model=%s, length=%d, %dms)",
        model,
        len(text),
        elapsed_ms,
    )

    return GeminiResponse(
        text=text,
        model=model,
        input_tokens=usage.prompt_tokens if usage else None,
        output_tokens=usage.completion_tokens if usage else None,
        total_tokens=usage.total_tokens if usage else None,
        generation_time_ms=elapsed_ms,
    )


async def test_connection(timeout_ms: int = 10_000) -> ConnectionTestResult:
    """
    Check that the configured key can generate text.

    Sends a short prompt and races it against ``timeout_ms``.
    """
    start = time.perf_counter()

    def _elapsed() -> int:
        return int((time.perf_counter() - start) * 1000)

    if not has_api_key():
        return ConnectionTestResult(
            success=False,
            error="GEMINI_API_KEY 환경변수가 설정되지 않았습니다.",
            response_time_ms=_elapsed(),
        )

    try:
        try:
            response = await asyncio.wait_for(
                generate_text(
                    CONNECTION_TEST_PROMPT,
                    GenerationConfig(temperature=0.7, max_output_tokens=50),
                ),
                timeout=timeout_ms / 1000,
            )
        except TimeoutError as e:
            raise GeminiTimeoutError("Connection timeout") from e
    except Exception as e:
        parsed = parse_gemini_error(e)
        log_gemini_error(parsed, "Connection Test")
        return ConnectionTestResult(
            success=False,
            error=parsed.message,
            response_time_ms=_elapsed(),
        )

    return ConnectionTestResult(
        success=True,
        response_time_ms=_elapsed(),
        test_response=response.text,
    )
