"""
Text Utilities

Prompt validation and token budgeting helpers for the Gemini integration,
plus small text formatting helpers shared by the schemas.

Token counts are estimated from character classes, not with a real
tokenizer:
    - Hangul / CJK / Japanese kana: ~2 characters per token
    - Everything else: ~4 characters per token
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass

DEFAULT_MAX_TOKENS = 8000
MAX_TAGS = 6

# Hiragana/Katakana, CJK Extension A, CJK Unified Ideographs, Hangul syllables
ASIAN_CHAR_PATTERN = re.compile("[\u3040-\u30ff\u3400-\u4dbf\u4e00-\u9fff\uac00-\ud7af]")
_WHITESPACE_RUN = re.compile(r"\s+")


@dataclass(frozen=True)
class PromptValidation:
    """Outcome of ``validate_prompt``."""

    valid: bool
    error: str | None = None


def is_empty_prompt(prompt: str | None) -> bool:
    return not prompt or not prompt.strip()


def _count_asian_chars(text: str) -> int:
    return len(ASIAN_CHAR_PATTERN.findall(text))


def estimate_token_count(text: str | None) -> int:
    """
    Estimate the number of tokens in ``text``.

    Examples:
        >>> estimate_token_count("안녕하세요")
        3
        >>> estimate_token_count("Hello World")
        3
    """
    if not text:
        return 0

    asian_chars = _count_asian_chars(text)
    other_chars = len(text) - asian_chars
    return math.ceil(asian_chars / 2) + math.ceil(other_chars / 4)


def exceeds_token_limit(text: str, max_tokens: int = DEFAULT_MAX_TOKENS) -> bool:
    return estimate_token_count(text) > max_tokens


def validate_prompt(prompt: str, max_tokens: int = DEFAULT_MAX_TOKENS) -> PromptValidation:
    """Reject empty prompts and prompts above the estimated token budget."""
    if is_empty_prompt(prompt):
        return PromptValidation(valid=False, error="프롬프트가 비어있습니다.")

    if exceeds_token_limit(prompt, max_tokens):
        estimated = estimate_token_count(prompt)
        return PromptValidation(
            valid=False,
            error=f"프롬프트가 너무 깁니다. (추정: {estimated} 토큰, 최대: {max_tokens} 토큰)",
        )

    return PromptValidation(valid=True)


def truncate_to_token_limit(text: str, max_tokens: int) -> str:
    """
    Cut ``text`` so that it fits (approximately) within ``max_tokens``.

    The character budget is derived from the share of Asian characters in
    the text. Truncated text ends with ``"..."``; text already within the
    budget is returned unchanged.
    """
    if not exceeds_token_limit(text, max_tokens):
        return text

    asian_ratio = _count_asian_chars(text) / len(text)
    estimated_chars = math.floor(max_tokens * (2 * asian_ratio + 4 * (1 - asian_ratio)))
    return text[:estimated_chars] + "..."


def parse_tags_from_text(text: str | None, limit: int = MAX_TAGS) -> list[str]:
    """
    Parse a comma separated model response into normalized tags.

    Tags are trimmed and lowercased; empty and duplicate tags are dropped
    (first occurrence wins) and at most ``limit`` tags are kept.

    Example:
        >>> parse_tags_from_text("개발, JavaScript, React")
        ['개발', 'javascript', 'react']
    """
    if not text or not text.strip():
        return []

    tags: list[str] = []
    for raw in text.split(","):
        tag = raw.strip().lower()
        if tag and tag not in tags:
            tags.append(tag)
    return tags[:limit]


def truncate_text(text: str | None, max_length: int = 150) -> str:
    """Collapse newlines/whitespace and cut to ``max_length`` with an ellipsis."""
    if not text:
        return ""

    normalized = _WHITESPACE_RUN.sub(" ", text).strip()
    if len(normalized) <= max_length:
        return normalized
    return normalized[:max_length].strip() + "..."
