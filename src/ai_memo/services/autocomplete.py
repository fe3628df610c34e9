"""
Autocomplete Service

Generates up to three continuations for the text a user is typing.

The model is asked for one suggestion per line in the form
``text [word|phrase|sentence] (NN%)``. Lines that do not follow the format
are kept as plain phrases with a default confidence.
"""

from __future__ import annotations

import logging
import re

from ai_memo.core.auth import AuthUser
from ai_memo.schemas.ai import AutocompleteResult, AutocompleteSuggestion
from ai_memo.services import gemini
from ai_memo.services.gemini_errors import log_gemini_error, parse_gemini_error
from ai_memo.services.prompts import create_autocomplete_prompt
from ai_memo.services.text_utils import truncate_to_token_limit, validate_prompt

logger = logging.getLogger(__name__)

INPUT_TOKEN_BUDGET = 6000
MAX_SUGGESTIONS = 3
DEFAULT_CONFIDENCE = 0.7
AUTOCOMPLETE_CONFIG = gemini.GenerationConfig(temperature=0.7, max_output_tokens=300)

SUGGESTION_PATTERN = re.compile(r"^(.+?)\s*\[(word|phrase|sentence)\]\s*\((\d+)%\)$")

MSG_UNAUTHENTICATED = "인증되지 않은 사용자입니다. 다시 로그인해주세요."
MSG_INPUT_REQUIRED = "입력 텍스트가 필요합니다."
MSG_EMPTY_RESPONSE = "자동완성 제안을 생성할 수 없습니다. 다시 시도해주세요."
MSG_NO_VALID_SUGGESTIONS = "유효한 자동완성 제안을 생성할 수 없습니다. 다시 시도해주세요."


def parse_autocomplete_suggestions(text: str) -> list[AutocompleteSuggestion]:
    """
    Parse the model response into at most three suggestions.

    Example:
        >>> parse_autocomplete_suggestions("회의를 진행했습니다 [phrase] (85%)")[0].confidence
        0.85
    """
    lines = [line.strip() for line in text.splitlines() if line.strip()]

    suggestions: list[AutocompleteSuggestion] = []
    for index, line in enumerate(lines[:MAX_SUGGESTIONS], start=1):
        match = SUGGESTION_PATTERN.match(line)
        if match:
            body, kind, confidence = match.groups()
            suggestions.append(
                AutocompleteSuggestion(
                    id=f"suggestion-{index}",
                    text=body.strip(),
                    confidence=max(0.0, min(1.0, int(confidence) / 100)),
                    type=kind,  # type: ignore[arg-type]
                )
            )
        else:
            suggestions.append(
                AutocompleteSuggestion(
                    id=f"suggestion-{index}",
                    text=line,
                    confidence=DEFAULT_CONFIDENCE,
                    type="phrase",
                )
            )
    return suggestions


async def generate_autocomplete_suggestion(
    user: AuthUser | None,
    input_text: str | None,
    context: str = "",
) -> AutocompleteResult:
    """
    Suggest continuations for ``input_text``.

    Args:
        user: Calling user (required).
        input_text: Text typed so far; truncated to the input token budget.
        context: Note title or surrounding content.
    """
    if user is None:
        return AutocompleteResult(success=False, error=MSG_UNAUTHENTICATED)
    if not input_text or not input_text.strip():
        return AutocompleteResult(success=False, error=MSG_INPUT_REQUIRED)

    text = input_text
    if not validate_prompt(text, INPUT_TOKEN_BUDGET).valid:
        text = truncate_to_token_limit(text, INPUT_TOKEN_BUDGET)

    try:
        response = await gemini.generate_text(
            create_autocomplete_prompt(text, context),
            AUTOCOMPLETE_CONFIG,
        )
    except Exception as e:
        parsed = parse_gemini_error(e)
        log_gemini_error(parsed, "Autocomplete")
        return AutocompleteResult(success=False, error=parsed.message)

    raw = response.text.strip()
    if not raw:
        return AutocompleteResult(success=False, error=MSG_EMPTY_RESPONSE)

    suggestions = parse_autocomplete_suggestions(raw)
    if not suggestions:
        return AutocompleteResult(success=False, error=MSG_NO_VALID_SUGGESTIONS)

    logger.debug(f"Generated {len(suggestions)} autocomplete suggestions")
    return AutocompleteResult(success=True, suggestions=suggestions)
