"""
Unit tests for autocomplete suggestion generation and parsing.
"""

from unittest.mock import AsyncMock, patch

import pytest

from ai_memo.services.autocomplete import (
    DEFAULT_CONFIDENCE,
    MSG_EMPTY_RESPONSE,
    MSG_INPUT_REQUIRED,
    MSG_UNAUTHENTICATED,
    generate_autocomplete_suggestion,
    parse_autocomplete_suggestions,
)
from ai_memo.services.gemini import GeminiResponse
from ai_memo.services.gemini_errors import MSG_TIMEOUT, GeminiTimeoutError


class TestParseSuggestions:
    def test_formatted_lines(self):
        text = "회의를 진행했습니다 [phrase] (85%)\n결론 [word] (60%)"

        suggestions = parse_autocomplete_suggestions(text)

        assert [s.id for s in suggestions] == ["suggestion-1", "suggestion-2"]
        assert suggestions[0].text == "회의를 진행했습니다"
        assert suggestions[0].type == "phrase"
        assert suggestions[0].confidence == pytest.approx(0.85)
        assert suggestions[1].type == "word"

    def test_free_text_lines_use_defaults(self):
        suggestions = parse_autocomplete_suggestions("그리고 다음 주에 다시 모이기로 했다")

        assert suggestions[0].type == "phrase"
        assert suggestions[0].confidence == DEFAULT_CONFIDENCE

    def test_at_most_three_and_blank_lines_skipped(self):
        text = "\n".join(["하나", "", "둘", "셋", "넷"])

        suggestions = parse_autocomplete_suggestions(text)

        assert [s.text for s in suggestions] == ["하나", "둘", "셋"]

    def test_confidence_clamped(self):
        suggestions = parse_autocomplete_suggestions("과장된 확신 [sentence] (150%)")
        assert suggestions[0].confidence == 1.0


@pytest.fixture
def generate():
    with patch("ai_memo.services.gemini.generate_text", new_callable=AsyncMock) as mock_gen:
        yield mock_gen


@pytest.mark.asyncio
async def test_requires_user(generate):
    result = await generate_autocomplete_suggestion(None, "오늘")

    assert result.error == MSG_UNAUTHENTICATED
    generate.assert_not_called()


@pytest.mark.asyncio
async def test_requires_input(user, generate):
    result = await generate_autocomplete_suggestion(user, "   ")

    assert result.success is False
    assert result.error == MSG_INPUT_REQUIRED


@pytest.mark.asyncio
async def test_returns_suggestions_with_context(user, generate):
    generate.return_value = GeminiResponse(
        text="결정했습니다 [phrase] (80%)\n논의했습니다 [phrase] (70%)",
        model="gemini-2.0-flash",
    )

    result = await generate_autocomplete_suggestion(user, "오늘 회의에서", context="주간 회의록")

    assert result.success is True
    assert len(result.suggestions) == 2
    prompt, config = generate.call_args.args
    assert "오늘 회의에서" in prompt
    assert "주간 회의록" in prompt
    assert config.max_output_tokens == 300


@pytest.mark.asyncio
async def test_empty_model_response(user, generate):
    generate.return_value = GeminiResponse(text="  \n ", model="gemini-2.0-flash")

    result = await generate_autocomplete_suggestion(user, "오늘")

    assert result.success is False
    assert result.error == MSG_EMPTY_RESPONSE


@pytest.mark.asyncio
async def test_gemini_failure_is_mapped(user, generate):
    generate.side_effect = GeminiTimeoutError()

    result = await generate_autocomplete_suggestion(user, "오늘")

    assert result.success is False
    assert result.error == MSG_TIMEOUT
