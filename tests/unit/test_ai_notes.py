"""
Unit tests for summary and tag generation.

Repositories and the Gemini client are mocked.
"""

import uuid
from datetime import timedelta
from unittest.mock import AsyncMock, patch

import httpx
import openai
import pytest

from ai_memo.core.config import settings
from ai_memo.models.base import utcnow
from ai_memo.services import ai_notes
from ai_memo.services.ai_notes import (
    MSG_EMPTY_SUMMARY,
    MSG_EMPTY_TAGS,
    MSG_INVALID_NOTE_ID,
    MSG_INVALID_TAG_COUNT,
    MSG_NOTE_NOT_FOUND,
    MSG_UNAUTHENTICATED,
    PROMPT_TOKEN_BUDGET,
)
from ai_memo.services.gemini import GeminiResponse
from ai_memo.services.gemini_errors import MSG_RATE_LIMIT
from ai_memo.services.text_utils import estimate_token_count


def _response(text: str) -> GeminiResponse:
    return GeminiResponse(text=text, model="gemini-2.0-flash")


@pytest.fixture
def repos():
    with (
        patch("ai_memo.services.ai_notes.note_repository") as notes,
        patch("ai_memo.services.ai_notes.summary_repository") as summaries,
        patch("ai_memo.services.ai_notes.tag_repository") as tags,
    ):
        notes.get_active = AsyncMock()
        summaries.latest_for_note = AsyncMock(return_value=None)
        summaries.add = AsyncMock()
        tags.list_for_note = AsyncMock(return_value=[])
        tags.replace_for_note = AsyncMock()
        yield notes, summaries, tags


@pytest.fixture
def generate():
    with patch("ai_memo.services.gemini.generate_text", new_callable=AsyncMock) as mock_gen:
        yield mock_gen


class TestNoteAccess:
    @pytest.mark.asyncio
    async def test_unauthenticated(self, session, repos, generate):
        result = await ai_notes.generate_summary(session, None, str(uuid.uuid4()))

        assert result.success is False
        assert result.error == MSG_UNAUTHENTICATED
        generate.assert_not_called()

    @pytest.mark.asyncio
    async def test_blank_note_id(self, session, user, repos, generate):
        result = await ai_notes.generate_summary(session, user, "  ")

        assert result.error == MSG_INVALID_NOTE_ID

    @pytest.mark.asyncio
    async def test_malformed_note_id_is_not_found(self, session, user, repos, generate):
        result = await ai_notes.get_tags(session, user, "abc")

        assert result.error == MSG_NOTE_NOT_FOUND

    @pytest.mark.asyncio
    async def test_other_users_note(self, session, user, repos, generate):
        notes, _, _ = repos
        notes.get_active.return_value = None

        result = await ai_notes.get_summary(session, user, str(uuid.uuid4()))

        assert result.success is False
        assert result.error == MSG_NOTE_NOT_FOUND


class TestGenerateSummary:
    @pytest.mark.asyncio
    async def test_generates_and_stores(self, session, user, repos, generate, note_factory):
        notes, summaries, _ = repos
        note = note_factory()
        notes.get_active.return_value = note
        generate.return_value = _response("  - 핵심 1\n- 핵심 2  ")
        summaries.add.side_effect = lambda *args, **kwargs: type(
            "Row", (), {"summary": args[3]}
        )()

        result = await ai_notes.generate_summary(session, user, str(note.id))

        assert result.success is True
        assert result.summary == "- 핵심 1\n- 핵심 2"
        assert result.cached is False
        prompt, config = generate.call_args.args
        assert note.content in prompt
        assert config.temperature == 0.3
        assert config.max_output_tokens == 500
        summaries.add.assert_awaited_once()
        assert summaries.add.call_args.kwargs["model"] == "gemini-2.0-flash"

    @pytest.mark.asyncio
    async def test_recent_summary_is_reused(
        self, session, user, repos, generate, note_factory, summary_factory
    ):
        notes, summaries, _ = repos
        note = note_factory()
        notes.get_active.return_value = note
        summaries.latest_for_note.return_value = summary_factory(
            note.id, summary="- 저장된 요약", created_at=utcnow() - timedelta(seconds=30)
        )

        result = await ai_notes.generate_summary(session, user, str(note.id))

        assert result.success is True
        assert result.cached is True
        assert result.summary == "- 저장된 요약"
        generate.assert_not_called()

    @pytest.mark.asyncio
    async def test_stale_summary_is_regenerated(
        self, session, user, repos, generate, note_factory, summary_factory
    ):
        notes, summaries, _ = repos
        note = note_factory()
        notes.get_active.return_value = note
        stale_age = timedelta(seconds=settings.SUMMARY_CACHE_TTL_SECONDS + 60)
        summaries.latest_for_note.return_value = summary_factory(
            note.id, created_at=utcnow() - stale_age
        )
        generate.return_value = _response("- 새 요약")
        summaries.add.return_value = summary_factory(note.id, summary="- 새 요약")

        result = await ai_notes.generate_summary(session, user, str(note.id))

        assert result.cached is False
        assert result.summary == "- 새 요약"
        generate.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_empty_model_output(self, session, user, repos, generate, note_factory):
        notes, summaries, _ = repos
        notes.get_active.return_value = note_factory()
        generate.return_value = _response("   ")

        result = await ai_notes.generate_summary(session, user, str(uuid.uuid4()))

        assert result.success is False
        assert result.error == MSG_EMPTY_SUMMARY
        summaries.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_long_note_is_truncated(
        self, session, user, repos, generate, note_factory, summary_factory
    ):
        notes, summaries, _ = repos
        note = note_factory(content="가" * 20_000)
        notes.get_active.return_value = note
        summaries.add.return_value = summary_factory(note.id, summary="- 요약")
        generate.return_value = _response("- 요약")

        result = await ai_notes.generate_summary(session, user, str(note.id))

        assert result.success is True
        assert result.summary == "- 요약"

        prompt = generate.call_args.args[0]
        assert "가" * (PROMPT_TOKEN_BUDGET * 2) + "..." in prompt
        assert estimate_token_count(prompt) < estimate_token_count("가" * 20_000)

    @pytest.mark.asyncio
    async def test_gemini_error_is_mapped(self, session, user, repos, generate, note_factory):
        notes, _, _ = repos
        notes.get_active.return_value = note_factory()
        request = httpx.Request("POST", "https://example.invalid")
        generate.side_effect = openai.RateLimitError(
            "quota", response=httpx.Response(429, request=request), body=None
        )

        result = await ai_notes.generate_summary(session, user, str(uuid.uuid4()))

        assert result.success is False
        assert result.error == MSG_RATE_LIMIT


class TestStyledSummary:
    @pytest.mark.asyncio
    async def test_style_reaches_prompt_and_result(
        self, session, user, repos, generate, note_factory
    ):
        notes, summaries, _ = repos
        notes.get_active.return_value = note_factory()
        generate.return_value = _response("1. 첫째\n2. 둘째")

        result = await ai_notes.generate_summary_with_style(
            session, user, str(uuid.uuid4()), style="numbered", length="short"
        )

        assert result.success is True
        assert result.style == "numbered"
        assert result.length == "short"
        assert "번호 목록" in generate.call_args.args[0]
        summaries.add.assert_awaited_once()
        summaries.latest_for_note.assert_not_called()


class TestGetSummary:
    @pytest.mark.asyncio
    async def test_never_generated(self, session, user, repos, note_factory):
        notes, _, _ = repos
        notes.get_active.return_value = note_factory()

        result = await ai_notes.get_summary(session, user, str(uuid.uuid4()))

        assert result.success is True
        assert result.summary is None

    @pytest.mark.asyncio
    async def test_latest_summary(self, session, user, repos, note_factory, summary_factory):
        notes, summaries, _ = repos
        note = note_factory()
        notes.get_active.return_value = note
        summaries.latest_for_note.return_value = summary_factory(note.id)

        result = await ai_notes.get_summary(session, user, str(note.id))

        assert result.summary.note_id == note.id
        assert result.summary.summary == "- 다음 분기 계획 논의"


class TestTags:
    @pytest.mark.asyncio
    async def test_invalid_count_rejected_before_lookup(self, session, user, repos, generate):
        notes, _, _ = repos

        result = await ai_notes.generate_tags(session, user, str(uuid.uuid4()), count=5)

        assert result.success is False
        assert result.error == MSG_INVALID_TAG_COUNT
        notes.get_active.assert_not_called()

    @pytest.mark.asyncio
    async def test_tags_parsed_and_replaced(self, session, user, repos, generate, note_factory):
        notes, _, tags = repos
        note = note_factory()
        notes.get_active.return_value = note
        generate.return_value = _response("회의, 계획, 회의, 일정, 팀, 목표")

        result = await ai_notes.generate_tags(session, user, str(note.id), count=3)

        assert result.success is True
        assert result.tags == ["회의", "계획", "일정"]
        assert result.count == 3
        args = tags.replace_for_note.call_args.args
        assert args[1] == note.id
        assert args[3] == ["회의", "계획", "일정"]
        assert "최대 3개의 태그" in generate.call_args.args[0]

    @pytest.mark.asyncio
    async def test_no_tags_in_response(self, session, user, repos, generate, note_factory):
        notes, _, tags = repos
        notes.get_active.return_value = note_factory()
        generate.return_value = _response(" , ,")

        result = await ai_notes.generate_tags(session, user, str(uuid.uuid4()))

        assert result.error == MSG_EMPTY_TAGS
        tags.replace_for_note.assert_not_called()

    @pytest.mark.asyncio
    async def test_get_tags(self, session, user, repos, note_factory, tag_factory):
        notes, _, tags = repos
        note = note_factory()
        notes.get_active.return_value = note
        tags.list_for_note.return_value = [tag_factory(note.id, "회의"), tag_factory(note.id, "계획")]

        result = await ai_notes.get_tags(session, user, str(note.id))

        assert result.success is True
        assert result.tags == ["회의", "계획"]


class TestPlayground:
    @pytest.mark.asyncio
    async def test_blank_prompt(self, generate):
        result = await ai_notes.test_gemini_api("  ")

        assert result.success is False
        assert result.error == "프롬프트가 비어있습니다."
        generate.assert_not_called()

    @pytest.mark.asyncio
    async def test_reports_usage(self, generate):
        generate.return_value = GeminiResponse(
            text="응답",
            model="gemini-2.0-flash",
            input_tokens=3,
            output_tokens=2,
            total_tokens=5,
            generation_time_ms=120,
        )

        result = await ai_notes.test_gemini_api("안녕", temperature=1.2, max_tokens=64)

        assert result.success is True
        assert result.text == "응답"
        assert result.total_tokens == 5
        config = generate.call_args.args[1]
        assert config.temperature == 1.2
        assert config.max_output_tokens == 64
