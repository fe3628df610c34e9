"""
AI Note Service

Summary and tag generation for a user's notes, plus the Gemini playground.

Flow (generate_summary):
    1. Auth + note ownership check (trashed notes are not summarized).
    2. Reuse the latest summary if it is younger than the cache TTL.
    3. Truncate the note to the prompt token budget and call Gemini.
    4. Store the new summary (append-only) and return it.

Gemini failures are mapped to user-facing messages by parse_gemini_error.
"""

from __future__ import annotations

import logging
import uuid
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from ai_memo.core.auth import AuthUser
from ai_memo.core.config import settings
from ai_memo.models import Note
from ai_memo.models.base import utcnow
from ai_memo.repositories import note_repository, summary_repository, tag_repository
from ai_memo.schemas.ai import (
    GeminiTestResult,
    GenerateSummaryResult,
    GenerateTagsResult,
    GetSummaryResult,
    GetTagsResult,
    StyledSummaryResult,
    SummaryRead,
)
from ai_memo.services import gemini
from ai_memo.services.gemini_errors import log_gemini_error, parse_gemini_error
from ai_memo.services.prompts import (
    SummaryLength,
    SummaryStyle,
    create_styled_summary_prompt,
    create_summary_prompt,
    create_tags_prompt,
)
from ai_memo.services.text_utils import (
    parse_tags_from_text,
    truncate_to_token_limit,
    validate_prompt,
)

logger = logging.getLogger(__name__)

PROMPT_TOKEN_BUDGET = 7000
SUMMARY_CONFIG = gemini.GenerationConfig(temperature=0.3, max_output_tokens=500)
TAGS_CONFIG = gemini.GenerationConfig(temperature=0.3, max_output_tokens=200)
ALLOWED_TAG_COUNTS = (3, 6, 9)

MSG_UNAUTHENTICATED = "인증되지 않은 사용자입니다. 다시 로그인해주세요."
MSG_INVALID_NOTE_ID = "노트 ID가 유효하지 않습니다."
MSG_NOTE_NOT_FOUND = "노트를 찾을 수 없거나 접근 권한이 없습니다."
MSG_EMPTY_SUMMARY = "요약을 생성할 수 없습니다. 다시 시도해주세요."
MSG_GET_SUMMARY_FAILED = "요약을 불러오는데 실패했습니다. 잠시 후 다시 시도해주세요."
MSG_INVALID_TAG_COUNT = "태그 개수는 3, 6, 9 중 하나여야 합니다."
MSG_EMPTY_TAGS = "태그를 생성할 수 없습니다. 다시 시도해주세요."
MSG_GET_TAGS_FAILED = "태그를 불러오는데 실패했습니다. 잠시 후 다시 시도해주세요."


class NoteAccessError(Exception):
    """Raised when a note id is blank or the note is not accessible."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


async def _load_note(
    session: AsyncSession,
    user: AuthUser,
    note_id: str | uuid.UUID | None,
) -> Note:
    if note_id is None or (isinstance(note_id, str) and not note_id.strip()):
        raise NoteAccessError(MSG_INVALID_NOTE_ID)
    try:
        parsed = note_id if isinstance(note_id, uuid.UUID) else uuid.UUID(note_id.strip())
    except ValueError as e:
        raise NoteAccessError(MSG_NOTE_NOT_FOUND) from e

    note = await note_repository.get_active(session, parsed, uuid.UUID(user.id))
    if note is None:
        raise NoteAccessError(MSG_NOTE_NOT_FOUND)
    return note


def _prepare_content(content: str) -> str:
    """Cut note content to the prompt token budget when needed."""
    if not validate_prompt(content, PROMPT_TOKEN_BUDGET).valid:
        return truncate_to_token_limit(content, PROMPT_TOKEN_BUDGET)
    return content


async def generate_summary(
    session: AsyncSession,
    user: AuthUser | None,
    note_id: str | uuid.UUID | None,
) -> GenerateSummaryResult:
    """
    Summarize a note, reusing a recent summary when one exists.

    Returns:
        GenerateSummaryResult with ``cached=True`` when the latest summary
        is younger than SUMMARY_CACHE_TTL_SECONDS.
    """
    if user is None:
        return GenerateSummaryResult(success=False, error=MSG_UNAUTHENTICATED)

    try:
        note = await _load_note(session, user, note_id)
        user_id = uuid.UUID(user.id)

        latest = await summary_repository.latest_for_note(session, note.id, user_id)
        cache_ttl = timedelta(seconds=settings.SUMMARY_CACHE_TTL_SECONDS)
        if latest is not None and latest.created_at > utcnow() - cache_ttl:
            logger.info(f"Using cached summary for note {note.id}")
            return GenerateSummaryResult(success=True, summary=latest.summary, cached=True)

        prompt = create_summary_prompt(_prepare_content(note.content))
        response = await gemini.generate_text(prompt, SUMMARY_CONFIG)

        summary_text = response.text.strip()
        if not summary_text:
            return GenerateSummaryResult(success=False, error=MSG_EMPTY_SUMMARY)

        saved = await summary_repository.add(
            session, note.id, user_id, summary_text, model=response.model
        )
    except NoteAccessError as e:
        return GenerateSummaryResult(success=False, error=e.message)
    except Exception as e:
        parsed = parse_gemini_error(e)
        log_gemini_error(parsed, "Summary")
        return GenerateSummaryResult(success=False, error=parsed.message)

    return GenerateSummaryResult(success=True, summary=saved.summary, cached=False)


async def get_summary(
    session: AsyncSession,
    user: AuthUser | None,
    note_id: str | uuid.UUID | None,
) -> GetSummaryResult:
    """Latest summary of a note (``summary=None`` when never generated)."""
    if user is None:
        return GetSummaryResult(success=False, error=MSG_UNAUTHENTICATED)

    try:
        note = await _load_note(session, user, note_id)
        latest = await summary_repository.latest_for_note(
            session, note.id, uuid.UUID(user.id)
        )
    except NoteAccessError as e:
        return GetSummaryResult(success=False, error=e.message)
    except Exception:
        logger.exception(f"Summary lookup failed: {note_id}")
        return GetSummaryResult(success=False, error=MSG_GET_SUMMARY_FAILED)

    return GetSummaryResult(
        success=True,
        summary=SummaryRead.model_validate(latest) if latest else None,
    )


async def generate_summary_with_style(
    session: AsyncSession,
    user: AuthUser | None,
    note_id: str | uuid.UUID | None,
    style: SummaryStyle = "bullet",
    length: SummaryLength = "medium",
) -> StyledSummaryResult:
    """Regenerate a summary with an explicit format and length (no cache)."""
    if user is None:
        return StyledSummaryResult(success=False, error=MSG_UNAUTHENTICATED)

    try:
        note = await _load_note(session, user, note_id)
        prompt = create_styled_summary_prompt(_prepare_content(note.content), style, length)
        response = await gemini.generate_text(prompt, SUMMARY_CONFIG)

        summary_text = response.text.strip()
        if not summary_text:
            return StyledSummaryResult(success=False, error=MSG_EMPTY_SUMMARY)

        await summary_repository.add(
            session, note.id, uuid.UUID(user.id), summary_text, model=response.model
        )
    except NoteAccessError as e:
        return StyledSummaryResult(success=False, error=e.message)
    except Exception as e:
        parsed = parse_gemini_error(e)
        log_gemini_error(parsed, "Styled Summary")
        return StyledSummaryResult(success=False, error=parsed.message)

    return StyledSummaryResult(success=True, summary=summary_text, style=style, length=length)


async def generate_tags(
    session: AsyncSession,
    user: AuthUser | None,
    note_id: str | uuid.UUID | None,
    count: int = 6,
) -> GenerateTagsResult:
    """
    Generate tags for a note and replace its current tag set.

    Args:
        count: Maximum number of tags (3, 6 or 9).
    """
    if user is None:
        return GenerateTagsResult(success=False, error=MSG_UNAUTHENTICATED)
    if count not in ALLOWED_TAG_COUNTS:
        return GenerateTagsResult(success=False, error=MSG_INVALID_TAG_COUNT)

    try:
        note = await _load_note(session, user, note_id)
        prompt = create_tags_prompt(_prepare_content(note.content), count)
        response = await gemini.generate_text(prompt, TAGS_CONFIG)

        tags = parse_tags_from_text(response.text, limit=count)
        if not tags:
            return GenerateTagsResult(success=False, error=MSG_EMPTY_TAGS)

        await tag_repository.replace_for_note(
            session, note.id, uuid.UUID(user.id), tags, model=response.model
        )
    except NoteAccessError as e:
        return GenerateTagsResult(success=False, error=e.message)
    except Exception as e:
        parsed = parse_gemini_error(e)
        log_gemini_error(parsed, "Tags")
        return GenerateTagsResult(success=False, error=parsed.message)

    logger.info(f"Generated {len(tags)} tags for note {note.id}")
    return GenerateTagsResult(success=True, tags=tags, count=len(tags))


async def get_tags(
    session: AsyncSession,
    user: AuthUser | None,
    note_id: str | uuid.UUID | None,
) -> GetTagsResult:
    if user is None:
        return GetTagsResult(success=False, error=MSG_UNAUTHENTICATED)

    try:
        note = await _load_note(session, user, note_id)
        rows = await tag_repository.list_for_note(session, note.id, uuid.UUID(user.id))
    except NoteAccessError as e:
        return GetTagsResult(success=False, error=e.message)
    except Exception:
        logger.exception(f"Tag lookup failed: {note_id}")
        return GetTagsResult(success=False, error=MSG_GET_TAGS_FAILED)

    return GetTagsResult(success=True, tags=[row.tag for row in rows])


async def test_gemini_api(
    prompt: str,
    temperature: float = gemini.DEFAULT_TEMPERATURE,
    max_tokens: int = gemini.DEFAULT_MAX_OUTPUT_TOKENS,
) -> GeminiTestResult:
    """Playground call: generate text and report usage and timing."""
    validation = validate_prompt(prompt)
    if not validation.valid:
        return GeminiTestResult(success=False, error=validation.error)

    try:
        response = await gemini.generate_text(
            prompt,
            gemini.GenerationConfig(temperature=temperature, max_output_tokens=max_tokens),
        )
    except Exception as e:
        parsed = parse_gemini_error(e)
        log_gemini_error(parsed, "Playground")
        return GeminiTestResult(success=False, error=parsed.message)

    return GeminiTestResult(
        success=True,
        text=response.text,
        model=response.model,
        input_tokens=response.input_tokens,
        output_tokens=response.output_tokens,
        total_tokens=response.total_tokens,
        generation_time_ms=response.generation_time_ms,
    )
