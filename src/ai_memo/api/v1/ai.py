"""
AI API Router

Summary and tag endpoints nested under a note, plus autocomplete and the
Gemini status / playground endpoints.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ai_memo.core.auth import AuthUser, get_current_user
from ai_memo.core.config import settings
from ai_memo.core.database import get_db
from ai_memo.schemas.ai import (
    AutocompleteRequest,
    AutocompleteResult,
    GeminiStatus,
    GeminiTestRequest,
    GeminiTestResult,
    GenerateSummaryResult,
    GenerateTagsResult,
    GetSummaryResult,
    GetTagsResult,
    StyledSummaryRequest,
    StyledSummaryResult,
)
from ai_memo.services import ai_notes, autocomplete, gemini

MSG_UNAUTHENTICATED = "인증되지 않은 사용자입니다. 다시 로그인해주세요."

# Mounted under /api/v1/notes
note_ai_router = APIRouter()

# Mounted under /api/v1/ai
router = APIRouter()


@note_ai_router.get("/{note_id}/summary", response_model=GetSummaryResult)
async def read_summary(
    note_id: str,
    db: AsyncSession = Depends(get_db),
    user: AuthUser | None = Depends(get_current_user),
):
    """Latest summary of the note (``summary`` is null when none exists)."""
    return await ai_notes.get_summary(db, user, note_id)


@note_ai_router.post("/{note_id}/summary", response_model=GenerateSummaryResult)
async def generate_summary(
    note_id: str,
    db: AsyncSession = Depends(get_db),
    user: AuthUser | None = Depends(get_current_user),
):
    """
    Summarize the note.

    A summary generated within the last five minutes is returned as-is
    with ``cached: true``.
    """
    return await ai_notes.generate_summary(db, user, note_id)


@note_ai_router.post("/{note_id}/summary/styled", response_model=StyledSummaryResult)
async def generate_styled_summary(
    note_id: str,
    options: StyledSummaryRequest,
    db: AsyncSession = Depends(get_db),
    user: AuthUser | None = Depends(get_current_user),
):
    """Regenerate the summary with an explicit style and length."""
    return await ai_notes.generate_summary_with_style(
        db, user, note_id, options.style, options.length
    )


@note_ai_router.get("/{note_id}/tags", response_model=GetTagsResult)
async def read_tags(
    note_id: str,
    db: AsyncSession = Depends(get_db),
    user: AuthUser | None = Depends(get_current_user),
):
    return await ai_notes.get_tags(db, user, note_id)


@note_ai_router.post("/{note_id}/tags", response_model=GenerateTagsResult)
async def generate_tags(
    note_id: str,
    count: int = Query(6, description="Number of tags: 3, 6 or 9"),
    db: AsyncSession = Depends(get_db),
    user: AuthUser | None = Depends(get_current_user),
):
    """Generate tags and replace the note's current tag set."""
    return await ai_notes.generate_tags(db, user, note_id, count)


@router.post("/autocomplete", response_model=AutocompleteResult)
async def autocomplete_suggestions(
    request: AutocompleteRequest,
    user: AuthUser | None = Depends(get_current_user),
):
    """Up to three continuations for the text being typed."""
    return await autocomplete.generate_autocomplete_suggestion(
        user, request.input, request.context
    )


@router.get("/status", response_model=GeminiStatus)
async def gemini_status(check: bool = Query(False)):
    """
    Whether an API key is configured (the key itself is never returned).

    With ``check=true`` a short generation is sent to verify the key works.
    """
    status = GeminiStatus(configured=gemini.has_api_key(), model=settings.GEMINI_MODEL)
    if check:
        result = await gemini.test_connection(int(settings.gemini_timeout_seconds * 1000))
        status.connected = result.success
        status.response_time_ms = result.response_time_ms
        status.error = result.error
    return status


@router.post("/test", response_model=GeminiTestResult)
async def gemini_playground(
    request: GeminiTestRequest,
    user: AuthUser | None = Depends(get_current_user),
):
    """Run a raw prompt and report token usage and timing."""
    if user is None:
        return GeminiTestResult(success=False, error=MSG_UNAUTHENTICATED)
    return await ai_notes.test_gemini_api(
        request.prompt, request.temperature, request.max_tokens
    )
