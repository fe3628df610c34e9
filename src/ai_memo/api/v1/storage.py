"""
Storage API Router

Per-user drafts and AI regeneration history kept in Redis.
"""

from fastapi import APIRouter, Depends
from redis.asyncio import Redis

from ai_memo.core.auth import AuthUser, get_current_user
from ai_memo.core.cache import get_redis
from ai_memo.schemas.common import ActionResult
from ai_memo.schemas.storage import (
    DraftResult,
    DraftSave,
    SummaryHistoryCreate,
    SummaryHistoryResult,
    SummaryHistoryView,
    TagHistoryCreate,
    TagHistoryResult,
    TagHistoryView,
)
from ai_memo.services import storage

MSG_UNAUTHENTICATED = "인증되지 않은 사용자입니다. 다시 로그인해주세요."
MSG_DRAFT_SAVE_FAILED = "임시 저장에 실패했습니다."
MSG_DRAFT_CLEAR_FAILED = "임시 저장 삭제에 실패했습니다."
MSG_HISTORY_SAVE_FAILED = "히스토리 저장에 실패했습니다."
MSG_HISTORY_CLEAR_FAILED = "히스토리 삭제에 실패했습니다."

# Mounted under /api/v1/drafts
drafts_router = APIRouter()

# Mounted under /api/v1/history
history_router = APIRouter()


def _outcome(ok: bool, error: str) -> ActionResult:
    return ActionResult(success=True) if ok else ActionResult(success=False, error=error)


@drafts_router.get("/", response_model=DraftResult)
async def read_draft(
    user: AuthUser | None = Depends(get_current_user),
    client: Redis = Depends(get_redis),
):
    """The user's unsent draft (``draft`` is null when none or expired)."""
    if user is None:
        return DraftResult(success=False, error=MSG_UNAUTHENTICATED)
    return DraftResult(success=True, draft=await storage.load_draft(client, user.id))


@drafts_router.put("/", response_model=ActionResult)
async def save_draft(
    draft: DraftSave,
    user: AuthUser | None = Depends(get_current_user),
    client: Redis = Depends(get_redis),
):
    if user is None:
        return ActionResult(success=False, error=MSG_UNAUTHENTICATED)
    ok = await storage.save_draft(client, user.id, draft.title, draft.content)
    return _outcome(ok, MSG_DRAFT_SAVE_FAILED)


@drafts_router.delete("/", response_model=ActionResult)
async def clear_draft(
    user: AuthUser | None = Depends(get_current_user),
    client: Redis = Depends(get_redis),
):
    if user is None:
        return ActionResult(success=False, error=MSG_UNAUTHENTICATED)
    return _outcome(await storage.clear_draft(client, user.id), MSG_DRAFT_CLEAR_FAILED)


@history_router.get("/{note_id}/summary", response_model=SummaryHistoryResult)
async def read_summary_history(
    note_id: str,
    user: AuthUser | None = Depends(get_current_user),
    client: Redis = Depends(get_redis),
):
    """Last three summary regenerations of the note, newest first."""
    if user is None:
        return SummaryHistoryResult(success=False, error=MSG_UNAUTHENTICATED)
    history = await storage.get_summary_history(client, user.id, note_id)
    views = [
        SummaryHistoryView(
            **entry.model_dump(), relative_time=storage.get_relative_time(entry.timestamp)
        )
        for entry in history
    ]
    return SummaryHistoryResult(success=True, history=views)


@history_router.post("/{note_id}/summary", response_model=ActionResult)
async def add_summary_history(
    note_id: str,
    entry: SummaryHistoryCreate,
    user: AuthUser | None = Depends(get_current_user),
    client: Redis = Depends(get_redis),
):
    if user is None:
        return ActionResult(success=False, error=MSG_UNAUTHENTICATED)
    ok = await storage.save_summary_history(
        client, user.id, note_id, entry.content, entry.style, entry.length
    )
    return _outcome(ok, MSG_HISTORY_SAVE_FAILED)


@history_router.delete("/{note_id}/summary", response_model=ActionResult)
async def clear_summary_history(
    note_id: str,
    user: AuthUser | None = Depends(get_current_user),
    client: Redis = Depends(get_redis),
):
    if user is None:
        return ActionResult(success=False, error=MSG_UNAUTHENTICATED)
    ok = await storage.clear_summary_history(client, user.id, note_id)
    return _outcome(ok, MSG_HISTORY_CLEAR_FAILED)


@history_router.get("/{note_id}/tags", response_model=TagHistoryResult)
async def read_tag_history(
    note_id: str,
    user: AuthUser | None = Depends(get_current_user),
    client: Redis = Depends(get_redis),
):
    if user is None:
        return TagHistoryResult(success=False, error=MSG_UNAUTHENTICATED)
    history = await storage.get_tag_history(client, user.id, note_id)
    views = [
        TagHistoryView(
            **entry.model_dump(), relative_time=storage.get_relative_time(entry.timestamp)
        )
        for entry in history
    ]
    return TagHistoryResult(success=True, history=views)


@history_router.post("/{note_id}/tags", response_model=ActionResult)
async def add_tag_history(
    note_id: str,
    entry: TagHistoryCreate,
    user: AuthUser | None = Depends(get_current_user),
    client: Redis = Depends(get_redis),
):
    if user is None:
        return ActionResult(success=False, error=MSG_UNAUTHENTICATED)
    ok = await storage.save_tag_history(client, user.id, note_id, entry.tags, entry.count)
    return _outcome(ok, MSG_HISTORY_SAVE_FAILED)


@history_router.delete("/{note_id}/tags", response_model=ActionResult)
async def clear_tag_history(
    note_id: str,
    user: AuthUser | None = Depends(get_current_user),
    client: Redis = Depends(get_redis),
):
    if user is None:
        return ActionResult(success=False, error=MSG_UNAUTHENTICATED)
    ok = await storage.clear_tag_history(client, user.id, note_id)
    return _outcome(ok, MSG_HISTORY_CLEAR_FAILED)


@history_router.delete("/{note_id}", response_model=ActionResult)
async def clear_note_history(
    note_id: str,
    user: AuthUser | None = Depends(get_current_user),
    client: Redis = Depends(get_redis),
):
    """Remove both summary and tag history of one note."""
    if user is None:
        return ActionResult(success=False, error=MSG_UNAUTHENTICATED)
    ok = await storage.clear_all_history(client, user.id, note_id)
    return _outcome(ok, MSG_HISTORY_CLEAR_FAILED)


@history_router.delete("/", response_model=ActionResult)
async def clear_all_histories(
    user: AuthUser | None = Depends(get_current_user),
    client: Redis = Depends(get_redis),
):
    """Remove every history entry of the user."""
    if user is None:
        return ActionResult(success=False, error=MSG_UNAUTHENTICATED)
    ok = await storage.clear_all_histories(client, user.id)
    return _outcome(ok, MSG_HISTORY_CLEAR_FAILED)
