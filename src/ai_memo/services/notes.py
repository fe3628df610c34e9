"""
Note Service

Request handlers for note CRUD and the trash lifecycle.

Every handler follows the same shape:
    1. Reject a missing user (``AuthUser | None``).
    2. Validate input.
    3. One repository call scoped to the user's id.
    4. Return a result model; unexpected exceptions are logged and mapped
       to a fixed Korean message.
"""

from __future__ import annotations

import logging
import math
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from ai_memo.core.auth import AuthUser
from ai_memo.core.config import settings
from ai_memo.models.note import TITLE_MAX_LENGTH
from ai_memo.repositories import note_repository
from ai_memo.schemas.common import ActionResult, Pagination
from ai_memo.schemas.notes import (
    CreateNoteResult,
    CreateSampleNotesResult,
    DeleteNotesResult,
    GetNoteResult,
    GetNotesResult,
    NoteRead,
    UpdateNoteResult,
)

logger = logging.getLogger(__name__)

MSG_UNAUTHENTICATED = "인증되지 않은 사용자입니다. 다시 로그인해주세요."
MSG_TITLE_REQUIRED = "제목을 입력해주세요."
MSG_TITLE_TOO_LONG = "제목은 200자 이하로 입력해주세요."
MSG_CONTENT_REQUIRED = "본문을 입력해주세요."
MSG_CREATE_FAILED = "노트 저장에 실패했습니다. 잠시 후 다시 시도해주세요."
MSG_LIST_FAILED = "노트 목록을 불러오는데 실패했습니다. 잠시 후 다시 시도해주세요."
MSG_GET_FAILED = "노트를 불러오는데 실패했습니다. 잠시 후 다시 시도해주세요."
MSG_UPDATE_NOT_FOUND = "노트를 찾을 수 없거나 수정 권한이 없습니다."
MSG_UPDATE_FAILED = "노트 수정에 실패했습니다. 잠시 후 다시 시도해주세요."
MSG_DELETE_NOT_FOUND = "노트를 찾을 수 없거나 삭제 권한이 없습니다."
MSG_DELETE_FAILED = "노트 삭제에 실패했습니다. 잠시 후 다시 시도해주세요."
MSG_DELETE_ALL_FAILED = "노트 삭제에 실패했습니다."
MSG_TRASH_FAILED = "휴지통을 불러오는데 실패했습니다. 잠시 후 다시 시도해주세요."
MSG_RESTORE_NOT_FOUND = "노트를 찾을 수 없거나 복원 권한이 없습니다."
MSG_RESTORE_FAILED = "노트 복원에 실패했습니다. 잠시 후 다시 시도해주세요."
MSG_EMPTY_TRASH_FAILED = "휴지통 비우기에 실패했습니다. 잠시 후 다시 시도해주세요."
MSG_SAMPLES_FAILED = "샘플 노트 생성에 실패했습니다. 잠시 후 다시 시도해주세요."

SAMPLE_NOTES: list[dict[str, str]] = [
    {
        "title": "🌟 AI 메모장 사용 가이드",
        "content": """AI 메모장에 오신 것을 환영합니다!

이 메모장은 여러분의 생각과 아이디어를 쉽고 빠르게 기록하고, AI가 자동으로 정리해주는 스마트한 도구입니다.

주요 기능:
- 📝 텍스트 메모: 언제 어디서나 빠르게 생각을 기록하세요
- 🎙️ 음성 메모: 말로 하면 자동으로 텍스트로 변환됩니다 (향후 제공)
- 🤖 AI 요약: 긴 메모도 핵심만 간추려 정리해드립니다
- 🏷️ 자동 태깅: AI가 관련 태그를 자동으로 추천합니다
- 🔍 스마트 검색: 태그와 내용으로 빠르게 검색하세요 (향후 제공)
- 📤 데이터 내보내기: 언제든 내 데이터를 다운로드할 수 있습니다 (향후 제공)

이 샘플 노트들은 언제든 삭제하실 수 있습니다!""",
    },
    {
        "title": "📝 텍스트 메모 작성하기",
        "content": """텍스트 메모는 AI 메모장의 가장 기본적인 기능입니다.

작성 방법:
1. 우측 상단의 "새 노트 작성" 버튼을 클릭하세요
2. 제목과 본문을 입력하세요
3. 저장 버튼을 누르면 완료!

수정 방법:
1. 노트를 클릭하여 상세 페이지로 이동
2. "수정" 버튼 클릭
3. 내용을 수정하면 자동으로 저장됩니다

팁:
- 제목은 간결하게, 본문은 자유롭게 작성하세요
- 긴 메모도 걱정 없어요. AI가 요약해드립니다!
- 자주 쓰는 단어는 태그로 자동 추천됩니다""",
    },
    {
        "title": "🎙️ 음성 메모 활용법 (향후 제공 예정)",
        "content": """음성 메모 기능은 곧 제공될 예정입니다!

음성 메모를 사용하면:
- 타이핑 없이 말로 빠르게 메모할 수 있어요
- 회의나 강의 중에도 손쉽게 기록 가능
- 음성이 자동으로 텍스트로 변환됩니다

사용 시나리오:
- 운전 중 떠오른 아이디어를 안전하게 기록
- 회의록을 빠르게 작성
- 학습 내용을 복습하면서 요약

기대해주세요! 🌟""",
    },
]


def parse_id(value: str | uuid.UUID | None) -> uuid.UUID | None:
    """Parse an id from a path or body. Malformed ids are treated as missing."""
    if isinstance(value, uuid.UUID):
        return value
    if not value or not value.strip():
        return None
    try:
        return uuid.UUID(value.strip())
    except ValueError:
        return None


def validate_note_input(title: str | None, content: str | None) -> str | None:
    """
    Check title and body of a create/update request.

    Returns:
        The first validation message, or None when the input is valid.
    """
    if not title or not title.strip():
        return MSG_TITLE_REQUIRED
    if len(title) > TITLE_MAX_LENGTH:
        return MSG_TITLE_TOO_LONG
    if not content or not content.strip():
        return MSG_CONTENT_REQUIRED
    return None


def normalize_page(page: float | int | None) -> int:
    """Clamp a requested page number to an integer >= 1."""
    if page is None:
        return 1
    try:
        return max(1, math.floor(page))
    except (TypeError, ValueError, OverflowError):
        return 1


def _pagination(page: int, total: int) -> Pagination:
    page_size = settings.NOTES_PAGE_SIZE
    return Pagination(
        current_page=page,
        total_pages=math.ceil(total / page_size),
        total_notes=total,
        page_size=page_size,
    )


async def create_note(
    session: AsyncSession,
    user: AuthUser | None,
    title: str | None,
    content: str | None,
) -> CreateNoteResult:
    """Create a note owned by ``user`` from trimmed title and content."""
    if user is None:
        return CreateNoteResult(success=False, error=MSG_UNAUTHENTICATED)

    error = validate_note_input(title, content)
    if error:
        return CreateNoteResult(success=False, error=error)

    try:
        note = await note_repository.create(
            session,
            {
                "user_id": uuid.UUID(user.id),
                "title": title.strip(),  # type: ignore[union-attr]
                "content": content.strip(),  # type: ignore[union-attr]
            },
        )
    except Exception:
        logger.exception("Note creation failed")
        return CreateNoteResult(success=False, error=MSG_CREATE_FAILED)

    logger.info(f"Note created: {note.id}")
    return CreateNoteResult(success=True, note_id=note.id)


async def get_notes(
    session: AsyncSession,
    user: AuthUser | None,
    page: float | int = 1,
    sort: str = "newest",
) -> GetNotesResult:
    """
    List the user's active notes, one page at a time.

    Args:
        page: Requested page; values below 1 (or fractional) are clamped.
        sort: newest | oldest | title | updated.

    Returns:
        GetNotesResult with the page of notes and pagination metadata.
    """
    if user is None:
        return GetNotesResult(success=False, error=MSG_UNAUTHENTICATED)

    current_page = normalize_page(page)
    page_size = settings.NOTES_PAGE_SIZE
    user_id = uuid.UUID(user.id)

    try:
        total = await note_repository.count_active(session, user_id)
        notes = await note_repository.list_active(
            session,
            user_id,
            offset=(current_page - 1) * page_size,
            limit=page_size,
            sort=sort,
        )
    except Exception:
        logger.exception("Note listing failed")
        return GetNotesResult(success=False, error=MSG_LIST_FAILED)

    return GetNotesResult(
        success=True,
        notes=[NoteRead.model_validate(note) for note in notes],
        pagination=_pagination(current_page, total),
    )


async def get_note_by_id(
    session: AsyncSession,
    user: AuthUser | None,
    note_id: str | uuid.UUID,
) -> GetNoteResult:
    """Fetch one active owned note. Missing notes succeed with ``note=None``."""
    if user is None:
        return GetNoteResult(success=False, error=MSG_UNAUTHENTICATED)

    parsed_id = parse_id(note_id)
    if parsed_id is None:
        return GetNoteResult(success=True, note=None)

    try:
        note = await note_repository.get_active(session, parsed_id, uuid.UUID(user.id))
    except Exception:
        logger.exception(f"Note lookup failed: {note_id}")
        return GetNoteResult(success=False, error=MSG_GET_FAILED)

    return GetNoteResult(
        success=True,
        note=NoteRead.model_validate(note) if note else None,
    )


async def update_note(
    session: AsyncSession,
    user: AuthUser | None,
    note_id: str | uuid.UUID,
    title: str | None,
    content: str | None,
) -> UpdateNoteResult:
    """Replace title and body of an owned active note and bump ``updated_at``."""
    if user is None:
        return UpdateNoteResult(success=False, error=MSG_UNAUTHENTICATED)

    error = validate_note_input(title, content)
    if error:
        return UpdateNoteResult(success=False, error=error)

    parsed_id = parse_id(note_id)
    if parsed_id is None:
        return UpdateNoteResult(success=False, error=MSG_UPDATE_NOT_FOUND)

    try:
        note = await note_repository.update_content(
            session,
            parsed_id,
            uuid.UUID(user.id),
            title=title.strip(),  # type: ignore[union-attr]
            content=content.strip(),  # type: ignore[union-attr]
        )
    except Exception:
        logger.exception(f"Note update failed: {note_id}")
        return UpdateNoteResult(success=False, error=MSG_UPDATE_FAILED)

    if note is None:
        return UpdateNoteResult(success=False, error=MSG_UPDATE_NOT_FOUND)

    return UpdateNoteResult(success=True, note=NoteRead.model_validate(note))


async def delete_note(
    session: AsyncSession,
    user: AuthUser | None,
    note_id: str | uuid.UUID,
) -> ActionResult:
    """Move an owned note to the trash."""
    if user is None:
        return ActionResult(success=False, error=MSG_UNAUTHENTICATED)

    parsed_id = parse_id(note_id)
    if parsed_id is None:
        return ActionResult(success=False, error=MSG_DELETE_NOT_FOUND)

    try:
        deleted = await note_repository.soft_delete(session, parsed_id, uuid.UUID(user.id))
    except Exception:
        logger.exception(f"Note deletion failed: {note_id}")
        return ActionResult(success=False, error=MSG_DELETE_FAILED)

    if not deleted:
        return ActionResult(success=False, error=MSG_DELETE_NOT_FOUND)
    return ActionResult(success=True)


async def delete_all_notes(
    session: AsyncSession,
    user: AuthUser | None,
) -> DeleteNotesResult:
    """Move every active note of the user to the trash."""
    if user is None:
        return DeleteNotesResult(success=False, error=MSG_UNAUTHENTICATED)

    try:
        count = await note_repository.soft_delete_all(session, uuid.UUID(user.id))
    except Exception:
        logger.exception("Bulk note deletion failed")
        return DeleteNotesResult(success=False, error=MSG_DELETE_ALL_FAILED)

    logger.info(f"Moved {count} notes to trash")
    return DeleteNotesResult(success=True, deleted_count=count)


async def get_deleted_notes(
    session: AsyncSession,
    user: AuthUser | None,
    page: float | int = 1,
) -> GetNotesResult:
    """List trashed notes, most recently deleted first."""
    if user is None:
        return GetNotesResult(success=False, error=MSG_UNAUTHENTICATED)

    current_page = normalize_page(page)
    page_size = settings.NOTES_PAGE_SIZE
    user_id = uuid.UUID(user.id)

    try:
        total = await note_repository.count_deleted(session, user_id)
        notes = await note_repository.list_deleted(
            session,
            user_id,
            offset=(current_page - 1) * page_size,
            limit=page_size,
        )
    except Exception:
        logger.exception("Trash listing failed")
        return GetNotesResult(success=False, error=MSG_TRASH_FAILED)

    return GetNotesResult(
        success=True,
        notes=[NoteRead.model_validate(note) for note in notes],
        pagination=_pagination(current_page, total),
    )


async def restore_note(
    session: AsyncSession,
    user: AuthUser | None,
    note_id: str | uuid.UUID,
) -> ActionResult:
    """Take an owned note out of the trash."""
    if user is None:
        return ActionResult(success=False, error=MSG_UNAUTHENTICATED)

    parsed_id = parse_id(note_id)
    if parsed_id is None:
        return ActionResult(success=False, error=MSG_RESTORE_NOT_FOUND)

    try:
        restored = await note_repository.restore(session, parsed_id, uuid.UUID(user.id))
    except Exception:
        logger.exception(f"Note restore failed: {note_id}")
        return ActionResult(success=False, error=MSG_RESTORE_FAILED)

    if not restored:
        return ActionResult(success=False, error=MSG_RESTORE_NOT_FOUND)
    return ActionResult(success=True)


async def permanently_delete_note(
    session: AsyncSession,
    user: AuthUser | None,
    note_id: str | uuid.UUID,
) -> ActionResult:
    """Physically delete a trashed note together with its summaries and tags."""
    if user is None:
        return ActionResult(success=False, error=MSG_UNAUTHENTICATED)

    parsed_id = parse_id(note_id)
    if parsed_id is None:
        return ActionResult(success=False, error=MSG_DELETE_NOT_FOUND)

    try:
        deleted = await note_repository.delete_permanently(
            session, parsed_id, uuid.UUID(user.id)
        )
    except Exception:
        logger.exception(f"Permanent deletion failed: {note_id}")
        return ActionResult(success=False, error=MSG_DELETE_FAILED)

    if not deleted:
        return ActionResult(success=False, error=MSG_DELETE_NOT_FOUND)
    return ActionResult(success=True)


async def empty_trash(
    session: AsyncSession,
    user: AuthUser | None,
) -> DeleteNotesResult:
    """Physically delete every trashed note of the user."""
    if user is None:
        return DeleteNotesResult(success=False, error=MSG_UNAUTHENTICATED)

    try:
        count = await note_repository.empty_trash(session, uuid.UUID(user.id))
    except Exception:
        logger.exception("Emptying trash failed")
        return DeleteNotesResult(success=False, error=MSG_EMPTY_TRASH_FAILED)

    logger.info(f"Trash emptied: {count} notes")
    return DeleteNotesResult(success=True, deleted_count=count)


async def create_sample_notes(
    session: AsyncSession,
    user: AuthUser | None,
) -> CreateSampleNotesResult:
    """Insert the onboarding sample notes for a new user."""
    if user is None:
        return CreateSampleNotesResult(success=False, error=MSG_UNAUTHENTICATED)

    user_id = uuid.UUID(user.id)
    try:
        notes = await note_repository.create_many(
            session,
            [{"user_id": user_id, **sample} for sample in SAMPLE_NOTES],
        )
    except Exception:
        logger.exception("Sample note creation failed")
        return CreateSampleNotesResult(success=False, error=MSG_SAMPLES_FAILED)

    return CreateSampleNotesResult(success=True, count=len(notes))
