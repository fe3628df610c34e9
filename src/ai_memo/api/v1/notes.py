"""
Notes API Router

REST endpoints for note CRUD and the trash lifecycle.

Handler outcomes (including "not found" and validation messages) are
returned as 200 responses with a ``{success, error}`` body; only malformed
request bodies produce FastAPI's 422.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ai_memo.core.auth import AuthUser, get_current_user
from ai_memo.core.database import get_db
from ai_memo.schemas.common import ActionResult
from ai_memo.schemas.notes import (
    CreateNoteResult,
    CreateSampleNotesResult,
    DeleteNotesResult,
    GetNoteResult,
    GetNotesResult,
    NoteCreate,
    NoteUpdate,
    UpdateNoteResult,
)
from ai_memo.services import notes as note_service

router = APIRouter()


@router.post("/", response_model=CreateNoteResult)
async def create_note(
    note: NoteCreate,
    db: AsyncSession = Depends(get_db),
    user: AuthUser | None = Depends(get_current_user),
):
    """Create a note for the signed-in user."""
    return await note_service.create_note(db, user, note.title, note.content)


@router.get("/", response_model=GetNotesResult)
async def read_notes(
    page: float = Query(1, description="Page number (clamped to >= 1)"),
    sort: str = Query("newest", description="newest | oldest | title | updated"),
    db: AsyncSession = Depends(get_db),
    user: AuthUser | None = Depends(get_current_user),
):
    """List active notes, 20 per page."""
    return await note_service.get_notes(db, user, page, sort)


@router.delete("/", response_model=DeleteNotesResult)
async def delete_all_notes(
    db: AsyncSession = Depends(get_db),
    user: AuthUser | None = Depends(get_current_user),
):
    """Move every active note to the trash."""
    return await note_service.delete_all_notes(db, user)


@router.post("/samples", response_model=CreateSampleNotesResult)
async def create_sample_notes(
    db: AsyncSession = Depends(get_db),
    user: AuthUser | None = Depends(get_current_user),
):
    """Insert the onboarding sample notes."""
    return await note_service.create_sample_notes(db, user)


@router.get("/trash", response_model=GetNotesResult)
async def read_trash(
    page: float = Query(1),
    db: AsyncSession = Depends(get_db),
    user: AuthUser | None = Depends(get_current_user),
):
    """List trashed notes, most recently deleted first."""
    return await note_service.get_deleted_notes(db, user, page)


@router.delete("/trash", response_model=DeleteNotesResult)
async def empty_trash(
    db: AsyncSession = Depends(get_db),
    user: AuthUser | None = Depends(get_current_user),
):
    """Permanently delete every trashed note."""
    return await note_service.empty_trash(db, user)


@router.get("/{note_id}", response_model=GetNoteResult)
async def read_note(
    note_id: str,
    db: AsyncSession = Depends(get_db),
    user: AuthUser | None = Depends(get_current_user),
):
    """Retrieve a single active note (``note`` is null when not found)."""
    return await note_service.get_note_by_id(db, user, note_id)


@router.put("/{note_id}", response_model=UpdateNoteResult)
async def update_note(
    note_id: str,
    note: NoteUpdate,
    db: AsyncSession = Depends(get_db),
    user: AuthUser | None = Depends(get_current_user),
):
    return await note_service.update_note(db, user, note_id, note.title, note.content)


@router.delete("/{note_id}", response_model=ActionResult)
async def delete_note(
    note_id: str,
    db: AsyncSession = Depends(get_db),
    user: AuthUser | None = Depends(get_current_user),
):
    """Soft delete: the note moves to the trash."""
    return await note_service.delete_note(db, user, note_id)


@router.post("/{note_id}/restore", response_model=ActionResult)
async def restore_note(
    note_id: str,
    db: AsyncSession = Depends(get_db),
    user: AuthUser | None = Depends(get_current_user),
):
    return await note_service.restore_note(db, user, note_id)


@router.delete("/{note_id}/permanent", response_model=ActionResult)
async def permanently_delete_note(
    note_id: str,
    db: AsyncSession = Depends(get_db),
    user: AuthUser | None = Depends(get_current_user),
):
    """Physically delete a trashed note with its summaries and tags."""
    return await note_service.permanently_delete_note(db, user, note_id)
