"""
Note Schemas

Pydantic models for note request bodies and handler results.

Request bodies only check types: content rules (blank title, 200-char
limit, blank body) are enforced by the handlers so that failures come
back as localized ``{success: false, error}`` results.
"""

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field

from ai_memo.schemas.common import ActionResult, Pagination
from ai_memo.services.text_utils import truncate_text

SortOption = Literal["newest", "oldest", "title", "updated"]


class NoteCreate(BaseModel):
    """Request schema for POST /notes."""

    title: str = Field(default="", description="Note title (1-200 chars after trim)")
    content: str = Field(default="", description="Note body")


class NoteUpdate(NoteCreate):
    """Request schema for PUT /notes/{id} (full replacement of title and body)."""

    pass


class NoteRead(BaseModel):
    """Full note representation including timestamps."""

    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    content: str
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)  # Enables ORM model conversion

    @computed_field  # type: ignore[prop-decorator]
    @property
    def preview(self) -> str:
        """Single-line excerpt of the body for list cards."""
        return truncate_text(self.content)


class CreateNoteResult(ActionResult):
    note_id: uuid.UUID | None = None


class GetNotesResult(ActionResult):
    notes: list[NoteRead] | None = None
    pagination: Pagination | None = None


class GetNoteResult(ActionResult):
    note: NoteRead | None = None


class UpdateNoteResult(ActionResult):
    note: NoteRead | None = None


class DeleteNotesResult(ActionResult):
    """Result of bulk operations (delete all, empty trash)."""

    deleted_count: int | None = None


class CreateSampleNotesResult(ActionResult):
    count: int | None = None
