"""
Storage Schemas

JSON blobs persisted per user in Redis: note drafts and AI regeneration
history. Timestamps serialize as ISO 8601 strings.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from ai_memo.schemas.common import ActionResult


class DraftNote(BaseModel):
    title: str = ""
    content: str = ""
    saved_at: datetime


class DraftSave(BaseModel):
    """Request schema for PUT /drafts."""

    title: str = ""
    content: str = ""


class SummaryHistory(BaseModel):
    id: str
    content: str
    style: str
    length: str
    timestamp: datetime


class TagHistory(BaseModel):
    id: str
    tags: list[str]
    count: int
    timestamp: datetime


class SummaryHistoryCreate(BaseModel):
    """Request schema for POST /history/{note_id}/summary."""

    content: str = Field(min_length=1)
    style: str = "bullet"
    length: str = "medium"


class TagHistoryCreate(BaseModel):
    """Request schema for POST /history/{note_id}/tags."""

    tags: list[str] = Field(min_length=1)
    count: int | None = None


class DraftResult(ActionResult):
    draft: DraftNote | None = None


class SummaryHistoryView(SummaryHistory):
    """History entry as returned by the API, with a Korean relative-time label."""

    relative_time: str


class TagHistoryView(TagHistory):
    relative_time: str


class SummaryHistoryResult(ActionResult):
    history: list[SummaryHistoryView] | None = None


class TagHistoryResult(ActionResult):
    history: list[TagHistoryView] | None = None
