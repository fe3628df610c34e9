"""Repositories package."""

from ai_memo.repositories.base import BaseRepository
from ai_memo.repositories.notes import NoteRepository, note_repository
from ai_memo.repositories.summaries import SummaryRepository, summary_repository
from ai_memo.repositories.tags import TagRepository, tag_repository

__all__ = [
    "BaseRepository",
    "NoteRepository",
    "note_repository",
    "SummaryRepository",
    "summary_repository",
    "TagRepository",
    "tag_repository",
]
