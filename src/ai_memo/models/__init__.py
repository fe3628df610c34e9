"""Models package - re-exports all models for convenient imports."""

from ai_memo.models.base import Base, OwnedMixin
from ai_memo.models.note import Note, Summary, Tag

__all__ = [
    "Base",
    "OwnedMixin",
    "Note",
    "Summary",
    "Tag",
]
