"""
Note Models

Core entities of the memo application: notes, their AI-generated
summaries and tags. Every row is owned by exactly one user.

Tables:
    notes:     User notes with soft-delete (``deleted_at``).
    summaries: Append-only AI summaries; the newest row is current.
    tags:      AI-generated tags, unique per (note, tag).
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ai_memo.models.base import Base, OwnedMixin, utcnow

DEFAULT_MODEL_NAME = "gemini-2.0-flash"
TITLE_MAX_LENGTH = 200


class Note(Base, OwnedMixin):
    """
    User note with soft-delete support.

    Attributes:
        title: Note title (max 200 chars, enforced by the handlers).
        content: Note body, no length limit.
        updated_at: Last modification time (set on insert and every edit).
        deleted_at: Trash timestamp; NULL while the note is active.
        summaries: Generated summaries (cascade delete).
        tags: Generated tags (cascade delete).
    """

    __tablename__ = "notes"
    __table_args__ = (Index("ix_notes_created_at", "created_at"),)

    title: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        index=True,
    )

    summaries: Mapped[list[Summary]] = relationship(
        back_populates="note",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    tags: Mapped[list[Tag]] = relationship(
        back_populates="note",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def __repr__(self) -> str:
        return f"<Note(id={self.id!s:.8}, title='{self.title[:20]}...')>"


class Summary(Base, OwnedMixin):
    """
    AI-generated note summary.

    Treated as an append-only cache entry: regeneration inserts a new row
    and the most recent row by ``created_at`` is the current summary.
    """

    __tablename__ = "summaries"

    note_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("notes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    summary: Mapped[str] = mapped_column(Text, nullable=False)
    model: Mapped[str] = mapped_column(
        String(100), nullable=False, default=DEFAULT_MODEL_NAME
    )

    note: Mapped[Note] = relationship(back_populates="summaries")

    def __repr__(self) -> str:
        return f"<Summary(id={self.id!s:.8}, note={self.note_id!s:.8})>"


class Tag(Base, OwnedMixin):
    """AI-generated tag attached to a note."""

    __tablename__ = "tags"
    __table_args__ = (
        UniqueConstraint("note_id", "tag", name="tags_note_id_tag_unique"),
    )

    note_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("notes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    tag: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    model: Mapped[str] = mapped_column(
        String(100), nullable=False, default=DEFAULT_MODEL_NAME
    )

    note: Mapped[Note] = relationship(back_populates="tags")

    def __repr__(self) -> str:
        return f"<Tag(note={self.note_id!s:.8}, tag='{self.tag}')>"
