"""
Note Repository

Data access layer for Note entities: owner-scoped listing with sort
options, soft delete (trash) and restore, and physical deletion of trashed
notes.

Active notes have ``deleted_at IS NULL``; trashed notes have it set.
"""

import uuid
from collections.abc import Sequence
from typing import Any

from sqlalchemy import ColumnElement, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ai_memo.models import Note
from ai_memo.models.base import utcnow
from ai_memo.repositories.base import BaseRepository

# Leading run of emoji, variation selectors, joiners and spaces
# (PostgreSQL ARE escapes, passed through as-is).
LEADING_EMOJI_PATTERN = (
    r"^[\U0001F000-\U0001FAFF\u2600-\u27BF\u2B00-\u2BFF\uFE0F\u200D[:space:]]+"
)


def title_sort_key() -> ColumnElement[str]:
    """Title with its leading emoji run removed, for alphabetical sorting."""
    return func.regexp_replace(Note.title, LEADING_EMOJI_PATTERN, "")


def _order_by(sort: str) -> tuple[ColumnElement[Any], ...]:
    if sort == "oldest":
        return (Note.created_at.asc(),)
    if sort == "title":
        return (title_sort_key().asc(), Note.title.asc())
    if sort == "updated":
        return (Note.updated_at.desc(),)
    # "newest" and anything unrecognized
    return (Note.created_at.desc(),)


class NoteRepository(BaseRepository[Note]):
    """
    Repository for Note entities with trash support.

    Inherits owner-scoped CRUD from BaseRepository and adds paginated
    listing for active and trashed notes plus the trash lifecycle
    (soft_delete / restore / delete_permanently / empty_trash).
    """

    def __init__(self) -> None:
        super().__init__(Note)

    @staticmethod
    def active_filter(user_id: uuid.UUID) -> tuple[ColumnElement[bool], ...]:
        return (Note.user_id == user_id, Note.deleted_at.is_(None))

    @staticmethod
    def trash_filter(user_id: uuid.UUID) -> tuple[ColumnElement[bool], ...]:
        return (Note.user_id == user_id, Note.deleted_at.isnot(None))

    async def count_active(self, session: AsyncSession, user_id: uuid.UUID) -> int:
        stmt = select(func.count()).select_from(Note).where(*self.active_filter(user_id))
        return (await session.execute(stmt)).scalar_one()

    def list_active_stmt(
        self,
        user_id: uuid.UUID,
        offset: int,
        limit: int,
        sort: str = "newest",
    ):
        return (
            select(Note)
            .where(*self.active_filter(user_id))
            .order_by(*_order_by(sort))
            .offset(offset)
            .limit(limit)
        )

    async def list_active(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        offset: int,
        limit: int,
        sort: str = "newest",
    ) -> Sequence[Note]:
        """
        List the user's active notes.

        Args:
            session: Database session.
            user_id: Owner.
            offset: Rows to skip.
            limit: Page size.
            sort: newest | oldest | title | updated (unknown values sort as newest).
        """
        result = await session.execute(self.list_active_stmt(user_id, offset, limit, sort))
        return result.scalars().all()

    async def get_active(
        self,
        session: AsyncSession,
        note_id: uuid.UUID,
        user_id: uuid.UUID,
    ) -> Note | None:
        """Get an owned note that is not in the trash."""
        result = await session.execute(
            select(Note).where(Note.id == note_id, *self.active_filter(user_id))
        )
        return result.scalars().first()

    async def update_content(
        self,
        session: AsyncSession,
        note_id: uuid.UUID,
        user_id: uuid.UUID,
        title: str,
        content: str,
    ) -> Note | None:
        """
        Replace title and content of an owned active note.

        Returns:
            The updated note, or None if no owned active note matched.
        """
        stmt = (
            update(Note)
            .where(Note.id == note_id, *self.active_filter(user_id))
            .values(title=title, content=content, updated_at=utcnow())
            .returning(Note)
        )
        result = await session.execute(stmt)
        note = result.scalars().first()
        await session.commit()
        return note

    async def soft_delete(
        self,
        session: AsyncSession,
        note_id: uuid.UUID,
        user_id: uuid.UUID,
    ) -> bool:
        """Move an owned active note to the trash. Returns False if none matched."""
        stmt = (
            update(Note)
            .where(Note.id == note_id, *self.active_filter(user_id))
            .values(deleted_at=utcnow())
            .returning(Note.id)
        )
        result = await session.execute(stmt)
        matched = result.first() is not None
        await session.commit()
        return matched

    async def soft_delete_all(self, session: AsyncSession, user_id: uuid.UUID) -> int:
        """Move every active note of the user to the trash."""
        stmt = (
            update(Note)
            .where(*self.active_filter(user_id))
            .values(deleted_at=utcnow())
            .returning(Note.id)
        )
        result = await session.execute(stmt)
        count = len(result.all())
        await session.commit()
        return count

    async def restore(
        self,
        session: AsyncSession,
        note_id: uuid.UUID,
        user_id: uuid.UUID,
    ) -> bool:
        """Take an owned note out of the trash. Returns False if none matched."""
        stmt = (
            update(Note)
            .where(Note.id == note_id, *self.trash_filter(user_id))
            .values(deleted_at=None)
            .returning(Note.id)
        )
        result = await session.execute(stmt)
        matched = result.first() is not None
        await session.commit()
        return matched

    async def count_deleted(self, session: AsyncSession, user_id: uuid.UUID) -> int:
        stmt = select(func.count()).select_from(Note).where(*self.trash_filter(user_id))
        return (await session.execute(stmt)).scalar_one()

    async def list_deleted(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        offset: int,
        limit: int,
    ) -> Sequence[Note]:
        """List trashed notes, most recently deleted first."""
        stmt = (
            select(Note)
            .where(*self.trash_filter(user_id))
            .order_by(Note.deleted_at.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def delete_permanently(
        self,
        session: AsyncSession,
        note_id: uuid.UUID,
        user_id: uuid.UUID,
    ) -> bool:
        """
        Physically delete an owned note that is already in the trash.

        Summaries and tags go with it (ON DELETE CASCADE).
        """
        stmt = (
            delete(Note)
            .where(Note.id == note_id, *self.trash_filter(user_id))
            .returning(Note.id)
        )
        result = await session.execute(stmt)
        matched = result.first() is not None
        await session.commit()
        return matched

    async def empty_trash(self, session: AsyncSession, user_id: uuid.UUID) -> int:
        """Physically delete every trashed note of the user."""
        stmt = delete(Note).where(*self.trash_filter(user_id)).returning(Note.id)
        result = await session.execute(stmt)
        count = len(result.all())
        await session.commit()
        return count


# Module-level instance for function-based API
note_repository = NoteRepository()
