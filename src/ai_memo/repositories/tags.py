"""
Tag Repository

Tags are regenerated as a set: replacing a note's tags deletes the old
rows and inserts the new ones in one transaction. Inserted rows get strictly
increasing ``created_at`` values, so listing returns the generated order.
"""

import uuid
from collections.abc import Sequence
from datetime import UTC, datetime, timedelta

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ai_memo.models import Tag
from ai_memo.models.note import DEFAULT_MODEL_NAME
from ai_memo.repositories.base import BaseRepository


class TagRepository(BaseRepository[Tag]):
    def __init__(self) -> None:
        super().__init__(Tag)

    async def list_for_note(
        self,
        session: AsyncSession,
        note_id: uuid.UUID,
        user_id: uuid.UUID,
    ) -> Sequence[Tag]:
        """Current tags of an owned note, in creation order."""
        stmt = (
            select(Tag)
            .where(Tag.note_id == note_id, Tag.user_id == user_id)
            .order_by(Tag.created_at.asc())
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def replace_for_note(
        self,
        session: AsyncSession,
        note_id: uuid.UUID,
        user_id: uuid.UUID,
        tags: Sequence[str],
        model: str = DEFAULT_MODEL_NAME,
    ) -> list[Tag]:
        """
        Replace all tags of a note.

        Args:
            tags: Normalized, de-duplicated tag strings (unique per note).

        Returns:
            The inserted Tag rows.
        """
        await session.execute(
            delete(Tag).where(Tag.note_id == note_id, Tag.user_id == user_id)
        )
        now = datetime.now(UTC)
        rows = [
            Tag(
                note_id=note_id,
                user_id=user_id,
                tag=tag,
                model=model,
                created_at=now + timedelta(microseconds=position),
            )
            for position, tag in enumerate(tags)
        ]
        session.add_all(rows)
        await session.commit()
        return rows


tag_repository = TagRepository()
