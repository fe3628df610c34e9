"""
Summary Repository

Append-only access to AI summaries: the newest row per note is current.
"""

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ai_memo.models import Summary
from ai_memo.models.note import DEFAULT_MODEL_NAME
from ai_memo.repositories.base import BaseRepository


class SummaryRepository(BaseRepository[Summary]):
    def __init__(self) -> None:
        super().__init__(Summary)

    async def latest_for_note(
        self,
        session: AsyncSession,
        note_id: uuid.UUID,
        user_id: uuid.UUID,
    ) -> Summary | None:
        """Most recent summary of an owned note, or None."""
        stmt = (
            select(Summary)
            .where(Summary.note_id == note_id, Summary.user_id == user_id)
            .order_by(Summary.created_at.desc())
            .limit(1)
        )
        result = await session.execute(stmt)
        return result.scalars().first()

    async def add(
        self,
        session: AsyncSession,
        note_id: uuid.UUID,
        user_id: uuid.UUID,
        summary: str,
        model: str = DEFAULT_MODEL_NAME,
    ) -> Summary:
        """Insert a new summary row (previous rows are kept)."""
        return await self.create(
            session,
            {"note_id": note_id, "user_id": user_id, "summary": summary, "model": model},
        )


summary_repository = SummaryRepository()
