"""
Base Repository

Generic repository pattern implementation for async SQLAlchemy writes.
Callers pass the owning ``user_id`` in the entity data; reads are scoped
to the owner by the concrete repositories.
"""

from collections.abc import Sequence
from typing import Any, Generic, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from ai_memo.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Generic repository providing insert operations shared by all entities.

    All methods expect an externally managed session (injected via FastAPI
    dependency) and commit their own writes.

    Usage:
        class SummaryRepository(BaseRepository[Summary]):
            def __init__(self):
                super().__init__(Summary)
    """

    def __init__(self, model: type[ModelType]):
        self.model = model

    async def create(self, session: AsyncSession, obj_in: Any) -> ModelType:
        """
        Create a new record.

        Args:
            session: Active database session.
            obj_in: Pydantic schema or dict with entity data (including user_id).

        Returns:
            The created entity with generated fields populated.
        """
        data = obj_in.model_dump() if hasattr(obj_in, "model_dump") else obj_in
        db_obj = self.model(**data)
        session.add(db_obj)
        await session.commit()
        await session.refresh(db_obj)
        return db_obj

    async def create_many(
        self,
        session: AsyncSession,
        objs_in: Sequence[Any],
    ) -> list[ModelType]:
        """Insert several records in a single transaction."""
        db_objs = [
            self.model(**(obj.model_dump() if hasattr(obj, "model_dump") else obj))
            for obj in objs_in
        ]
        session.add_all(db_objs)
        await session.commit()
        return db_objs
