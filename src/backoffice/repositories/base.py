"""Base repository with common CRUD operations."""

from datetime import datetime
from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel, select

from src.backoffice.schemas.pagination import decode_cursor, encode_cursor

ModelType = TypeVar("ModelType", bound=SQLModel)


class BaseRepository(Generic[ModelType]):
    """Data access for one table.

    Repositories never commit; the service layer owns the transaction.
    """

    model: type[ModelType]

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, id: UUID, for_update: bool = False) -> ModelType | None:
        """Get a record by its primary key, optionally locking the row."""
        query = select(self.model).where(self.model.id == id)  # type: ignore[attr-defined]
        if for_update:
            query = query.with_for_update()
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    def add(self, entity: ModelType) -> None:
        """Add entity to session (no flush/commit)."""
        self.session.add(entity)

    async def paginate_by_created_at(
        self,
        query: Any,
        cursor: str | None,
        limit: int,
    ) -> tuple[list[ModelType], str | None, bool]:
        """Page through ``query`` newest first, keyed on ``created_at``.

        Returns:
            (items, next_cursor, has_more). An unreadable cursor restarts from
            the first page.
        """
        created_at = self.model.created_at  # type: ignore[attr-defined]
        if cursor:
            try:
                query = query.where(created_at < datetime.fromisoformat(decode_cursor(cursor)))
            except ValueError:
                pass

        result = await self.session.execute(query.order_by(created_at.desc()).limit(limit + 1))
        items = list(result.scalars().all())

        has_more = len(items) > limit
        if has_more:
            items = items[:limit]

        next_cursor = None
        if has_more and items:
            next_cursor = encode_cursor(items[-1].created_at.isoformat())  # type: ignore[attr-defined]
        return items, next_cursor, has_more
