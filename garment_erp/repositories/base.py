from __future__ import annotations

from typing import Any, Dict, Generic, Iterable, List, Mapping, Optional, Sequence, Type, TypeVar
from uuid import UUID

from sqlalchemy import Executable, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from garment_erp.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository:
    """
    Base class for repositories providing common helpers.

    Note:
      Repositories never commit implicitly inside multi-step writes; callers
      pass commit=False and commit once through the service.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def execute(self, statement: Executable, params: Optional[dict[str, Any]] = None):
        """Execute a SQLAlchemy statement."""
        return await self.session.execute(statement, params or {})

    async def scalars(self, statement: Executable, params: Optional[dict[str, Any]] = None):
        """Execute and return scalars."""
        result = await self.execute(statement, params)
        return result.scalars()

    async def scalar_one_or_none(self, statement: Executable, params: Optional[dict[str, Any]] = None):
        """Execute and return a single scalar or None."""
        result = await self.execute(statement, params)
        return result.scalar_one_or_none()

    async def commit(self) -> None:
        """Commit current transaction."""
        await self.session.commit()

    async def flush(self) -> None:
        """Flush pending changes so generated values are visible in this transaction."""
        await self.session.flush()

    async def add_all(self, entities: Iterable[Any]) -> None:
        """Add multiple entities to session."""
        self.session.add_all(list(entities))

    async def add(self, entity: Any) -> None:
        """Add a single entity to session."""
        self.session.add(entity)


class CrudRepository(BaseRepository, Generic[ModelT]):
    """
    Generic get/list/create/update/delete for a single model.

    Subclasses set `model`, optionally `search_columns` (matched with ILIKE by
    the `search` argument) and `order_by` ("column" or "-column").
    """

    model: Type[ModelT]
    search_columns: Sequence[str] = ()
    order_by: Sequence[str] = ("-created_at",)

    def _ordering(self) -> list:
        clauses = []
        for name in self.order_by:
            column = getattr(self.model, name.lstrip("-"))
            clauses.append(column.desc() if name.startswith("-") else column.asc())
        return clauses

    def _filtered(self, stmt, *, search: Optional[str], filters: Optional[Mapping[str, Any]]):
        for key, value in (filters or {}).items():
            if value is not None:
                stmt = stmt.where(getattr(self.model, key) == value)
        if search and search.strip() and self.search_columns:
            like = f"%{search.strip()}%"
            stmt = stmt.where(or_(*[getattr(self.model, c).ilike(like) for c in self.search_columns]))
        return stmt

    async def get(self, entity_id: UUID) -> Optional[ModelT]:
        return await self.session.get(self.model, entity_id)

    async def get_by(self, **criteria: Any) -> Optional[ModelT]:
        stmt = select(self.model).filter_by(**criteria).limit(1)
        return await self.scalar_one_or_none(stmt)

    async def list_entities(
        self,
        *,
        search: Optional[str] = None,
        filters: Optional[Mapping[str, Any]] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[ModelT]:
        stmt = self._filtered(select(self.model), search=search, filters=filters)
        stmt = stmt.order_by(*self._ordering()).offset(offset).limit(limit)
        res = await self.scalars(stmt)
        return list(res)

    async def count(self, **filters: Any) -> int:
        stmt = self._filtered(select(func.count()).select_from(self.model), search=None, filters=filters)
        result = await self.execute(stmt)
        return int(result.scalar_one())

    async def create(self, values: Dict[str, Any], *, commit: bool = True) -> ModelT:
        entity = self.model(**values)
        await self.add(entity)
        if commit:
            await self.commit()
        else:
            await self.flush()
        return entity

    async def update(self, entity: ModelT, values: Dict[str, Any], *, commit: bool = True) -> ModelT:
        for key, value in values.items():
            setattr(entity, key, value)
        if commit:
            await self.commit()
        else:
            await self.flush()
        return entity

    async def delete(self, entity: ModelT, *, commit: bool = True) -> None:
        await self.session.delete(entity)
        if commit:
            await self.commit()
        else:
            await self.flush()
