from __future__ import annotations

import logging
from typing import Any, Dict, Generic, List, Mapping, Optional, Sequence
from uuid import UUID

from fastapi import UploadFile
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from garment_erp.core.errors import ConflictError, NotFoundError
from garment_erp.repositories.base import CrudRepository, ModelT
from garment_erp.services.base import BaseService
from garment_erp.services.media import discard_file, store_upload

logger = logging.getLogger(__name__)


class CatalogService(BaseService, Generic[ModelT]):
    """
    CRUD for the simple master tables (people, sizes, fabrics, suppliers...).

    unique_fields are checked before insert/update and reported as 409;
    a delete blocked by a foreign key is reported as 409 as well.
    """

    def __init__(
        self,
        session: AsyncSession,
        repo: CrudRepository[ModelT],
        label: str,
        data_types: Sequence[str] = (),
        unique_fields: Sequence[str] = (),
    ) -> None:
        super().__init__(session)
        self.repo = repo
        self.label = label
        self.data_types = tuple(data_types)
        self.unique_fields = tuple(unique_fields)

    async def get(self, entity_id: UUID) -> ModelT:
        entity = await self.repo.get(entity_id)
        if not entity:
            raise NotFoundError(f"{self.label} not found")
        return entity

    # PUBLIC_INTERFACE
    async def list_entities(
        self,
        search: Optional[str] = None,
        filters: Optional[Mapping[str, Any]] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[ModelT]:
        return await self.repo.list_entities(search=search, filters=filters, limit=limit, offset=offset)

    async def _check_unique(self, values: Dict[str, Any], current: Optional[ModelT] = None) -> None:
        for field in self.unique_fields:
            value = values.get(field)
            if value is None:
                continue
            other = await self.repo.get_by(**{field: value})
            if other is not None and (current is None or other.id != current.id):
                raise ConflictError(f"{self.label} with this {field.replace('_', ' ')} already exists", {field: value})

    # PUBLIC_INTERFACE
    async def create(self, values: Dict[str, Any]) -> ModelT:
        await self._check_unique(values)
        entity = await self.repo.create(values)
        self.invalidate(*self.data_types)
        return entity

    # PUBLIC_INTERFACE
    async def update(self, entity_id: UUID, values: Dict[str, Any]) -> ModelT:
        entity = await self.get(entity_id)
        await self._check_unique(values, entity)
        entity = await self.repo.update(entity, values)
        self.invalidate(*self.data_types)
        return entity

    # PUBLIC_INTERFACE
    async def delete(self, entity_id: UUID, file_fields: Sequence[str] = ()) -> None:
        """Delete the row, then remove any stored files it referenced."""
        entity = await self.get(entity_id)
        files = [getattr(entity, f) for f in file_fields]
        try:
            await self.repo.delete(entity)
        except IntegrityError:
            await self.session.rollback()
            raise ConflictError(f"{self.label} is in use and cannot be deleted")
        self.invalidate(*self.data_types)
        for path in files:
            discard_file(path)

    # PUBLIC_INTERFACE
    async def replace_image(self, entity_id: UUID, field: str, file: UploadFile, bucket: str) -> ModelT:
        """Store a new image for `field` and remove the one it replaces."""
        entity = await self.get(entity_id)
        stored = await store_upload(file, bucket)
        previous = getattr(entity, field)
        setattr(entity, field, stored.url)
        await self.repo.commit()
        self.invalidate(*self.data_types)
        discard_file(previous)
        logger.info("Replaced %s %s of %s", self.label.lower(), field, entity_id)
        return entity
