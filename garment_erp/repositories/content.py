from __future__ import annotations

from typing import List

from sqlalchemy import func, select

from garment_erp.db.models.content import Tutorial
from .base import CrudRepository


class TutorialRepository(CrudRepository[Tutorial]):
    """Repository for help tutorials grouped by section."""
    model = Tutorial
    search_columns = ("title", "description", "option_name")
    order_by = ("section", "order_index")

    async def next_order_index(self, section: str) -> int:
        res = await self.execute(select(func.max(Tutorial.order_index)).where(Tutorial.section == section))
        current = res.scalar_one_or_none()
        return (int(current) if current is not None else 0) + 1

    async def sections(self) -> List[str]:
        res = await self.execute(select(Tutorial.section).distinct().order_by(Tutorial.section))
        return [row[0] for row in res.all()]
