from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from garment_erp.core.cache import get_query_cache
from garment_erp.services.realtime import broadcast_manager

logger = logging.getLogger(__name__)


class BaseService:
    """
    Base class for services. Holds a session for use across multiple repositories.

    Services should keep business logic and orchestration, delegating data access
    to repositories. Writes commit once per operation; follow-up side effects
    (cache invalidation, realtime pushes) never fail the committed write.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def invalidate(self, *data_types: str) -> None:
        """Drop cached query results for the given data types."""
        try:
            get_query_cache().invalidate_data_type(*data_types)
        except Exception:
            logger.exception("Failed to invalidate query cache for %s", data_types)

    async def publish_change(self, table: str, event: str, entity: Any) -> None:
        """Push a db.change event for the row to table subscribers."""
        try:
            await broadcast_manager.publish_entity_change(table, event, entity)
        except Exception:
            logger.exception("Failed to publish %s change on %s", event, table)
