from __future__ import annotations

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from garment_erp.core.errors import NotFoundError
from garment_erp.db.models.content import Tutorial
from garment_erp.repositories.content import TutorialRepository
from garment_erp.schemas.content import TutorialCreate, TutorialUpdate
from garment_erp.services.base import BaseService
from garment_erp.services.media import VIDEO, discard_file, store_upload

logger = logging.getLogger(__name__)

VIDEO_BUCKET = "tutorial-videos"


class TutorialService(BaseService):
    """Help tutorials; each section keeps its own running order."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = TutorialRepository(session)

    async def get(self, tutorial_id: UUID) -> Tutorial:
        tutorial = await self.repo.get(tutorial_id)
        if not tutorial:
            raise NotFoundError("Tutorial not found")
        return tutorial

    # PUBLIC_INTERFACE
    async def list_tutorials(
        self, section: Optional[str] = None, search: Optional[str] = None, limit: int = 100, offset: int = 0
    ) -> List[Tutorial]:
        return await self.repo.list_entities(
            search=search, filters={"section": section}, limit=limit, offset=offset
        )

    # PUBLIC_INTERFACE
    async def create_tutorial(self, payload: TutorialCreate) -> Tutorial:
        """New tutorials go to the end of their section."""
        values = payload.model_dump()
        values["order_index"] = await self.repo.next_order_index(payload.section)
        return await self.repo.create(values)

    # PUBLIC_INTERFACE
    async def update_tutorial(self, tutorial_id: UUID, payload: TutorialUpdate) -> Tutorial:
        tutorial = await self.get(tutorial_id)
        values = payload.model_dump(exclude_unset=True, exclude_none=True)
        if "section" in values and values["section"] != tutorial.section and "order_index" not in values:
            values["order_index"] = await self.repo.next_order_index(values["section"])
        return await self.repo.update(tutorial, values)

    # PUBLIC_INTERFACE
    async def delete_tutorial(self, tutorial_id: UUID) -> None:
        tutorial = await self.get(tutorial_id)
        video_path = tutorial.video_path
        await self.repo.delete(tutorial)
        discard_file(video_path)

    # PUBLIC_INTERFACE
    async def upload_video(self, tutorial_id: UUID, file: UploadFile) -> Tutorial:
        """Attach an uploaded video (video/* within MAX_UPLOAD_MB), replacing any previous one."""
        tutorial = await self.get(tutorial_id)
        stored = await store_upload(file, VIDEO_BUCKET, VIDEO)
        previous = tutorial.video_path
        tutorial.video_path = stored.path
        tutorial.video_url = stored.url
        await self.repo.commit()
        discard_file(previous)
        logger.info("Uploaded video for tutorial %s (%d bytes)", tutorial.id, stored.size)
        return tutorial
