from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Path, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from garment_erp.core.deps import get_current_active_user, require_roles
from garment_erp.db.models.security import ROLE_ADMIN
from garment_erp.db.session import get_async_session
from garment_erp.schemas.content import TutorialCreate, TutorialRead, TutorialUpdate
from garment_erp.services.tutorials import TutorialService

router = APIRouter(prefix="/tutorials", tags=["Tutorials"])

VIEW = Depends(get_current_active_user)
MANAGE = Depends(require_roles(ROLE_ADMIN))


# PUBLIC_INTERFACE
@router.get("", response_model=List[TutorialRead], summary="List tutorials", dependencies=[VIEW])
async def list_tutorials(
    session: AsyncSession = Depends(get_async_session),
    section: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[TutorialRead]:
    rows = await TutorialService(session).list_tutorials(section=section, search=search, limit=limit, offset=offset)
    return [TutorialRead.model_validate(t) for t in rows]


# PUBLIC_INTERFACE
@router.get("/sections", response_model=List[str], summary="Tutorial sections", dependencies=[VIEW])
async def list_sections(session: AsyncSession = Depends(get_async_session)) -> List[str]:
    return await TutorialService(session).repo.sections()


# PUBLIC_INTERFACE
@router.get("/{tutorial_id}", response_model=TutorialRead, summary="Get tutorial", dependencies=[VIEW])
async def get_tutorial(tutorial_id: UUID = Path(...), session: AsyncSession = Depends(get_async_session)) -> TutorialRead:
    return TutorialRead.model_validate(await TutorialService(session).get(tutorial_id))


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TutorialRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create tutorial",
    description="New tutorials are placed at the end of their section.",
    dependencies=[MANAGE],
)
async def create_tutorial(payload: TutorialCreate, session: AsyncSession = Depends(get_async_session)) -> TutorialRead:
    return TutorialRead.model_validate(await TutorialService(session).create_tutorial(payload))


# PUBLIC_INTERFACE
@router.patch("/{tutorial_id}", response_model=TutorialRead, summary="Update tutorial", dependencies=[MANAGE])
async def update_tutorial(
    payload: TutorialUpdate,
    tutorial_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> TutorialRead:
    return TutorialRead.model_validate(await TutorialService(session).update_tutorial(tutorial_id, payload))


# PUBLIC_INTERFACE
@router.delete(
    "/{tutorial_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete tutorial",
    dependencies=[MANAGE],
)
async def delete_tutorial(tutorial_id: UUID = Path(...), session: AsyncSession = Depends(get_async_session)) -> None:
    await TutorialService(session).delete_tutorial(tutorial_id)


# PUBLIC_INTERFACE
@router.put(
    "/{tutorial_id}/video",
    response_model=TutorialRead,
    summary="Upload tutorial video",
    description="Replaces any previous video of the tutorial.",
    dependencies=[MANAGE],
)
async def upload_video(
    tutorial_id: UUID = Path(...),
    file: UploadFile = File(..., description="Video file"),
    session: AsyncSession = Depends(get_async_session),
) -> TutorialRead:
    return TutorialRead.model_validate(await TutorialService(session).upload_video(tutorial_id, file))
