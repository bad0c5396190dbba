from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from garment_erp.core.deps import require_roles
from garment_erp.db.models.security import ROLE_PRODUCTION, ROLE_QC, User
from garment_erp.db.session import get_async_session
from garment_erp.schemas.quality import QcOrderRow, QcReviewRead, QcReviewSubmit, QcSummary
from garment_erp.services.quality import QualityService

router = APIRouter(prefix="/quality", tags=["Quality"])

VIEW = Depends(require_roles(ROLE_QC, ROLE_PRODUCTION))


# PUBLIC_INTERFACE
@router.get(
    "/orders",
    response_model=List[QcOrderRow],
    summary="QC queue",
    description="Orders with picked pieces, aggregated over their batch assignments.",
    dependencies=[VIEW],
)
async def qc_queue(
    session: AsyncSession = Depends(get_async_session),
    search: Optional[str] = Query(None, description="Order number or customer"),
) -> List[QcOrderRow]:
    return await QualityService(session).order_queue(search=search)


# PUBLIC_INTERFACE
@router.get(
    "/batch-assignments/{assignment_id}/review",
    response_model=QcReviewRead,
    summary="Review state",
    description="Per-size assigned, picked and cumulative approved/rejected counts.",
    dependencies=[VIEW],
)
async def get_review(
    assignment_id: UUID = Path(...), session: AsyncSession = Depends(get_async_session)
) -> QcReviewRead:
    return await QualityService(session).review(assignment_id)


# PUBLIC_INTERFACE
@router.post(
    "/batch-assignments/{assignment_id}/review",
    response_model=QcReviewRead,
    summary="Submit inspection round",
    description=(
        "Approved and rejected counts add to the stored totals. A size cannot be reviewed beyond "
        "its picked pieces, and rejections need remarks."
    ),
)
async def submit_review(
    payload: QcReviewSubmit,
    assignment_id: UUID = Path(...),
    user: User = Depends(require_roles(ROLE_QC)),
    session: AsyncSession = Depends(get_async_session),
) -> QcReviewRead:
    return await QualityService(session).submit_review(
        assignment_id, payload, reviewed_by_name=user.full_name or user.email
    )


# PUBLIC_INTERFACE
@router.get("/summary", response_model=QcSummary, summary="QC summary", dependencies=[VIEW])
async def qc_summary(session: AsyncSession = Depends(get_async_session)) -> QcSummary:
    return await QualityService(session).summary()
