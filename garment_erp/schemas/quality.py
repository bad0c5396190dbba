from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class QcOrderRow(BaseModel):
    """Order waiting in the QC queue, aggregated over its picked batch assignments."""
    order_id: UUID
    order_number: str
    customer_name: Optional[str] = None
    picked: int = 0
    total: int = 0
    approved: int = 0
    rejected: int = 0
    assignment_ids: List[UUID] = Field(default_factory=list)

    class Config:
        from_attributes = True


class QcReviewRow(BaseModel):
    """Review state of one size of a batch assignment."""
    size_name: str
    assigned: int = 0
    picked: int = 0
    approved: int = Field(0, description="Cumulative approved")
    rejected: int = Field(0, description="Cumulative rejected")
    needs_qc: int = Field(0, description="Pieces waiting for inspection")
    remarks: Optional[str] = None


class QcReviewRead(BaseModel):
    assignment_id: UUID
    order_id: UUID
    order_number: Optional[str] = None
    batch_name: Optional[str] = None
    sizes: List[QcReviewRow] = Field(default_factory=list)


class QcSizeDecision(BaseModel):
    size_name: str = Field(..., description="Size")
    approved: int = Field(0, description="Pieces approved in this round")
    rejected: int = Field(0, description="Pieces rejected in this round")
    remarks: Optional[str] = Field(None, description="Required when rejecting")


class QcReviewSubmit(BaseModel):
    sizes: List[QcSizeDecision] = Field(..., min_length=1)


class QcSummary(BaseModel):
    total_picked: int = 0
    total_approved: int = 0
    total_rejected: int = 0
    pass_rate: int = Field(0, description="round(approved / picked * 100)")
