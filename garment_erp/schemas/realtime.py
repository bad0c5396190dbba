from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class WsEnvelope(BaseModel):
    """Envelope for WebSocket messages."""
    type: str = Field(..., description="Message type (e.g., 'kpi.snapshot', 'db.change').")
    payload: Dict[str, Any] = Field(default_factory=dict, description="Message payload.")
    at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), description="Timestamp (UTC).")
    user_id: Optional[UUID] = Field(default=None, description="Acting user id, if applicable.")
    channel: Optional[str] = Field(default=None, description="Optional sub-channel (e.g., table name).")


class ChangeEvent(BaseModel):
    """Row-level change notification."""
    table: str = Field(..., description="Table the row belongs to")
    event: str = Field(..., description="INSERT, UPDATE or DELETE")
    record: Dict[str, Any] = Field(default_factory=dict, description="Row as JSON (id only for DELETE)")


class KpiSnapshot(BaseModel):
    """Snapshot of production floor KPIs."""
    cutting_pending: int = Field(0, description="Pieces assigned to cutting masters and not yet cut")
    stitching_assigned: int = Field(0, description="Pieces distributed to tailoring batches")
    qc_total_picked: int = Field(0, description="Pieces picked from batches")
    qc_total_approved: int = Field(0, description="Pieces approved in QC")
    qc_total_rejected: int = Field(0, description="Pieces rejected in QC")
    qc_pass_rate: int = Field(0, description="Approved share of picked pieces (0-100)")
    at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), description="Snapshot timestamp (UTC).")
