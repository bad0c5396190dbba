from __future__ import annotations

from datetime import date, datetime
from typing import Dict, List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

ReassignMode = Literal["all", "partial"]


class BatchRead(BaseModel):
    """Tailoring batch."""
    id: UUID = Field(..., description="Batch ID")
    batch_name: str = Field(..., description="Batch name")
    batch_code: str = Field(..., description="Unique batch code")
    tailor_type: str = Field(..., description="single_needle or overlock_flatlock")
    max_capacity: int = Field(0)
    current_capacity: int = Field(0)
    available_capacity: int = Field(0, description="max_capacity - current_capacity")
    status: str = Field("active")
    batch_leader_name: Optional[str] = Field(None)
    location: Optional[str] = Field(None)
    created_at: datetime = Field(..., description="Created at")
    updated_at: datetime = Field(..., description="Updated at")

    class Config:
        from_attributes = True


class BatchCreate(BaseModel):
    batch_name: str = Field(..., min_length=1)
    batch_code: str = Field(..., min_length=1)
    tailor_type: Literal["single_needle", "overlock_flatlock"] = Field("single_needle")
    max_capacity: int = Field(0, ge=0)
    current_capacity: int = Field(0, ge=0)
    status: Literal["active", "inactive"] = Field("active")
    batch_leader_name: Optional[str] = Field(None)
    location: Optional[str] = Field(None)


class BatchUpdate(BaseModel):
    batch_name: Optional[str] = Field(None)
    batch_code: Optional[str] = Field(None)
    tailor_type: Optional[Literal["single_needle", "overlock_flatlock"]] = Field(None)
    max_capacity: Optional[int] = Field(None, ge=0)
    current_capacity: Optional[int] = Field(None, ge=0)
    status: Optional[Literal["active", "inactive"]] = Field(None)
    batch_leader_name: Optional[str] = Field(None)
    location: Optional[str] = Field(None)


class SizeDistributionRead(BaseModel):
    size_name: str = Field(..., description="Size")
    quantity: int = Field(0, description="Pieces assigned")
    picked_quantity: int = Field(0, description="Pieces picked up after stitching")

    class Config:
        from_attributes = True


class BatchAssignmentRead(BaseModel):
    """Portion of an order assigned to a batch, with per-size breakdown."""
    id: UUID = Field(..., description="Assignment ID")
    order_id: UUID = Field(..., description="Order ID")
    order_number: Optional[str] = Field(None)
    batch_id: UUID = Field(..., description="Batch ID")
    batch_name: Optional[str] = Field(None)
    assignment_date: date = Field(..., description="Assignment date")
    assigned_by_name: Optional[str] = Field(None)
    total_quantity: int = Field(0)
    notes: Optional[str] = Field(None)
    sizes: List[SizeDistributionRead] = Field(default_factory=list)
    created_at: datetime = Field(..., description="Created at")
    updated_at: datetime = Field(..., description="Updated at")

    class Config:
        from_attributes = True


class BatchShareIn(BaseModel):
    batch_id: UUID = Field(..., description="Batch receiving the share")
    size_quantities: Dict[str, int] = Field(default_factory=dict, description="Pieces per size for this batch")


class BatchDistributionRequest(BaseModel):
    """Split of the whole order across one or more batches."""
    batches: List[BatchShareIn] = Field(..., min_length=1)
    notes: Optional[str] = Field(None)


class BatchReassignRequest(BaseModel):
    target_batch_id: UUID = Field(..., description="Batch receiving the pieces")
    mode: ReassignMode = Field("all", description="'all' moves every unpicked piece")
    size_quantities: Optional[Dict[str, int]] = Field(None, description="Required for partial mode")


class BatchReassignResult(BaseModel):
    source: BatchAssignmentRead
    target: BatchAssignmentRead
    moved: Dict[str, int] = Field(default_factory=dict)
    total_moved: int = Field(0)


class CuttingAssignmentRead(BaseModel):
    id: UUID = Field(..., description="Cutting assignment ID")
    order_id: UUID = Field(..., description="Order ID")
    cutting_master_id: UUID = Field(..., description="Employee ID of the cutting master")
    cutting_master_name: Optional[str] = Field(None)
    assigned_quantity: Optional[int] = Field(None, description="Pieces to cut; null means the whole order")
    completed_quantity: int = Field(0)
    cut_quantities_by_size: Dict[str, int] = Field(default_factory=dict)
    status: str = Field("assigned")
    assigned_date: date = Field(..., description="Assigned on")
    assigned_by_name: Optional[str] = Field(None)
    notes: Optional[str] = Field(None)
    created_at: datetime = Field(..., description="Created at")
    updated_at: datetime = Field(..., description="Updated at")

    class Config:
        from_attributes = True


class CuttingAssignmentCreate(BaseModel):
    cutting_master_id: UUID = Field(..., description="Employee ID of an eligible cutting master")
    assigned_quantity: Optional[int] = Field(None, ge=1, description="Defaults to the order total")
    notes: Optional[str] = Field(None)


class CuttingReassignRequest(BaseModel):
    new_master_id: UUID = Field(..., description="Employee ID of the new cutting master")
    mode: ReassignMode = Field("all")
    quantity: Optional[int] = Field(None, description="Required for partial mode")


class CuttingReassignResult(BaseModel):
    source: CuttingAssignmentRead
    target: CuttingAssignmentRead
    quantity: int = Field(..., description="Pieces moved")
    size_split: Dict[str, int] = Field(default_factory=dict, description="Proportional per-size view of the move")


class FabricUsageIn(BaseModel):
    fabric_id: UUID = Field(..., description="Fabric consumed")
    used_quantity: float = Field(..., description="Quantity consumed, in the fabric's unit")
    unit: Optional[str] = Field(None, description="Defaults to the fabric's uom")
    notes: Optional[str] = Field(None)


class CuttingUpdateRequest(BaseModel):
    additional_cuts: Dict[str, int] = Field(..., description="Newly cut pieces per size")
    cutting_assignment_id: Optional[UUID] = Field(None)
    fabric_usage: Optional[FabricUsageIn] = Field(None)


class CuttingProgressRead(BaseModel):
    order_id: UUID
    cut_quantity: int = Field(0)
    cut_quantities_by_size: Dict[str, int] = Field(default_factory=dict)
    applied: Dict[str, int] = Field(default_factory=dict, description="Pieces accepted from this update")

    class Config:
        from_attributes = True


class PickRequest(BaseModel):
    size_picks: Dict[str, int] = Field(..., description="Newly picked pieces per size")


class PickerSizeRow(BaseModel):
    size_name: str
    assigned: int = 0
    picked: int = 0
    rejected: int = 0
    remaining: int = 0


class PickerRow(BaseModel):
    """One batch assignment as shown on the picker screen."""
    assignment_id: UUID
    order_id: UUID
    order_number: Optional[str] = None
    customer_name: Optional[str] = None
    batch_id: UUID
    batch_name: Optional[str] = None
    total_quantity: int = 0
    total_picked: int = 0
    total_remaining: int = 0
    sizes: List[PickerSizeRow] = Field(default_factory=list)


class SizeProductionStatus(BaseModel):
    size_name: str
    ordered: int = 0
    cut: int = 0
    assigned_to_batches: int = 0
    picked: int = 0
    approved: int = 0
    rejected: int = 0


class OrderProductionStatus(BaseModel):
    """Per-size progress of an order through cutting, stitching and QC."""
    order_id: UUID
    order_number: str
    status: str
    sizes: List[SizeProductionStatus] = Field(default_factory=list)
    cutting_assignments: List[CuttingAssignmentRead] = Field(default_factory=list)
