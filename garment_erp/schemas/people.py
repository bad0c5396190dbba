from __future__ import annotations

from datetime import date, datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

TailorType = Literal["single_needle", "overlock_flatlock"]


class DepartmentRead(BaseModel):
    id: UUID = Field(..., description="Department ID")
    name: str = Field(..., description="Department name")
    description: Optional[str] = Field(None)
    head_name: Optional[str] = Field(None)
    created_at: datetime = Field(..., description="Created at")
    updated_at: datetime = Field(..., description="Updated at")

    class Config:
        from_attributes = True


class DepartmentCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = Field(None)
    head_name: Optional[str] = Field(None)


class DepartmentUpdate(BaseModel):
    name: Optional[str] = Field(None)
    description: Optional[str] = Field(None)
    head_name: Optional[str] = Field(None)


class DesignationRead(BaseModel):
    id: UUID = Field(..., description="Designation ID")
    name: str = Field(..., description="Designation name")
    description: Optional[str] = Field(None)
    department_id: Optional[UUID] = Field(None)
    is_active: bool = Field(True)
    created_at: datetime = Field(..., description="Created at")
    updated_at: datetime = Field(..., description="Updated at")

    class Config:
        from_attributes = True


class DesignationCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = Field(None)
    department_id: Optional[UUID] = Field(None)
    is_active: bool = Field(True)


class DesignationUpdate(BaseModel):
    name: Optional[str] = Field(None)
    description: Optional[str] = Field(None)
    department_id: Optional[UUID] = Field(None)
    is_active: Optional[bool] = Field(None)


class EmployeeRead(BaseModel):
    """Employee read model."""
    id: UUID = Field(..., description="Employee ID")
    employee_code: str = Field(..., description="Employee code")
    full_name: str = Field(..., description="Full name")
    designation: Optional[str] = Field(None)
    department_id: Optional[UUID] = Field(None)
    personal_phone: Optional[str] = Field(None)
    personal_email: Optional[str] = Field(None)
    address: Optional[str] = Field(None)
    joining_date: Optional[date] = Field(None)
    avatar_url: Optional[str] = Field(None)
    is_active: bool = Field(True)
    created_at: datetime = Field(..., description="Created at")
    updated_at: datetime = Field(..., description="Updated at")

    class Config:
        from_attributes = True


class EmployeeCreate(BaseModel):
    employee_code: str = Field(..., min_length=1, description="Unique employee code")
    full_name: str = Field(..., min_length=1)
    designation: Optional[str] = Field(None, description="Designation name, e.g. 'Cutting Master'")
    department_id: Optional[UUID] = Field(None)
    personal_phone: Optional[str] = Field(None)
    personal_email: Optional[str] = Field(None)
    address: Optional[str] = Field(None)
    joining_date: Optional[date] = Field(None)
    is_active: bool = Field(True)


class EmployeeUpdate(BaseModel):
    employee_code: Optional[str] = Field(None)
    full_name: Optional[str] = Field(None)
    designation: Optional[str] = Field(None)
    department_id: Optional[UUID] = Field(None)
    personal_phone: Optional[str] = Field(None)
    personal_email: Optional[str] = Field(None)
    address: Optional[str] = Field(None)
    joining_date: Optional[date] = Field(None)
    is_active: Optional[bool] = Field(None)


class TailorRead(BaseModel):
    id: UUID = Field(..., description="Tailor ID")
    tailor_code: Optional[str] = Field(None)
    full_name: str = Field(..., description="Full name")
    tailor_type: str = Field(..., description="single_needle or overlock_flatlock")
    batch_id: Optional[UUID] = Field(None, description="Batch the tailor works in")
    is_batch_leader: bool = Field(False)
    personal_phone: Optional[str] = Field(None)
    avatar_url: Optional[str] = Field(None)
    status: str = Field("active")
    created_at: datetime = Field(..., description="Created at")
    updated_at: datetime = Field(..., description="Updated at")

    class Config:
        from_attributes = True


class TailorCreate(BaseModel):
    tailor_code: Optional[str] = Field(None)
    full_name: str = Field(..., min_length=1)
    tailor_type: TailorType = Field("single_needle")
    batch_id: Optional[UUID] = Field(None)
    is_batch_leader: bool = Field(False)
    personal_phone: Optional[str] = Field(None)
    status: str = Field("active")


class TailorUpdate(BaseModel):
    tailor_code: Optional[str] = Field(None)
    full_name: Optional[str] = Field(None)
    tailor_type: Optional[TailorType] = Field(None)
    batch_id: Optional[UUID] = Field(None)
    is_batch_leader: Optional[bool] = Field(None)
    personal_phone: Optional[str] = Field(None)
    status: Optional[str] = Field(None)
