from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

ApprovalStatus = Literal["pending_approval", "approved", "rejected"]

MIN_PASSWORD_LENGTH = 6


class TokenPair(BaseModel):
    """Bearer tokens issued on login and refresh."""
    token_type: str = Field("bearer")
    access_token: str = Field(..., description="Short-lived token sent as Authorization: Bearer")
    refresh_token: str = Field(..., description="Exchanged at /auth/refresh for a new pair")


class RefreshRequest(BaseModel):
    refresh_token: str


class StaffProfile(BaseModel):
    """Contact details shown on the staff directory and approval screen."""
    full_name: Optional[str] = Field(None, max_length=200)
    phone: Optional[str] = Field(None, max_length=32)
    department: Optional[str] = Field(None, description="e.g. Cutting, Stitching, Dispatch")


class RegisterRequest(StaffProfile):
    """Self sign-up. The account stays in pending_approval until an admin grants a role."""
    email: EmailStr
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)


class UserRead(StaffProfile):
    id: UUID
    email: EmailStr
    avatar_url: Optional[str] = None
    status: ApprovalStatus
    is_active: bool
    is_superadmin: bool
    created_at: datetime
    updated_at: datetime
    roles: List[str] = Field(default_factory=list, description="Granted role names, e.g. sales, qc")

    class Config:
        from_attributes = True


class UserCreate(StaffProfile):
    """Account created by an admin; it skips the approval queue."""
    email: EmailStr
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)
    roles: List[str] = Field(default_factory=list)
    is_active: Optional[bool] = True
    is_superadmin: Optional[bool] = False


class UserUpdate(StaffProfile):
    """Partial update; omitted fields are left unchanged."""
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=MIN_PASSWORD_LENGTH)
    is_active: Optional[bool] = None
    is_superadmin: Optional[bool] = None


class ApproveRequest(BaseModel):
    """Role granted when a pending account is approved."""
    role: str = Field(..., min_length=1)


class RoleRead(BaseModel):
    id: UUID
    name: str
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class RoleCreate(BaseModel):
    name: str = Field(..., min_length=1, description="Stored lower-cased")
    description: Optional[str] = None


class RoleUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
