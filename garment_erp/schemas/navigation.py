from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class SidebarItemRead(BaseModel):
    id: UUID = Field(..., description="Item ID")
    title: str = Field(..., description="Menu title")
    url: Optional[str] = Field(None, description="Client route")
    icon: Optional[str] = Field(None, description="Icon name")
    parent_id: Optional[UUID] = Field(None, description="Parent item")
    sort_order: int = Field(0)
    is_active: bool = Field(True)
    created_at: datetime = Field(..., description="Created at")
    updated_at: datetime = Field(..., description="Updated at")

    class Config:
        from_attributes = True


class SidebarItemCreate(BaseModel):
    title: str = Field(..., min_length=1)
    url: Optional[str] = Field(None)
    icon: Optional[str] = Field(None)
    parent_id: Optional[UUID] = Field(None)
    sort_order: int = Field(0)
    is_active: bool = Field(True)


class SidebarItemUpdate(BaseModel):
    title: Optional[str] = Field(None)
    url: Optional[str] = Field(None)
    icon: Optional[str] = Field(None)
    parent_id: Optional[UUID] = Field(None)
    sort_order: Optional[int] = Field(None)
    is_active: Optional[bool] = Field(None)


class SidebarPermissionEntry(BaseModel):
    """Permission on one sidebar item."""
    sidebar_item_id: UUID = Field(..., description="Sidebar item")
    can_view: bool = Field(True)
    can_edit: bool = Field(False)

    class Config:
        from_attributes = True


class UserSidebarPermissionEntry(SidebarPermissionEntry):
    is_override: bool = Field(True, description="When any row is an override, role permissions are ignored")


class RolePermissionsUpdate(BaseModel):
    permissions: List[SidebarPermissionEntry] = Field(default_factory=list)


class UserPermissionsUpdate(BaseModel):
    permissions: List[UserSidebarPermissionEntry] = Field(default_factory=list)


class SidebarNodeRead(BaseModel):
    """Node of the effective sidebar tree."""
    id: UUID
    title: str
    url: Optional[str] = None
    icon: Optional[str] = None
    sort_order: int = 0
    can_view: bool = True
    can_edit: bool = False
    children: List["SidebarNodeRead"] = Field(default_factory=list)

    class Config:
        from_attributes = True


SidebarNodeRead.model_rebuild()
