from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class SizeTypeRead(BaseModel):
    """Size chart (e.g. 'Standard', 'Numeric', 'Kids')."""
    id: UUID = Field(..., description="Size type ID")
    size_name: str = Field(..., description="Size chart name")
    available_sizes: List[str] = Field(default_factory=list, description="Sizes in display order")
    size_order: Dict[str, int] = Field(default_factory=dict, description="Size -> 1-based position")
    created_at: datetime = Field(..., description="Created at")
    updated_at: datetime = Field(..., description="Updated at")

    class Config:
        from_attributes = True


class SizeTypeCreate(BaseModel):
    size_name: str = Field(..., min_length=1)
    available_sizes: List[str] = Field(..., min_length=1, description="Sizes in display order")
    size_order: Optional[Dict[str, int]] = Field(None, description="Derived from available_sizes when omitted")


class SizeTypeUpdate(BaseModel):
    size_name: Optional[str] = Field(None)
    available_sizes: Optional[List[str]] = Field(None)
    size_order: Optional[Dict[str, int]] = Field(None)


class ProductCategoryRead(BaseModel):
    id: UUID = Field(..., description="Category ID")
    category_name: str = Field(..., description="Category name")
    description: Optional[str] = Field(None)
    category_image_url: Optional[str] = Field(None)
    created_at: datetime = Field(..., description="Created at")
    updated_at: datetime = Field(..., description="Updated at")

    class Config:
        from_attributes = True


class ProductCategoryCreate(BaseModel):
    category_name: str = Field(..., min_length=1)
    description: Optional[str] = Field(None)


class ProductCategoryUpdate(BaseModel):
    category_name: Optional[str] = Field(None)
    description: Optional[str] = Field(None)


class FabricRead(BaseModel):
    """Fabric master with current stock."""
    id: UUID = Field(..., description="Fabric ID")
    fabric_code: Optional[str] = Field(None)
    fabric_name: str = Field(..., description="Fabric name")
    color: Optional[str] = Field(None)
    gsm: Optional[int] = Field(None)
    uom: str = Field("meters")
    rate: Optional[float] = Field(None)
    inventory: float = Field(0, description="Quantity in stock, in uom")
    image_url: Optional[str] = Field(None)
    created_at: datetime = Field(..., description="Created at")
    updated_at: datetime = Field(..., description="Updated at")

    class Config:
        from_attributes = True


class FabricCreate(BaseModel):
    fabric_code: Optional[str] = Field(None)
    fabric_name: str = Field(..., min_length=1)
    color: Optional[str] = Field(None)
    gsm: Optional[int] = Field(None, ge=0)
    uom: str = Field("meters")
    rate: Optional[float] = Field(None, ge=0)
    inventory: float = Field(0, ge=0)


class FabricUpdate(BaseModel):
    fabric_code: Optional[str] = Field(None)
    fabric_name: Optional[str] = Field(None)
    color: Optional[str] = Field(None)
    gsm: Optional[int] = Field(None, ge=0)
    uom: Optional[str] = Field(None)
    rate: Optional[float] = Field(None, ge=0)
    inventory: Optional[float] = Field(None, ge=0)


class SupplierRead(BaseModel):
    id: UUID = Field(..., description="Supplier ID")
    supplier_code: str = Field(..., description="Supplier code")
    supplier_name: str = Field(..., description="Supplier name")
    contact_person: Optional[str] = Field(None)
    phone: Optional[str] = Field(None)
    email: Optional[str] = Field(None)
    address: Optional[str] = Field(None)
    gstin: Optional[str] = Field(None)
    created_at: datetime = Field(..., description="Created at")
    updated_at: datetime = Field(..., description="Updated at")

    class Config:
        from_attributes = True


class SupplierCreate(BaseModel):
    supplier_code: str = Field(..., min_length=1)
    supplier_name: str = Field(..., min_length=1)
    contact_person: Optional[str] = Field(None)
    phone: Optional[str] = Field(None)
    email: Optional[str] = Field(None)
    address: Optional[str] = Field(None)
    gstin: Optional[str] = Field(None)


class SupplierUpdate(BaseModel):
    supplier_code: Optional[str] = Field(None)
    supplier_name: Optional[str] = Field(None)
    contact_person: Optional[str] = Field(None)
    phone: Optional[str] = Field(None)
    email: Optional[str] = Field(None)
    address: Optional[str] = Field(None)
    gstin: Optional[str] = Field(None)
