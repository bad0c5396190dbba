from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class TutorialRead(BaseModel):
    id: UUID
    section: str = Field(..., description="Help section, e.g. 'Orders'")
    title: str
    description: Optional[str] = None
    option_name: Optional[str] = None
    written_steps: Optional[str] = None
    video_url: Optional[str] = None
    video_path: Optional[str] = None
    order_index: int = 0
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TutorialCreate(BaseModel):
    section: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: Optional[str] = Field(None)
    option_name: Optional[str] = Field(None)
    written_steps: Optional[str] = Field(None)
    video_url: Optional[str] = Field(None, description="External video link")


class TutorialUpdate(BaseModel):
    section: Optional[str] = Field(None)
    title: Optional[str] = Field(None)
    description: Optional[str] = Field(None)
    option_name: Optional[str] = Field(None)
    written_steps: Optional[str] = Field(None)
    video_url: Optional[str] = Field(None)
    order_index: Optional[int] = Field(None, ge=0)
