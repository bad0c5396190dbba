from __future__ import annotations

from typing import Optional

from sqlalchemy import Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from garment_erp.db.base import Base, TimestampMixin, UUIDPkMixin


class Tutorial(UUIDPkMixin, TimestampMixin, Base):
    """How-to entry shown in the in-app tutorials section."""
    __tablename__ = "tutorials"

    section: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    option_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    written_steps: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    video_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    video_path: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
