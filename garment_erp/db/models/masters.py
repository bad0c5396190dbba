from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from garment_erp.db.base import Base, JSONType, Measure, Money, TimestampMixin, UUIDPkMixin


class SizeType(UUIDPkMixin, TimestampMixin, Base):
    """Size chart: the sizes offered and their display order."""
    __tablename__ = "size_types"

    size_name: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    available_sizes: Mapped[list[Any]] = mapped_column(JSONType, nullable=False, default=list)
    size_order: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)


class ProductCategory(UUIDPkMixin, TimestampMixin, Base):
    __tablename__ = "product_categories"

    category_name: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category_image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class Fabric(UUIDPkMixin, TimestampMixin, Base):
    """Fabric master; `inventory` is the stock on hand in `uom`."""
    __tablename__ = "fabrics"

    fabric_code: Mapped[Optional[str]] = mapped_column(Text, nullable=True, unique=True)
    fabric_name: Mapped[str] = mapped_column(Text, nullable=False)
    color: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    gsm: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    uom: Mapped[str] = mapped_column(Text, nullable=False, default="meters", server_default="meters")
    rate: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    inventory: Mapped[float] = mapped_column(Measure, nullable=False, default=0, server_default="0")
    image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class Supplier(UUIDPkMixin, TimestampMixin, Base):
    """Supplier/vendor master."""
    __tablename__ = "suppliers"

    supplier_code: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    supplier_name: Mapped[str] = mapped_column(Text, nullable=False)
    contact_person: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    email: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    gstin: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
