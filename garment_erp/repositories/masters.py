from __future__ import annotations

from garment_erp.db.models.masters import Fabric, ProductCategory, SizeType, Supplier
from .base import CrudRepository


class SizeTypeRepository(CrudRepository[SizeType]):
    model = SizeType
    search_columns = ("size_name",)
    order_by = ("size_name",)


class ProductCategoryRepository(CrudRepository[ProductCategory]):
    model = ProductCategory
    search_columns = ("category_name", "description")
    order_by = ("category_name",)


class FabricRepository(CrudRepository[Fabric]):
    model = Fabric
    search_columns = ("fabric_name", "fabric_code", "color")
    order_by = ("fabric_name",)


class SupplierRepository(CrudRepository[Supplier]):
    model = Supplier
    search_columns = ("supplier_name", "supplier_code", "contact_person", "phone")
    order_by = ("supplier_name",)
