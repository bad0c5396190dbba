"""
ORM models for the ERP domain: security and navigation, people, masters,
sales, production, quality, inventory, procurement, accounts, dispatch and
tutorials.

Importing this package ensures model classes are registered with the Base
metadata for Alembic and runtime usage.
"""

from .security import Role, User, UserRole  # noqa: F401
from .navigation import (  # noqa: F401
    RoleSidebarPermission,
    SidebarItem,
    UserSidebarPermission,
)
from .people import Department, Designation, Employee, Tailor  # noqa: F401
from .masters import Fabric, ProductCategory, SizeType, Supplier  # noqa: F401
from .sales import Customer, Order, OrderItem  # noqa: F401
from .production import (  # noqa: F401
    Batch,
    CuttingProgress,
    FabricUsageRecord,
    OrderBatchAssignment,
    OrderBatchSizeDistribution,
    OrderCuttingAssignment,
)
from .quality import QcReview  # noqa: F401
from .inventory import (  # noqa: F401
    AdjustmentReason,
    InventoryAdjustment,
    InventoryAdjustmentItem,
    InventoryItem,
    InventoryLog,
)
from .procurement import (  # noqa: F401
    GoodsReceiptNote,
    GrnItem,
    PurchaseOrder,
    PurchaseOrderItem,
)
from .accounts import Invoice, InvoiceItem  # noqa: F401
from .dispatch import DispatchOrder, DispatchOrderItem  # noqa: F401
from .content import Tutorial  # noqa: F401
