"""Initial garment ERP schema.

- security: users, roles, user_roles
- navigation: sidebar_items and role/user sidebar permissions
- people: departments, designations, employees, tailors
- masters: size_types, product_categories, fabrics, suppliers
- sales: customers, orders, order_items
- production: batches, batch assignments and size distributions, cutting
  assignments, cutting progress, fabric usage
- quality: qc_reviews
- inventory: items, adjustment reasons, adjustments, logs
- procurement: purchase orders and goods receipts
- accounts: invoices
- dispatch: dispatch orders
- tutorials
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "4c1d2e7a9b10"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSON = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")
MONEY = sa.Numeric(14, 2)
MEASURE = sa.Numeric(14, 3)


def _id() -> sa.Column:
    return sa.Column("id", sa.Uuid(), primary_key=True)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
    ]


def _money(name: str, default: str = "0") -> sa.Column:
    return sa.Column(name, MONEY, server_default=default, nullable=False)


def upgrade() -> None:
    # Security
    op.create_table(
        "users",
        _id(),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("full_name", sa.Text(), nullable=True),
        sa.Column("phone", sa.Text(), nullable=True),
        sa.Column("department", sa.Text(), nullable=True),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        sa.Column("hashed_password", sa.Text(), nullable=False),
        sa.Column("status", sa.Text(), server_default="pending_approval", nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("is_superadmin", sa.Boolean(), server_default=sa.false(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )
    op.create_table(
        "roles",
        _id(),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("name", name="uq_roles_name"),
    )
    op.create_table(
        "user_roles",
        _id(),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("role_id", sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["role_id"], ["roles.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("user_id", "role_id", name="uq_user_roles_user_role"),
    )

    # Navigation
    op.create_table(
        "sidebar_items",
        _id(),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("url", sa.Text(), nullable=True),
        sa.Column("icon", sa.Text(), nullable=True),
        sa.Column("parent_id", sa.Uuid(), nullable=True),
        sa.Column("sort_order", sa.Integer(), server_default="0", nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["parent_id"], ["sidebar_items.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_sidebar_items_parent_id", "sidebar_items", ["parent_id"])
    op.create_table(
        "role_sidebar_permissions",
        _id(),
        sa.Column("role_id", sa.Uuid(), nullable=False),
        sa.Column("sidebar_item_id", sa.Uuid(), nullable=False),
        sa.Column("can_view", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("can_edit", sa.Boolean(), server_default=sa.false(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["role_id"], ["roles.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["sidebar_item_id"], ["sidebar_items.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("role_id", "sidebar_item_id", name="uq_role_sidebar_permissions_role_item"),
    )
    op.create_table(
        "user_sidebar_permissions",
        _id(),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("sidebar_item_id", sa.Uuid(), nullable=False),
        sa.Column("can_view", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("can_edit", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("is_override", sa.Boolean(), server_default=sa.true(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["sidebar_item_id"], ["sidebar_items.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("user_id", "sidebar_item_id", name="uq_user_sidebar_permissions_user_item"),
    )

    # People
    op.create_table(
        "departments",
        _id(),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("head_name", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("name", name="uq_departments_name"),
    )
    op.create_table(
        "designations",
        _id(),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("department_id", sa.Uuid(), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["department_id"], ["departments.id"], ondelete="SET NULL"),
        sa.UniqueConstraint("name", name="uq_designations_name"),
    )
    op.create_table(
        "employees",
        _id(),
        sa.Column("employee_code", sa.Text(), nullable=False),
        sa.Column("full_name", sa.Text(), nullable=False),
        sa.Column("designation", sa.Text(), nullable=True),
        sa.Column("department_id", sa.Uuid(), nullable=True),
        sa.Column("personal_phone", sa.Text(), nullable=True),
        sa.Column("personal_email", sa.Text(), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("joining_date", sa.Date(), nullable=True),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["department_id"], ["departments.id"], ondelete="SET NULL"),
        sa.UniqueConstraint("employee_code", name="uq_employees_employee_code"),
    )
    op.create_table(
        "batches",
        _id(),
        sa.Column("batch_name", sa.Text(), nullable=False),
        sa.Column("batch_code", sa.Text(), nullable=False),
        sa.Column("tailor_type", sa.Text(), server_default="single_needle", nullable=False),
        sa.Column("max_capacity", sa.Integer(), server_default="0", nullable=False),
        sa.Column("current_capacity", sa.Integer(), server_default="0", nullable=False),
        sa.Column("status", sa.Text(), server_default="active", nullable=False),
        sa.Column("batch_leader_name", sa.Text(), nullable=True),
        sa.Column("location", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("batch_code", name="uq_batches_batch_code"),
    )
    op.create_table(
        "tailors",
        _id(),
        sa.Column("tailor_code", sa.Text(), nullable=True),
        sa.Column("full_name", sa.Text(), nullable=False),
        sa.Column("tailor_type", sa.Text(), server_default="single_needle", nullable=False),
        sa.Column("batch_id", sa.Uuid(), nullable=True),
        sa.Column("is_batch_leader", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("personal_phone", sa.Text(), nullable=True),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        sa.Column("status", sa.Text(), server_default="active", nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["batch_id"], ["batches.id"], ondelete="SET NULL"),
        sa.UniqueConstraint("tailor_code", name="uq_tailors_tailor_code"),
    )
    op.create_index("ix_tailors_batch_id", "tailors", ["batch_id"])

    # Masters
    op.create_table(
        "size_types",
        _id(),
        sa.Column("size_name", sa.Text(), nullable=False),
        sa.Column("available_sizes", JSON, nullable=False),
        sa.Column("size_order", JSON, nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("size_name", name="uq_size_types_size_name"),
    )
    op.create_table(
        "product_categories",
        _id(),
        sa.Column("category_name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category_image_url", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("category_name", name="uq_product_categories_category_name"),
    )
    op.create_table(
        "fabrics",
        _id(),
        sa.Column("fabric_code", sa.Text(), nullable=True),
        sa.Column("fabric_name", sa.Text(), nullable=False),
        sa.Column("color", sa.Text(), nullable=True),
        sa.Column("gsm", sa.Integer(), nullable=True),
        sa.Column("uom", sa.Text(), server_default="meters", nullable=False),
        sa.Column("rate", MONEY, nullable=True),
        sa.Column("inventory", MEASURE, server_default="0", nullable=False),
        sa.Column("image_url", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("fabric_code", name="uq_fabrics_fabric_code"),
    )
    op.create_table(
        "suppliers",
        _id(),
        sa.Column("supplier_code", sa.Text(), nullable=False),
        sa.Column("supplier_name", sa.Text(), nullable=False),
        sa.Column("contact_person", sa.Text(), nullable=True),
        sa.Column("phone", sa.Text(), nullable=True),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("gstin", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("supplier_code", name="uq_suppliers_supplier_code"),
    )

    # Sales
    op.create_table(
        "customers",
        _id(),
        sa.Column("company_name", sa.Text(), nullable=False),
        sa.Column("contact_person", sa.Text(), nullable=True),
        sa.Column("phone", sa.Text(), nullable=True),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("city", sa.Text(), nullable=True),
        sa.Column("state", sa.Text(), nullable=True),
        sa.Column("pincode", sa.Text(), nullable=True),
        sa.Column("gstin", sa.Text(), nullable=True),
        sa.Column("pan", sa.Text(), nullable=True),
        sa.Column("customer_type", sa.Text(), server_default="Retail", nullable=False),
        sa.Column("customer_tier", sa.Text(), server_default="bronze", nullable=False),
        _money("credit_limit"),
        _money("outstanding_amount"),
        *_timestamps(),
    )
    op.create_index("ix_customers_company_name", "customers", ["company_name"])
    op.create_table(
        "orders",
        _id(),
        sa.Column("order_number", sa.Text(), nullable=False),
        sa.Column("customer_id", sa.Uuid(), nullable=False),
        sa.Column("order_date", sa.Date(), nullable=False),
        sa.Column("expected_delivery_date", sa.Date(), nullable=True),
        sa.Column("status", sa.Text(), server_default="pending", nullable=False),
        sa.Column("sales_manager", sa.Text(), nullable=True),
        _money("gst_rate", "18"),
        _money("total_amount"),
        _money("tax_amount"),
        _money("final_amount"),
        _money("advance_amount"),
        _money("balance_amount"),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["customer_id"], ["customers.id"], ondelete="RESTRICT"),
        sa.UniqueConstraint("order_number", name="uq_orders_order_number"),
    )
    op.create_index("ix_orders_customer_id", "orders", ["customer_id"])
    op.create_table(
        "order_items",
        _id(),
        sa.Column("order_id", sa.Uuid(), nullable=False),
        sa.Column("product_category_id", sa.Uuid(), nullable=True),
        sa.Column("product_description", sa.Text(), nullable=False),
        sa.Column("fabric_id", sa.Uuid(), nullable=True),
        sa.Column("color", sa.Text(), nullable=True),
        sa.Column("gsm", sa.Integer(), nullable=True),
        sa.Column("size_type_id", sa.Uuid(), nullable=True),
        sa.Column("sizes_quantities", JSON, nullable=False),
        sa.Column("size_prices", JSON, nullable=True),
        sa.Column("quantity", sa.Integer(), server_default="0", nullable=False),
        _money("unit_price"),
        _money("total_price"),
        sa.Column("gst_rate", MONEY, nullable=True),
        sa.Column("remarks", sa.Text(), nullable=True),
        sa.Column("image_urls", JSON, nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["order_id"], ["orders.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["product_category_id"], ["product_categories.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["fabric_id"], ["fabrics.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["size_type_id"], ["size_types.id"], ondelete="SET NULL"),
    )
    op.create_index("ix_order_items_order_id", "order_items", ["order_id"])

    # Production
    op.create_table(
        "order_batch_assignments",
        _id(),
        sa.Column("order_id", sa.Uuid(), nullable=False),
        sa.Column("batch_id", sa.Uuid(), nullable=False),
        sa.Column("assignment_date", sa.Date(), nullable=False),
        sa.Column("assigned_by_name", sa.Text(), nullable=True),
        sa.Column("total_quantity", sa.Integer(), server_default="0", nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["order_id"], ["orders.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["batch_id"], ["batches.id"], ondelete="RESTRICT"),
    )
    op.create_index("ix_order_batch_assignments_order_id", "order_batch_assignments", ["order_id"])
    op.create_index("ix_order_batch_assignments_batch_id", "order_batch_assignments", ["batch_id"])
    op.create_table(
        "order_batch_size_distributions",
        _id(),
        sa.Column("order_batch_assignment_id", sa.Uuid(), nullable=False),
        sa.Column("size_name", sa.Text(), nullable=False),
        sa.Column("quantity", sa.Integer(), server_default="0", nullable=False),
        sa.Column("picked_quantity", sa.Integer(), server_default="0", nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["order_batch_assignment_id"], ["order_batch_assignments.id"], ondelete="CASCADE"),
        sa.UniqueConstraint(
            "order_batch_assignment_id", "size_name", name="uq_order_batch_size_distributions_assignment_size"
        ),
    )
    op.create_index(
        "ix_order_batch_size_distributions_order_batch_assignment_id",
        "order_batch_size_distributions",
        ["order_batch_assignment_id"],
    )
    op.create_table(
        "order_cutting_assignments",
        _id(),
        sa.Column("order_id", sa.Uuid(), nullable=False),
        sa.Column("cutting_master_id", sa.Uuid(), nullable=False),
        sa.Column("cutting_master_name", sa.Text(), nullable=True),
        sa.Column("assigned_quantity", sa.Integer(), nullable=True),
        sa.Column("completed_quantity", sa.Integer(), server_default="0", nullable=False),
        sa.Column("cut_quantities_by_size", JSON, nullable=False),
        sa.Column("status", sa.Text(), server_default="assigned", nullable=False),
        sa.Column("assigned_date", sa.Date(), nullable=False),
        sa.Column("assigned_by_name", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["order_id"], ["orders.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["cutting_master_id"], ["employees.id"], ondelete="RESTRICT"),
    )
    op.create_index("ix_order_cutting_assignments_order_id", "order_cutting_assignments", ["order_id"])
    op.create_index(
        "ix_order_cutting_assignments_cutting_master_id", "order_cutting_assignments", ["cutting_master_id"]
    )
    op.create_table(
        "cutting_progress",
        _id(),
        sa.Column("order_id", sa.Uuid(), nullable=False),
        sa.Column("cut_quantity", sa.Integer(), server_default="0", nullable=False),
        sa.Column("cut_quantities_by_size", JSON, nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["order_id"], ["orders.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("order_id", name="uq_cutting_progress_order_id"),
    )
    op.create_table(
        "fabric_usage_records",
        _id(),
        sa.Column("order_id", sa.Uuid(), nullable=False),
        sa.Column("fabric_id", sa.Uuid(), nullable=False),
        sa.Column("used_quantity", MEASURE, nullable=False),
        sa.Column("unit", sa.Text(), server_default="meters", nullable=False),
        sa.Column("cutting_quantity", sa.Integer(), server_default="0", nullable=False),
        sa.Column("used_by_name", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["order_id"], ["orders.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["fabric_id"], ["fabrics.id"], ondelete="RESTRICT"),
    )
    op.create_index("ix_fabric_usage_records_order_id", "fabric_usage_records", ["order_id"])

    # Quality
    op.create_table(
        "qc_reviews",
        _id(),
        sa.Column("order_batch_assignment_id", sa.Uuid(), nullable=False),
        sa.Column("size_name", sa.Text(), nullable=False),
        sa.Column("picked_quantity", sa.Integer(), server_default="0", nullable=False),
        sa.Column("approved_quantity", sa.Integer(), server_default="0", nullable=False),
        sa.Column("rejected_quantity", sa.Integer(), server_default="0", nullable=False),
        sa.Column("remarks", sa.Text(), nullable=True),
        sa.Column("reviewed_by_name", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["order_batch_assignment_id"], ["order_batch_assignments.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("order_batch_assignment_id", "size_name", name="uq_qc_reviews_assignment_size"),
    )
    op.create_index("ix_qc_reviews_order_batch_assignment_id", "qc_reviews", ["order_batch_assignment_id"])

    # Inventory
    op.create_table(
        "inventory_items",
        _id(),
        sa.Column("sku", sa.Text(), nullable=False),
        sa.Column("item_name", sa.Text(), nullable=False),
        sa.Column("category", sa.Text(), nullable=True),
        sa.Column("product_class", sa.Text(), nullable=True),
        sa.Column("color", sa.Text(), nullable=True),
        sa.Column("size", sa.Text(), nullable=True),
        sa.Column("brand", sa.Text(), nullable=True),
        sa.Column("uom", sa.Text(), server_default="pcs", nullable=False),
        sa.Column("unit_price", MONEY, nullable=True),
        sa.Column("current_stock", MEASURE, server_default="0", nullable=False),
        sa.Column("image_url", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("sku", name="uq_inventory_items_sku"),
    )
    op.create_table(
        "inventory_adjustment_reasons",
        _id(),
        sa.Column("reason_name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("reason_name", name="uq_inventory_adjustment_reasons_reason_name"),
    )
    op.create_table(
        "inventory_adjustments",
        _id(),
        sa.Column("adjustment_type", sa.Text(), nullable=False),
        sa.Column("reason_id", sa.Uuid(), nullable=True),
        sa.Column("custom_reason", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("adjusted_by_user_id", sa.Uuid(), nullable=True),
        sa.Column("adjustment_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.Text(), server_default="COMPLETED", nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["reason_id"], ["inventory_adjustment_reasons.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["adjusted_by_user_id"], ["users.id"], ondelete="SET NULL"),
    )
    op.create_table(
        "inventory_adjustment_items",
        _id(),
        sa.Column("adjustment_id", sa.Uuid(), nullable=False),
        sa.Column("item_id", sa.Uuid(), nullable=False),
        sa.Column("sku", sa.Text(), nullable=False),
        sa.Column("item_name", sa.Text(), nullable=False),
        sa.Column("quantity_before", MEASURE, nullable=False),
        sa.Column("adjustment_quantity", MEASURE, nullable=False),
        sa.Column("quantity_after", MEASURE, nullable=False),
        sa.Column("replace_quantity", MEASURE, nullable=True),
        sa.Column("unit", sa.Text(), server_default="pcs", nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["adjustment_id"], ["inventory_adjustments.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["item_id"], ["inventory_items.id"], ondelete="RESTRICT"),
    )
    op.create_index("ix_inventory_adjustment_items_adjustment_id", "inventory_adjustment_items", ["adjustment_id"])
    op.create_table(
        "inventory_logs",
        _id(),
        sa.Column("item_type", sa.Text(), nullable=False),
        sa.Column("item_id", sa.Uuid(), nullable=True),
        sa.Column("item_name", sa.Text(), nullable=False),
        sa.Column("item_code", sa.Text(), nullable=True),
        sa.Column("quantity", MEASURE, nullable=False),
        sa.Column("old_quantity", MEASURE, nullable=True),
        sa.Column("new_quantity", MEASURE, nullable=True),
        sa.Column("unit", sa.Text(), nullable=True),
        sa.Column("action", sa.Text(), nullable=False),
        sa.Column("reference_type", sa.Text(), nullable=True),
        sa.Column("reference_id", sa.Uuid(), nullable=True),
        sa.Column("reference_number", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_inventory_logs_item_id", "inventory_logs", ["item_id"])

    # Procurement
    op.create_table(
        "purchase_orders",
        _id(),
        sa.Column("po_number", sa.Text(), nullable=False),
        sa.Column("supplier_id", sa.Uuid(), nullable=False),
        sa.Column("order_date", sa.Date(), nullable=False),
        sa.Column("expected_date", sa.Date(), nullable=True),
        sa.Column("status", sa.Text(), server_default="draft", nullable=False),
        _money("subtotal"),
        _money("tax_amount"),
        _money("total_amount"),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["supplier_id"], ["suppliers.id"], ondelete="RESTRICT"),
        sa.UniqueConstraint("po_number", name="uq_purchase_orders_po_number"),
    )
    op.create_table(
        "purchase_order_items",
        _id(),
        sa.Column("purchase_order_id", sa.Uuid(), nullable=False),
        sa.Column("item_type", sa.Text(), nullable=False),
        sa.Column("item_id", sa.Uuid(), nullable=True),
        sa.Column("item_name", sa.Text(), nullable=False),
        sa.Column("quantity", MEASURE, nullable=False),
        sa.Column("unit", sa.Text(), nullable=True),
        _money("unit_price"),
        _money("gst_rate"),
        _money("total_price"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["purchase_order_id"], ["purchase_orders.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_purchase_order_items_purchase_order_id", "purchase_order_items", ["purchase_order_id"])
    op.create_table(
        "goods_receipt_notes",
        _id(),
        sa.Column("grn_number", sa.Text(), nullable=False),
        sa.Column("purchase_order_id", sa.Uuid(), nullable=True),
        sa.Column("supplier_id", sa.Uuid(), nullable=True),
        sa.Column("received_date", sa.Date(), nullable=False),
        sa.Column("status", sa.Text(), server_default="draft", nullable=False),
        sa.Column("received_by_name", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["purchase_order_id"], ["purchase_orders.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["supplier_id"], ["suppliers.id"], ondelete="SET NULL"),
        sa.UniqueConstraint("grn_number", name="uq_goods_receipt_notes_grn_number"),
    )
    op.create_index("ix_goods_receipt_notes_purchase_order_id", "goods_receipt_notes", ["purchase_order_id"])
    op.create_table(
        "grn_items",
        _id(),
        sa.Column("grn_id", sa.Uuid(), nullable=False),
        sa.Column("po_item_id", sa.Uuid(), nullable=True),
        sa.Column("item_type", sa.Text(), nullable=False),
        sa.Column("item_id", sa.Uuid(), nullable=True),
        sa.Column("item_name", sa.Text(), nullable=False),
        sa.Column("unit", sa.Text(), nullable=True),
        sa.Column("ordered_quantity", MEASURE, server_default="0", nullable=False),
        sa.Column("received_quantity", MEASURE, server_default="0", nullable=False),
        sa.Column("approved_quantity", MEASURE, server_default="0", nullable=False),
        sa.Column("rejected_quantity", MEASURE, server_default="0", nullable=False),
        sa.Column("quality_status", sa.Text(), server_default="pending", nullable=False),
        sa.Column("quality_notes", sa.Text(), nullable=True),
        sa.Column("stock_posted", sa.Boolean(), server_default=sa.false(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["grn_id"], ["goods_receipt_notes.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["po_item_id"], ["purchase_order_items.id"], ondelete="SET NULL"),
    )
    op.create_index("ix_grn_items_grn_id", "grn_items", ["grn_id"])
    op.create_index("ix_grn_items_po_item_id", "grn_items", ["po_item_id"])

    # Accounts
    op.create_table(
        "invoices",
        _id(),
        sa.Column("invoice_number", sa.Text(), nullable=False),
        sa.Column("customer_id", sa.Uuid(), nullable=False),
        sa.Column("order_id", sa.Uuid(), nullable=True),
        sa.Column("invoice_date", sa.Date(), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("status", sa.Text(), server_default="draft", nullable=False),
        _money("subtotal"),
        _money("tax_amount"),
        _money("total_amount"),
        _money("paid_amount"),
        _money("balance_amount"),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["customer_id"], ["customers.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["order_id"], ["orders.id"], ondelete="SET NULL"),
        sa.UniqueConstraint("invoice_number", name="uq_invoices_invoice_number"),
    )
    op.create_index("ix_invoices_customer_id", "invoices", ["customer_id"])
    op.create_table(
        "invoice_items",
        _id(),
        sa.Column("invoice_id", sa.Uuid(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("hsn_code", sa.Text(), nullable=True),
        sa.Column("quantity", MEASURE, nullable=False),
        sa.Column("unit_price", MONEY, nullable=False),
        sa.Column("total_price", MONEY, nullable=False),
        _money("gst_rate"),
        _money("gst_amount"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["invoice_id"], ["invoices.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_invoice_items_invoice_id", "invoice_items", ["invoice_id"])

    # Dispatch
    op.create_table(
        "dispatch_orders",
        _id(),
        sa.Column("dispatch_number", sa.Text(), nullable=False),
        sa.Column("order_id", sa.Uuid(), nullable=False),
        sa.Column("dispatch_date", sa.Date(), nullable=False),
        sa.Column("status", sa.Text(), server_default="pending", nullable=False),
        sa.Column("courier_name", sa.Text(), nullable=True),
        sa.Column("tracking_number", sa.Text(), nullable=True),
        sa.Column("delivery_address", sa.Text(), nullable=True),
        sa.Column("estimated_delivery", sa.Date(), nullable=True),
        sa.Column("actual_delivery", sa.Date(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["order_id"], ["orders.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("dispatch_number", name="uq_dispatch_orders_dispatch_number"),
    )
    op.create_index("ix_dispatch_orders_order_id", "dispatch_orders", ["order_id"])
    op.create_table(
        "dispatch_order_items",
        _id(),
        sa.Column("dispatch_order_id", sa.Uuid(), nullable=False),
        sa.Column("order_id", sa.Uuid(), nullable=False),
        sa.Column("size_name", sa.Text(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["dispatch_order_id"], ["dispatch_orders.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["order_id"], ["orders.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_dispatch_order_items_dispatch_order_id", "dispatch_order_items", ["dispatch_order_id"])
    op.create_index("ix_dispatch_order_items_order_id", "dispatch_order_items", ["order_id"])

    # Tutorials
    op.create_table(
        "tutorials",
        _id(),
        sa.Column("section", sa.Text(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("option_name", sa.Text(), nullable=True),
        sa.Column("written_steps", sa.Text(), nullable=True),
        sa.Column("video_url", sa.Text(), nullable=True),
        sa.Column("video_path", sa.Text(), nullable=True),
        sa.Column("order_index", sa.Integer(), server_default="0", nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_tutorials_section", "tutorials", ["section"])


def downgrade() -> None:
    # Reverse dependency order; indexes go with their tables.
    for table in [
        "tutorials",
        "dispatch_order_items",
        "dispatch_orders",
        "invoice_items",
        "invoices",
        "grn_items",
        "goods_receipt_notes",
        "purchase_order_items",
        "purchase_orders",
        "inventory_logs",
        "inventory_adjustment_items",
        "inventory_adjustments",
        "inventory_adjustment_reasons",
        "inventory_items",
        "qc_reviews",
        "fabric_usage_records",
        "cutting_progress",
        "order_cutting_assignments",
        "order_batch_size_distributions",
        "order_batch_assignments",
        "order_items",
        "orders",
        "customers",
        "suppliers",
        "fabrics",
        "product_categories",
        "size_types",
        "tailors",
        "batches",
        "employees",
        "designations",
        "departments",
        "user_sidebar_permissions",
        "role_sidebar_permissions",
        "sidebar_items",
        "user_roles",
        "roles",
        "users",
    ]:
        op.drop_table(table)
