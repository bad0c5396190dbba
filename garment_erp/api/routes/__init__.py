"""
API route modules.

This package contains subrouters for:
- Auth, Users, Roles and Navigation: login, approval, roles and sidebar permissions
- People and Masters: departments, employees, tailors, size types, categories, fabrics, suppliers
- Customers, Orders and Invoices: the sales side
- Production and Quality: batches, cutting, picking and QC rounds
- Inventory and Procurement: stock, adjustments, purchase orders and goods receipts
- Dispatch, Tutorials and Reports

Routers are included from garment_erp.api.main (under the /api/v1 prefix).
"""
