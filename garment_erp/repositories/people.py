from __future__ import annotations

from typing import List

from sqlalchemy import func, or_, select

from garment_erp.db.models.people import Department, Designation, Employee, Tailor
from .base import CrudRepository

CUTTING_MASTER_TITLES = ("cutting master", "cutting manager")


class DepartmentRepository(CrudRepository[Department]):
    model = Department
    search_columns = ("name", "description")
    order_by = ("name",)


class DesignationRepository(CrudRepository[Designation]):
    model = Designation
    search_columns = ("name",)
    order_by = ("name",)


class EmployeeRepository(CrudRepository[Employee]):
    """Repository for employees."""
    model = Employee
    search_columns = ("full_name", "employee_code", "designation", "personal_phone")
    order_by = ("full_name",)

    async def list_cutting_masters(self) -> List[Employee]:
        """Active employees whose designation names them a cutting master/manager."""
        designation = func.lower(func.coalesce(Employee.designation, ""))
        stmt = (
            select(Employee)
            .where(Employee.is_active.is_(True))
            .where(or_(*[designation.contains(title) for title in CUTTING_MASTER_TITLES]))
            .order_by(Employee.full_name)
        )
        res = await self.scalars(stmt)
        return list(res)


class TailorRepository(CrudRepository[Tailor]):
    model = Tailor
    search_columns = ("full_name", "tailor_code", "personal_phone")
    order_by = ("full_name",)
