from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Path, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from garment_erp.core.deps import require_roles
from garment_erp.db.models.security import ROLE_CUTTING, ROLE_PRODUCTION, ROLE_QC
from garment_erp.db.session import get_async_session
from garment_erp.repositories.people import (
    DepartmentRepository,
    DesignationRepository,
    EmployeeRepository,
    TailorRepository,
)
from garment_erp.schemas.people import (
    DepartmentCreate,
    DepartmentRead,
    DepartmentUpdate,
    DesignationCreate,
    DesignationRead,
    DesignationUpdate,
    EmployeeCreate,
    EmployeeRead,
    EmployeeUpdate,
    TailorCreate,
    TailorRead,
    TailorUpdate,
)
from garment_erp.services.catalog import CatalogService

router = APIRouter(prefix="/people", tags=["People"])

VIEW = Depends(require_roles(ROLE_PRODUCTION, ROLE_CUTTING, ROLE_QC))
MANAGE = Depends(require_roles(ROLE_PRODUCTION))


def _departments(session: AsyncSession) -> CatalogService:
    return CatalogService(session, DepartmentRepository(session), "Department", ("employees",), ("name",))


def _designations(session: AsyncSession) -> CatalogService:
    return CatalogService(session, DesignationRepository(session), "Designation", ("employees",), ("name",))


def _employees(session: AsyncSession) -> CatalogService:
    return CatalogService(
        session, EmployeeRepository(session), "Employee", ("employees", "dashboard_metrics"), ("employee_code",)
    )


def _tailors(session: AsyncSession) -> CatalogService:
    return CatalogService(session, TailorRepository(session), "Tailor", ("employees", "batches"), ("tailor_code",))


# PUBLIC_INTERFACE
@router.get("/departments", response_model=List[DepartmentRead], summary="List departments", dependencies=[VIEW])
async def list_departments(
    session: AsyncSession = Depends(get_async_session),
    search: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[DepartmentRead]:
    rows = await _departments(session).list_entities(search=search, limit=limit, offset=offset)
    return [DepartmentRead.model_validate(r) for r in rows]


# PUBLIC_INTERFACE
@router.post(
    "/departments",
    response_model=DepartmentRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create department",
    dependencies=[MANAGE],
)
async def create_department(
    payload: DepartmentCreate, session: AsyncSession = Depends(get_async_session)
) -> DepartmentRead:
    return DepartmentRead.model_validate(await _departments(session).create(payload.model_dump()))


# PUBLIC_INTERFACE
@router.patch(
    "/departments/{department_id}", response_model=DepartmentRead, summary="Update department", dependencies=[MANAGE]
)
async def update_department(
    payload: DepartmentUpdate,
    department_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> DepartmentRead:
    entity = await _departments(session).update(department_id, payload.model_dump(exclude_unset=True, exclude_none=True))
    return DepartmentRead.model_validate(entity)


# PUBLIC_INTERFACE
@router.delete(
    "/departments/{department_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete department",
    dependencies=[MANAGE],
)
async def delete_department(
    department_id: UUID = Path(...), session: AsyncSession = Depends(get_async_session)
) -> None:
    await _departments(session).delete(department_id)


# PUBLIC_INTERFACE
@router.get("/designations", response_model=List[DesignationRead], summary="List designations", dependencies=[VIEW])
async def list_designations(
    session: AsyncSession = Depends(get_async_session),
    department_id: Optional[UUID] = Query(None),
    search: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[DesignationRead]:
    rows = await _designations(session).list_entities(
        search=search, filters={"department_id": department_id}, limit=limit, offset=offset
    )
    return [DesignationRead.model_validate(r) for r in rows]


# PUBLIC_INTERFACE
@router.post(
    "/designations",
    response_model=DesignationRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create designation",
    dependencies=[MANAGE],
)
async def create_designation(
    payload: DesignationCreate, session: AsyncSession = Depends(get_async_session)
) -> DesignationRead:
    return DesignationRead.model_validate(await _designations(session).create(payload.model_dump()))


# PUBLIC_INTERFACE
@router.patch(
    "/designations/{designation_id}",
    response_model=DesignationRead,
    summary="Update designation",
    dependencies=[MANAGE],
)
async def update_designation(
    payload: DesignationUpdate,
    designation_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> DesignationRead:
    entity = await _designations(session).update(designation_id, payload.model_dump(exclude_unset=True, exclude_none=True))
    return DesignationRead.model_validate(entity)


# PUBLIC_INTERFACE
@router.delete(
    "/designations/{designation_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete designation",
    dependencies=[MANAGE],
)
async def delete_designation(
    designation_id: UUID = Path(...), session: AsyncSession = Depends(get_async_session)
) -> None:
    await _designations(session).delete(designation_id)


# PUBLIC_INTERFACE
@router.get("/employees", response_model=List[EmployeeRead], summary="List employees", dependencies=[VIEW])
async def list_employees(
    session: AsyncSession = Depends(get_async_session),
    department_id: Optional[UUID] = Query(None),
    search: Optional[str] = Query(None, description="Name, code, designation or phone"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[EmployeeRead]:
    rows = await _employees(session).list_entities(
        search=search, filters={"department_id": department_id}, limit=limit, offset=offset
    )
    return [EmployeeRead.model_validate(r) for r in rows]


# PUBLIC_INTERFACE
@router.get(
    "/cutting-masters",
    response_model=List[EmployeeRead],
    summary="List cutting masters",
    description="Active employees whose designation contains 'cutting master' or 'cutting manager'.",
    dependencies=[VIEW],
)
async def list_cutting_masters(session: AsyncSession = Depends(get_async_session)) -> List[EmployeeRead]:
    rows = await EmployeeRepository(session).list_cutting_masters()
    return [EmployeeRead.model_validate(r) for r in rows]


# PUBLIC_INTERFACE
@router.get("/employees/{employee_id}", response_model=EmployeeRead, summary="Get employee", dependencies=[VIEW])
async def get_employee(
    employee_id: UUID = Path(...), session: AsyncSession = Depends(get_async_session)
) -> EmployeeRead:
    return EmployeeRead.model_validate(await _employees(session).get(employee_id))


# PUBLIC_INTERFACE
@router.post(
    "/employees",
    response_model=EmployeeRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create employee",
    dependencies=[MANAGE],
)
async def create_employee(payload: EmployeeCreate, session: AsyncSession = Depends(get_async_session)) -> EmployeeRead:
    return EmployeeRead.model_validate(await _employees(session).create(payload.model_dump()))


# PUBLIC_INTERFACE
@router.patch("/employees/{employee_id}", response_model=EmployeeRead, summary="Update employee", dependencies=[MANAGE])
async def update_employee(
    payload: EmployeeUpdate,
    employee_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> EmployeeRead:
    entity = await _employees(session).update(employee_id, payload.model_dump(exclude_unset=True, exclude_none=True))
    return EmployeeRead.model_validate(entity)


# PUBLIC_INTERFACE
@router.delete(
    "/employees/{employee_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete employee",
    dependencies=[MANAGE],
)
async def delete_employee(employee_id: UUID = Path(...), session: AsyncSession = Depends(get_async_session)) -> None:
    await _employees(session).delete(employee_id, file_fields=("avatar_url",))


# PUBLIC_INTERFACE
@router.put(
    "/employees/{employee_id}/avatar",
    response_model=EmployeeRead,
    summary="Upload employee photo",
    dependencies=[MANAGE],
)
async def upload_employee_avatar(
    employee_id: UUID = Path(...),
    file: UploadFile = File(..., description="Image file"),
    session: AsyncSession = Depends(get_async_session),
) -> EmployeeRead:
    entity = await _employees(session).replace_image(employee_id, "avatar_url", file, "employee-avatars")
    return EmployeeRead.model_validate(entity)


# PUBLIC_INTERFACE
@router.get("/tailors", response_model=List[TailorRead], summary="List tailors", dependencies=[VIEW])
async def list_tailors(
    session: AsyncSession = Depends(get_async_session),
    batch_id: Optional[UUID] = Query(None),
    tailor_type: Optional[str] = Query(None, description="single_needle | overlock_flatlock"),
    search: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[TailorRead]:
    rows = await _tailors(session).list_entities(
        search=search, filters={"batch_id": batch_id, "tailor_type": tailor_type}, limit=limit, offset=offset
    )
    return [TailorRead.model_validate(r) for r in rows]


# PUBLIC_INTERFACE
@router.post(
    "/tailors",
    response_model=TailorRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create tailor",
    dependencies=[MANAGE],
)
async def create_tailor(payload: TailorCreate, session: AsyncSession = Depends(get_async_session)) -> TailorRead:
    return TailorRead.model_validate(await _tailors(session).create(payload.model_dump()))


# PUBLIC_INTERFACE
@router.patch("/tailors/{tailor_id}", response_model=TailorRead, summary="Update tailor", dependencies=[MANAGE])
async def update_tailor(
    payload: TailorUpdate,
    tailor_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> TailorRead:
    entity = await _tailors(session).update(tailor_id, payload.model_dump(exclude_unset=True, exclude_none=True))
    return TailorRead.model_validate(entity)


# PUBLIC_INTERFACE
@router.delete(
    "/tailors/{tailor_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete tailor",
    dependencies=[MANAGE],
)
async def delete_tailor(tailor_id: UUID = Path(...), session: AsyncSession = Depends(get_async_session)) -> None:
    await _tailors(session).delete(tailor_id, file_fields=("avatar_url",))


# PUBLIC_INTERFACE
@router.put(
    "/tailors/{tailor_id}/avatar",
    response_model=TailorRead,
    summary="Upload tailor photo",
    dependencies=[MANAGE],
)
async def upload_tailor_avatar(
    tailor_id: UUID = Path(...),
    file: UploadFile = File(..., description="Image file"),
    session: AsyncSession = Depends(get_async_session),
) -> TailorRead:
    entity = await _tailors(session).replace_image(tailor_id, "avatar_url", file, "tailor-avatars")
    return TailorRead.model_validate(entity)
