import re
from typing import List, Optional, Tuple
from uuid import UUID

from fastapi import status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from feedback_admin.core.exceptions import ServiceError
from feedback_admin.core.models import Department

from .schemas import (
    DepartmentCreate,
    DepartmentDropdownItem,
    DepartmentResponse,
)

_WHITESPACE_RE = re.compile(r"\s+")
_CODE_STRIP_RE = re.compile(r"[^a-z0-9-]")


def generate_department_code(name: str) -> str:
    """Lowercase, whitespace runs to '-', then drop anything outside [a-z0-9-].

    "Finance" -> "finance", "Finance & Accounting" -> "finance--accounting".
    """
    code = _WHITESPACE_RE.sub("-", name.lower())
    return _CODE_STRIP_RE.sub("", code)


def _to_uuid(val):
    if val is None:
        return None
    return val if isinstance(val, UUID) else UUID(str(val))


def _to_response(dept: Department) -> DepartmentResponse:
    return DepartmentResponse(
        id=_to_uuid(dept.id),
        tenant_id=_to_uuid(dept.tenant_id),
        code=dept.code,
        name=dept.name,
        description=dept.description,
        is_active=dept.is_active,
        created_at=dept.created_at,
        updated_at=dept.updated_at,
    )


async def create_department(
    db: AsyncSession,
    tenant_id: UUID,
    payload: DepartmentCreate,
) -> DepartmentResponse:
    name = payload.name.strip()
    if not name:
        raise ServiceError("Department name cannot be empty.", status.HTTP_400_BAD_REQUEST)
    code = (payload.code or "").strip() or generate_department_code(name)
    description = payload.description.strip() if payload.description else None
    try:
        dept = Department(
            tenant_id=tenant_id,
            code=code,
            name=name,
            description=description,
            is_active=True,
        )
        db.add(dept)
        await db.commit()
        await db.refresh(dept)
        return _to_response(dept)
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Department name already exists for this tenant", status.HTTP_409_CONFLICT)


async def list_departments(
    db: AsyncSession,
    tenant_id: UUID,
    active_only: bool = True,
) -> List[DepartmentResponse]:
    stmt = select(Department).where(Department.tenant_id == tenant_id)
    if active_only:
        stmt = stmt.where(Department.is_active.is_(True))
    stmt = stmt.order_by(Department.name)
    result = await db.execute(stmt)
    return [_to_response(d) for d in result.scalars().all()]


async def get_department(
    db: AsyncSession,
    tenant_id: UUID,
    department_id: UUID,
) -> Optional[DepartmentResponse]:
    result = await db.execute(
        select(Department).where(
            Department.id == department_id,
            Department.tenant_id == tenant_id,
        )
    )
    dept = result.scalar_one_or_none()
    if not dept:
        return None
    return _to_response(dept)


async def ensure_department(
    db: AsyncSession,
    tenant_id: UUID,
    name: str,
) -> Tuple[DepartmentResponse, bool]:
    """Return the directory entry with this exact name, creating it if missing.

    Inactive entries count as existing. Returns (department, created).
    Safe to call concurrently: losing a create race resolves to the winner's row.
    """
    name = name.strip()
    existing = await list_departments(db, tenant_id, active_only=False)
    for dept in existing:
        if dept.name == name:
            return dept, False
    try:
        created = await create_department(db, tenant_id, DepartmentCreate(name=name))
        return created, True
    except ServiceError as e:
        if e.status_code != status.HTTP_409_CONFLICT:
            raise
    for dept in await list_departments(db, tenant_id, active_only=False):
        if dept.name == name:
            return dept, False
    raise ServiceError(f"Department '{name}' could not be created", status.HTTP_409_CONFLICT)


async def get_department_dropdown(
    db: AsyncSession,
    tenant_id: UUID,
) -> List[DepartmentDropdownItem]:
    result = await db.execute(
        select(Department.id, Department.name)
        .where(Department.tenant_id == tenant_id, Department.is_active.is_(True))
        .order_by(Department.name)
    )
    rows = result.all()
    return [DepartmentDropdownItem(label=name, value=_to_uuid(id_)) for id_, name in rows]
