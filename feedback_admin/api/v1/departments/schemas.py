from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class DepartmentCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    code: Optional[str] = Field(None, max_length=100, description="Derived from name when omitted")
    description: Optional[str] = None


class DepartmentEnsure(BaseModel):
    """Reference a department by name; the directory entry is created on first use."""

    name: str = Field(..., min_length=1, max_length=100)


class DepartmentResponse(BaseModel):
    id: UUID
    tenant_id: UUID
    code: str
    name: str
    description: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class DepartmentEnsureResponse(BaseModel):
    department: DepartmentResponse
    created: bool


class DepartmentDropdownItem(BaseModel):
    label: str
    value: UUID
