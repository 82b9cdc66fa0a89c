from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from feedback_admin.core.enums import ConfigSource, HierarchyLevel, SaveState, SubjectType, TreeAction


# ---------------------------------------------------------------------------
# Editable tree (the source of truth while editing)
# ---------------------------------------------------------------------------


class SubjectNode(BaseModel):
    name: str
    code: str = ""
    type: SubjectType = SubjectType.THEORY
    batches: List[str] = Field(default_factory=list)


class DepartmentNode(BaseModel):
    name: str
    subjects: List[SubjectNode] = Field(default_factory=list)


class YearNode(BaseModel):
    name: str
    departments: List[DepartmentNode] = Field(default_factory=list)


class CourseNode(BaseModel):
    name: str
    years: List[YearNode] = Field(default_factory=list)
    semesters: Optional[List[str]] = None


class AcademicTree(BaseModel):
    """Course -> Year -> Department -> Subject -> Batch for one college."""

    courses: List[CourseNode] = Field(default_factory=list)
    batches: List[str] = Field(default_factory=list, description="College-wide default batch set")


# ---------------------------------------------------------------------------
# Persisted shapes (views regenerated from the tree on save)
# ---------------------------------------------------------------------------


class CourseIndexEntry(BaseModel):
    years: List[str] = Field(default_factory=list)
    year_departments: Dict[str, List[str]] = Field(default_factory=dict)
    semesters: Optional[List[str]] = None


class SubjectRecord(BaseModel):
    code: str = ""
    type: SubjectType = SubjectType.THEORY
    batches: List[str] = Field(default_factory=list)


CourseIndex = Dict[str, CourseIndexEntry]
SubjectTable = Dict[str, Dict[str, Dict[str, Dict[str, SubjectRecord]]]]


# ---------------------------------------------------------------------------
# API payloads
# ---------------------------------------------------------------------------


class HierarchyPath(BaseModel):
    """Indices of the node (and its ancestors) an operation targets."""

    course_index: Optional[int] = None
    year_index: Optional[int] = None
    department_index: Optional[int] = None
    subject_index: Optional[int] = None
    batch_index: Optional[int] = None


class TreeOperationRequest(BaseModel):
    tree: AcademicTree
    action: TreeAction
    level: HierarchyLevel
    path: HierarchyPath = Field(default_factory=HierarchyPath)
    name: Optional[str] = Field(None, description="Required for add/edit")
    code: Optional[str] = Field(None, description="Subject code (subjects only)")
    type: Optional[SubjectType] = Field(None, description="Subject type (subjects only)")


class TreeOperationResponse(BaseModel):
    tree: AcademicTree
    message: str


class ValidateNameRequest(BaseModel):
    """Inline validation of a single field against the current tree."""

    tree: AcademicTree
    level: HierarchyLevel
    name: str
    path: HierarchyPath = Field(default_factory=HierarchyPath)
    exclude_index: Optional[int] = Field(None, description="Index of the node being edited, if any")


class ValidateNameResponse(BaseModel):
    valid: bool
    message: Optional[str] = None


class AcademicConfigResponse(BaseModel):
    tree: AcademicTree
    source: ConfigSource
    template_id: Optional[str] = None
    updated_at: Optional[datetime] = None


class SaveResult(BaseModel):
    state: SaveState
    course_index: CourseIndex
    subject_table: SubjectTable
    created_departments: List[str] = Field(default_factory=list)
    failed_departments: List[str] = Field(default_factory=list)


class TemplateSummary(BaseModel):
    id: str
    name: str
    description: str
    institution_code: Optional[str] = None
    courses: int
    departments: int
    subjects: int


class DropdownResponse(BaseModel):
    level: HierarchyLevel
    options: List[str]
    semesters: Optional[List[str]] = None
