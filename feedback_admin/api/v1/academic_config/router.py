from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from feedback_admin.auth.dependencies import get_current_user
from feedback_admin.auth.rbac import check_permission
from feedback_admin.auth.schemas import CurrentUser
from feedback_admin.core.config import settings
from feedback_admin.core.enums import HierarchyLevel, SaveState, TreeAction
from feedback_admin.core.exceptions import HierarchyValidationError, PersistenceError, ServiceError
from feedback_admin.db.session import get_db, get_session_factory

from . import lookups, service, tree as tree_ops
from .schemas import (
    AcademicConfigResponse,
    AcademicTree,
    DropdownResponse,
    SaveResult,
    TemplateSummary,
    TreeOperationRequest,
    TreeOperationResponse,
    ValidateNameRequest,
    ValidateNameResponse,
)

router = APIRouter(prefix="/api/v1/academic-config", tags=["academic-config"])

_ACTION_VERBS = {TreeAction.ADD: "added", TreeAction.EDIT: "updated", TreeAction.DELETE: "deleted"}


def _to_http(e: ServiceError) -> HTTPException:
    if isinstance(e, HierarchyValidationError):
        return HTTPException(status_code=e.status_code, detail={"field": e.field, "message": e.message})
    if isinstance(e, PersistenceError):
        return HTTPException(status_code=e.status_code, detail={"state": SaveState.FAILED.value, "message": e.message})
    return HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "",
    response_model=AcademicConfigResponse,
    dependencies=[Depends(check_permission("academic_config", "read"))],
)
async def get_academic_config(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> AcademicConfigResponse:
    try:
        return await service.load_academic_config(db, current_user.tenant_id)
    except ServiceError as e:
        raise _to_http(e)


@router.put(
    "",
    response_model=SaveResult,
    dependencies=[Depends(check_permission("academic_config", "update"))],
)
async def save_academic_config(
    payload: AcademicTree,
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker = Depends(get_session_factory),
    current_user: CurrentUser = Depends(get_current_user),
) -> SaveResult:
    try:
        return await service.save_academic_config(db, session_factory, current_user.tenant_id, payload)
    except ServiceError as e:
        raise _to_http(e)


@router.post(
    "/operations",
    response_model=TreeOperationResponse,
    dependencies=[Depends(check_permission("academic_config", "update"))],
)
async def apply_tree_operation(payload: TreeOperationRequest) -> TreeOperationResponse:
    """Apply one add/edit/delete to the client's tree. Nothing is stored until PUT /academic-config."""
    try:
        new_tree = tree_ops.apply_operation(
            payload.tree,
            payload.action,
            payload.level,
            payload.path,
            name=payload.name,
            code=payload.code,
            subject_type=payload.type,
            policy=service.policy_from_settings(),
        )
    except ServiceError as e:
        raise _to_http(e)
    message = f"{payload.level.value.capitalize()} {_ACTION_VERBS[payload.action]}."
    return TreeOperationResponse(tree=new_tree, message=message)


@router.post(
    "/validate",
    response_model=ValidateNameResponse,
    dependencies=[Depends(check_permission("academic_config", "read"))],
)
async def validate_name(payload: ValidateNameRequest) -> ValidateNameResponse:
    """Inline check of a single name against its siblings in the client's tree."""
    try:
        message = tree_ops.validate_name(
            payload.tree,
            payload.level,
            payload.name,
            payload.path,
            exclude_index=payload.exclude_index,
            policy=service.policy_from_settings(),
        )
    except ServiceError as e:
        raise _to_http(e)
    return ValidateNameResponse(valid=message is None, message=message)


@router.get(
    "/dropdown",
    response_model=DropdownResponse,
    dependencies=[Depends(check_permission("academic_config", "read"))],
)
async def academic_dropdown(
    course: Optional[str] = Query(None),
    year: Optional[str] = Query(None),
    department: Optional[str] = Query(None),
    subject: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> DropdownResponse:
    """
    Cascading selector options. The deepest given parameter decides the level:
    - nothing: courses
    - course: years (plus the course's semesters)
    - course + year: departments
    - course + year + department: subjects
    - course + year + department + subject: batches
    """
    try:
        course_index, subject_table = await service.load_views(db, current_user.tenant_id)
    except ServiceError as e:
        raise _to_http(e)

    if course is None:
        return DropdownResponse(level=HierarchyLevel.COURSE, options=lookups.get_all_courses(course_index))
    if year is None:
        return DropdownResponse(
            level=HierarchyLevel.YEAR,
            options=lookups.get_years_for_course(course_index, course),
            semesters=lookups.get_semesters_for_course(course_index, course, settings.default_semesters),
        )
    if department is None:
        return DropdownResponse(
            level=HierarchyLevel.DEPARTMENT,
            options=lookups.get_departments_for_course_year(course_index, course, year),
        )
    if subject is None:
        return DropdownResponse(
            level=HierarchyLevel.SUBJECT,
            options=lookups.get_subjects_for_context(subject_table, course, year, department),
        )
    return DropdownResponse(
        level=HierarchyLevel.BATCH,
        options=lookups.get_batches_for_subject(subject_table, course, year, department, subject),
    )


@router.get(
    "/templates",
    response_model=List[TemplateSummary],
    dependencies=[Depends(check_permission("academic_config", "read"))],
)
async def list_templates() -> List[TemplateSummary]:
    return service.list_templates()


@router.post(
    "/templates/{template_id}/apply",
    response_model=SaveResult,
    dependencies=[Depends(check_permission("academic_config", "update"))],
)
async def apply_template(
    template_id: str,
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker = Depends(get_session_factory),
    current_user: CurrentUser = Depends(get_current_user),
) -> SaveResult:
    try:
        return await service.apply_template(db, session_factory, current_user.tenant_id, template_id)
    except ServiceError as e:
        raise _to_http(e)
