import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple
from uuid import UUID

from fastapi import status
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from feedback_admin.api.v1.departments import service as department_service
from feedback_admin.core.config import settings
from feedback_admin.core.enums import ConfigSource, SaveState
from feedback_admin.core.exceptions import HierarchyValidationError, PersistenceError, ServiceError
from feedback_admin.core.models import AcademicConfig, Tenant

from .normalize import (
    build_tree,
    collect_department_names,
    derive_course_index,
    derive_subject_table,
    dump_course_index,
    dump_subject_table,
    find_key_collision,
)
from .schemas import (
    AcademicConfigResponse,
    AcademicTree,
    CourseIndex,
    SaveResult,
    SubjectTable,
    TemplateSummary,
)
from .templates import TEMPLATES, AcademicTemplate, get_template, template_for_institution
from .validators import HierarchyPolicy

logger = logging.getLogger(__name__)


def policy_from_settings() -> HierarchyPolicy:
    return HierarchyPolicy(
        reserved_course_names=tuple(settings.reserved_course_names),
        year_values=tuple(settings.allowed_year_values),
        default_batches=tuple(settings.default_batches),
    )


# ---------------------------------------------------------------------------
# Store operations
# ---------------------------------------------------------------------------


async def get_config(db: AsyncSession, tenant_id: UUID) -> Optional[AcademicConfig]:
    result = await db.execute(select(AcademicConfig).where(AcademicConfig.tenant_id == tenant_id))
    return result.scalar_one_or_none()


async def upsert_config(
    db: AsyncSession,
    tenant_id: UUID,
    course_index: Dict[str, Any],
    subject_table: Dict[str, Any],
    batches: Optional[List[str]] = None,
) -> AcademicConfig:
    """Insert or overwrite the tenant's configuration. No version check: last writer wins."""
    config = await get_config(db, tenant_id)
    if config is None:
        config = AcademicConfig(
            tenant_id=tenant_id,
            course_index=course_index,
            subject_table=subject_table,
            batches=batches,
        )
        db.add(config)
    else:
        config.course_index = course_index
        config.subject_table = subject_table
        config.batches = batches
        config.updated_at = datetime.utcnow()
    await db.commit()
    await db.refresh(config)
    return config


async def get_tenant(db: AsyncSession, tenant_id: UUID) -> Optional[Tenant]:
    result = await db.execute(select(Tenant).where(Tenant.id == tenant_id))
    return result.scalar_one_or_none()


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------


def tree_from_template(template: AcademicTemplate, policy: Optional[HierarchyPolicy] = None) -> AcademicTree:
    policy = policy or policy_from_settings()
    return build_tree(template.course_index, template.subject_table, None, policy.default_batches)


async def load_academic_config(
    db: AsyncSession,
    tenant_id: UUID,
    policy: Optional[HierarchyPolicy] = None,
) -> AcademicConfigResponse:
    """Stored configuration as an editable tree, or the college's template when none is saved yet."""
    policy = policy or policy_from_settings()
    try:
        config = await get_config(db, tenant_id)
        tenant = None if config else await get_tenant(db, tenant_id)
    except SQLAlchemyError:
        logger.exception("Failed to load academic configuration for tenant %s", tenant_id)
        raise PersistenceError("Failed to load academic configuration")

    if config is not None:
        tree = build_tree(config.course_index, config.subject_table, config.batches, policy.default_batches)
        return AcademicConfigResponse(tree=tree, source=ConfigSource.STORED, updated_at=config.updated_at)

    template = template_for_institution(tenant.code if tenant else None)
    logger.info("No academic configuration for tenant %s; starting from template %s", tenant_id, template.id)
    return AcademicConfigResponse(
        tree=tree_from_template(template, policy),
        source=ConfigSource.TEMPLATE,
        template_id=template.id,
    )


async def load_views(
    db: AsyncSession,
    tenant_id: UUID,
    policy: Optional[HierarchyPolicy] = None,
) -> Tuple[CourseIndex, SubjectTable]:
    """Normalized (course index, subject table) for read-only consumers."""
    loaded = await load_academic_config(db, tenant_id, policy)
    return derive_course_index(loaded.tree), derive_subject_table(loaded.tree)


# ---------------------------------------------------------------------------
# Reconciler
# ---------------------------------------------------------------------------


async def _ensure_department(session_factory: async_sessionmaker, tenant_id: UUID, name: str) -> bool:
    async with session_factory() as session:
        _, created = await department_service.ensure_department(session, tenant_id, name)
        return created


async def reconcile_departments(
    session_factory: async_sessionmaker,
    tenant_id: UUID,
    names: Sequence[str],
) -> Tuple[List[str], List[str]]:
    """Create missing directory entries concurrently, one session each.

    Returns (created, failed). Failures are logged and left for the next save.
    """
    results = await asyncio.gather(
        *(_ensure_department(session_factory, tenant_id, name) for name in names),
        return_exceptions=True,
    )
    created: List[str] = []
    failed: List[str] = []
    for name, result in zip(names, results):
        if isinstance(result, BaseException):
            logger.warning("Could not create department %r for tenant %s: %s", name, tenant_id, result)
            failed.append(name)
        elif result:
            created.append(name)
    if created:
        logger.info("Created %d department(s) for tenant %s: %s", len(created), tenant_id, ", ".join(created))
    return created, failed


async def save_academic_config(
    db: AsyncSession,
    session_factory: async_sessionmaker,
    tenant_id: UUID,
    tree: AcademicTree,
) -> SaveResult:
    """Persist the whole tree and reconcile the department directory.

    The course index and subject table are regenerated from the tree on every
    call. Success depends only on the configuration write; department creation
    failures are reported in the result. Raises PersistenceError when the write
    fails, leaving the caller's tree untouched for a retry. Concurrent saves for
    one tenant are not serialized here.
    """
    collision = find_key_collision(tree)
    if collision:
        raise HierarchyValidationError(collision, field="tree")

    course_index = derive_course_index(tree)
    subject_table = derive_subject_table(tree)
    logger.info("Saving academic configuration for tenant %s (%d courses)", tenant_id, len(course_index))
    try:
        await upsert_config(
            db,
            tenant_id,
            dump_course_index(course_index),
            dump_subject_table(subject_table),
            list(tree.batches),
        )
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Failed to save academic configuration for tenant %s", tenant_id)
        raise PersistenceError("Failed to save academic configuration")

    created, failed = await reconcile_departments(
        session_factory, tenant_id, collect_department_names(course_index)
    )
    return SaveResult(
        state=SaveState.SAVED,
        course_index=course_index,
        subject_table=subject_table,
        created_departments=created,
        failed_departments=failed,
    )


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------


def list_templates() -> List[TemplateSummary]:
    summaries: List[TemplateSummary] = []
    for template in TEMPLATES.values():
        tree = tree_from_template(template)
        departments = {d.name for c in tree.courses for y in c.years for d in y.departments}
        subjects = sum(len(d.subjects) for c in tree.courses for y in c.years for d in y.departments)
        summaries.append(
            TemplateSummary(
                id=template.id,
                name=template.name,
                description=template.description,
                institution_code=template.institution_code,
                courses=len(tree.courses),
                departments=len(departments),
                subjects=subjects,
            )
        )
    return summaries


async def apply_template(
    db: AsyncSession,
    session_factory: async_sessionmaker,
    tenant_id: UUID,
    template_id: str,
    policy: Optional[HierarchyPolicy] = None,
) -> SaveResult:
    """Replace the tenant's configuration with a built-in template."""
    template = get_template(template_id)
    if template is None:
        raise ServiceError(f"Template '{template_id}' not found", status.HTTP_404_NOT_FOUND)
    logger.info("Applying template %s for tenant %s", template.id, tenant_id)
    return await save_academic_config(db, session_factory, tenant_id, tree_from_template(template, policy))
