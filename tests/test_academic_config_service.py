import pytest
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from feedback_admin.api.v1.academic_config import service
from feedback_admin.api.v1.academic_config.schemas import (
    AcademicTree,
    CourseNode,
    DepartmentNode,
    SubjectNode,
    YearNode,
)
from feedback_admin.api.v1.departments import service as department_service
from feedback_admin.core.enums import ConfigSource, SaveState, SubjectType
from feedback_admin.core.exceptions import HierarchyValidationError, PersistenceError, ServiceError
from feedback_admin.core.models import AcademicConfig, Department, Tenant


def _mba_finance_tree() -> AcademicTree:
    return AcademicTree(
        courses=[
            CourseNode(
                name="MBA",
                years=[YearNode(name="1", departments=[DepartmentNode(name="Finance")])],
            )
        ],
        batches=["A", "B", "C", "D"],
    )


async def _departments(db: AsyncSession, tenant_id):
    result = await db.execute(select(Department).where(Department.tenant_id == tenant_id))
    return result.scalars().all()


@pytest.mark.asyncio
async def test_load_without_config_falls_back_to_default_template(db_session: AsyncSession, tenant: Tenant) -> None:
    """With nothing saved, an unknown college gets the default template."""
    loaded = await service.load_academic_config(db_session, tenant.id)
    assert loaded.source == ConfigSource.TEMPLATE
    assert loaded.template_id == "default"
    assert loaded.updated_at is None
    assert [c.name for c in loaded.tree.courses] == ["Engineering", "MBA", "MCA", "BBA+MBA", "BCA+MCA"]


@pytest.mark.asyncio
async def test_load_picks_template_by_college_code(db_session: AsyncSession) -> None:
    icem = Tenant(code="ICEM", name="ICEM")
    db_session.add(icem)
    await db_session.commit()

    loaded = await service.load_academic_config(db_session, icem.id)
    assert loaded.template_id == "icem"
    assert loaded.tree.courses[0].name == "BE"


@pytest.mark.asyncio
async def test_save_creates_config_and_department(
    db_session: AsyncSession, session_factory: async_sessionmaker, tenant: Tenant
) -> None:
    """Saving MBA / 1 / Finance stores both shapes and creates "finance"."""
    result = await service.save_academic_config(db_session, session_factory, tenant.id, _mba_finance_tree())

    assert result.state == SaveState.SAVED
    assert result.course_index["MBA"].years == ["1"]
    assert result.course_index["MBA"].year_departments == {"1": ["Finance"]}
    assert result.subject_table == {"MBA": {"1": {"Finance": {}}}}
    assert result.created_departments == ["Finance"]
    assert result.failed_departments == []

    departments = await _departments(db_session, tenant.id)
    assert [(d.name, d.code, d.is_active) for d in departments] == [("Finance", "finance", True)]

    config = await service.get_config(db_session, tenant.id)
    assert config.course_index == {"MBA": {"years": ["1"], "year_departments": {"1": ["Finance"]}}}
    assert config.subject_table == {"MBA": {"1": {"Finance": {}}}}
    assert config.batches == ["A", "B", "C", "D"]


@pytest.mark.asyncio
async def test_save_twice_creates_no_duplicates(
    db_session: AsyncSession, session_factory: async_sessionmaker, tenant: Tenant
) -> None:
    """Saving the same tree twice is idempotent."""
    tree = _mba_finance_tree()
    await service.save_academic_config(db_session, session_factory, tenant.id, tree)
    second = await service.save_academic_config(db_session, session_factory, tenant.id, tree)

    assert second.state == SaveState.SAVED
    assert second.created_departments == []
    assert len(await _departments(db_session, tenant.id)) == 1

    result = await db_session.execute(select(AcademicConfig).where(AcademicConfig.tenant_id == tenant.id))
    assert len(result.scalars().all()) == 1


@pytest.mark.asyncio
async def test_save_shared_department_name_created_once(
    db_session: AsyncSession, session_factory: async_sessionmaker, tenant: Tenant
) -> None:
    tree = AcademicTree(
        courses=[
            CourseNode(
                name="MBA",
                years=[
                    YearNode(name="1", departments=[DepartmentNode(name="Finance"), DepartmentNode(name="Marketing")]),
                    YearNode(name="2", departments=[DepartmentNode(name="Finance")]),
                ],
            ),
            CourseNode(name="BBA", years=[YearNode(name="1", departments=[DepartmentNode(name="Finance & Accounting")])]),
        ]
    )
    result = await service.save_academic_config(db_session, session_factory, tenant.id, tree)

    assert sorted(result.created_departments) == ["Finance", "Finance & Accounting", "Marketing"]
    codes = {d.name: d.code for d in await _departments(db_session, tenant.id)}
    assert codes == {"Finance": "finance", "Marketing": "marketing", "Finance & Accounting": "finance--accounting"}


@pytest.mark.asyncio
async def test_existing_department_is_not_recreated(
    db_session: AsyncSession, session_factory: async_sessionmaker, tenant: Tenant
) -> None:
    await department_service.ensure_department(db_session, tenant.id, "Finance")

    result = await service.save_academic_config(db_session, session_factory, tenant.id, _mba_finance_tree())
    assert result.created_departments == []
    assert len(await _departments(db_session, tenant.id)) == 1


@pytest.mark.asyncio
async def test_saved_config_round_trips_through_store(
    db_session: AsyncSession, session_factory: async_sessionmaker, tenant: Tenant
) -> None:
    """A saved tree loads back unchanged."""
    tree = AcademicTree(
        courses=[
            CourseNode(
                name="MBA",
                semesters=["Trimester 1", "Trimester 2"],
                years=[
                    YearNode(
                        name="1",
                        departments=[
                            DepartmentNode(
                                name="Finance",
                                subjects=[
                                    SubjectNode(name="Accounts", code="FN101", type=SubjectType.THEORY, batches=["A"]),
                                    SubjectNode(name="Modelling", code="FN102", type=SubjectType.PRACTICAL),
                                ],
                            )
                        ],
                    )
                ],
            )
        ],
        batches=["A", "B"],
    )
    await service.save_academic_config(db_session, session_factory, tenant.id, tree)

    loaded = await service.load_academic_config(db_session, tenant.id)
    assert loaded.source == ConfigSource.STORED
    assert loaded.template_id is None
    assert loaded.updated_at is not None
    assert loaded.tree == tree


@pytest.mark.asyncio
async def test_legacy_stored_rows_are_normalized(db_session: AsyncSession, tenant: Tenant) -> None:
    """Rows in the old list encoding load as full subjects."""
    await service.upsert_config(
        db_session,
        tenant.id,
        {"MBA": {"years": ["1st Year"], "yearDepartments": {"1st Year": ["Finance"]}}},
        {"MBA": {"1st Year": {"Finance": ["Accounts", "Taxation"]}}},
    )

    loaded = await service.load_academic_config(db_session, tenant.id)
    subjects = loaded.tree.courses[0].years[0].departments[0].subjects
    assert [s.name for s in subjects] == ["Accounts", "Taxation"]
    assert all(s.type == SubjectType.THEORY and s.code == "" for s in subjects)
    assert subjects[0].batches == ["A", "B", "C", "D"]
    assert loaded.tree.batches == ["A", "B", "C", "D"]

    course_index, subject_table = await service.load_views(db_session, tenant.id)
    assert course_index["MBA"].years == ["1st Year"]
    assert list(subject_table["MBA"]["1st Year"]["Finance"]) == ["Accounts", "Taxation"]


@pytest.mark.asyncio
async def test_save_rejects_exact_duplicate_siblings(
    db_session: AsyncSession, session_factory: async_sessionmaker, tenant: Tenant
) -> None:
    tree = AcademicTree(courses=[CourseNode(name="MBA"), CourseNode(name="MBA")])
    with pytest.raises(HierarchyValidationError) as exc:
        await service.save_academic_config(db_session, session_factory, tenant.id, tree)
    assert exc.value.field == "tree"
    assert await service.get_config(db_session, tenant.id) is None


@pytest.mark.asyncio
async def test_save_rejects_case_only_duplicate_courses(
    db_session: AsyncSession, session_factory: async_sessionmaker, tenant: Tenant
) -> None:
    """Course names that differ only in case are one course."""
    tree = AcademicTree(courses=[CourseNode(name="Engineering"), CourseNode(name="engineering")])
    with pytest.raises(HierarchyValidationError) as exc:
        await service.save_academic_config(db_session, session_factory, tenant.id, tree)
    assert exc.value.message == "Duplicate course 'engineering'."
    assert await service.get_config(db_session, tenant.id) is None


@pytest.mark.asyncio
async def test_save_write_failure_raises_persistence_error(
    db_session: AsyncSession, session_factory: async_sessionmaker, tenant: Tenant, monkeypatch
) -> None:
    """A failed config write rolls back, creates no departments and raises PersistenceError."""

    async def failing_upsert(*args, **kwargs):
        raise SQLAlchemyError("disk I/O error")

    monkeypatch.setattr(service, "upsert_config", failing_upsert)

    with pytest.raises(PersistenceError) as exc:
        await service.save_academic_config(db_session, session_factory, tenant.id, _mba_finance_tree())
    assert exc.value.status_code == 503
    assert exc.value.message == "Failed to save academic configuration"
    assert await _departments(db_session, tenant.id) == []


@pytest.mark.asyncio
async def test_department_creation_failure_does_not_fail_save(
    db_session: AsyncSession, session_factory: async_sessionmaker, tenant: Tenant, monkeypatch
) -> None:
    """Departments that cannot be created are reported; the configuration is still saved."""
    real_ensure = department_service.ensure_department

    async def flaky_ensure(db, tenant_id, name):
        if name == "Marketing":
            raise SQLAlchemyError("connection reset")
        return await real_ensure(db, tenant_id, name)

    monkeypatch.setattr(department_service, "ensure_department", flaky_ensure)

    tree = AcademicTree(
        courses=[
            CourseNode(
                name="MBA",
                years=[YearNode(name="1", departments=[DepartmentNode(name="Finance"), DepartmentNode(name="Marketing")])],
            )
        ]
    )
    result = await service.save_academic_config(db_session, session_factory, tenant.id, tree)

    assert result.state == SaveState.SAVED
    assert result.created_departments == ["Finance"]
    assert result.failed_departments == ["Marketing"]
    assert [d.name for d in await _departments(db_session, tenant.id)] == ["Finance"]
    config = await service.get_config(db_session, tenant.id)
    assert config.course_index["MBA"]["year_departments"] == {"1": ["Finance", "Marketing"]}


@pytest.mark.asyncio
async def test_apply_template(db_session: AsyncSession, session_factory: async_sessionmaker, tenant: Tenant) -> None:
    result = await service.apply_template(db_session, session_factory, tenant.id, "igsb")
    assert list(result.course_index) == ["MBA", "BBA"]
    assert sorted(result.created_departments) == sorted(
        ["Marketing", "Finance", "Human Resources", "Operations", "Business Analytics"]
    )

    loaded = await service.load_academic_config(db_session, tenant.id)
    assert loaded.source == ConfigSource.STORED


@pytest.mark.asyncio
async def test_apply_unknown_template(
    db_session: AsyncSession, session_factory: async_sessionmaker, tenant: Tenant
) -> None:
    with pytest.raises(ServiceError) as exc:
        await service.apply_template(db_session, session_factory, tenant.id, "nope")
    assert exc.value.status_code == 404


def test_list_templates_summaries() -> None:
    """Template summaries count courses, distinct departments and subjects."""
    summaries = {t.id: t for t in service.list_templates()}
    assert set(summaries) == {"default", "icem", "igsb"}
    assert summaries["igsb"].courses == 2
    assert summaries["igsb"].departments == 5
    assert summaries["default"].institution_code is None
