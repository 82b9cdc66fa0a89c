"""Conversions between the editable tree and the two persisted shapes.

Stored subject data comes in more than one encoding:

- legacy: {department: ["Subject A", "Subject B"]}
- current: {department: {"Subject A": {"code": ..., "type": ..., "batches": [...]}}}

Rows written by older editors may also hold a bare batch list in place of the
subject record. All of these are accepted here and nowhere else; the tree the
loader returns only ever contains canonical SubjectNode objects.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from feedback_admin.core.enums import SubjectType

from .schemas import (
    AcademicTree,
    CourseIndexEntry,
    CourseNode,
    DepartmentNode,
    SubjectNode,
    SubjectRecord,
    YearNode,
)
from .validators import DEFAULT_BATCHES

logger = logging.getLogger(__name__)


def _coerce_subject_type(raw: Any, subject_name: str) -> SubjectType:
    if raw in (None, ""):
        return SubjectType.THEORY
    try:
        return SubjectType(raw)
    except ValueError:
        logger.warning("Unknown subject type %r for subject %r; using Theory", raw, subject_name)
        return SubjectType.THEORY


def _string_list(raw: Any) -> List[str]:
    if not isinstance(raw, (list, tuple)):
        return []
    return [str(item) for item in raw]


def normalize_subjects(raw: Any, default_batches: Sequence[str] = DEFAULT_BATCHES) -> List[SubjectNode]:
    """Turn one department's stored subjects, in any supported encoding, into SubjectNodes."""
    if not raw:
        return []
    if isinstance(raw, (list, tuple)):
        return [
            SubjectNode(name=str(name), code="", type=SubjectType.THEORY, batches=list(default_batches))
            for name in raw
        ]
    if not isinstance(raw, Mapping):
        logger.warning("Ignoring subject data of unexpected type %s", type(raw).__name__)
        return []

    subjects: List[SubjectNode] = []
    for name, record in raw.items():
        if isinstance(record, (list, tuple)):
            subjects.append(SubjectNode(name=name, batches=_string_list(record)))
            continue
        record = record if isinstance(record, Mapping) else {}
        subjects.append(
            SubjectNode(
                name=name,
                code=str(record.get("code") or ""),
                type=_coerce_subject_type(record.get("type"), name),
                batches=_string_list(record.get("batches")),
            )
        )
    return subjects


def _year_departments(course_info: Mapping[str, Any]) -> Mapping[str, Any]:
    mapping = course_info.get("year_departments")
    if mapping is None:
        mapping = course_info.get("yearDepartments")
    return mapping if isinstance(mapping, Mapping) else {}


def build_tree(
    course_index: Optional[Mapping[str, Any]],
    subject_table: Optional[Mapping[str, Any]],
    batches: Optional[Sequence[str]] = None,
    default_batches: Sequence[str] = DEFAULT_BATCHES,
) -> AcademicTree:
    """Build the editable tree from stored (or template) shapes.

    The course index drives structure and order; subject table entries that no
    course index path reaches are dropped. Legacy subject lists get the stored
    batch set, or `default_batches` when none was stored.
    """
    course_index = course_index or {}
    subject_table = subject_table or {}
    legacy_batches = list(batches) if batches else list(default_batches)
    courses: List[CourseNode] = []

    for course_name, course_info in course_index.items():
        course_info = course_info if isinstance(course_info, Mapping) else {}
        year_departments = _year_departments(course_info)
        course_subjects = subject_table.get(course_name) or {}
        years: List[YearNode] = []
        for year_name in _string_list(course_info.get("years")):
            year_subjects = course_subjects.get(year_name) or {}
            departments = [
                DepartmentNode(
                    name=dept_name,
                    subjects=normalize_subjects(year_subjects.get(dept_name), legacy_batches),
                )
                for dept_name in _string_list(year_departments.get(year_name))
            ]
            years.append(YearNode(name=year_name, departments=departments))

        semesters = course_info.get("semesters")
        courses.append(
            CourseNode(
                name=course_name,
                years=years,
                semesters=_string_list(semesters) if semesters is not None else None,
            )
        )

    return AcademicTree(
        courses=courses,
        batches=legacy_batches,
    )


def derive_course_index(tree: AcademicTree) -> Dict[str, CourseIndexEntry]:
    index: Dict[str, CourseIndexEntry] = {}
    for course in tree.courses:
        index[course.name] = CourseIndexEntry(
            years=[y.name for y in course.years],
            year_departments={y.name: [d.name for d in y.departments] for y in course.years},
            semesters=list(course.semesters) if course.semesters is not None else None,
        )
    return index


def derive_subject_table(tree: AcademicTree) -> Dict[str, Dict[str, Dict[str, Dict[str, SubjectRecord]]]]:
    table: Dict[str, Dict[str, Dict[str, Dict[str, SubjectRecord]]]] = {}
    for course in tree.courses:
        course_entry = table.setdefault(course.name, {})
        for year in course.years:
            year_entry = course_entry.setdefault(year.name, {})
            for department in year.departments:
                year_entry[department.name] = {
                    subject.name: SubjectRecord(
                        code=subject.code,
                        type=subject.type,
                        batches=list(subject.batches),
                    )
                    for subject in department.subjects
                }
    return table


def dump_course_index(index: Mapping[str, CourseIndexEntry]) -> Dict[str, Any]:
    return {name: entry.model_dump(mode="json", exclude_none=True) for name, entry in index.items()}


def dump_subject_table(table: Mapping[str, Mapping[str, Mapping[str, Mapping[str, SubjectRecord]]]]) -> Dict[str, Any]:
    return {
        course: {
            year: {
                dept: {subject: record.model_dump(mode="json") for subject, record in subjects.items()}
                for dept, subjects in depts.items()
            }
            for year, depts in years.items()
        }
        for course, years in table.items()
    }


def find_key_collision(tree: AcademicTree) -> Optional[str]:
    """Report sibling names that would collide in the keyed shapes.

    Courses, departments and subjects collide ignoring case, as their
    validators compare them; years only when exactly equal. Batch lists are
    not keys and are left alone.
    """

    def _first_duplicate(names: Sequence[str], case_sensitive: bool = False) -> Optional[str]:
        seen = set()
        for name in names:
            key = name if case_sensitive else name.lower()
            if key in seen:
                return name
            seen.add(key)
        return None

    dup = _first_duplicate([c.name for c in tree.courses])
    if dup is not None:
        return f"Duplicate course '{dup}'."
    for course in tree.courses:
        dup = _first_duplicate([y.name for y in course.years], case_sensitive=True)
        if dup is not None:
            return f"Duplicate year '{dup}' in course '{course.name}'."
        for year in course.years:
            dup = _first_duplicate([d.name for d in year.departments])
            if dup is not None:
                return f"Duplicate department '{dup}' in {course.name} year {year.name}."
            for department in year.departments:
                dup = _first_duplicate([s.name for s in department.subjects])
                if dup is not None:
                    return f"Duplicate subject '{dup}' in department '{department.name}'."
    return None


def collect_department_names(course_index: Mapping[str, CourseIndexEntry]) -> List[str]:
    """Distinct department names across every course and year, in first-seen order."""
    names: Dict[str, None] = {}
    for entry in course_index.values():
        for departments in entry.year_departments.values():
            for name in departments:
                names.setdefault(name, None)
    return list(names)
