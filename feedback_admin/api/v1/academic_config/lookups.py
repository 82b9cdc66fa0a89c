"""Read-only projections used by session creation, dashboards and allocation screens.

They take the normalized course index / subject table and never fail on
unknown keys; a missing course, year or department simply yields no options.
"""

from typing import Dict, List, Mapping, Optional, Sequence

from .schemas import CourseIndexEntry, SubjectRecord

DEFAULT_SEMESTERS = ("Odd", "Even")

SubjectTableView = Mapping[str, Mapping[str, Mapping[str, Mapping[str, SubjectRecord]]]]


def get_all_courses(course_index: Mapping[str, CourseIndexEntry]) -> List[str]:
    return list(course_index.keys())


def get_years_for_course(course_index: Mapping[str, CourseIndexEntry], course: str) -> List[str]:
    entry = course_index.get(course)
    return list(entry.years) if entry else []


def get_departments_for_course_year(
    course_index: Mapping[str, CourseIndexEntry], course: str, year: str
) -> List[str]:
    entry = course_index.get(course)
    if not entry:
        return []
    return list(entry.year_departments.get(year, []))


def get_semesters_for_course(
    course_index: Mapping[str, CourseIndexEntry],
    course: str,
    default: Sequence[str] = DEFAULT_SEMESTERS,
) -> List[str]:
    entry = course_index.get(course)
    if entry and entry.semesters:
        return list(entry.semesters)
    return list(default)


def _department_subjects(
    subject_table: SubjectTableView, course: str, year: str, department: str
) -> Mapping[str, SubjectRecord]:
    return subject_table.get(course, {}).get(year, {}).get(department, {})


def get_subjects_for_context(subject_table: SubjectTableView, course: str, year: str, department: str) -> List[str]:
    return list(_department_subjects(subject_table, course, year, department).keys())


def get_subject_details(
    subject_table: SubjectTableView, course: str, year: str, department: str
) -> Dict[str, SubjectRecord]:
    return dict(_department_subjects(subject_table, course, year, department))


def get_batches_for_subject(
    subject_table: SubjectTableView, course: str, year: str, department: str, subject: str
) -> List[str]:
    record: Optional[SubjectRecord] = _department_subjects(subject_table, course, year, department).get(subject)
    return list(record.batches) if record else []
