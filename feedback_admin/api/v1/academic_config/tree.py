"""Path-indexed add/edit/delete operations on the academic hierarchy tree.

Each operation takes the tree and the indices of the target's ancestors,
re-validates that path, and returns a new tree. The input tree is never
modified, so a rejected operation leaves the caller's copy as it was.
"""

from typing import Callable, Dict, List, Optional, Tuple

from feedback_admin.core.enums import HierarchyLevel, SubjectType, TreeAction
from feedback_admin.core.exceptions import (
    CascadeDeleteError,
    HierarchyValidationError,
    InvalidSelectionError,
)

from .schemas import (
    AcademicTree,
    CourseNode,
    DepartmentNode,
    HierarchyPath,
    SubjectNode,
    YearNode,
)
from .validators import (
    HierarchyPolicy,
    validate_batch_name,
    validate_course_name,
    validate_department_name,
    validate_subject_name,
    validate_subject_type,
    validate_year_name,
)


def _pick(items: List, index: Optional[int], label: str):
    if index is None or index < 0 or index >= len(items):
        raise InvalidSelectionError(f"Invalid {label} selected.")
    return items[index]


def _raise_if(error: Optional[str], level: HierarchyLevel, field: str = "name") -> None:
    if error:
        raise HierarchyValidationError(error, field=field, level=level.value)


def _course(tree: AcademicTree, ci: Optional[int]) -> CourseNode:
    return _pick(tree.courses, ci, "course")


def _year(tree: AcademicTree, ci: Optional[int], yi: Optional[int]) -> YearNode:
    return _pick(_course(tree, ci).years, yi, "year")


def _department(tree: AcademicTree, ci: Optional[int], yi: Optional[int], di: Optional[int]) -> DepartmentNode:
    return _pick(_year(tree, ci, yi).departments, di, "department")


def _subject(
    tree: AcademicTree, ci: Optional[int], yi: Optional[int], di: Optional[int], si: Optional[int]
) -> SubjectNode:
    return _pick(_department(tree, ci, yi, di).subjects, si, "subject")


def _copy(tree: AcademicTree) -> AcademicTree:
    return tree.model_copy(deep=True)


# ---------------------------------------------------------------------------
# Courses
# ---------------------------------------------------------------------------


def add_course(tree: AcademicTree, name: str, policy: Optional[HierarchyPolicy] = None) -> AcademicTree:
    siblings = [c.name for c in tree.courses]
    _raise_if(validate_course_name(name, siblings, policy=policy), HierarchyLevel.COURSE)
    new_tree = _copy(tree)
    new_tree.courses.append(CourseNode(name=name.strip()))
    return new_tree


def edit_course(
    tree: AcademicTree, course_index: int, name: str, policy: Optional[HierarchyPolicy] = None
) -> AcademicTree:
    _course(tree, course_index)
    siblings = [c.name for c in tree.courses]
    _raise_if(validate_course_name(name, siblings, course_index, policy=policy), HierarchyLevel.COURSE)
    new_tree = _copy(tree)
    new_tree.courses[course_index].name = name.strip()
    return new_tree


def delete_course(tree: AcademicTree, course_index: int) -> AcademicTree:
    _course(tree, course_index)
    new_tree = _copy(tree)
    del new_tree.courses[course_index]
    return new_tree


# ---------------------------------------------------------------------------
# Years
# ---------------------------------------------------------------------------


def add_year(
    tree: AcademicTree, course_index: int, name: str, policy: Optional[HierarchyPolicy] = None
) -> AcademicTree:
    course = _course(tree, course_index)
    siblings = [y.name for y in course.years]
    _raise_if(validate_year_name(name, siblings, policy=policy), HierarchyLevel.YEAR)
    new_tree = _copy(tree)
    new_tree.courses[course_index].years.append(YearNode(name=name.strip()))
    return new_tree


def edit_year(
    tree: AcademicTree,
    course_index: int,
    year_index: int,
    name: str,
    policy: Optional[HierarchyPolicy] = None,
) -> AcademicTree:
    _year(tree, course_index, year_index)
    siblings = [y.name for y in tree.courses[course_index].years]
    _raise_if(validate_year_name(name, siblings, year_index, policy=policy), HierarchyLevel.YEAR)
    new_tree = _copy(tree)
    new_tree.courses[course_index].years[year_index].name = name.strip()
    return new_tree


def delete_year(tree: AcademicTree, course_index: int, year_index: int) -> AcademicTree:
    year = _year(tree, course_index, year_index)
    if year.departments:
        raise CascadeDeleteError(
            "Cannot delete year with existing departments. Please delete all departments first."
        )
    new_tree = _copy(tree)
    del new_tree.courses[course_index].years[year_index]
    return new_tree


# ---------------------------------------------------------------------------
# Departments
# ---------------------------------------------------------------------------


def add_department(tree: AcademicTree, course_index: int, year_index: int, name: str) -> AcademicTree:
    year = _year(tree, course_index, year_index)
    siblings = [d.name for d in year.departments]
    _raise_if(validate_department_name(name, siblings), HierarchyLevel.DEPARTMENT)
    new_tree = _copy(tree)
    new_tree.courses[course_index].years[year_index].departments.append(DepartmentNode(name=name.strip()))
    return new_tree


def edit_department(
    tree: AcademicTree, course_index: int, year_index: int, department_index: int, name: str
) -> AcademicTree:
    _department(tree, course_index, year_index, department_index)
    siblings = [d.name for d in tree.courses[course_index].years[year_index].departments]
    _raise_if(validate_department_name(name, siblings, department_index), HierarchyLevel.DEPARTMENT)
    new_tree = _copy(tree)
    new_tree.courses[course_index].years[year_index].departments[department_index].name = name.strip()
    return new_tree


def delete_department(
    tree: AcademicTree, course_index: int, year_index: int, department_index: int
) -> AcademicTree:
    department = _department(tree, course_index, year_index, department_index)
    if department.subjects:
        raise CascadeDeleteError(
            "Cannot delete department with existing subjects. Please delete all subjects first."
        )
    new_tree = _copy(tree)
    del new_tree.courses[course_index].years[year_index].departments[department_index]
    return new_tree


# ---------------------------------------------------------------------------
# Subjects
# ---------------------------------------------------------------------------


def add_subject(
    tree: AcademicTree,
    course_index: int,
    year_index: int,
    department_index: int,
    name: str,
    code: Optional[str] = None,
    subject_type: Optional[SubjectType] = None,
) -> AcademicTree:
    department = _department(tree, course_index, year_index, department_index)
    siblings = [s.name for s in department.subjects]
    _raise_if(validate_subject_name(name, siblings), HierarchyLevel.SUBJECT)
    _raise_if(validate_subject_type(subject_type), HierarchyLevel.SUBJECT, field="type")
    new_tree = _copy(tree)
    new_tree.courses[course_index].years[year_index].departments[department_index].subjects.append(
        SubjectNode(
            name=name.strip(),
            code=(code or "").strip(),
            type=subject_type or SubjectType.THEORY,
            batches=[],
        )
    )
    return new_tree


def edit_subject(
    tree: AcademicTree,
    course_index: int,
    year_index: int,
    department_index: int,
    subject_index: int,
    name: str,
    code: Optional[str] = None,
    subject_type: Optional[SubjectType] = None,
) -> AcademicTree:
    _subject(tree, course_index, year_index, department_index, subject_index)
    siblings = [s.name for s in tree.courses[course_index].years[year_index].departments[department_index].subjects]
    _raise_if(validate_subject_name(name, siblings, subject_index), HierarchyLevel.SUBJECT)
    _raise_if(validate_subject_type(subject_type), HierarchyLevel.SUBJECT, field="type")
    new_tree = _copy(tree)
    subject = new_tree.courses[course_index].years[year_index].departments[department_index].subjects[subject_index]
    subject.name = name.strip()
    # Omitted code / type keep their current values
    if code is not None:
        subject.code = code.strip()
    if subject_type is not None:
        subject.type = SubjectType(subject_type)
    return new_tree


def delete_subject(
    tree: AcademicTree, course_index: int, year_index: int, department_index: int, subject_index: int
) -> AcademicTree:
    _subject(tree, course_index, year_index, department_index, subject_index)
    new_tree = _copy(tree)
    del new_tree.courses[course_index].years[year_index].departments[department_index].subjects[subject_index]
    return new_tree


# ---------------------------------------------------------------------------
# Batches
# ---------------------------------------------------------------------------


def add_batch(
    tree: AcademicTree,
    course_index: int,
    year_index: int,
    department_index: int,
    subject_index: int,
    name: str,
) -> AcademicTree:
    subject = _subject(tree, course_index, year_index, department_index, subject_index)
    _raise_if(validate_batch_name(name, subject.batches), HierarchyLevel.BATCH)
    new_tree = _copy(tree)
    target = new_tree.courses[course_index].years[year_index].departments[department_index].subjects[subject_index]
    target.batches.append(name.strip())
    return new_tree


def edit_batch(
    tree: AcademicTree,
    course_index: int,
    year_index: int,
    department_index: int,
    subject_index: int,
    batch_index: int,
    name: str,
) -> AcademicTree:
    subject = _subject(tree, course_index, year_index, department_index, subject_index)
    _pick(subject.batches, batch_index, "batch")
    _raise_if(validate_batch_name(name, subject.batches, batch_index), HierarchyLevel.BATCH)
    new_tree = _copy(tree)
    target = new_tree.courses[course_index].years[year_index].departments[department_index].subjects[subject_index]
    target.batches[batch_index] = name.strip()
    return new_tree


def delete_batch(
    tree: AcademicTree,
    course_index: int,
    year_index: int,
    department_index: int,
    subject_index: int,
    batch_index: int,
) -> AcademicTree:
    subject = _subject(tree, course_index, year_index, department_index, subject_index)
    _pick(subject.batches, batch_index, "batch")
    new_tree = _copy(tree)
    target = new_tree.courses[course_index].years[year_index].departments[department_index].subjects[subject_index]
    del target.batches[batch_index]
    return new_tree


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


def _require_name(name: Optional[str]) -> str:
    if name is None:
        raise HierarchyValidationError("Name is required.")
    return name


_Handler = Callable[[AcademicTree, HierarchyPath, Optional[str], Optional[str], Optional[SubjectType], Optional[HierarchyPolicy]], AcademicTree]

_OPERATIONS: Dict[Tuple[TreeAction, HierarchyLevel], _Handler] = {
    (TreeAction.ADD, HierarchyLevel.COURSE): lambda t, p, n, c, st, pol: add_course(t, _require_name(n), pol),
    (TreeAction.EDIT, HierarchyLevel.COURSE): lambda t, p, n, c, st, pol: edit_course(
        t, p.course_index, _require_name(n), pol
    ),
    (TreeAction.DELETE, HierarchyLevel.COURSE): lambda t, p, n, c, st, pol: delete_course(t, p.course_index),
    (TreeAction.ADD, HierarchyLevel.YEAR): lambda t, p, n, c, st, pol: add_year(
        t, p.course_index, _require_name(n), pol
    ),
    (TreeAction.EDIT, HierarchyLevel.YEAR): lambda t, p, n, c, st, pol: edit_year(
        t, p.course_index, p.year_index, _require_name(n), pol
    ),
    (TreeAction.DELETE, HierarchyLevel.YEAR): lambda t, p, n, c, st, pol: delete_year(
        t, p.course_index, p.year_index
    ),
    (TreeAction.ADD, HierarchyLevel.DEPARTMENT): lambda t, p, n, c, st, pol: add_department(
        t, p.course_index, p.year_index, _require_name(n)
    ),
    (TreeAction.EDIT, HierarchyLevel.DEPARTMENT): lambda t, p, n, c, st, pol: edit_department(
        t, p.course_index, p.year_index, p.department_index, _require_name(n)
    ),
    (TreeAction.DELETE, HierarchyLevel.DEPARTMENT): lambda t, p, n, c, st, pol: delete_department(
        t, p.course_index, p.year_index, p.department_index
    ),
    (TreeAction.ADD, HierarchyLevel.SUBJECT): lambda t, p, n, c, st, pol: add_subject(
        t, p.course_index, p.year_index, p.department_index, _require_name(n), c, st
    ),
    (TreeAction.EDIT, HierarchyLevel.SUBJECT): lambda t, p, n, c, st, pol: edit_subject(
        t, p.course_index, p.year_index, p.department_index, p.subject_index, _require_name(n), c, st
    ),
    (TreeAction.DELETE, HierarchyLevel.SUBJECT): lambda t, p, n, c, st, pol: delete_subject(
        t, p.course_index, p.year_index, p.department_index, p.subject_index
    ),
    (TreeAction.ADD, HierarchyLevel.BATCH): lambda t, p, n, c, st, pol: add_batch(
        t, p.course_index, p.year_index, p.department_index, p.subject_index, _require_name(n)
    ),
    (TreeAction.EDIT, HierarchyLevel.BATCH): lambda t, p, n, c, st, pol: edit_batch(
        t, p.course_index, p.year_index, p.department_index, p.subject_index, p.batch_index, _require_name(n)
    ),
    (TreeAction.DELETE, HierarchyLevel.BATCH): lambda t, p, n, c, st, pol: delete_batch(
        t, p.course_index, p.year_index, p.department_index, p.subject_index, p.batch_index
    ),
}


def apply_operation(
    tree: AcademicTree,
    action: TreeAction,
    level: HierarchyLevel,
    path: Optional[HierarchyPath] = None,
    name: Optional[str] = None,
    code: Optional[str] = None,
    subject_type: Optional[SubjectType] = None,
    policy: Optional[HierarchyPolicy] = None,
) -> AcademicTree:
    """Run one (action, level) operation, e.g. (ADD, YEAR) -> add_year."""
    handler = _OPERATIONS[(TreeAction(action), HierarchyLevel(level))]
    return handler(tree, path or HierarchyPath(), name, code, subject_type, policy)


def sibling_names(tree: AcademicTree, level: HierarchyLevel, path: Optional[HierarchyPath] = None) -> List[str]:
    """Names of the nodes a new or edited node at `level` under `path` must not collide with."""
    path = path or HierarchyPath()
    level = HierarchyLevel(level)
    if level == HierarchyLevel.COURSE:
        return [c.name for c in tree.courses]
    if level == HierarchyLevel.YEAR:
        return [y.name for y in _course(tree, path.course_index).years]
    if level == HierarchyLevel.DEPARTMENT:
        return [d.name for d in _year(tree, path.course_index, path.year_index).departments]
    if level == HierarchyLevel.SUBJECT:
        return [
            s.name
            for s in _department(tree, path.course_index, path.year_index, path.department_index).subjects
        ]
    return list(
        _subject(tree, path.course_index, path.year_index, path.department_index, path.subject_index).batches
    )


def validate_name(
    tree: AcademicTree,
    level: HierarchyLevel,
    name: str,
    path: Optional[HierarchyPath] = None,
    exclude_index: Optional[int] = None,
    policy: Optional[HierarchyPolicy] = None,
) -> Optional[str]:
    """Run the level's validator against the siblings found at `path`. Raises InvalidSelectionError for a bad path."""
    level = HierarchyLevel(level)
    siblings = sibling_names(tree, level, path)
    if level == HierarchyLevel.COURSE:
        return validate_course_name(name, siblings, exclude_index, policy)
    if level == HierarchyLevel.YEAR:
        return validate_year_name(name, siblings, exclude_index, policy)
    if level == HierarchyLevel.DEPARTMENT:
        return validate_department_name(name, siblings, exclude_index)
    if level == HierarchyLevel.SUBJECT:
        return validate_subject_name(name, siblings, exclude_index)
    return validate_batch_name(name, siblings, exclude_index)
