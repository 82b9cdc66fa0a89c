"""Per-level name validators for the academic hierarchy.

Every validator is pure: it takes the candidate value plus the names of the
node's siblings and returns None when valid, or a message to show next to the
field. Validators never raise.
"""

import re
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from feedback_admin.core.enums import SubjectType

DEFAULT_RESERVED_COURSE_NAMES: Tuple[str, ...] = ("admin", "system", "test", "null", "undefined")
DEFAULT_YEAR_VALUES: Tuple[str, ...] = ("1", "2", "3", "4")
DEFAULT_BATCHES: Tuple[str, ...] = ("A", "B", "C", "D")

COURSE_NAME_RE = re.compile(r"^[a-zA-Z0-9\s\-_]+$")
YEAR_LABEL_RE = re.compile(r"^[a-zA-Z0-9\s\-_]+$")
DEPARTMENT_NAME_RE = re.compile(r"^[a-zA-Z0-9\s\-_&]+$")
SUBJECT_NAME_RE = re.compile(r"^[a-zA-Z0-9\s\-_()]+$")
BATCH_NAME_RE = re.compile(r"^[a-zA-Z0-9\s\-_]+$")


@dataclass(frozen=True)
class HierarchyPolicy:
    """College-tunable rules. An empty year_values accepts free-text year labels."""

    reserved_course_names: Tuple[str, ...] = DEFAULT_RESERVED_COURSE_NAMES
    year_values: Tuple[str, ...] = DEFAULT_YEAR_VALUES
    default_batches: Tuple[str, ...] = DEFAULT_BATCHES


def _is_duplicate(
    value: str,
    siblings: Sequence[str],
    exclude_index: Optional[int],
    case_sensitive: bool,
) -> bool:
    target = value if case_sensitive else value.lower()
    for index, sibling in enumerate(siblings):
        if index == exclude_index:
            continue
        candidate = sibling if case_sensitive else sibling.lower()
        if candidate == target:
            return True
    return False


def _check_length(label: str, value: str, min_len: int, max_len: int) -> Optional[str]:
    if len(value) < min_len:
        unit = "character" if min_len == 1 else "characters"
        return f"{label} name must be at least {min_len} {unit} long."
    if len(value) > max_len:
        return f"{label} name cannot exceed {max_len} characters."
    return None


def validate_course_name(
    value: str,
    siblings: Sequence[str] = (),
    exclude_index: Optional[int] = None,
    policy: Optional[HierarchyPolicy] = None,
) -> Optional[str]:
    policy = policy or HierarchyPolicy()
    trimmed = value.strip()
    if not trimmed:
        return "Course name cannot be empty."
    error = _check_length("Course", trimmed, 2, 50)
    if error:
        return error
    if not COURSE_NAME_RE.match(trimmed):
        return "Course name can only contain letters, numbers, spaces, hyphens, and underscores."
    if _is_duplicate(trimmed, siblings, exclude_index, case_sensitive=False):
        return "A course with this name already exists."
    if trimmed.lower() in {word.lower() for word in policy.reserved_course_names}:
        return "This course name is reserved and cannot be used."
    return None


def validate_year_name(
    value: str,
    siblings: Sequence[str] = (),
    exclude_index: Optional[int] = None,
    policy: Optional[HierarchyPolicy] = None,
) -> Optional[str]:
    policy = policy or HierarchyPolicy()
    trimmed = value.strip()
    if not trimmed:
        return "Year cannot be empty."
    if policy.year_values:
        if trimmed not in policy.year_values:
            allowed = ", ".join(policy.year_values[:-1])
            if len(policy.year_values) > 1:
                allowed = f"{allowed}, or {policy.year_values[-1]}"
            else:
                allowed = policy.year_values[0]
            return f"Only the values {allowed} are allowed for years."
    else:
        error = _check_length("Year", trimmed, 1, 20)
        if error:
            return error
        if not YEAR_LABEL_RE.match(trimmed):
            return "Year name can only contain letters, numbers, spaces, hyphens, and underscores."
    if _is_duplicate(trimmed, siblings, exclude_index, case_sensitive=True):
        return f"Year {trimmed} already exists in this course."
    return None


def validate_department_name(
    value: str,
    siblings: Sequence[str] = (),
    exclude_index: Optional[int] = None,
) -> Optional[str]:
    trimmed = value.strip()
    if not trimmed:
        return "Department name cannot be empty."
    error = _check_length("Department", trimmed, 2, 50)
    if error:
        return error
    if not DEPARTMENT_NAME_RE.match(trimmed):
        return (
            "Department name can only contain letters, numbers, spaces, hyphens, underscores, "
            "and ampersands (&)."
        )
    if _is_duplicate(trimmed, siblings, exclude_index, case_sensitive=False):
        return "A department with this name already exists in this year."
    return None


def validate_subject_name(
    value: str,
    siblings: Sequence[str] = (),
    exclude_index: Optional[int] = None,
) -> Optional[str]:
    trimmed = value.strip()
    if not trimmed:
        return "Subject name cannot be empty."
    error = _check_length("Subject", trimmed, 2, 100)
    if error:
        return error
    if not SUBJECT_NAME_RE.match(trimmed):
        return (
            "Subject name can only contain letters, numbers, spaces, hyphens, underscores, "
            "and parentheses."
        )
    if _is_duplicate(trimmed, siblings, exclude_index, case_sensitive=False):
        return "A subject with this name already exists in this department."
    return None


def validate_subject_type(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    allowed = [t.value for t in SubjectType]
    if value not in allowed:
        return f"Subject type must be one of: {', '.join(allowed)}."
    return None


def validate_batch_name(
    value: str,
    siblings: Sequence[str] = (),
    exclude_index: Optional[int] = None,
) -> Optional[str]:
    trimmed = value.strip()
    if not trimmed:
        return "Batch name cannot be empty."
    error = _check_length("Batch", trimmed, 1, 10)
    if error:
        return error
    if not BATCH_NAME_RE.match(trimmed):
        return "Batch name can only contain letters, numbers, spaces, hyphens, and underscores."
    if _is_duplicate(trimmed, siblings, exclude_index, case_sensitive=True):
        return f"Batch {trimmed} already exists in this subject."
    return None
