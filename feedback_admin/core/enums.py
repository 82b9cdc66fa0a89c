from enum import Enum


class SubjectType(str, Enum):
    THEORY = "Theory"
    PRACTICAL = "Practical"
    TUTORIAL = "Tutorial"
    THEORY_PRACTICAL = "Theory / Practical"


class HierarchyLevel(str, Enum):
    COURSE = "course"
    YEAR = "year"
    DEPARTMENT = "department"
    SUBJECT = "subject"
    BATCH = "batch"


class TreeAction(str, Enum):
    ADD = "add"
    EDIT = "edit"
    DELETE = "delete"


class SaveState(str, Enum):
    SAVED = "SAVED"
    FAILED = "FAILED"


class ConfigSource(str, Enum):
    STORED = "stored"
    TEMPLATE = "template"


class UserRole(str, Enum):
    SUPER_ADMIN = "SUPER_ADMIN"
    ADMIN = "ADMIN"
    HOD = "HOD"
    FACULTY = "FACULTY"
