from feedback_admin.core.models.tenant import Tenant
from feedback_admin.core.models.department import Department
from feedback_admin.core.models.academic_config import AcademicConfig

__all__ = [
    "AcademicConfig",
    "Department",
    "Tenant",
]
