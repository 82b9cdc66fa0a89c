from typing import Dict

from fastapi import Depends, HTTPException, status

from feedback_admin.auth.dependencies import get_current_user
from feedback_admin.auth.schemas import CurrentUser
from feedback_admin.core.enums import UserRole

_READ_ONLY = {"read": True}

# Baseline grants per role; token "permissions" claims are merged on top.
DEFAULT_ROLE_PERMISSIONS: Dict[str, Dict[str, Dict[str, bool]]] = {
    UserRole.HOD.value: {
        "academic_config": dict(_READ_ONLY),
        "departments": dict(_READ_ONLY),
    },
    UserRole.FACULTY.value: {
        "academic_config": dict(_READ_ONLY),
        "departments": dict(_READ_ONLY),
    },
}


def check_permission(module: str, action: str):
    """
    Dependency factory to enforce a specific permission.

    Example:
        Depends(check_permission("academic_config", "update"))
    """

    async def _checker(current_user: CurrentUser = Depends(get_current_user)) -> None:
        if current_user.role in (UserRole.SUPER_ADMIN.value, UserRole.ADMIN.value):
            return
        baseline = DEFAULT_ROLE_PERMISSIONS.get(current_user.role, {})
        module_perms = {**baseline.get(module, {}), **(current_user.permissions or {}).get(module, {})}
        if not module_perms.get(action, False):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )

    return _checker
