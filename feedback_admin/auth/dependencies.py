from typing import Dict
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError

from feedback_admin.auth.schemas import CurrentUser
from feedback_admin.auth.security import decode_access_token


bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> CurrentUser:
    """Resolve the caller's tenant, role and permissions from the bearer token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise credentials_exception

    try:
        payload = decode_access_token(credentials.credentials)
    except JWTError:
        raise credentials_exception

    tenant_id_str = payload.get("tenant_id")
    role_name = payload.get("role")
    if not tenant_id_str or not role_name:
        raise credentials_exception

    try:
        tenant_id = UUID(str(tenant_id_str))
    except ValueError:
        raise credentials_exception

    permissions: Dict[str, Dict[str, bool]] = {}
    if isinstance(payload.get("permissions"), dict):
        permissions = payload["permissions"]

    return CurrentUser(
        id=payload.get("sub"),
        tenant_id=tenant_id,
        role=str(role_name).upper(),
        permissions=permissions,
    )
