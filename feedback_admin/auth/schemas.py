from typing import Dict, Optional
from uuid import UUID

from pydantic import BaseModel


class CurrentUser(BaseModel):
    """Lightweight representation of the authenticated user for RBAC checks.
    Built from the identity provider's token; this service keeps no user table.
    """

    id: Optional[str] = None  # Identity provider subject
    tenant_id: UUID
    role: str
    permissions: Dict[str, Dict[str, bool]] = {}
