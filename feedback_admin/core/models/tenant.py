import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, String, Uuid

from feedback_admin.db.session import Base


class Tenant(Base):
    """
    Institution (college) that all hierarchy data is partitioned by.

    - id: internal primary key, referenced as tenant_id everywhere.
    - code: public short code (e.g. ICEM, IGSB). Also selects the built-in
      academic template used before a configuration has been saved.
    """

    __tablename__ = "tenants"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    code = Column(String(20), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    status = Column(String(20), nullable=False, default="ACTIVE")
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
