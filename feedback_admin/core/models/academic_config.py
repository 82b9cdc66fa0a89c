import uuid
from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Uuid

from feedback_admin.db.session import Base


class AcademicConfig(Base):
    """
    Persisted academic hierarchy for one tenant (one row per tenant).

    Both JSON columns are views derived from the editor's tree on every save:
    - course_index: {course: {years: [...], year_departments: {year: [...]}, semesters?: [...]}}
    - subject_table: {course: {year: {department: {subject: {code, type, batches}}}}}
    Older rows may hold a plain list of subject names per department; the loader normalizes them.
    JSON (not JSONB) so key order is kept.
    """

    __tablename__ = "academic_configs"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Uuid(as_uuid=True), ForeignKey("tenants.id"), nullable=False, unique=True, index=True)
    course_index = Column(JSON, nullable=False, default=dict)
    subject_table = Column(JSON, nullable=False, default=dict)
    batches = Column(JSON, nullable=True)  # Default batch set for the college
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
