"""
Seed script to register a college (tenant) and optionally load an academic template.

Run once per college with env set (DATABASE_URL, JWT_SECRET_KEY):
  python -m feedback_admin.db.seed_colleges --code ICEM --name "Indira College of Engineering and Management"
  python -m feedback_admin.db.seed_colleges --code IGSB --name "Indira Global School of Business" --template igsb

Creates:
- tenants: one row for the college code (if not exists)
- academic_configs + departments: only when --template is given
"""
import argparse
import asyncio
import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from feedback_admin.api.v1.academic_config import service as academic_config_service
from feedback_admin.auth.security import create_access_token
from feedback_admin.core.models import Tenant
from feedback_admin.db.session import AsyncSessionLocal, Base, engine

logger = logging.getLogger(__name__)


async def ensure_tenant(db: AsyncSession, code: str, name: str) -> Tenant:
    code = code.strip().upper()
    result = await db.execute(select(Tenant).where(Tenant.code == code))
    tenant = result.scalar_one_or_none()
    if tenant:
        print(f"College {code} already exists.")
        return tenant
    tenant = Tenant(code=code, name=name.strip() or code, status="ACTIVE")
    db.add(tenant)
    await db.commit()
    await db.refresh(tenant)
    print(f"Created college {code}.")
    return tenant


async def seed_college(code: str, name: str, template_id: Optional[str] = None) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        tenant = await ensure_tenant(db, code, name)
        if template_id:
            result = await academic_config_service.apply_template(db, AsyncSessionLocal, tenant.id, template_id)
            print(
                f"Applied template {template_id}: {len(result.course_index)} courses, "
                f"{len(result.created_departments)} departments created."
            )
            if result.failed_departments:
                print(f"Departments not created (retry with another save): {', '.join(result.failed_departments)}")

    # Admin token for trying the API locally
    token = create_access_token(subject={"sub": "seed", "tenant_id": str(tenant.id), "role": "ADMIN"})
    print(f"Tenant id: {tenant.id}")
    print(f"Admin token: {token}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Register a college and optionally apply an academic template.")
    parser.add_argument("--code", required=True, help="College code, e.g. ICEM")
    parser.add_argument("--name", default="", help="Display name (defaults to the code)")
    parser.add_argument("--template", default=None, help="Template id to apply: default, icem or igsb")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed_college(args.code, args.name, args.template))


if __name__ == "__main__":
    main()
