import os

# Settings are read at import time; point them at throwaway values first.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"

from typing import AsyncGenerator, Callable, Dict, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from feedback_admin.auth.security import create_access_token
from feedback_admin.core.models import Tenant
from feedback_admin.db.session import Base, get_db, get_session_factory
from feedback_admin.main import app


@pytest.fixture()
async def engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """File-backed SQLite so concurrent sessions see the same tables."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        echo=False,
        future=True,
        connect_args={"timeout": 30},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture()
async def db_session(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture()
async def client(
    db_session: AsyncSession, session_factory: async_sessionmaker
) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app, with DB dependencies overridden."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture()
async def tenant(db_session: AsyncSession) -> Tenant:
    tenant = Tenant(code="TEST", name="Test College", status="ACTIVE")
    db_session.add(tenant)
    await db_session.commit()
    await db_session.refresh(tenant)
    return tenant


@pytest.fixture()
def make_headers() -> Callable[..., Dict[str, str]]:
    def _make(tenant_id, role: str = "ADMIN", permissions: Optional[Dict] = None) -> Dict[str, str]:
        claims = {"sub": "user-1", "tenant_id": str(tenant_id), "role": role}
        if permissions is not None:
            claims["permissions"] = permissions
        return {"Authorization": f"Bearer {create_access_token(subject=claims)}"}

    return _make


@pytest.fixture()
def admin_headers(tenant: Tenant, make_headers) -> Dict[str, str]:
    return make_headers(tenant.id)
