import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RUN_MIGRATIONS_ON_STARTUP", "false")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing-only")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.api.deps import get_db  # noqa: E402
from app.core.security_password import hash_password  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.main import api  # noqa: E402
from app.models import Client, Membership, Tenant, User  # noqa: E402

USER_EMAIL = "a@b.com"
USER_PASSWORD = "secret123"


@pytest.fixture
def engine():
    eng = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(eng)
    yield eng
    Base.metadata.drop_all(eng)
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def tenant(db):
    t = Tenant(name="Demo Tenant")
    db.add(t); db.commit(); db.refresh(t)
    return t


@pytest.fixture
def brand(db, tenant):
    c = Client(tenant_id=tenant.id, name="Demo Brand")
    db.add(c); db.commit(); db.refresh(c)
    return c


@pytest.fixture
def user(db, tenant, brand):
    """u1: staff user with a staff membership on the demo brand."""
    u = User(
        tenant_id=tenant.id,
        email=USER_EMAIL,
        password_hash=hash_password(USER_PASSWORD),
        name="User One",
        role="staff",
    )
    db.add(u); db.flush()
    db.add(Membership(user_id=u.id, client_id=brand.id, role="staff"))
    db.commit(); db.refresh(u)
    return u


@pytest.fixture
def admin(db, tenant, brand):
    u = User(
        tenant_id=tenant.id,
        email="admin@demo.com",
        password_hash=hash_password("admin123"),
        name="Admin User",
        role="staff",
    )
    db.add(u); db.flush()
    db.add(Membership(user_id=u.id, client_id=brand.id, role="admin"))
    db.commit(); db.refresh(u)
    return u


@pytest.fixture
def client(session_factory):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    api.dependency_overrides[get_db] = _get_db
    try:
        yield TestClient(api)
    finally:
        api.dependency_overrides.clear()
