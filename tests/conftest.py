import os
import sys
from pathlib import Path

# Settings are read once at import, so the environment is fixed before any app import.
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-testing-only-do-not-use-in-production")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("AUTO_MIGRATE", "false")
os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.api.deps import get_db, get_settings  # noqa: E402
from app.core.config import settings as app_settings  # noqa: E402
from app.core.rbac import AccountRole, MembershipRole  # noqa: E402
from app.core.security_password import hash_password  # noqa: E402
from app.core.tokens import create_access_token  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.db.init_db import init_db  # noqa: E402
from app.main import api  # noqa: E402
from app.models.membership import PortalMembership  # noqa: E402
from app.models.portal import Portal  # noqa: E402
from app.models.user import User  # noqa: E402
from app.schemas.token import Identity  # noqa: E402

DEFAULT_PASSWORD = "Password123!"


@pytest.fixture()
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(eng)
    yield eng
    Base.metadata.drop_all(eng)
    eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def settings():
    return app_settings


@pytest.fixture()
def override_settings():
    """Swap the injected Settings for a copy with the given fields changed."""
    def _apply(**changes):
        patched = app_settings.model_copy(update=changes)
        api.dependency_overrides[get_settings] = lambda: patched
        return patched
    yield _apply
    api.dependency_overrides.pop(get_settings, None)


@pytest.fixture()
def client(session_factory, settings):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    api.dependency_overrides[get_db] = _get_db
    api.dependency_overrides.setdefault(get_settings, lambda: settings)
    yield TestClient(api)
    api.dependency_overrides.clear()


@pytest.fixture()
def seeded(db, settings):
    """Demo portal plus admin@example.com, as created on startup."""
    init_db(db, settings)
    return db.query(Portal).filter_by(subdomain="test").one()


@pytest.fixture()
def portal_a(db):
    p = Portal(name="Portal A", subdomain="portal-a")
    db.add(p); db.commit()
    return p


@pytest.fixture()
def portal_b(db):
    p = Portal(name="Portal B", subdomain="portal-b")
    db.add(p); db.commit()
    return p


@pytest.fixture()
def make_account(db):
    counter = {"n": 0}

    def _make(portal, role=AccountRole.VIEWER, *, email=None, username=None,
              password=DEFAULT_PASSWORD, is_active=True, membership=None, membership_active=True):
        counter["n"] += 1
        user = User(
            portal_id=portal.id,
            email=email or f"user{counter['n']}@example.com",
            username=username,
            password_hash=hash_password(password),
            role=role.value,
            is_active=is_active,
        )
        db.add(user); db.flush()
        if membership is not None:
            db.add(PortalMembership(
                user_id=user.id,
                portal_id=portal.id,
                assigned_role=MembershipRole(membership).value,
                is_active=membership_active,
            ))
        db.commit()
        return user

    return _make


@pytest.fixture()
def bearer(settings):
    """Authorization header for an arbitrary identity, bypassing login."""
    def _header(account_id, role, portal_id=None, **kwargs):
        token = create_access_token(
            Identity(account_id=account_id, role=role, portal_id=portal_id), settings, **kwargs
        )
        return {"Authorization": f"Bearer {token}"}

    return _header


@pytest.fixture()
def bearer_for(bearer):
    def _header(user, portal_id=None):
        return bearer(user.id, AccountRole(user.role), portal_id or user.portal_id)

    return _header
