"""
Shared pytest fixtures for the LenconDB test suite.

Provides:
    - app: Flask application (session-scoped, uploads in a temp dir)
    - _setup_db: Database table creation/teardown (session-scoped)
    - session: Per-test DB cleanup w/ rollback + recreate (autouse)
    - client: Flask test client (function-scoped)
    - make_user / admin / manager / employee / trial: users per role
    - auth_headers: Bearer header for a user
    - customer, contractor, project: pre-created domain rows
"""

import itertools
from datetime import date

import pytest

from lencondb import create_app
from lencondb.models import db as _db
from lencondb.models.company import Company
from lencondb.models.project import Project, ProjectUser
from lencondb.models.user import User
from lencondb.services.jwt_service import generate_access_token
from lencondb.utils.crypto import hash_password

DEFAULT_PASSWORD = "secret-pass-1"

_seq = itertools.count(1)


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app(tmp_path_factory):
    """Create the Flask application once per test session."""
    from lencondb.config import TestingConfig
    TestingConfig.UPLOAD_FOLDER = str(tmp_path_factory.mktemp("uploads"))

    application = create_app("testing")
    return application


@pytest.fixture(scope="session")
def _setup_db(app):
    """Create all tables at session start, drop at end."""
    with app.app_context():
        _db.create_all()
    yield
    with app.app_context():
        _db.drop_all()


@pytest.fixture(autouse=True)
def session(app, _setup_db):
    """Per-test: open app context, rollback after test, recreate tables."""
    with app.app_context():
        yield
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


# ── Users & auth ─────────────────────────────────────────────────────────


@pytest.fixture()
def make_user():
    """Factory: make_user(role="Employee", password=..., **columns) -> User."""

    def _make(role="Employee", password=DEFAULT_PASSWORD, **kw):
        n = next(_seq)
        user = User(
            first_name=kw.pop("first_name", role),
            last_name=kw.pop("last_name", f"Tester{n}"),
            email=kw.pop("email", f"{role.lower()}{n}@example.com"),
            phone=kw.pop("phone", f"+7900{n:07d}"),
            password_hash=hash_password(password, rounds=4),
            role=role,
            **kw,
        )
        _db.session.add(user)
        _db.session.commit()
        return user

    return _make


@pytest.fixture()
def admin(make_user):
    return make_user("Admin")


@pytest.fixture()
def manager(make_user):
    return make_user("Manager")


@pytest.fixture()
def employee(make_user):
    return make_user("Employee")


@pytest.fixture()
def trial(make_user):
    return make_user("Trial")


def bearer(user) -> dict:
    return {"Authorization": f"Bearer {generate_access_token(user)}"}


@pytest.fixture()
def auth_headers():
    """auth_headers(user) -> {"Authorization": "Bearer <access token>"}"""
    return bearer


# ── Domain rows ──────────────────────────────────────────────────────────


@pytest.fixture()
def customer():
    c = Company(name="Stroy Invest", type="Customer", inn="7701234567")
    _db.session.add(c)
    _db.session.commit()
    return c


@pytest.fixture()
def contractor():
    c = Company(name="Beton Service", type="Contractor")
    _db.session.add(c)
    _db.session.commit()
    return c


@pytest.fixture()
def project(customer, manager):
    p = Project(
        name="Riverside Residential",
        contract_date=date(2026, 1, 10),
        expiration_date=date(2026, 12, 20),
        customer_id=customer.id,
        manager_id=manager.id,
    )
    _db.session.add(p)
    _db.session.commit()
    return p


@pytest.fixture()
def assign():
    """assign(project, user) — put a user on a project team."""

    def _assign(project, user):
        _db.session.add(ProjectUser(project_id=project.id, user_id=user.id))
        _db.session.commit()

    return _assign
