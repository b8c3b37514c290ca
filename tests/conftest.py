import os

# Settings are read once at import time; configure before importing the app.
os.environ["SERVICEHOURS_DATABASE_URL"] = "sqlite://"
os.environ["SERVICEHOURS_AUTH_MODE"] = "mock"
os.environ["SERVICEHOURS_ALLOWED_EMAIL_DOMAIN"] = "sxc.edu.np"
os.environ["SERVICEHOURS_ADMIN_EMAILS"] = '["admin@sxc.edu.np"]'
os.environ["SERVICEHOURS_REQUIRED_HOURS"] = "50"

import pytest
from fastapi.testclient import TestClient

from servicehours.core.database import Base, SessionLocal, engine, get_db
from servicehours.core.security import Principal, mock_uid
from servicehours.main import create_app
from servicehours.services import identity_service

ADMIN_EMAIL = "admin@sxc.edu.np"
STUDENT_EMAIL = "2081234@sxc.edu.np"


def auth(email):
    """Bearer header for a mock principal."""
    return {"Authorization": f"Bearer mock-{email}"}


def principal_for(email, name=None):
    return Principal(uid=mock_uid(email), email=email, display_name=name or email.split("@")[0])


@pytest.fixture
def db_session():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    identity_service.seed_role_policies(session, [ADMIN_EMAIL])
    session.commit()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def app(db_session):
    application = create_app()

    def _override_get_db():
        yield db_session

    application.dependency_overrides[get_db] = _override_get_db
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def make_student(db_session):
    """Provision a student record the way the identity gate does."""

    def _make(email=STUDENT_EMAIL, name=None, **fields):
        principal = principal_for(email, name)
        student = identity_service.provision_student(
            db_session,
            principal,
            is_admin=identity_service.resolve_role(db_session, email).value == "admin",
        )
        for key, value in fields.items():
            setattr(student, key, value)
        db_session.commit()
        return student

    return _make


@pytest.fixture
def student(make_student):
    return make_student(STUDENT_EMAIL, name="Aarav Shrestha")


@pytest.fixture
def admin(make_student):
    return make_student(ADMIN_EMAIL, name="Commandant")
