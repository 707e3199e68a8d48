import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from league.main import app
from league.api.dependencies import get_db
from league.core.database import Base, init_db
from league.models.user import ROLE_ADMIN
from league.services import auth_service

ADMIN_PASSWORD = "admin-secret"


# --- Database ---
@pytest.fixture
def engine():
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


# --- API client ---
@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def bearer(user) -> dict:
    return {"Authorization": f"Bearer {auth_service.issue_token(user)}"}


@pytest.fixture
def admin_user(db_session):
    return auth_service.create_identity(db_session, "admin@example.com", ADMIN_PASSWORD, ROLE_ADMIN, "Admin")


@pytest.fixture
def admin_headers(admin_user):
    return bearer(admin_user)


@pytest.fixture
def other_admin_headers(db_session):
    other = auth_service.create_identity(db_session, "other-admin@example.com", ADMIN_PASSWORD, ROLE_ADMIN)
    return bearer(other)


@pytest.fixture
def tournament(client, admin_headers):
    response = client.post("/tournaments", json={"name": "Spring Cup"}, headers=admin_headers)
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def open_round(client, admin_headers, tournament):
    response = client.post(f"/tournaments/{tournament['id']}/rounds", json={}, headers=admin_headers)
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def make_team(client, admin_headers, tournament):
    """Register a team through the API and log in with its one-time password."""

    def _make_team(name: str):
        registered = client.post(
            "/teams/register",
            json={"name": name, "tournamentId": tournament["id"]},
            headers=admin_headers,
        )
        assert registered.status_code == 201, registered.text
        team = registered.json()
        login = client.post(
            "/auth/login",
            json={"email": team["email"], "password": team["generated_password"]},
        )
        assert login.status_code == 200, login.text
        team["headers"] = {"Authorization": f"Bearer {login.json()['access_token']}"}
        return team

    return _make_team
