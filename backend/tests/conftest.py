import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from printshop.core.config import Settings
from printshop.core.database import Base
from printshop.core.security import PasswordHasher
from printshop.main import create_app

STAFF_KEY = "staff-test-key"


@pytest.fixture
def engine():
    # One shared in-memory database for the whole test, across threads
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


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
def hasher():
    # Minimum bcrypt cost keeps the suite fast
    return PasswordHasher(rounds=4)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        SECRET_KEY="test-secret-key",
        UPLOAD_DIR=str(tmp_path / "uploads"),
        MAX_FILE_SIZE=1024,
        STAFF_API_KEY=STAFF_KEY,
        BCRYPT_ROUNDS=4,
        ENABLE_CLEANUP_SCHEDULER=False,
    )


@pytest.fixture
def app(settings, engine, session_factory):
    app = create_app(settings)
    # Point the real get_db at the shared in-memory database
    app.state.engine.dispose()
    app.state.engine = engine
    app.state.session_factory = session_factory
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


def register(client, email="ada@example.com", password="s3cret!", name="Ada", phone=None):
    """Register through the API and return (token, user_id)"""
    response = client.post("/api/register", json={
        "name": name,
        "email": email,
        "password": password,
        "phone": phone,
    })
    assert response.status_code == 201, response.text
    body = response.json()
    return body["token"], body["userId"]


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


def place_order(client, token, material="pla", needs_design="no", description="A bracket", **extra):
    response = client.post(
        "/api/orders",
        data={
            "service_type": "printing",
            "material": material,
            "description": description,
            "needs_design": needs_design,
        },
        headers=auth_headers(token),
        **extra,
    )
    assert response.status_code == 201, response.text
    return response.json()
