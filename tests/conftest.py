from __future__ import annotations

import os
import tempfile
from pathlib import Path

# Point settings at a throwaway database and storage dir before driverhire is imported.
_TEST_ROOT = Path(tempfile.mkdtemp(prefix="driverhire-tests-"))
os.environ["APP_ENV"] = "test"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_ROOT / 'test.db'}"
os.environ["DATA_DIR"] = str(_TEST_ROOT)
os.environ["STORAGE_DIR"] = str(_TEST_ROOT / "storage")
os.environ["BOOTSTRAP_MANAGER_EMAIL"] = ""
os.environ["BOOTSTRAP_MANAGER_PASSWORD"] = ""

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from driverhire.api.app import create_app  # noqa: E402
from driverhire.core.auth import register_user  # noqa: E402
from driverhire.db.base import Base  # noqa: E402
from driverhire.db.repositories import Repository  # noqa: E402
from driverhire.db.session import SessionLocal, engine  # noqa: E402

PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def reset_db() -> None:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    with SessionLocal() as session:
        yield session


@pytest.fixture
def repo(db) -> Repository:
    return Repository(db)


@pytest.fixture
def client() -> TestClient:
    return TestClient(create_app())


def create_account(email: str, *, manager: bool = False, full_name: str = "") -> int:
    with SessionLocal() as session:
        repo = Repository(session)
        user = register_user(repo, email=email, password=PASSWORD, full_name=full_name)
        if manager:
            repo.add_user_role(user.id, "manager")
        return user.id


def sign_in(client: TestClient, email: str) -> None:
    response = client.post("/login", data={"email": email, "password": PASSWORD}, follow_redirects=False)
    assert response.status_code == 303


def api_token(client: TestClient, email: str) -> dict[str, str]:
    response = client.post("/api/auth/login", json={"email": email, "password": PASSWORD})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def make_account():
    return create_account


@pytest.fixture
def login():
    return sign_in


@pytest.fixture
def auth_headers():
    return api_token
