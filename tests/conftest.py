import os
import sys
import tempfile
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

tmp_dir = tempfile.mkdtemp()
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(tmp_dir, 'test.db')}"
os.environ["ENV"] = "dev"
os.environ["REMINDERS_ENABLED"] = "false"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["EMAIL_USER"] = ""
os.environ["EMAIL_PASS"] = ""

from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import select  # noqa: E402

from app.main import app  # noqa: E402
from app.db.session import create_all_tables, session_scope  # noqa: E402
from app.db.store import RecordStore  # noqa: E402
from app.models.task import Task  # noqa: E402
from app.models.user import User  # noqa: E402

create_all_tables()


@pytest.fixture(autouse=True)
def clean_db():
    yield
    with session_scope() as db:
        for model in (Task, User):
            for row in db.exec(select(model)).all():
                db.delete(row)
        db.commit()
    app.dependency_overrides.clear()


@pytest.fixture()
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture()
def db():
    with session_scope() as s:
        yield s


@pytest.fixture()
def store(db) -> RecordStore:
    return RecordStore(db)


@pytest.fixture()
def register(client):
    """API로 가입하고 (user, Authorization 헤더) 반환"""

    def _register(username: str, email: str | None = None, password: str = "secret123"):
        resp = client.post(
            "/api/auth/register",
            json={"username": username, "email": email or f"{username}@example.com", "password": password},
        )
        assert resp.status_code == 201, resp.text
        data = resp.json()
        return data["user"], {"Authorization": f"Bearer {data['token']}"}

    return _register
