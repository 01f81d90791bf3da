import asyncio
import os
import tempfile

# Point the app at a throwaway database before app.config is imported
_db_dir = tempfile.mkdtemp(prefix="spk-tests-")
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///" + os.path.join(_db_dir, "test.db")
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ.pop("SQLALCHEMY_DATABASE_URL", None)

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.database import engine, Base
from app.core.security import create_access_token


async def _reset_db():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture
def client():
    asyncio.run(_reset_db())
    # entering the client runs the startup hook, which seeds the criteria
    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth_headers():
    token = create_access_token({"sub": "teacher-1", "email": "teacher@school.test", "role": "user"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers():
    token = create_access_token({"sub": "admin-1", "email": "principal@school.test", "role": "admin"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def criteria_ids(client, auth_headers):
    resp = client.get("/criteria", headers=auth_headers)
    assert resp.status_code == 200
    return [c["id"] for c in resp.json()]


def create_student(client, headers, name, nis, scores, class_name="9A"):
    resp = client.post(
        "/students",
        json={"name": name, "class": class_name, "nis": nis,
              "scores": {str(k): v for k, v in scores.items()}},
        headers=headers,
    )
    assert resp.status_code == 200, resp.text
    return resp.json()
