import os

os.environ.setdefault("TK_JWT_SECRET", "test-jwt-secret-0123456789-abcdefghijklmnop")
os.environ.setdefault("TK_QR_SECRET_KEY", "test-qr-secret-0123456789-abcdefghijklmnop")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from ticketing.config import settings  # noqa: E402
from ticketing.database import open_database  # noqa: E402
from ticketing.main import app  # noqa: E402


@pytest.fixture
async def db():
    conn = await open_database(":memory:")
    yield conn
    await conn.close()


@pytest.fixture
def db_path(tmp_path, monkeypatch) -> str:
    path = str(tmp_path / "ticketing-test.db")
    monkeypatch.setattr(settings, "db_path", path)
    return path


@pytest.fixture
def client(db_path):
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
