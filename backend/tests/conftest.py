"""
Pytest configuration.

Settings are read when excel_analytics is first imported, so the test
database and upload directory are pointed at a temp dir before anything
from the package is imported.
"""
import os
import shutil
import tempfile

_TEST_ROOT = tempfile.mkdtemp(prefix="excel-analytics-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TEST_ROOT, 'test.db')}"
os.environ["UPLOAD_DIR"] = os.path.join(_TEST_ROOT, "uploads")
os.environ["DISABLE_AUTH"] = "false"
os.environ["ENABLE_SCHEDULER"] = "false"

import pytest
from fastapi.testclient import TestClient

from excel_analytics.core.database import Base, SessionLocal, engine
from excel_analytics.main import app
from excel_analytics.models.user import User
from excel_analytics.storage.local_storage import storage
from helpers import SALES_ROWS, XLSX_MIME, workbook_bytes


@pytest.fixture(autouse=True)
def reset_state():
    """Fresh tables and an empty upload directory for every test"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    shutil.rmtree(storage.upload_dir, ignore_errors=True)
    storage.upload_dir.mkdir(parents=True, exist_ok=True)
    yield


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def sales_workbook():
    return workbook_bytes({"Sales": SALES_ROWS})


def _register(client, email, password="secret-pass", full_name=None):
    response = client.post(
        "/api/auth/register",
        json={"email": email, "password": password, "full_name": full_name},
    )
    assert response.status_code == 201, response.text
    login = client.post("/api/auth/login", data={"username": email, "password": password})
    assert login.status_code == 200, login.text
    token = login.json()["access_token"]
    return response.json()["id"], {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_headers(client):
    _, headers = _register(client, "alice@example.com", full_name="Alice")
    return headers


@pytest.fixture
def other_headers(client):
    _, headers = _register(client, "bob@example.com", full_name="Bob")
    return headers


@pytest.fixture
def admin_headers(client, db_session):
    user_id, headers = _register(client, "root@example.com", full_name="Root")
    admin = db_session.query(User).filter(User.id == user_id).first()
    admin.role = "admin"
    db_session.commit()
    return headers


@pytest.fixture
def upload_workbook(client):
    """Post workbook bytes to the upload endpoint as the given user"""
    def _upload(headers, content, filename="sales.xlsx", mime=XLSX_MIME):
        return client.post(
            "/api/upload/",
            files={"file": (filename, content, mime)},
            headers=headers,
        )
    return _upload
