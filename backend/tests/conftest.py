"""
Shared fixtures: an isolated SQLite database, storage and draft directory
per test session, reset between tests.
"""
import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="neobank-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["STORAGE_DIR"] = os.path.join(_TMP_DIR, "storage")
os.environ["DRAFT_DIR"] = os.path.join(_TMP_DIR, "drafts")
os.environ["LOG_DIR"] = os.path.join(_TMP_DIR, "logs")
os.environ["DEMO_AUTO_VALIDATE"] = "false"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from neobank import models  # noqa: E402,F401
from neobank.database import Base, SessionLocal, engine, seed_demo_data  # noqa: E402
from neobank.main import app  # noqa: E402
from neobank.utils.rate_limiter import reset_rate_limits  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed_demo_data(db)
    finally:
        db.close()
    reset_rate_limits()
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def draft_dir(tmp_path):
    return str(tmp_path / "drafts")
