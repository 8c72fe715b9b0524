"""
Общие фикстуры. Интеграционные тесты идут на временном sqlite-файле:
DATABASE_URL выставляется до импорта src.db.database.
"""

import os
import tempfile
from pathlib import Path

_TMP_DIR = tempfile.mkdtemp(prefix="product_api_tests_")
os.environ["DATABASE_URL"] = f"sqlite:///{Path(_TMP_DIR) / 'test.db'}"
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from src.db.CRUD import create_db, drop_db, seed_db  # noqa: E402
from src.db.database import SessionLocal  # noqa: E402
from src.main import app  # noqa: E402


@pytest.fixture
def seeded_db():
    """Чистая схема + 6 продуктов из SEED_PRODUCTS."""
    drop_db()
    create_db()
    db = SessionLocal()
    try:
        seed_db(db)
    finally:
        db.close()
    yield


@pytest.fixture
def db(seeded_db):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(seeded_db):
    return TestClient(app)
