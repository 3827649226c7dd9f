"""
Shared fixtures: isolated settings, a temporary SQLite database and a CSV writer.
"""
from pathlib import Path

import pytest

from core.config import reset_settings
from core.db import Database, reset_db
from core.repositories import CategoryRepository, TransactionRepository
from services.import_service import ImportTransactionsService
from services.transaction_service import TransactionService

HEADER = "title,type,value,category\n"


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point settings at temporary paths for every test."""
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "test.db"))
    monkeypatch.setenv("STORAGE_PATH", str(tmp_path / "uploads"))
    for name in ("LOG_LEVEL", "PORT", "CSV_FROM_LINE", "CSV_DELIMITER", "MAX_UPLOAD_SIZE_MB"):
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    reset_db()
    yield
    reset_settings()
    reset_db()


@pytest.fixture
def database(tmp_path) -> Database:
    db = Database(str(tmp_path / "test.db"))
    db.init_db()
    return db


@pytest.fixture
def category_repository(database) -> CategoryRepository:
    return CategoryRepository(database)


@pytest.fixture
def transaction_repository(database) -> TransactionRepository:
    return TransactionRepository(database)


@pytest.fixture
def import_service(database, category_repository, transaction_repository) -> ImportTransactionsService:
    return ImportTransactionsService(category_repository, transaction_repository, database)


@pytest.fixture
def transaction_service(database, category_repository, transaction_repository) -> TransactionService:
    return TransactionService(category_repository, transaction_repository, database)


@pytest.fixture
def write_csv(tmp_path):
    """Write CSV content (header included unless given) and return its path."""
    def _write(body: str, name: str = "import.csv", header: str = HEADER) -> Path:
        path = tmp_path / name
        path.write_text(header + body, encoding="utf-8")
        return path
    return _write
