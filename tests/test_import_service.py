"""
Tests for the CSV import routine.
"""
import sqlite3

import pytest

from core.exceptions import DataNotFoundError, FileProcessingError, ValidationError
from core.schema import Category
from services.import_service import find_category, missing_category_titles

SAMPLE = "Bus ticket,outcome,3.5,Transport\nSalary,income,2000,Salary\n"


def test_import_creates_transactions_and_categories(import_service, category_repository, write_csv):
    path = write_csv(SAMPLE)

    transactions = import_service.execute(str(path))

    assert [t.title for t in transactions] == ["Bus ticket", "Salary"]
    assert [t.category.title for t in transactions] == ["Transport", "Salary"]
    assert sorted(c.title for c in category_repository.list_all()) == ["Salary", "Transport"]
    assert not path.exists()


def test_import_reuses_existing_category(import_service, category_repository, write_csv):
    transport = category_repository.create_many(["Transport"])[0]
    path = write_csv(SAMPLE)

    result = import_service.import_file(str(path))

    assert [c.title for c in result.created_categories] == ["Salary"]
    assert result.transactions[0].category.id == transport.id
    assert len(category_repository.list_all()) == 2


def test_import_twice_creates_no_duplicate_categories(import_service, category_repository, write_csv):
    first = import_service.import_file(str(write_csv(SAMPLE)))
    second = import_service.import_file(str(write_csv(SAMPLE)))

    assert len(first.created_categories) == 2
    assert second.created_categories == []
    assert len(category_repository.list_all()) == 2


def test_rows_sharing_label_share_category(import_service, category_repository, write_csv):
    path = write_csv(
        "Bus ticket,outcome,3.5,Transport\n"
        "Taxi,outcome,12,Transport\n"
        "Train,outcome,40, Transport \n"
    )

    transactions = import_service.execute(str(path))

    assert len({t.category.id for t in transactions}) == 1
    assert len(category_repository.list_all()) == 1


def test_header_only_file_creates_nothing(import_service, category_repository, transaction_repository, write_csv):
    path = write_csv("")

    assert import_service.execute(str(path)) == []
    assert category_repository.list_all() == []
    assert transaction_repository.list_all() == []
    assert not path.exists()


def test_invalid_row_excluded_with_its_label(import_service, category_repository, write_csv):
    path = write_csv(
        ",income,10,Gifts\n"
        ",income,10,Food\n"
        "Lunch,outcome,15,Food\n"
    )

    transactions = import_service.execute(str(path))

    assert [t.title for t in transactions] == ["Lunch"]
    assert [c.title for c in category_repository.list_all()] == ["Food"]


def test_empty_category_label_leaves_reference_unset(import_service, category_repository, write_csv):
    path = write_csv("Cash,income,50,\n")

    transactions = import_service.execute(str(path))

    assert transactions[0].category is None
    assert category_repository.list_all() == []


def test_validation_error_persists_nothing(import_service, transaction_repository, write_csv):
    path = write_csv("Salary,income,2000,Salary\nRent,expense,900,Housing\n")

    with pytest.raises(ValidationError):
        import_service.execute(str(path))

    assert transaction_repository.list_all() == []
    assert path.exists()


def test_storage_failure_rolls_back_categories(import_service, category_repository, database, write_csv):
    with database.transaction() as conn:
        conn.execute("DROP TABLE transactions")
    path = write_csv(SAMPLE)

    with pytest.raises(sqlite3.OperationalError):
        import_service.execute(str(path))

    assert category_repository.list_all() == []
    assert path.exists()


def test_missing_file_raises(import_service, tmp_path):
    with pytest.raises(DataNotFoundError):
        import_service.execute(str(tmp_path / "nope.csv"))


def test_delete_failure_propagates_after_persisting(
    import_service, transaction_repository, write_csv, monkeypatch
):
    path = write_csv(SAMPLE)

    def failing_unlink(self, *args, **kwargs):
        raise PermissionError("read-only")

    monkeypatch.setattr(type(path), "unlink", failing_unlink)

    with pytest.raises(FileProcessingError):
        import_service.execute(str(path))

    assert len(transaction_repository.list_all()) == 2


def test_missing_category_titles_order_and_uniqueness():
    existing = [Category(id=1, title="Transport")]
    titles = ["Salary", "Transport", "Food", "Salary", "", "Food"]

    assert missing_category_titles(titles, existing) == ["Salary", "Food"]


def test_find_category_returns_first_match():
    categories = [Category(id=1, title="Food"), Category(id=2, title="Rent")]

    assert find_category(categories, "Rent").id == 2
    assert find_category(categories, "Other") is None


def test_import_short_first_row_keeps_every_row(import_service, category_repository, write_csv):
    path = write_csv("Cash,income,50\nBus ticket,outcome,3.5,Transport,paid cash\n")

    result = import_service.import_file(str(path))

    assert [t.title for t in result.transactions] == ["Cash", "Bus ticket"]
    assert result.transactions[0].category is None
    assert [c.title for c in result.created_categories] == ["Transport"]
    assert not path.exists()


def test_import_non_finite_value_persists_nothing(import_service, transaction_repository, write_csv):
    path = write_csv("Salary,income,2000,Salary\nOdd,income,nan,Misc\n")

    with pytest.raises(ValidationError):
        import_service.execute(str(path))

    assert transaction_repository.list_all() == []
