"""
CSV transaction import.
Parses a file, reuses or creates categories, stores transactions
and removes the source file.
"""
from pathlib import Path
from typing import List, Optional

from core.config import get_settings
from core.db import Database
from core.exceptions import FileProcessingError
from core.logger import setup_logger
from core.parsing import collect_category_titles, parse_csv_file
from core.repositories import CategoryRepository, TransactionRepository
from core.schema import Category, ImportResult, Transaction

logger = setup_logger(__name__)


def missing_category_titles(titles: List[str], existing: List[Category]) -> List[str]:
    """
    Labels with no stored category, unique and in first-occurrence order.

    The empty label never becomes a category.
    """
    existing_titles = {category.title for category in existing}
    return list(dict.fromkeys(
        title for title in titles
        if title and title not in existing_titles
    ))


def find_category(categories: List[Category], title: str) -> Optional[Category]:
    """First category with the given title, or None."""
    return next((category for category in categories if category.title == title), None)


def remove_source_file(file_path: str) -> None:
    """Delete an imported file; failure is reported, not ignored."""
    try:
        Path(file_path).unlink()
        logger.debug(f"Removed source file: {file_path}")
    except OSError as e:
        logger.error(f"Failed to remove {file_path}: {e}")
        raise FileProcessingError(
            "Failed to remove imported file",
            details={"file_path": str(file_path), "error": str(e)}
        )


class ImportTransactionsService:
    """Imports a transactions CSV file into storage."""

    def __init__(
        self,
        category_repository: CategoryRepository,
        transaction_repository: TransactionRepository,
        database: Database
    ):
        self.settings = get_settings()
        self.category_repository = category_repository
        self.transaction_repository = transaction_repository
        self.database = database

    def execute(self, file_path: str) -> List[Transaction]:
        """Import a CSV file and return the created transactions, in file order."""
        return self.import_file(file_path).transactions

    def import_file(self, file_path: str) -> ImportResult:
        """
        Import transactions from a CSV file.

        Args:
            file_path: Path to a CSV file with columns title,type,value,category

        Returns:
            Created transactions and the categories created for them

        Raises:
            DataNotFoundError: If the file doesn't exist
            ParsingError: If the CSV structure is invalid
            ValidationError: If an accepted row has invalid type or value
            FileProcessingError: If the file can't be read or removed
            sqlite3.Error: If storage rejects an insert
        """
        logger.info(f"Importing transactions from {file_path}")

        rows = parse_csv_file(
            file_path,
            from_line=self.settings.csv_from_line,
            encoding=self.settings.csv_encoding,
            delimiter=self.settings.csv_delimiter,
        )
        titles = collect_category_titles(rows)

        with self.database.transaction() as conn:
            existing = self.category_repository.find_by_titles(
                [title for title in titles if title], conn=conn
            )
            new_titles = missing_category_titles(titles, existing)
            created = self.category_repository.create_many(new_titles, conn=conn)

            categories = [*created, *existing]
            records = [(row, find_category(categories, row.category)) for row in rows]
            transactions = self.transaction_repository.create_many(records, conn=conn)

        logger.info(
            f"Stored {len(transactions)} transactions "
            f"({len(created)} new categories, {len(existing)} reused)"
        )

        remove_source_file(file_path)
        return ImportResult(transactions=transactions, created_categories=created)
