"""
Repositories for category and transaction persistence.
Each method accepts an optional connection so callers can group
several writes into one database transaction.
"""
import sqlite3
from typing import Iterable, List, Optional, Sequence, Tuple

from core.db import Database
from core.exceptions import DataNotFoundError
from core.logger import setup_logger
from core.schema import Balance, Category, CsvTransaction, Transaction

logger = setup_logger(__name__)

# Stay below SQLite's default bound-parameter limit
QUERY_CHUNK_SIZE = 500

TRANSACTION_SELECT = """
    SELECT
        t.id, t.title, t.type, t.value, t.category_id, t.created_at,
        c.title AS category_title, c.created_at AS category_created_at
    FROM transactions t
    LEFT JOIN categories c ON c.id = t.category_id
"""


def _chunks(items: Sequence[str], size: int = QUERY_CHUNK_SIZE) -> Iterable[Sequence[str]]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


def row_to_category(row: sqlite3.Row) -> Category:
    return Category(id=row["id"], title=row["title"], created_at=row["created_at"])


def row_to_transaction(row: sqlite3.Row) -> Transaction:
    category = None
    if row["category_id"] is not None:
        category = Category(
            id=row["category_id"],
            title=row["category_title"],
            created_at=row["category_created_at"],
        )
    return Transaction(
        id=row["id"],
        title=row["title"],
        type=row["type"],
        value=row["value"],
        category_id=row["category_id"],
        category=category,
        created_at=row["created_at"],
    )


class CategoryRepository:
    """Storage access for categories."""

    def __init__(self, database: Database):
        self.database = database

    def find_by_titles(
        self,
        titles: Iterable[str],
        conn: Optional[sqlite3.Connection] = None
    ) -> List[Category]:
        """Return categories whose title is any of the given titles."""
        unique_titles = list(dict.fromkeys(titles))
        if not unique_titles:
            return []

        found: List[Category] = []
        with self.database.use(conn) as c:
            for chunk in _chunks(unique_titles):
                placeholders = ", ".join("?" for _ in chunk)
                cursor = c.execute(
                    f"SELECT id, title, created_at FROM categories WHERE title IN ({placeholders}) ORDER BY id",
                    tuple(chunk),
                )
                found.extend(row_to_category(row) for row in cursor.fetchall())
        return found

    def create_many(
        self,
        titles: Sequence[str],
        conn: Optional[sqlite3.Connection] = None
    ) -> List[Category]:
        """Insert one category per title and return them with their ids."""
        created: List[Category] = []
        with self.database.use(conn) as c:
            for title in titles:
                cursor = c.execute("INSERT INTO categories (title) VALUES (?)", (title,))
                row = c.execute(
                    "SELECT id, title, created_at FROM categories WHERE id = ?",
                    (cursor.lastrowid,),
                ).fetchone()
                created.append(row_to_category(row))
        if created:
            logger.debug(f"Inserted {len(created)} categories")
        return created

    def find_or_create(self, title: str, conn: Optional[sqlite3.Connection] = None) -> Category:
        with self.database.use(conn) as c:
            existing = self.find_by_titles([title], conn=c)
            if existing:
                return existing[0]
            return self.create_many([title], conn=c)[0]

    def list_all(self, conn: Optional[sqlite3.Connection] = None) -> List[Category]:
        with self.database.use(conn) as c:
            rows = c.execute("SELECT id, title, created_at FROM categories ORDER BY title").fetchall()
        return [row_to_category(row) for row in rows]


class TransactionRepository:
    """Storage access for transactions."""

    def __init__(self, database: Database):
        self.database = database

    def get(self, transaction_id: int, conn: Optional[sqlite3.Connection] = None) -> Transaction:
        with self.database.use(conn) as c:
            row = c.execute(f"{TRANSACTION_SELECT} WHERE t.id = ?", (transaction_id,)).fetchone()
        if row is None:
            raise DataNotFoundError(
                f"Transaction not found: {transaction_id}",
                details={"transaction_id": transaction_id}
            )
        return row_to_transaction(row)

    def create(
        self,
        title: str,
        type: str,
        value: float,
        category: Optional[Category] = None,
        conn: Optional[sqlite3.Connection] = None
    ) -> Transaction:
        """Insert a single transaction."""
        with self.database.use(conn) as c:
            cursor = c.execute(
                "INSERT INTO transactions (title, type, value, category_id) VALUES (?, ?, ?, ?)",
                (title, type, value, category.id if category else None),
            )
            return self.get(cursor.lastrowid, conn=c)

    def create_many(
        self,
        records: Sequence[Tuple[CsvTransaction, Optional[Category]]],
        conn: Optional[sqlite3.Connection] = None
    ) -> List[Transaction]:
        """
        Bulk insert transactions.

        Args:
            records: Pairs of parsed row and its resolved category (or None)
            conn: Optional connection shared with the caller

        Returns:
            Created transactions in input order
        """
        created: List[Transaction] = []
        with self.database.use(conn) as c:
            for row, category in records:
                created.append(
                    self.create(row.title, row.type, row.value, category, conn=c)
                )
        logger.debug(f"Inserted {len(created)} transactions")
        return created

    def list_all(self, conn: Optional[sqlite3.Connection] = None) -> List[Transaction]:
        with self.database.use(conn) as c:
            rows = c.execute(f"{TRANSACTION_SELECT} ORDER BY t.id").fetchall()
        return [row_to_transaction(row) for row in rows]

    def get_balance(self, conn: Optional[sqlite3.Connection] = None) -> Balance:
        """Sum incomes and outcomes; total is income minus outcome."""
        with self.database.use(conn) as c:
            row = c.execute(
                """
                SELECT
                    COALESCE(SUM(CASE WHEN type = 'income' THEN value END), 0) AS income,
                    COALESCE(SUM(CASE WHEN type = 'outcome' THEN value END), 0) AS outcome
                FROM transactions
                """
            ).fetchone()
        income = float(row["income"])
        outcome = float(row["outcome"])
        return Balance(income=income, outcome=outcome, total=income - outcome)

    def delete(self, transaction_id: int, conn: Optional[sqlite3.Connection] = None) -> None:
        with self.database.use(conn) as c:
            cursor = c.execute("DELETE FROM transactions WHERE id = ?", (transaction_id,))
            if cursor.rowcount == 0:
                raise DataNotFoundError(
                    f"Transaction not found: {transaction_id}",
                    details={"transaction_id": transaction_id}
                )
        logger.info(f"Deleted transaction {transaction_id}")
