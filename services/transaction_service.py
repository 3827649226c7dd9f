"""
Transaction service.
Listing, balance, single create and delete of transactions.
"""
from core.db import Database
from core.exceptions import ValidationError
from core.logger import setup_logger
from core.repositories import CategoryRepository, TransactionRepository
from core.schema import Balance, Transaction, TransactionCreate, TransactionListResponse

logger = setup_logger(__name__)


class TransactionService:
    """Service for managing stored transactions."""

    def __init__(
        self,
        category_repository: CategoryRepository,
        transaction_repository: TransactionRepository,
        database: Database
    ):
        self.category_repository = category_repository
        self.transaction_repository = transaction_repository
        self.database = database

    def list_transactions(self) -> TransactionListResponse:
        with self.database.transaction() as conn:
            transactions = self.transaction_repository.list_all(conn=conn)
            balance = self.transaction_repository.get_balance(conn=conn)
        return TransactionListResponse(transactions=transactions, balance=balance)

    def get_balance(self) -> Balance:
        return self.transaction_repository.get_balance()

    def create_transaction(self, data: TransactionCreate) -> Transaction:
        """
        Create a transaction, reusing the category with the same title.

        Args:
            data: Validated request body

        Returns:
            Stored transaction

        Raises:
            ValidationError: If an outcome exceeds the available total
        """
        with self.database.transaction() as conn:
            if data.type == "outcome":
                balance = self.transaction_repository.get_balance(conn=conn)
                if data.value > balance.total:
                    raise ValidationError(
                        "Outcome value exceeds available balance",
                        details={"value": data.value, "total": balance.total}
                    )

            category = None
            if data.category:
                category = self.category_repository.find_or_create(data.category, conn=conn)

            transaction = self.transaction_repository.create(
                data.title, data.type, data.value, category, conn=conn
            )

        logger.info(f"Created {transaction.type} transaction {transaction.id}: {transaction.title}")
        return transaction

    def delete_transaction(self, transaction_id: int) -> None:
        self.transaction_repository.delete(transaction_id)
