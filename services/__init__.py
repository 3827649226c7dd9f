"""
Business logic services.
"""
from services.import_service import ImportTransactionsService
from services.transaction_service import TransactionService

__all__ = ["ImportTransactionsService", "TransactionService"]
