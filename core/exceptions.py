"""
Custom exceptions for better error handling.
"""
from typing import Any, Dict, Optional


class TransactionImportException(Exception):
    """Base exception for all transaction import errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize exception.

        Args:
            message: Error message
            details: Additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class FileProcessingError(TransactionImportException):
    """Raised when reading, saving or removing a source file fails."""
    pass


class ValidationError(TransactionImportException):
    """Raised when data validation fails."""
    pass


class ParsingError(TransactionImportException):
    """Raised when CSV parsing fails."""
    pass


class ConfigurationError(TransactionImportException):
    """Raised when configuration is invalid."""
    pass


class DataNotFoundError(TransactionImportException):
    """Raised when required data is not found."""
    pass
