"""
Core modules for the transaction import service.

This package contains:
- config: Application configuration and settings
- db: Database access layer
- exceptions: Custom exception classes
- logger: Logging configuration
- parsing: CSV file parsing
- repositories: Category and transaction storage
- schema: Pydantic models for data validation
"""
