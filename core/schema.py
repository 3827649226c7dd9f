"""
Pydantic schemas for transactions, categories and API payloads.
"""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

TransactionType = Literal["income", "outcome"]


class CsvTransaction(BaseModel):
    """A single accepted row of an import file."""
    title: str = Field(..., min_length=1)
    type: TransactionType
    value: float = Field(..., allow_inf_nan=False)
    category: str = ""


class Category(BaseModel):
    """Stored category record."""
    id: int
    title: str
    created_at: Optional[datetime] = None


class Transaction(BaseModel):
    """Stored transaction record with its resolved category."""
    id: int
    title: str
    type: TransactionType
    value: float
    category_id: Optional[int] = None
    category: Optional[Category] = None
    created_at: Optional[datetime] = None


class TransactionCreate(BaseModel):
    """Request body for creating a single transaction."""
    title: str = Field(..., min_length=1)
    type: TransactionType
    value: float = Field(..., ge=0, allow_inf_nan=False)
    category: str = ""

    @field_validator("title", "category", mode="before")
    @classmethod
    def strip_text(cls, v):
        """Trim surrounding whitespace like imported cells are trimmed."""
        if isinstance(v, str):
            return v.strip()
        return v


class Balance(BaseModel):
    """Income and outcome totals over all stored transactions."""
    income: float = 0.0
    outcome: float = 0.0
    total: float = 0.0


class TransactionListResponse(BaseModel):
    transactions: List[Transaction]
    balance: Balance


class ImportResult(BaseModel):
    """Outcome of one import call."""
    transactions: List[Transaction]
    created_categories: List[Category] = Field(default_factory=list)


class ImportResponse(BaseModel):
    """Summary returned after a CSV import."""
    imported: int
    categories_created: int
    transactions: List[Transaction]
