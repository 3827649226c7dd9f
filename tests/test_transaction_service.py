"""
Tests for transaction listing, creation and deletion.
"""
import pytest
from pydantic import ValidationError as PydanticValidationError

from core.exceptions import DataNotFoundError, ValidationError
from core.schema import TransactionCreate


def test_create_income_with_new_category(transaction_service, category_repository):
    transaction = transaction_service.create_transaction(
        TransactionCreate(title="Salary", type="income", value=3000, category="Salary")
    )

    assert transaction.id
    assert transaction.category.title == "Salary"
    assert [c.title for c in category_repository.list_all()] == ["Salary"]


def test_create_reuses_category(transaction_service, category_repository):
    first = transaction_service.create_transaction(
        TransactionCreate(title="Salary", type="income", value=3000, category="Job")
    )
    second = transaction_service.create_transaction(
        TransactionCreate(title="Overtime", type="income", value=200, category=" Job ")
    )

    assert first.category.id == second.category.id
    assert len(category_repository.list_all()) == 1


def test_create_without_category(transaction_service):
    transaction = transaction_service.create_transaction(
        TransactionCreate(title="Gift", type="income", value=10)
    )
    assert transaction.category is None


def test_outcome_exceeding_balance_rejected(transaction_service):
    transaction_service.create_transaction(
        TransactionCreate(title="Salary", type="income", value=100, category="Salary")
    )

    with pytest.raises(ValidationError) as exc_info:
        transaction_service.create_transaction(
            TransactionCreate(title="TV", type="outcome", value=500, category="Home")
        )

    assert exc_info.value.details["total"] == 100
    assert transaction_service.get_balance().outcome == 0


def test_list_transactions_includes_balance(transaction_service):
    transaction_service.create_transaction(
        TransactionCreate(title="Salary", type="income", value=100, category="Salary")
    )
    transaction_service.create_transaction(
        TransactionCreate(title="Lunch", type="outcome", value=30, category="Food")
    )

    response = transaction_service.list_transactions()

    assert [t.title for t in response.transactions] == ["Salary", "Lunch"]
    assert response.balance.total == 70


def test_delete_transaction(transaction_service):
    transaction = transaction_service.create_transaction(
        TransactionCreate(title="Salary", type="income", value=100)
    )

    transaction_service.delete_transaction(transaction.id)

    with pytest.raises(DataNotFoundError):
        transaction_service.delete_transaction(transaction.id)


def test_create_schema_rejects_blank_title():
    with pytest.raises(PydanticValidationError):
        TransactionCreate(title="   ", type="income", value=1)


def test_create_schema_rejects_negative_value():
    with pytest.raises(PydanticValidationError):
        TransactionCreate(title="Refund", type="income", value=-1)


@pytest.mark.parametrize("value", [float("nan"), float("inf")])
def test_create_schema_rejects_non_finite_value(value):
    with pytest.raises(PydanticValidationError):
        TransactionCreate(title="Odd", type="income", value=value)
