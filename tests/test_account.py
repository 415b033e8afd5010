"""Tests for the bank account service."""

from datetime import date
from decimal import Decimal

import pytest

from caixa.domain.entities import TransactionStatus, TransactionType
from caixa.domain.errors import ConflictError, DependencyError, NotFoundError, ValidationError


def test_create_and_get(account_service):
    account_id = account_service.create_account(
        name="Itaú PJ", bank_code="341", agency="0001", account_number="999", initial_balance="1500.00"
    )

    account = account_service.get_account(account_id)
    assert account.name == "Itaú PJ"
    assert account.initial_balance == Decimal("1500.00")
    assert account.is_primary is False
    assert account_service.get_account_by_name("Itaú PJ").id == account_id


def test_negative_initial_balance_allowed(account_service):
    account_id = account_service.create_account(name="Cheque especial", initial_balance=Decimal("-200"))
    assert account_service.get_account(account_id).initial_balance == Decimal("-200")


def test_duplicate_and_empty_names(account_service):
    account_service.create_account(name="Caixa")
    with pytest.raises(ConflictError):
        account_service.create_account(name="Caixa")
    with pytest.raises(ValidationError):
        account_service.create_account(name="  ")


def test_single_primary_account(account_service):
    first = account_service.create_account(name="A", is_primary=True)
    second = account_service.create_account(name="B", is_primary=True)

    primaries = [a.id for a in account_service.list_accounts() if a.is_primary]
    assert primaries == [second]
    assert account_service.get_primary().id == second

    account_service.set_primary(first)
    assert [a.id for a in account_service.list_accounts() if a.is_primary] == [first]


def test_set_primary_unknown_account(account_service):
    with pytest.raises(NotFoundError):
        account_service.set_primary(404)


def test_update_account(account_service, sample_account):
    account_service.update_account(sample_account.id, name="Renomeada", initial_balance=Decimal("10"))

    account = account_service.get_account(sample_account.id)
    assert account.name == "Renomeada"
    assert account.initial_balance == Decimal("10")
    assert account.bank_code == "341"
    assert account.current_balance == Decimal("10")


def test_delete_blocked_by_transactions(account_service, transaction_service, sample_account):
    transaction_service.create_transaction(
        type=TransactionType.EXPENSE, amount="10", due_date=date(2024, 1, 1),
        bank_account_id=sample_account.id,
    )
    with pytest.raises(DependencyError):
        account_service.delete_account(sample_account.id)


def test_delete_account(account_service):
    account_id = account_service.create_account(name="Temporária")
    account_service.delete_account(account_id)
    assert account_service.get_account(account_id) is None


def test_refresh_balances_counts_only_reconciled(account_service, transaction_service, sample_account):
    transaction_service.create_transaction(
        type=TransactionType.INCOME, amount="250", due_date=date(2024, 1, 1),
        bank_account_id=sample_account.id, status=TransactionStatus.COMPLETED, reconciled=True,
    )
    transaction_service.create_transaction(
        type=TransactionType.EXPENSE, amount="999", due_date=date(2024, 1, 1),
        bank_account_id=sample_account.id,
    )

    report = account_service.refresh_balances()

    assert report.for_account(sample_account.id).balance == Decimal("1250.00")
    assert account_service.get_account(sample_account.id).current_balance == Decimal("1250.00")


def test_sub_cent_initial_balance_rejected(account_service, sample_account):
    with pytest.raises(ValidationError):
        account_service.create_account(name="Caixa", initial_balance="0.001")
    with pytest.raises(ValidationError):
        account_service.update_account(sample_account.id, initial_balance="1000.005")
    assert account_service.get_account(sample_account.id).initial_balance == Decimal("1000.00")
