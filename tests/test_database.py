"""Tests for the SQLAlchemy store returning domain entities."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from caixa.domain import entities
from caixa.domain.entities import DREGroup, StatementLineType, TransactionStatus, TransactionType
from caixa.domain.errors import NotFoundError


class TestDatabaseInterface:
    """The store hands back frozen domain entities, never ORM rows."""

    def test_bank_account_round_trip(self, temp_db):
        account_id = temp_db.create_bank_account(
            name="Itaú", bank_code="341", agency="0001", account_number="1-2",
            initial_balance=Decimal("1234.56"),
        )

        account = temp_db.get_bank_account(account_id)

        assert isinstance(account, entities.BankAccount)
        assert account.initial_balance == Decimal("1234.56")
        assert account.current_balance == Decimal("1234.56")
        assert account.is_primary is False
        assert isinstance(account.created_at, datetime)

    def test_category_enums_restored(self, temp_db):
        category_id = temp_db.create_category_type(
            name="Aluguel", type=TransactionType.EXPENSE, dre_group=DREGroup.DESPESAS_ADMINISTRATIVAS
        )
        ungrouped_id = temp_db.create_category_type(
            name="Diversos", type=TransactionType.EXPENSE, dre_group=None
        )

        assert temp_db.get_category_type(category_id).dre_group is DREGroup.DESPESAS_ADMINISTRATIVAS
        assert temp_db.get_category_type(ungrouped_id).dre_group is None
        assert [c.name for c in temp_db.list_category_types()] == ["Aluguel", "Diversos"]

    def test_transaction_round_trip(self, temp_db):
        txn_id = temp_db.create_transaction(
            type=TransactionType.INCOME,
            amount=Decimal("10.50"),
            competence_date=date(2024, 1, 1),
            due_date=date(2024, 1, 31),
            status=TransactionStatus.COMPLETED,
            reconciled=True,
        )

        txn = temp_db.get_transaction(txn_id)

        assert isinstance(txn, entities.Transaction)
        assert txn.type is TransactionType.INCOME
        assert txn.status is TransactionStatus.COMPLETED
        assert txn.amount == Decimal("10.50")
        assert txn.description == ""

    def test_list_transactions_filters_by_due_date(self, temp_db):
        for day in (5, 15, 25):
            temp_db.create_transaction(
                type=TransactionType.EXPENSE, amount=Decimal(day), due_date=date(2024, 1, day)
            )

        txns = temp_db.list_transactions(start_date=date(2024, 1, 10), end_date=date(2024, 1, 25))

        assert [t.due_date.day for t in txns] == [15, 25]

    def test_single_primary_flag(self, temp_db):
        first = temp_db.create_bank_account(name="A")
        second = temp_db.create_bank_account(name="B")

        temp_db.set_primary_bank_account(first)
        temp_db.set_primary_bank_account(second)

        assert [a.name for a in temp_db.list_bank_accounts() if a.is_primary] == ["B"]
        assert temp_db.get_primary_bank_account().id == second

    def test_set_current_balances(self, temp_db):
        account_id = temp_db.create_bank_account(name="A", initial_balance=Decimal("5"))
        temp_db.set_current_balances({account_id: Decimal("42.10")})
        assert temp_db.get_bank_account(account_id).current_balance == Decimal("42.10")

    def test_update_unknown_transaction(self, temp_db):
        with pytest.raises(NotFoundError):
            temp_db.update_transaction(99, amount=Decimal("1"))

    def test_update_rejects_unknown_columns(self, temp_db):
        txn_id = temp_db.create_transaction(type=TransactionType.EXPENSE, amount=Decimal("1"))
        with pytest.raises(ValueError):
            temp_db.update_transaction(txn_id, colour="red")


class TestStatementLines:
    @pytest.fixture
    def account_id(self, temp_db):
        return temp_db.create_bank_account(name="Itaú")

    def _line(self, temp_db, account_id, fit_id="1", day=10):
        return temp_db.create_statement_line(
            bank_account_id=account_id,
            transaction_date=date(2024, 1, day),
            description="TARIFA",
            amount=Decimal("12.90"),
            type=StatementLineType.DEBIT,
            balance=Decimal("-12.90"),
            fit_id=fit_id,
        )

    def test_fit_id_lookup_is_per_account(self, temp_db, account_id):
        other = temp_db.create_bank_account(name="Nubank")
        self._line(temp_db, account_id, fit_id="ABC")

        assert temp_db.statement_line_exists(account_id, "ABC")
        assert not temp_db.statement_line_exists(other, "ABC")

    def test_lines_ordered_by_date(self, temp_db, account_id):
        self._line(temp_db, account_id, fit_id="2", day=20)
        self._line(temp_db, account_id, fit_id="1", day=5)

        lines = temp_db.list_statement_lines(bank_account_id=account_id)

        assert [line.transaction_date.day for line in lines] == [5, 20]
        assert lines[0].type is StatementLineType.DEBIT

    def test_reconcile_links_and_completes(self, temp_db, account_id):
        line_id = self._line(temp_db, account_id)
        txn_id = temp_db.create_transaction(
            type=TransactionType.EXPENSE, amount=Decimal("12.90"), bank_account_id=account_id
        )

        temp_db.reconcile_statement_line(line_id, txn_id)
        assert temp_db.get_transaction(txn_id).status is TransactionStatus.COMPLETED
        assert temp_db.get_statement_line(line_id).transaction_id == txn_id

        temp_db.unreconcile_statement_line(line_id)
        txn = temp_db.get_transaction(txn_id)
        assert txn.status is TransactionStatus.PENDING
        assert txn.reconciled is False
        assert temp_db.get_statement_line(line_id).transaction_id is None

    def test_delete_transfer_releases_lines(self, temp_db, account_id):
        line_id = self._line(temp_db, account_id)
        leg = {"amount": Decimal("12.90"), "transfer_id": "t1", "bank_account_id": account_id}
        out_id, _ = temp_db.create_transactions(
            [{**leg, "type": TransactionType.EXPENSE}, {**leg, "type": TransactionType.INCOME}]
        )
        temp_db.reconcile_statement_line(line_id, out_id)

        assert temp_db.delete_transfer("t1") == 2
        assert temp_db.get_statement_line(line_id).reconciled is False
        assert temp_db.list_transactions() == []
