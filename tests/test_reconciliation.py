"""Tests for statement line matching."""

from datetime import date
from decimal import Decimal

from caixa.domain.entities import (
    BankStatementLine,
    StatementLineType,
    TransactionStatus,
    TransactionType,
)
from caixa.domain.reconciliation import (
    descriptions_match,
    find_matching_transaction,
    normalize_description,
    statement_running_balance,
)

INCOME = TransactionType.INCOME
EXPENSE = TransactionType.EXPENSE


def _line(amount="150.00", line_type=StatementLineType.DEBIT, day=10, description="PAG ALUGUEL", **fields):
    return BankStatementLine(
        id=fields.pop("id", 1),
        bank_account_id=fields.pop("bank_account_id", 1),
        transaction_date=date(2024, 1, day),
        description=description,
        amount=Decimal(amount),
        type=line_type,
        **fields,
    )


def test_normalize_and_match_descriptions():
    assert normalize_description("Pag. Aluguel - 01/24") == "pagaluguel0124"
    assert descriptions_match("ALUGUEL", "pag aluguel janeiro")
    assert not descriptions_match("", "anything")
    assert not descriptions_match("luz", "agua")


class TestFindMatchingTransaction:
    def test_requires_same_account_amount_and_direction(self, make_txn):
        line = _line()
        wrong_account = make_txn(type=EXPENSE, amount="150.00", due_date=date(2024, 1, 10), bank_account_id=2)
        wrong_amount = make_txn(type=EXPENSE, amount="150.01", due_date=date(2024, 1, 10), bank_account_id=1)
        wrong_type = make_txn(type=INCOME, amount="150.00", due_date=date(2024, 1, 10), bank_account_id=1)
        completed = make_txn(type=EXPENSE, amount="150.00", due_date=date(2024, 1, 10), bank_account_id=1,
                             status=TransactionStatus.COMPLETED)

        assert find_matching_transaction(line, [wrong_account, wrong_amount, wrong_type, completed]) is None

    def test_tolerance_window(self, make_txn):
        line = _line(day=10)
        inside = make_txn(type=EXPENSE, amount="150.00", due_date=date(2024, 1, 15), bank_account_id=1)
        outside = make_txn(type=EXPENSE, amount="150.00", due_date=date(2024, 1, 16), bank_account_id=1)

        assert find_matching_transaction(line, [outside, inside]) is inside
        assert find_matching_transaction(line, [outside]) is None
        assert find_matching_transaction(line, [outside], tolerance_days=6) is outside

    def test_description_beats_date_distance(self, make_txn):
        line = _line(day=10, description="PAG ALUGUEL")
        close = make_txn(type=EXPENSE, amount="150.00", due_date=date(2024, 1, 10),
                         bank_account_id=1, description="Internet")
        described = make_txn(type=EXPENSE, amount="150.00", due_date=date(2024, 1, 13),
                             bank_account_id=1, description="Aluguel")

        assert find_matching_transaction(line, [close, described]) is described

    def test_closest_date_then_input_order(self, make_txn):
        line = _line(day=10, description="")
        far = make_txn(type=EXPENSE, amount="150.00", due_date=date(2024, 1, 7), bank_account_id=1)
        near_a = make_txn(type=EXPENSE, amount="150.00", due_date=date(2024, 1, 11), bank_account_id=1)
        near_b = make_txn(type=EXPENSE, amount="150.00", due_date=date(2024, 1, 9), bank_account_id=1)

        assert find_matching_transaction(line, [far, near_a, near_b]) is near_a

    def test_credit_matches_income(self, make_txn):
        line = _line(line_type=StatementLineType.CREDIT, description="TED ACME")
        income = make_txn(type=INCOME, amount="150.00", due_date=date(2024, 1, 8), bank_account_id=1)
        assert find_matching_transaction(line, [income]) is income


def test_statement_running_balance_sorts_and_accumulates():
    lines = [
        _line(amount="30.00", day=20, id=1),
        _line(amount="100.00", line_type=StatementLineType.CREDIT, day=5, id=2),
    ]

    result = statement_running_balance(lines, Decimal("10.00"))

    assert [line.id for line in result] == [2, 1]
    assert [line.balance for line in result] == [Decimal("110.00"), Decimal("80.00")]
