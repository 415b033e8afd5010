"""Tests for running balances and the cash views."""

from datetime import date
from decimal import Decimal

from caixa.domain.balances import (
    account_balances,
    annual_projection,
    bank_statement,
    cash_flow,
    compute_running_balances,
    daily_movements,
)
from caixa.domain.entities import (
    CategoryType,
    DREGroup,
    GroupKey,
    TransactionType,
)

INCOME = TransactionType.INCOME
EXPENSE = TransactionType.EXPENSE


def _example(make_txn):
    return [
        make_txn(type=INCOME, amount="100.00", due_date=date(2024, 1, 5)),
        make_txn(type=INCOME, amount="250.50", due_date=date(2024, 1, 5)),
        make_txn(type=INCOME, amount="75.25", due_date=date(2024, 1, 10)),
        make_txn(type=EXPENSE, amount="50.00", due_date=date(2024, 1, 5)),
    ]


class TestComputeRunningBalances:
    def test_daily_example(self, make_txn):
        report = compute_running_balances(_example(make_txn), GroupKey.DAY, Decimal("0.00"))

        first, second = report.periods
        assert first.key == "2024-01-05"
        assert first.income == Decimal("350.50")
        assert first.expense == Decimal("50.00")
        assert first.balance == Decimal("300.50")
        assert first.running_balance == Decimal("300.50")
        assert second.key == "2024-01-10"
        assert second.income == Decimal("75.25")
        assert second.expense == Decimal("0")
        assert second.balance == Decimal("75.25")
        assert second.running_balance == Decimal("375.75")

    def test_final_balance_does_not_depend_on_grouping(self, make_txn):
        txns = _example(make_txn) + [
            make_txn(type=EXPENSE, amount="0.10", due_date=date(2024, 3, 1)),
            make_txn(type=INCOME, amount="0.20", due_date=date(2025, 7, 9)),
        ]
        seed = Decimal("123.45")
        expected = seed + Decimal("425.95") - Decimal("50.10")

        for group_by in GroupKey:
            report = compute_running_balances(txns, group_by, seed)
            assert report.final_balance == expected
            assert report.periods[-1].running_balance == expected

    def test_idempotent(self, make_txn):
        txns = tuple(_example(make_txn))
        assert compute_running_balances(txns) == compute_running_balances(txns)

    def test_decimal_sums_are_exact(self, make_txn):
        txns = [make_txn(type=INCOME, amount="0.10", due_date=date(2024, 1, 1)) for _ in range(3)]
        report = compute_running_balances(txns)
        assert report.total_income == Decimal("0.30")


class TestCashFlow:
    def test_only_open_transactions_with_empty_months(self, make_txn):
        txns = [
            make_txn(type=INCOME, amount="500", due_date=date(2024, 1, 10)),
            make_txn(type=EXPENSE, amount="200", due_date=date(2024, 3, 5)),
            make_txn(type=INCOME, amount="999", due_date=date(2024, 2, 1), reconciled=True),
        ]

        report = cash_flow(txns, date(2024, 1, 1), date(2024, 3, 31), initial_balance=Decimal("100"))

        assert [p.key for p in report.periods] == ["2024-01", "2024-02", "2024-03"]
        jan, feb, mar = report.periods
        assert jan.running_balance == Decimal("600")
        assert feb.income == Decimal("0") and feb.running_balance == Decimal("600")
        assert mar.running_balance == Decimal("400")
        assert [d.key for d in jan.days] == ["2024-01-10"]

    def test_account_filter(self, make_txn):
        txns = [
            make_txn(type=INCOME, amount="10", due_date=date(2024, 1, 1), bank_account_id=1),
            make_txn(type=INCOME, amount="20", due_date=date(2024, 1, 1), bank_account_id=2),
        ]
        report = cash_flow(txns, date(2024, 1, 1), date(2024, 1, 31), bank_account_id=2)
        assert report.total_income == Decimal("20")


def test_daily_movements_take_everything_from_zero(make_txn):
    txns = [
        make_txn(type=INCOME, amount="10", due_date=date(2024, 1, 1), reconciled=True),
        make_txn(type=EXPENSE, amount="4", due_date=date(2024, 1, 2)),
    ]
    report = daily_movements(txns)
    assert report.initial_balance == Decimal("0")
    assert report.final_balance == Decimal("6")


def test_bank_statement_seeds_with_account_balance(make_txn, two_accounts):
    txns = [
        make_txn(type=INCOME, amount="50", due_date=date(2024, 1, 3), reconciled=True, bank_account_id=1),
        make_txn(type=EXPENSE, amount="30", due_date=date(2024, 1, 4), bank_account_id=1),
    ]

    selected = bank_statement(txns, two_accounts, bank_account_id=1)
    consolidated = bank_statement(txns, two_accounts)

    assert selected.final_balance == Decimal("1050.00")
    assert consolidated.initial_balance == Decimal("0")
    assert consolidated.final_balance == Decimal("50")


def test_account_balances(make_txn, two_accounts):
    txns = [
        make_txn(type=INCOME, amount="100", due_date=date(2024, 1, 1), reconciled=True, bank_account_id=1),
        make_txn(type=EXPENSE, amount="40", due_date=date(2024, 1, 2), reconciled=True, bank_account_id=1),
        make_txn(type=EXPENSE, amount="999", due_date=date(2024, 1, 2), bank_account_id=1),
        make_txn(type=INCOME, amount="5", due_date=date(2024, 1, 2), reconciled=True, bank_account_id=99),
    ]

    report = account_balances(txns, two_accounts)

    assert report.for_account(1).balance == Decimal("1060.00")
    assert report.for_account(2).balance == Decimal("250.00")
    assert report.total == Decimal("1310.00")


def test_annual_projection(make_txn, two_accounts):
    categories = [
        CategoryType(id=1, name="Consultoria", type=INCOME, dre_group=DREGroup.RECEITA_BRUTA),
        CategoryType(id=2, name="Aluguel", type=EXPENSE, dre_group=DREGroup.DESPESAS_ADMINISTRATIVAS),
    ]
    txns = [
        make_txn(type=INCOME, amount="1000", due_date=date(2024, 1, 15), category="Consultoria"),
        make_txn(type=EXPENSE, amount="300", due_date=date(2024, 1, 5), category="Aluguel"),
        make_txn(type=EXPENSE, amount="300", due_date=date(2024, 2, 5), category="Aluguel"),
        make_txn(type=EXPENSE, amount="77", due_date=date(2024, 3, 5), category="Sem cadastro"),
    ]

    projection = annual_projection(txns, two_accounts, categories, 2024)

    assert projection.opening_balance == Decimal("1250.00")
    assert projection.running_balances[0] == Decimal("1950.00")
    assert projection.running_balances[1] == Decimal("1650.00")
    assert projection.running_balances[2] == Decimal("1573.00")
    assert projection.running_balances[11] == Decimal("1573.00")

    assert [g.dre_group for g in projection.groups] == [
        DREGroup.RECEITA_BRUTA,
        DREGroup.DESPESAS_ADMINISTRATIVAS,
    ]
    rent = projection.groups[1].categories[0]
    assert rent.monthly[:2] == (Decimal("300"), Decimal("300"))
    assert rent.accumulated[1] == Decimal("-600")
    assert rent.accumulated[11] == Decimal("-600")
