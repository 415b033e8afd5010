"""Tests for sorting, filtering and grouping primitives."""

from datetime import date

from caixa.domain.entities import DateField, GroupKey, ReconciliationFilter, TransactionType
from caixa.domain.grouping import (
    filter_transactions,
    group_by_category,
    group_by_period,
    months_between,
    period_key,
    sort_transactions,
)


def test_period_key_formats():
    d = date(2024, 3, 7)
    assert period_key(d, GroupKey.DAY) == "2024-03-07"
    assert period_key(d, GroupKey.MONTH) == "2024-03"
    assert period_key(d, GroupKey.YEAR) == "2024"


def test_months_between_spans_year_boundary():
    assert months_between(date(2023, 11, 15), date(2024, 2, 1)) == (
        "2023-11",
        "2023-12",
        "2024-01",
        "2024-02",
    )


def test_sort_is_stable_and_drops_missing_dates(make_txn):
    a = make_txn(due_date=date(2024, 1, 5), description="a")
    b = make_txn(due_date=date(2024, 1, 1), description="b")
    c = make_txn(due_date=date(2024, 1, 5), description="c")
    undated = make_txn(due_date=None, description="undated")

    result = sort_transactions([a, undated, b, c])

    assert [t.description for t in result] == ["b", "a", "c"]


def test_group_by_period_orders_keys_and_keeps_input_order(make_txn):
    first = make_txn(due_date=date(2024, 2, 10))
    second = make_txn(due_date=date(2024, 1, 31))
    third = make_txn(due_date=date(2024, 2, 1))

    groups = group_by_period([first, second, third], GroupKey.MONTH)

    assert [key for key, _ in groups] == ["2024-01", "2024-02"]
    assert groups[1][1] == (third, first)


def test_group_by_period_uses_selected_date_field(make_txn):
    txn = make_txn(due_date=date(2024, 2, 10), competence_date=date(2024, 1, 20))

    groups = group_by_period([txn], GroupKey.MONTH, DateField.COMPETENCE_DATE)

    assert groups[0][0] == "2024-01"


def test_group_by_category_skips_uncategorized(make_txn):
    rent = make_txn(category="Aluguel")
    salary = make_txn(category="Salários")
    loose = make_txn(category=None)

    groups = group_by_category([salary, loose, rent])

    assert [name for name, _ in groups] == ["Aluguel", "Salários"]


class TestFilterTransactions:
    def test_reconciliation_filters(self, make_txn):
        open_txn = make_txn(due_date=date(2024, 1, 1))
        done = make_txn(due_date=date(2024, 1, 1), reconciled=True)

        assert filter_transactions([open_txn, done], reconciliation=ReconciliationFilter.EXCLUDED) == [open_txn]
        assert filter_transactions([open_txn, done], reconciliation=ReconciliationFilter.INCLUDED) == [done]
        assert len(filter_transactions([open_txn, done])) == 2

    def test_date_window_is_inclusive_and_drops_undated(self, make_txn):
        inside = make_txn(due_date=date(2024, 1, 31))
        outside = make_txn(due_date=date(2024, 2, 1))
        undated = make_txn(due_date=None)

        result = filter_transactions(
            [inside, outside, undated], start_date=date(2024, 1, 1), end_date=date(2024, 1, 31)
        )

        assert result == [inside]

    def test_account_type_and_search(self, make_txn):
        match = make_txn(
            type=TransactionType.INCOME, bank_account_id=1, supplier="Cliente ACME"
        )
        wrong_account = make_txn(type=TransactionType.INCOME, bank_account_id=2, supplier="ACME")
        wrong_type = make_txn(bank_account_id=1, supplier="ACME")

        result = filter_transactions(
            [match, wrong_account, wrong_type],
            bank_account_id=1,
            transaction_type=TransactionType.INCOME,
            search="acme",
        )

        assert result == [match]
