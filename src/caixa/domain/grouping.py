"""Sorting, filtering and grouping primitives for transaction snapshots.

Groups are returned as tuples of ``(key, transactions)`` ordered by key, so
callers never depend on the insertion order of a dict.
"""

import logging
from datetime import date
from typing import Iterable, Optional

from dateutil.relativedelta import relativedelta

from caixa.domain.entities import (
    CategoryType,
    DateField,
    GroupKey,
    ReconciliationFilter,
    Transaction,
    TransactionType,
)

logger = logging.getLogger("caixa.domain.grouping")


def period_key(value: date, group_by: GroupKey) -> str:
    """Return the normalized key of the period containing a date."""
    if group_by is GroupKey.DAY:
        return value.strftime("%Y-%m-%d")
    if group_by is GroupKey.MONTH:
        return value.strftime("%Y-%m")
    return value.strftime("%Y")


def months_between(start: date, end: date) -> tuple[str, ...]:
    """Return every ``YYYY-MM`` key from the month of ``start`` to that of ``end``."""
    keys = []
    current = start.replace(day=1)
    last = end.replace(day=1)
    while current <= last:
        keys.append(period_key(current, GroupKey.MONTH))
        current = current + relativedelta(months=1)
    return tuple(keys)


def sort_transactions(
    transactions: Iterable[Transaction],
    date_field: DateField = DateField.DUE_DATE,
) -> list[Transaction]:
    """Sort transactions ascending by a date field.

    The sort is stable, so transactions sharing a date keep their input
    order. Transactions without the date are excluded.
    """
    dated = [txn for txn in transactions if txn.get_date(date_field) is not None]
    return sorted(dated, key=lambda txn: txn.get_date(date_field))


def group_by_period(
    transactions: Iterable[Transaction],
    group_by: GroupKey,
    date_field: DateField = DateField.DUE_DATE,
) -> tuple[tuple[str, tuple[Transaction, ...]], ...]:
    """Partition transactions into periods ordered ascending by key.

    Args:
        transactions: Transactions to group
        group_by: Period granularity
        date_field: Date used to place each transaction

    Returns:
        Tuple of (period key, transactions) pairs
    """
    transactions = list(transactions)
    ordered = sort_transactions(transactions, date_field)
    if len(ordered) != len(transactions):
        logger.debug(
            "Skipped %d transactions without %s",
            len(transactions) - len(ordered),
            date_field.value,
        )

    grouped: dict[str, list[Transaction]] = {}
    for txn in ordered:
        key = period_key(txn.get_date(date_field), group_by)
        grouped.setdefault(key, []).append(txn)

    return tuple((key, tuple(grouped[key])) for key in sorted(grouped))


def group_by_category(
    transactions: Iterable[Transaction],
) -> tuple[tuple[str, tuple[Transaction, ...]], ...]:
    """Group transactions by category name, ordered by name.

    Transactions without a category are excluded.
    """
    grouped: dict[str, list[Transaction]] = {}
    for txn in transactions:
        if not txn.category:
            continue
        grouped.setdefault(txn.category, []).append(txn)
    return tuple((name, tuple(grouped[name])) for name in sorted(grouped))


def filter_transactions(
    transactions: Iterable[Transaction],
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    date_field: DateField = DateField.DUE_DATE,
    reconciliation: ReconciliationFilter = ReconciliationFilter.EITHER,
    bank_account_id: Optional[int] = None,
    transaction_type: Optional[TransactionType] = None,
    search: Optional[str] = None,
) -> list[Transaction]:
    """Apply a report's filter policy to a snapshot.

    When a date bound is given, transactions without the date are excluded.
    The search term matches description or supplier, case-insensitively.
    """
    needle = search.lower() if search else None
    result = []
    for txn in transactions:
        if not reconciliation.matches(txn.reconciled):
            continue
        if bank_account_id is not None and txn.bank_account_id != bank_account_id:
            continue
        if transaction_type is not None and txn.type is not transaction_type:
            continue
        if start_date is not None or end_date is not None:
            value = txn.get_date(date_field)
            if value is None:
                continue
            if start_date is not None and value < start_date:
                continue
            if end_date is not None and value > end_date:
                continue
        if needle is not None:
            haystacks = (txn.description or "", txn.supplier or "")
            if not any(needle in text.lower() for text in haystacks):
                continue
        result.append(txn)
    return result


def index_categories(categories: Iterable[CategoryType]) -> dict[str, CategoryType]:
    """Map category names to their CategoryType."""
    return {category.name: category for category in categories}
