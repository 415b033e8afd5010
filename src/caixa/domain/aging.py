"""Aging and delinquency metrics for receivables.

An income transaction is overdue when it is still pending and its due date
(taken as midnight) lies before ``now``. Lateness is counted in whole
elapsed days, truncated, without calendar-aware month arithmetic.
"""

import logging
from dataclasses import replace
from datetime import date, datetime, time
from decimal import Decimal
from typing import Iterable, Optional, Union

from caixa.domain.entities import (
    AgingBucket,
    AgingReport,
    CategoryDelinquency,
    DelinquencyScope,
    Transaction,
    TransactionStatus,
)
from caixa.domain.money import ZERO, percentage, sum_amounts

logger = logging.getLogger("caixa.domain.aging")

SECONDS_PER_DAY = 86400

# A receivable overdue by less than a full day still lands in the first band.
AGING_BUCKETS: tuple[AgingBucket, ...] = (
    AgingBucket("1-30", 0, 30),
    AgingBucket("31-60", 31, 60),
    AgingBucket("61-90", 61, 90),
    AgingBucket(">90", 91, None),
)

Moment = Union[date, datetime]


def _as_datetime(value: Moment, like: Optional[datetime] = None) -> datetime:
    if isinstance(value, datetime):
        return value
    tzinfo = like.tzinfo if like is not None else None
    return datetime.combine(value, time.min, tzinfo=tzinfo)


def days_overdue(due_date: date, now: Moment) -> int:
    """Return the number of whole days elapsed since a due date.

    Args:
        due_date: Date the payment was due
        now: Reference moment; a plain date means midnight of that day

    Returns:
        floor((now - due_date) / 1 day); negative when not yet due
    """
    current = _as_datetime(now)
    elapsed = current - _as_datetime(due_date, like=current)
    return int(elapsed.total_seconds() // SECONDS_PER_DAY)


def is_overdue(txn: Transaction, now: Moment) -> bool:
    """Check whether a receivable is pending past its due date."""
    if not txn.is_income or txn.status is not TransactionStatus.PENDING:
        return False
    if txn.due_date is None:
        return False
    current = _as_datetime(now)
    return _as_datetime(txn.due_date, like=current) < current


def delinquency_rate(overdue_amount: Decimal, total_amount: Decimal) -> Decimal:
    """Overdue share of the total in percent; exactly 0 when the total is 0."""
    return percentage(overdue_amount, total_amount)


def _in_scope(txn: Transaction, scope: DelinquencyScope) -> bool:
    if not txn.is_income:
        return False
    if scope is DelinquencyScope.PENDING:
        return txn.status is TransactionStatus.PENDING
    return True


def aging_report(
    transactions: Iterable[Transaction],
    now: Moment,
    scope: DelinquencyScope = DelinquencyScope.PENDING,
) -> AgingReport:
    """Classify overdue receivables into lateness buckets.

    The scope decides the rate's denominator: pending receivables for the
    receivables view, every income transaction for the dashboard. The
    overdue set itself is always pending income past due.

    Args:
        transactions: Snapshot to analyse
        now: Reference moment
        scope: Which income transactions make up the total

    Returns:
        AgingReport whose buckets partition the overdue set
    """
    current = _as_datetime(now)
    in_scope = [txn for txn in transactions if _in_scope(txn, scope)]
    overdue = [txn for txn in in_scope if is_overdue(txn, current)]

    counts = [0] * len(AGING_BUCKETS)
    amounts = [ZERO] * len(AGING_BUCKETS)
    for txn in overdue:
        days = days_overdue(txn.due_date, current)
        for index, bucket in enumerate(AGING_BUCKETS):
            if bucket.contains(days):
                counts[index] += 1
                amounts[index] += txn.amount
                break

    total_amount = sum_amounts(txn.amount for txn in in_scope)
    overdue_amount = sum_amounts(txn.amount for txn in overdue)
    logger.debug(
        "Aging as of %s: %d of %d receivables overdue",
        current.isoformat(),
        len(overdue),
        len(in_scope),
    )

    return AgingReport(
        as_of=current,
        scope=scope,
        buckets=tuple(
            replace(bucket, count=count, amount=amount)
            for bucket, count, amount in zip(AGING_BUCKETS, counts, amounts)
        ),
        overdue_count=len(overdue),
        overdue_amount=overdue_amount,
        total_amount=total_amount,
        rate=delinquency_rate(overdue_amount, total_amount),
        overdue=tuple(overdue),
    )


def delinquency_by_category(
    transactions: Iterable[Transaction],
    now: Moment,
    scope: DelinquencyScope = DelinquencyScope.PENDING,
) -> tuple[CategoryDelinquency, ...]:
    """Delinquency rate per income category, ordered by category name.

    Transactions without a category are reported under ``None``, last.
    """
    current = _as_datetime(now)
    totals: dict[Optional[str], Decimal] = {}
    overdue: dict[Optional[str], Decimal] = {}
    for txn in transactions:
        if not _in_scope(txn, scope):
            continue
        key = txn.category or None
        totals[key] = totals.get(key, ZERO) + txn.amount
        if is_overdue(txn, current):
            overdue[key] = overdue.get(key, ZERO) + txn.amount

    ordered = sorted(totals, key=lambda name: (name is None, name or ""))
    return tuple(
        CategoryDelinquency(
            category=name,
            overdue_amount=overdue.get(name, ZERO),
            total_amount=totals[name],
            rate=delinquency_rate(overdue.get(name, ZERO), totals[name]),
        )
        for name in ordered
    )
