"""Running-balance computation and the cash views built on it.

Each view applies its own reconciliation filter before aggregating:

* cash flow and the annual projection look forward, so they take only
  transactions that are not reconciled yet;
* the bank statement view and account balances take only reconciled ones;
* daily movements take everything.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from caixa.domain.entities import (
    AccountBalance,
    AccountBalancesReport,
    AnnualProjection,
    BankAccount,
    CategoryProjection,
    CategoryType,
    DateField,
    GroupKey,
    PeriodBalance,
    ProjectionGroup,
    ReconciliationFilter,
    RunningBalanceReport,
    Transaction,
    TransactionType,
)
from caixa.domain.grouping import (
    filter_transactions,
    group_by_period,
    index_categories,
    months_between,
    period_key,
    sort_transactions,
)
from caixa.domain.money import ZERO, sum_amounts

logger = logging.getLogger("caixa.domain.balances")


def compute_running_balances(
    transactions: Iterable[Transaction],
    group_by: GroupKey = GroupKey.DAY,
    initial_balance: Decimal = ZERO,
    date_field: DateField = DateField.DUE_DATE,
) -> RunningBalanceReport:
    """Aggregate transactions into periods with a cumulative balance.

    Periods are processed chronologically. Each transaction adds its amount
    to the period's income or expense total and moves the running balance
    by ``+amount`` (income) or ``-amount`` (expense); the running balance is
    snapshotted once the period is complete.

    Args:
        transactions: Snapshot to aggregate
        group_by: Period granularity
        initial_balance: Seed value for the running balance
        date_field: Date used to place each transaction

    Returns:
        RunningBalanceReport with one row per non-empty period
    """
    running = initial_balance
    total_income = ZERO
    total_expense = ZERO
    periods = []

    for key, group in group_by_period(transactions, group_by, date_field):
        income = ZERO
        expense = ZERO
        for txn in group:
            if txn.is_income:
                income += txn.amount
                running += txn.amount
            else:
                expense += txn.amount
                running -= txn.amount
        total_income += income
        total_expense += expense
        periods.append(
            PeriodBalance(
                key=key,
                income=income,
                expense=expense,
                running_balance=running,
                transactions=group,
            )
        )

    return RunningBalanceReport(
        group_by=group_by,
        initial_balance=initial_balance,
        periods=tuple(periods),
        total_income=total_income,
        total_expense=total_expense,
    )


def opening_balance(
    accounts: Iterable[BankAccount], bank_account_id: Optional[int]
) -> Decimal:
    """Return the selected account's initial balance, or zero without one."""
    if bank_account_id is None:
        return ZERO
    for account in accounts:
        if account.id == bank_account_id:
            return account.initial_balance
    return ZERO


def cash_flow(
    transactions: Iterable[Transaction],
    start_date: date,
    end_date: date,
    bank_account_id: Optional[int] = None,
    initial_balance: Decimal = ZERO,
) -> RunningBalanceReport:
    """Project cash movements of transactions not reconciled yet.

    Every month of the window gets a row, even without transactions; an
    empty month carries the previous running balance forward. Each month
    row nests its day rows.
    """
    filtered = filter_transactions(
        transactions,
        start_date=start_date,
        end_date=end_date,
        date_field=DateField.DUE_DATE,
        reconciliation=ReconciliationFilter.EXCLUDED,
        bank_account_id=bank_account_id,
    )
    daily = compute_running_balances(
        filtered, GroupKey.DAY, initial_balance, DateField.DUE_DATE
    )

    days_by_month: dict[str, list[PeriodBalance]] = {}
    for day in daily.periods:
        days_by_month.setdefault(day.key[:7], []).append(day)

    running = initial_balance
    months = []
    for month_key in months_between(start_date, end_date):
        days = days_by_month.get(month_key, [])
        if days:
            running = days[-1].running_balance
        months.append(
            PeriodBalance(
                key=month_key,
                income=sum_amounts(day.income for day in days),
                expense=sum_amounts(day.expense for day in days),
                running_balance=running,
                transactions=tuple(txn for day in days for txn in day.transactions),
                days=tuple(days),
            )
        )

    return RunningBalanceReport(
        group_by=GroupKey.MONTH,
        initial_balance=initial_balance,
        periods=tuple(months),
        total_income=daily.total_income,
        total_expense=daily.total_expense,
    )


def daily_movements(
    transactions: Iterable[Transaction],
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> RunningBalanceReport:
    """Group every transaction of the window by due day, seeded at zero."""
    filtered = filter_transactions(
        transactions,
        start_date=start_date,
        end_date=end_date,
        date_field=DateField.DUE_DATE,
        reconciliation=ReconciliationFilter.EITHER,
    )
    return compute_running_balances(filtered, GroupKey.DAY, ZERO, DateField.DUE_DATE)


def bank_statement(
    transactions: Iterable[Transaction],
    accounts: Sequence[BankAccount],
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    bank_account_id: Optional[int] = None,
    search: Optional[str] = None,
) -> RunningBalanceReport:
    """Reconciled transactions by day, seeded with the account's initial balance."""
    filtered = filter_transactions(
        transactions,
        start_date=start_date,
        end_date=end_date,
        date_field=DateField.DUE_DATE,
        reconciliation=ReconciliationFilter.INCLUDED,
        bank_account_id=bank_account_id,
        search=search,
    )
    seed = opening_balance(accounts, bank_account_id)
    return compute_running_balances(filtered, GroupKey.DAY, seed, DateField.DUE_DATE)


def account_balances(
    transactions: Iterable[Transaction], accounts: Sequence[BankAccount]
) -> AccountBalancesReport:
    """Compute each account's reconciled balance and the consolidated total.

    Transactions are applied in competence-date order; those pointing at an
    account missing from the snapshot are ignored.
    """
    income: dict[int, Decimal] = {account.id: ZERO for account in accounts}
    expense: dict[int, Decimal] = {account.id: ZERO for account in accounts}

    reconciled = [txn for txn in transactions if txn.reconciled]
    ignored = 0
    for txn in sort_transactions(reconciled, DateField.COMPETENCE_DATE):
        if txn.bank_account_id not in income:
            ignored += 1
            continue
        if txn.is_income:
            income[txn.bank_account_id] += txn.amount
        else:
            expense[txn.bank_account_id] += txn.amount
    if ignored:
        logger.debug("Ignored %d transactions of unknown accounts", ignored)

    rows = []
    for account in accounts:
        balance = account.initial_balance + income[account.id] - expense[account.id]
        rows.append(
            AccountBalance(
                account_id=account.id,
                account_name=account.name,
                initial_balance=account.initial_balance,
                income=income[account.id],
                expense=expense[account.id],
                balance=balance,
            )
        )

    return AccountBalancesReport(
        accounts=tuple(rows),
        total=sum_amounts(row.balance for row in rows),
    )


def annual_projection(
    transactions: Iterable[Transaction],
    accounts: Sequence[BankAccount],
    categories: Iterable[CategoryType],
    year: int,
    bank_account_id: Optional[int] = None,
) -> AnnualProjection:
    """Month-by-month projection of a year's open transactions.

    The opening balance is the selected account's initial balance, or the
    sum over all accounts when no account is selected. Category rows carry
    positive monthly totals and a signed accumulated value (expenses
    negated) that runs through all twelve months.
    """
    if bank_account_id is None:
        opening = sum_amounts(account.initial_balance for account in accounts)
    else:
        opening = opening_balance(accounts, bank_account_id)

    filtered = filter_transactions(
        transactions,
        start_date=date(year, 1, 1),
        end_date=date(year, 12, 31),
        date_field=DateField.DUE_DATE,
        reconciliation=ReconciliationFilter.EXCLUDED,
        bank_account_id=bank_account_id,
    )

    monthly = compute_running_balances(
        filtered, GroupKey.MONTH, opening, DateField.DUE_DATE
    )
    running = opening
    running_balances = []
    for month in range(1, 13):
        period = monthly.period(period_key(date(year, month, 1), GroupKey.MONTH))
        if period is not None:
            running = period.running_balance
        running_balances.append(running)

    category_index = index_categories(categories)
    totals: dict[str, list[Decimal]] = {}
    dropped = 0
    for txn in filtered:
        category = category_index.get(txn.category or "")
        if category is None:
            dropped += 1
            continue
        row = totals.setdefault(category.name, [ZERO] * 12)
        row[txn.due_date.month - 1] += txn.amount
    if dropped:
        logger.debug("Projection dropped %d transactions without a known category", dropped)

    projections = []
    for name in sorted(totals):
        category = category_index[name]
        accumulated = []
        value = ZERO
        for amount in totals[name]:
            value += -amount if category.type is TransactionType.EXPENSE else amount
            accumulated.append(value)
        projections.append(
            CategoryProjection(
                name=name,
                type=category.type,
                dre_group=category.dre_group,
                monthly=tuple(totals[name]),
                accumulated=tuple(accumulated),
            )
        )

    return AnnualProjection(
        year=year,
        bank_account_id=bank_account_id,
        opening_balance=opening,
        running_balances=tuple(running_balances),
        groups=_group_projections(projections),
    )


def _group_projections(
    projections: list[CategoryProjection],
) -> tuple[ProjectionGroup, ...]:
    """Group category rows by DRE group, income groups first."""
    grouped: dict[object, list[CategoryProjection]] = {}
    for projection in projections:
        grouped.setdefault(projection.dre_group, []).append(projection)

    def sort_key(dre_group):
        if dre_group is None:
            return (2, 0)
        is_expense = dre_group.type is TransactionType.EXPENSE
        return (1 if is_expense else 0, dre_group.order)

    return tuple(
        ProjectionGroup(dre_group=dre_group, categories=tuple(grouped[dre_group]))
        for dre_group in sorted(grouped, key=sort_key)
    )
