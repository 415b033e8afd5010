"""Report domain service.

Each report loads a fresh snapshot from the store and hands it to the pure
aggregation engine together with the view's filter policy.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Union

from caixa.database.base import Database
from caixa.domain import aging, balances, dre
from caixa.domain.entities import (
    AccountBalancesReport,
    AgingReport,
    AnnualProjection,
    BankAccount,
    CategoryDelinquency,
    CategoryFlowItem,
    CategoryType,
    DashboardMargins,
    DelinquencyScope,
    DREGroup,
    DREReport,
    ExpenseBreakdown,
    FinancialIndicators,
    RunningBalanceReport,
    Transaction,
    TransactionType,
    UnmappedCategoryPolicy,
)

logger = logging.getLogger("caixa.domain.reports")


@dataclass(frozen=True)
class Snapshot:
    """Immutable copy of everything the engine reads."""

    transactions: tuple[Transaction, ...]
    accounts: tuple[BankAccount, ...]
    categories: tuple[CategoryType, ...]


@dataclass(frozen=True)
class DashboardReport:
    """Figures shown together on the dashboard."""

    start_date: date
    end_date: date
    indicators: FinancialIndicators
    margins: DashboardMargins
    delinquency: AgingReport
    expenses: ExpenseBreakdown


class ReportService:
    """Service for building financial reports."""

    def __init__(self, db: Database):
        """Initialize report service.

        Args:
            db: Database instance
        """
        self.db = db

    def snapshot(self) -> Snapshot:
        """Load transactions, accounts and categories from the store."""
        snapshot = Snapshot(
            transactions=tuple(self.db.list_transactions()),
            accounts=tuple(self.db.list_bank_accounts()),
            categories=tuple(self.db.list_category_types()),
        )
        logger.debug(
            "Loaded snapshot: %d transactions, %d accounts, %d categories",
            len(snapshot.transactions),
            len(snapshot.accounts),
            len(snapshot.categories),
        )
        return snapshot

    def cash_flow(
        self, start_date: date, end_date: date, bank_account_id: Optional[int] = None
    ) -> RunningBalanceReport:
        """Monthly projection of open transactions, seeded with the account's opening balance."""
        data = self.snapshot()
        return balances.cash_flow(
            data.transactions,
            start_date,
            end_date,
            bank_account_id=bank_account_id,
            initial_balance=balances.opening_balance(data.accounts, bank_account_id),
        )

    def daily_movements(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> RunningBalanceReport:
        """Every transaction of the window by due day."""
        return balances.daily_movements(self.snapshot().transactions, start_date, end_date)

    def bank_statement(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        bank_account_id: Optional[int] = None,
        search: Optional[str] = None,
    ) -> RunningBalanceReport:
        """Reconciled transactions by day with the account's running balance."""
        data = self.snapshot()
        return balances.bank_statement(
            data.transactions,
            data.accounts,
            start_date=start_date,
            end_date=end_date,
            bank_account_id=bank_account_id,
            search=search,
        )

    def account_balances(self) -> AccountBalancesReport:
        data = self.snapshot()
        return balances.account_balances(data.transactions, data.accounts)

    def annual_projection(
        self, year: int, bank_account_id: Optional[int] = None
    ) -> AnnualProjection:
        data = self.snapshot()
        return balances.annual_projection(
            data.transactions, data.accounts, data.categories, year, bank_account_id
        )

    def income_statement(
        self,
        year: int,
        policy: UnmappedCategoryPolicy = UnmappedCategoryPolicy.EXCLUDE,
    ) -> DREReport:
        """Build the income statement of a year.

        Raises:
            ValidationError: If policy is ERROR and some categories are unmapped
        """
        data = self.snapshot()
        return dre.build_dre(data.transactions, data.categories, year, policy)

    def category_flow(
        self,
        year: int,
        month: int,
        dre_group: Optional[DREGroup] = None,
        transaction_type: Optional[TransactionType] = None,
        search: Optional[str] = None,
    ) -> tuple[CategoryFlowItem, ...]:
        data = self.snapshot()
        return dre.category_flow(
            data.transactions, data.categories, year, month, dre_group, transaction_type, search
        )

    def aging(
        self,
        now: Union[date, datetime],
        scope: DelinquencyScope = DelinquencyScope.PENDING,
    ) -> AgingReport:
        return aging.aging_report(self.snapshot().transactions, now, scope)

    def delinquency_by_category(
        self,
        now: Union[date, datetime],
        scope: DelinquencyScope = DelinquencyScope.PENDING,
    ) -> tuple[CategoryDelinquency, ...]:
        return aging.delinquency_by_category(self.snapshot().transactions, now, scope)

    def dashboard(
        self, start_date: date, end_date: date, now: Union[date, datetime]
    ) -> DashboardReport:
        """Indicators, margins, delinquency and the expense breakdown in one pass.

        Margins use the competence window; the expense breakdown covers the
        calendar year of ``end_date``; delinquency is measured over all income.
        """
        data = self.snapshot()
        return DashboardReport(
            start_date=start_date,
            end_date=end_date,
            indicators=dre.financial_indicators(data.transactions),
            margins=dre.dashboard_margins(
                data.transactions, data.categories, start_date, end_date
            ),
            delinquency=aging.aging_report(
                data.transactions, now, DelinquencyScope.ALL_INCOME
            ),
            expenses=dre.expense_breakdown(data.transactions, data.categories, end_date.year),
        )
