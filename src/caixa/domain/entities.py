"""Domain model entities for caixa.

These are pure data classes representing business concepts, independent of
database schema. The aggregation engine consumes them as read-only snapshots,
and every report it produces is itself an immutable entity defined here.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from caixa.domain.money import ZERO


class TransactionType(str, Enum):
    """Direction of a transaction; amounts themselves are never negative."""

    INCOME = "income"
    EXPENSE = "expense"


class TransactionStatus(str, Enum):
    """Settlement status of a transaction."""

    PENDING = "pending"
    COMPLETED = "completed"


class StatementLineType(str, Enum):
    """Direction of a bank statement line."""

    CREDIT = "credit"
    DEBIT = "debit"


class ReconciliationFilter(str, Enum):
    """Which reconciliation states a report includes."""

    INCLUDED = "included"
    EXCLUDED = "excluded"
    EITHER = "either"

    def matches(self, reconciled: bool) -> bool:
        if self is ReconciliationFilter.INCLUDED:
            return reconciled
        if self is ReconciliationFilter.EXCLUDED:
            return not reconciled
        return True


class GroupKey(str, Enum):
    """Period granularity used when grouping transactions."""

    DAY = "day"
    MONTH = "month"
    YEAR = "year"


class DateField(str, Enum):
    """Transaction date used for filtering and grouping."""

    DUE_DATE = "due_date"
    COMPETENCE_DATE = "competence_date"


class UnmappedCategoryPolicy(str, Enum):
    """What the income statement does with categories lacking a DRE group."""

    EXCLUDE = "exclude"
    ERROR = "error"


class DelinquencyScope(str, Enum):
    """Denominator used for delinquency rates.

    PENDING compares overdue receivables with all pending receivables;
    ALL_INCOME compares them with every income transaction.
    """

    PENDING = "pending"
    ALL_INCOME = "all_income"


@dataclass(frozen=True)
class DREGroupInfo:
    """Display metadata for an income statement line."""

    name: str
    type: TransactionType
    order: int


class DREGroup(str, Enum):
    """The thirteen fixed income statement (DRE) groups."""

    RECEITA_BRUTA = "receita_bruta"
    IMPOSTOS = "impostos"
    DEDUCAO_RECEITA = "deducao_receita"
    CUSTOS_CMV = "custos_cmv"
    CUSTOS_CPV = "custos_cpv"
    CUSTOS_SERVICOS = "custos_servicos"
    DESPESAS_ADMINISTRATIVAS = "despesas_administrativas"
    DESPESAS_PESSOAL = "despesas_pessoal"
    DESPESAS_VARIAVEIS = "despesas_variaveis"
    OUTRAS_RECEITAS = "outras_receitas"
    RECEITAS_FINANCEIRAS = "receitas_financeiras"
    DESPESAS_FINANCEIRAS = "despesas_financeiras"
    INVESTIMENTOS = "investimentos"

    @property
    def info(self) -> DREGroupInfo:
        return DRE_GROUP_INFO[self]

    @property
    def display_name(self) -> str:
        return self.info.name

    @property
    def type(self) -> TransactionType:
        return self.info.type

    @property
    def order(self) -> int:
        return self.info.order

    @classmethod
    def ordered(cls) -> tuple["DREGroup", ...]:
        """Return all groups in income statement display order."""
        return tuple(sorted(cls, key=lambda group: group.order))


DRE_GROUP_INFO: dict[DREGroup, DREGroupInfo] = {
    DREGroup.RECEITA_BRUTA: DREGroupInfo("Receita Bruta", TransactionType.INCOME, 1),
    DREGroup.IMPOSTOS: DREGroupInfo("Impostos", TransactionType.EXPENSE, 2),
    DREGroup.DEDUCAO_RECEITA: DREGroupInfo(
        "Deduções de Receitas", TransactionType.EXPENSE, 3
    ),
    DREGroup.CUSTOS_CMV: DREGroupInfo(
        "Custos das Mercadorias Vendidas (CMV)", TransactionType.EXPENSE, 4
    ),
    DREGroup.CUSTOS_CPV: DREGroupInfo(
        "Custos dos Produtos Vendidos (CPV)", TransactionType.EXPENSE, 5
    ),
    DREGroup.CUSTOS_SERVICOS: DREGroupInfo(
        "Custos dos Serviços", TransactionType.EXPENSE, 6
    ),
    DREGroup.DESPESAS_ADMINISTRATIVAS: DREGroupInfo(
        "Despesas Administrativas", TransactionType.EXPENSE, 7
    ),
    DREGroup.DESPESAS_PESSOAL: DREGroupInfo(
        "Despesas com Pessoal", TransactionType.EXPENSE, 8
    ),
    DREGroup.DESPESAS_VARIAVEIS: DREGroupInfo(
        "Despesas Variáveis", TransactionType.EXPENSE, 9
    ),
    DREGroup.OUTRAS_RECEITAS: DREGroupInfo(
        "Outras Receitas", TransactionType.INCOME, 10
    ),
    DREGroup.RECEITAS_FINANCEIRAS: DREGroupInfo(
        "Receitas Financeiras", TransactionType.INCOME, 11
    ),
    DREGroup.DESPESAS_FINANCEIRAS: DREGroupInfo(
        "Despesas Financeiras", TransactionType.EXPENSE, 12
    ),
    DREGroup.INVESTIMENTOS: DREGroupInfo("Investimentos", TransactionType.EXPENSE, 13),
}


@dataclass(frozen=True)
class BankAccount:
    """Bank account domain entity."""

    id: int
    name: str
    bank_code: str
    agency: str
    account_number: str
    initial_balance: Decimal
    current_balance: Decimal = ZERO
    is_primary: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class CategoryType:
    """Category domain entity mapped onto a DRE group."""

    id: int
    name: str
    type: TransactionType
    dre_group: Optional[DREGroup]
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class CostCenter:
    """Cost center domain entity."""

    id: int
    name: str
    description: Optional[str] = None
    active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity.

    ``amount`` is always non-negative; ``type`` carries the direction.
    """

    id: int
    type: TransactionType
    amount: Decimal
    description: str = ""
    category: Optional[str] = None
    competence_date: Optional[date] = None
    due_date: Optional[date] = None
    status: TransactionStatus = TransactionStatus.PENDING
    bank_account_id: Optional[int] = None
    supplier: Optional[str] = None
    cost_center: Optional[str] = None
    invoice_number: Optional[str] = None
    reconciled: bool = False
    transfer_id: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def is_income(self) -> bool:
        return self.type is TransactionType.INCOME

    @property
    def signed_amount(self) -> Decimal:
        """Amount with the direction applied: positive income, negative expense."""
        return self.amount if self.is_income else -self.amount

    def get_date(self, date_field: DateField) -> Optional[date]:
        if date_field is DateField.COMPETENCE_DATE:
            return self.competence_date
        return self.due_date


@dataclass(frozen=True)
class BankStatementLine:
    """Bank statement line domain entity."""

    id: int
    bank_account_id: int
    transaction_date: date
    description: str
    amount: Decimal
    type: StatementLineType
    balance: Decimal = ZERO
    reconciled: bool = False
    transaction_id: Optional[int] = None
    fit_id: Optional[str] = None
    created_at: Optional[datetime] = None


# Report models


@dataclass(frozen=True)
class PeriodBalance:
    """Totals for one period of a running-balance view."""

    key: str
    income: Decimal
    expense: Decimal
    running_balance: Decimal
    transactions: tuple[Transaction, ...] = ()
    days: tuple["PeriodBalance", ...] = ()

    @property
    def balance(self) -> Decimal:
        return self.income - self.expense


@dataclass(frozen=True)
class RunningBalanceReport:
    """Ordered period rows with cumulative balances."""

    group_by: GroupKey
    initial_balance: Decimal
    periods: tuple[PeriodBalance, ...]
    total_income: Decimal
    total_expense: Decimal

    @property
    def balance(self) -> Decimal:
        return self.total_income - self.total_expense

    @property
    def final_balance(self) -> Decimal:
        return self.initial_balance + self.balance

    def period(self, key: str) -> Optional[PeriodBalance]:
        for period in self.periods:
            if period.key == key:
                return period
        return None


@dataclass(frozen=True)
class AccountBalance:
    """Reconciled balance of a single bank account."""

    account_id: int
    account_name: str
    initial_balance: Decimal
    income: Decimal
    expense: Decimal
    balance: Decimal


@dataclass(frozen=True)
class AccountBalancesReport:
    """Balances for every bank account plus the consolidated total."""

    accounts: tuple[AccountBalance, ...]
    total: Decimal

    def for_account(self, account_id: int) -> Optional[AccountBalance]:
        for account in self.accounts:
            if account.account_id == account_id:
                return account
        return None


@dataclass(frozen=True)
class CategoryProjection:
    """Monthly totals of one category in the annual cash-flow projection."""

    name: str
    type: TransactionType
    dre_group: Optional[DREGroup]
    monthly: tuple[Decimal, ...]
    accumulated: tuple[Decimal, ...]


@dataclass(frozen=True)
class ProjectionGroup:
    """Categories of the annual projection sharing a DRE group."""

    dre_group: Optional[DREGroup]
    categories: tuple[CategoryProjection, ...]


@dataclass(frozen=True)
class AnnualProjection:
    """Month-by-month running balance of not-yet-reconciled transactions."""

    year: int
    bank_account_id: Optional[int]
    opening_balance: Decimal
    running_balances: tuple[Decimal, ...]
    groups: tuple[ProjectionGroup, ...]


@dataclass(frozen=True)
class DRECategoryLine:
    """Monthly totals of one category inside a DRE group."""

    name: str
    monthly: tuple[Decimal, ...]

    @property
    def total(self) -> Decimal:
        return sum(self.monthly, ZERO)


@dataclass(frozen=True)
class DRELine:
    """One income statement row with twelve monthly values."""

    key: str
    label: str
    monthly: tuple[Decimal, ...]
    categories: tuple[DRECategoryLine, ...] = ()
    type: Optional[TransactionType] = None

    @property
    def total(self) -> Decimal:
        return sum(self.monthly, ZERO)

    def month(self, month: int) -> Decimal:
        """Return the value for a calendar month (1-12)."""
        return self.monthly[month - 1]


@dataclass(frozen=True)
class DREReport:
    """Income statement for one calendar year."""

    year: int
    groups: tuple[DRELine, ...]
    derived: tuple[DRELine, ...]
    unmapped_categories: tuple[str, ...] = ()

    def row(self, key: str) -> DRELine:
        for line in self.groups + self.derived:
            if line.key == key:
                return line
        raise KeyError(key)


@dataclass(frozen=True)
class CategoryFlowItem:
    """Total of one category within a month, with its share of the total."""

    name: str
    dre_group: Optional[DREGroup]
    type: TransactionType
    total: Decimal
    share: Decimal


@dataclass(frozen=True)
class MarginMetric:
    """A result value and its margin over revenue, in percent."""

    value: Decimal
    margin: Decimal


@dataclass(frozen=True)
class DashboardMargins:
    """Profitability indicators over reconciled transactions of a window."""

    revenue: Decimal
    ebitda: MarginMetric
    contribution: MarginMetric
    net_profit: MarginMetric


@dataclass(frozen=True)
class ExpenseGroupMonth:
    """Expense total of a DRE group in a month and its share of that month."""

    total: Decimal
    share: Decimal
    categories: tuple[tuple[str, Decimal, Decimal], ...] = ()


@dataclass(frozen=True)
class ExpenseBreakdown:
    """Monthly expense analysis by DRE expense group."""

    year: int
    monthly_totals: tuple[Decimal, ...]
    groups: tuple[tuple[DREGroup, tuple[ExpenseGroupMonth, ...]], ...]


@dataclass(frozen=True)
class FinancialIndicators:
    """Open receivables/payables and realised income/expense totals."""

    total_receivables: Decimal
    total_payables: Decimal
    total_income: Decimal
    total_expense: Decimal


@dataclass(frozen=True)
class AgingBucket:
    """Count and amount of overdue receivables within a lateness band."""

    label: str
    min_days: int
    max_days: Optional[int]
    count: int = 0
    amount: Decimal = ZERO

    def contains(self, days: int) -> bool:
        if days < self.min_days:
            return False
        return self.max_days is None or days <= self.max_days


@dataclass(frozen=True)
class AgingReport:
    """Aging buckets and delinquency rate of receivables."""

    as_of: datetime
    scope: DelinquencyScope
    buckets: tuple[AgingBucket, ...]
    overdue_count: int
    overdue_amount: Decimal
    total_amount: Decimal
    rate: Decimal
    overdue: tuple[Transaction, ...] = field(default=(), repr=False)

    def bucket(self, label: str) -> AgingBucket:
        for bucket in self.buckets:
            if bucket.label == label:
                return bucket
        raise KeyError(label)


@dataclass(frozen=True)
class CategoryDelinquency:
    """Delinquency figures for a single income category."""

    category: Optional[str]
    overdue_amount: Decimal
    total_amount: Decimal
    rate: Decimal
