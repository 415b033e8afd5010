"""Income statement (DRE) aggregation.

Reconciled transactions of a year are summed per DRE group and category by
competence month. Group totals are always positive magnitudes; deductions
are applied only by the derived-row cascade:

1. receita_liquida       = receita_bruta - impostos - deducao_receita
2. lucro_bruto           = receita_liquida - custos_cmv - custos_cpv - custos_servicos
3. resultado_operacional = lucro_bruto - despesas_administrativas
                           - despesas_pessoal - despesas_variaveis
4. ebitda                = resultado_operacional
5. resultado_financeiro  = receitas_financeiras - despesas_financeiras
6. lucro_antes_impostos  = resultado_operacional + resultado_financeiro + outras_receitas
7. lucro_liquido         = lucro_antes_impostos
8. resultado_final       = lucro_liquido - investimentos
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Callable, Iterable, Mapping, Optional

from caixa.domain.entities import (
    CategoryFlowItem,
    CategoryType,
    DashboardMargins,
    DateField,
    DRECategoryLine,
    DREGroup,
    DRELine,
    DREReport,
    ExpenseBreakdown,
    ExpenseGroupMonth,
    FinancialIndicators,
    MarginMetric,
    ReconciliationFilter,
    Transaction,
    TransactionType,
    UnmappedCategoryPolicy,
)
from caixa.domain.errors import ValidationError, unmapped_categories
from caixa.domain.grouping import filter_transactions, index_categories
from caixa.domain.money import ZERO, percentage, sum_amounts

logger = logging.getLogger("caixa.domain.dre")

MONTHS = 12

UNCATEGORIZED = "(sem categoria)"

DERIVED_ROWS: tuple[tuple[str, str], ...] = (
    ("receita_liquida", "Receita Líquida"),
    ("lucro_bruto", "Lucro Bruto"),
    ("resultado_operacional", "Resultado Operacional"),
    ("ebitda", "EBITDA"),
    ("resultado_financeiro", "Resultado Financeiro"),
    ("lucro_antes_impostos", "Lucro Antes dos Impostos"),
    ("lucro_liquido", "Lucro Líquido"),
    ("resultado_final", "Resultado Final"),
)

MonthlyValues = tuple[Decimal, ...]


def _per_month(compute: Callable[[int], Decimal]) -> MonthlyValues:
    return tuple(compute(month) for month in range(MONTHS))


def compute_derived(
    group_totals: Mapping[DREGroup, MonthlyValues],
) -> dict[str, MonthlyValues]:
    """Evaluate the derived-row cascade month by month.

    Args:
        group_totals: Monthly totals per DRE group; missing groups count as zero

    Returns:
        Dict of derived row key to its twelve monthly values
    """
    zeros = (ZERO,) * MONTHS

    def g(group: DREGroup) -> MonthlyValues:
        return group_totals.get(group, zeros)

    receita_liquida = _per_month(
        lambda m: g(DREGroup.RECEITA_BRUTA)[m]
        - g(DREGroup.IMPOSTOS)[m]
        - g(DREGroup.DEDUCAO_RECEITA)[m]
    )
    lucro_bruto = _per_month(
        lambda m: receita_liquida[m]
        - g(DREGroup.CUSTOS_CMV)[m]
        - g(DREGroup.CUSTOS_CPV)[m]
        - g(DREGroup.CUSTOS_SERVICOS)[m]
    )
    resultado_operacional = _per_month(
        lambda m: lucro_bruto[m]
        - g(DREGroup.DESPESAS_ADMINISTRATIVAS)[m]
        - g(DREGroup.DESPESAS_PESSOAL)[m]
        - g(DREGroup.DESPESAS_VARIAVEIS)[m]
    )
    # No depreciation or amortization line is modeled.
    ebitda = resultado_operacional
    resultado_financeiro = _per_month(
        lambda m: g(DREGroup.RECEITAS_FINANCEIRAS)[m]
        - g(DREGroup.DESPESAS_FINANCEIRAS)[m]
    )
    lucro_antes_impostos = _per_month(
        lambda m: resultado_operacional[m]
        + resultado_financeiro[m]
        + g(DREGroup.OUTRAS_RECEITAS)[m]
    )
    # No income tax line is modeled.
    lucro_liquido = lucro_antes_impostos
    resultado_final = _per_month(
        lambda m: lucro_liquido[m] - g(DREGroup.INVESTIMENTOS)[m]
    )

    return {
        "receita_liquida": receita_liquida,
        "lucro_bruto": lucro_bruto,
        "resultado_operacional": resultado_operacional,
        "ebitda": ebitda,
        "resultado_financeiro": resultado_financeiro,
        "lucro_antes_impostos": lucro_antes_impostos,
        "lucro_liquido": lucro_liquido,
        "resultado_final": resultado_final,
    }


def build_dre(
    transactions: Iterable[Transaction],
    categories: Iterable[CategoryType],
    year: int,
    policy: UnmappedCategoryPolicy = UnmappedCategoryPolicy.EXCLUDE,
) -> DREReport:
    """Build the income statement for a calendar year.

    Only reconciled transactions whose competence date falls in ``year``
    are considered. A transaction whose category is unknown or has no DRE
    group is excluded under ``EXCLUDE`` (its category name is reported in
    ``unmapped_categories``) and rejected under ``ERROR``.

    Raises:
        ValidationError: If policy is ERROR and unmapped categories exist
    """
    year_transactions = filter_transactions(
        transactions,
        start_date=date(year, 1, 1),
        end_date=date(year, 12, 31),
        date_field=DateField.COMPETENCE_DATE,
        reconciliation=ReconciliationFilter.INCLUDED,
    )
    category_index = index_categories(categories)

    group_totals: dict[DREGroup, list[Decimal]] = {
        group: [ZERO] * MONTHS for group in DREGroup
    }
    category_totals: dict[DREGroup, dict[str, list[Decimal]]] = {
        group: {} for group in DREGroup
    }
    unmapped: set[str] = set()
    dropped = 0

    for txn in year_transactions:
        category = category_index.get(txn.category or "")
        if category is None or category.dre_group is None:
            unmapped.add(txn.category or UNCATEGORIZED)
            dropped += 1
            continue

        month = txn.competence_date.month - 1
        group_totals[category.dre_group][month] += txn.amount
        row = category_totals[category.dre_group].setdefault(
            category.name, [ZERO] * MONTHS
        )
        row[month] += txn.amount

    unmapped_names = tuple(sorted(unmapped))
    if unmapped_names:
        if policy is UnmappedCategoryPolicy.ERROR:
            raise ValidationError(unmapped_categories(list(unmapped_names)))
        logger.warning(
            "Excluded %d transactions from the %d income statement: %s",
            dropped,
            year,
            unmapped_categories(list(unmapped_names)),
        )

    groups = []
    for group in DREGroup.ordered():
        groups.append(
            DRELine(
                key=group.value,
                label=group.display_name,
                monthly=tuple(group_totals[group]),
                categories=tuple(
                    DRECategoryLine(name=name, monthly=tuple(values))
                    for name, values in sorted(category_totals[group].items())
                ),
                type=group.type,
            )
        )

    derived_values = compute_derived(
        {group: tuple(values) for group, values in group_totals.items()}
    )
    derived = tuple(
        DRELine(key=key, label=label, monthly=derived_values[key])
        for key, label in DERIVED_ROWS
    )

    logger.debug(
        "Built income statement for %d from %d transactions",
        year,
        len(year_transactions) - dropped,
    )
    return DREReport(
        year=year,
        groups=tuple(groups),
        derived=derived,
        unmapped_categories=unmapped_names,
    )


def category_flow(
    transactions: Iterable[Transaction],
    categories: Iterable[CategoryType],
    year: int,
    month: int,
    dre_group: Optional[DREGroup] = None,
    transaction_type: Optional[TransactionType] = None,
    search: Optional[str] = None,
) -> tuple[CategoryFlowItem, ...]:
    """Total each category for one competence month.

    Results are sorted by descending total, then by name, and carry their
    share of the month's total in percent. Transactions with unknown
    categories are skipped.
    """
    category_index = index_categories(categories)
    needle = search.lower() if search else None
    totals: dict[str, Decimal] = {}

    for txn in transactions:
        category = category_index.get(txn.category or "")
        if category is None or txn.competence_date is None:
            continue
        if txn.competence_date.year != year or txn.competence_date.month != month:
            continue
        if dre_group is not None and category.dre_group is not dre_group:
            continue
        if transaction_type is not None and category.type is not transaction_type:
            continue
        if needle is not None and needle not in category.name.lower():
            continue
        totals[category.name] = totals.get(category.name, ZERO) + txn.amount

    grand_total = sum_amounts(totals.values())
    ordered = sorted(totals.items(), key=lambda item: (-item[1], item[0]))
    return tuple(
        CategoryFlowItem(
            name=name,
            dre_group=category_index[name].dre_group,
            type=category_index[name].type,
            total=total,
            share=percentage(total, grand_total),
        )
        for name, total in ordered
        if total != ZERO
    )


EBITDA_DEDUCTIONS = (
    DREGroup.CUSTOS_SERVICOS,
    DREGroup.DESPESAS_ADMINISTRATIVAS,
    DREGroup.DESPESAS_PESSOAL,
    DREGroup.DESPESAS_VARIAVEIS,
)

VARIABLE_COST_GROUPS = (
    DREGroup.CUSTOS_SERVICOS,
    DREGroup.DESPESAS_VARIAVEIS,
    DREGroup.IMPOSTOS,
)


def dashboard_margins(
    transactions: Iterable[Transaction],
    categories: Iterable[CategoryType],
    start_date: date,
    end_date: date,
) -> DashboardMargins:
    """Compute profitability indicators for a competence-date window.

    Only reconciled transactions count. Revenue is the sum of income;
    EBITDA deducts service costs and operating expenses; the contribution
    margin deducts only expenses of variable-cost groups; net profit
    deducts every expense. Each margin is 0 when revenue is 0.
    """
    window = filter_transactions(
        transactions,
        start_date=start_date,
        end_date=end_date,
        date_field=DateField.COMPETENCE_DATE,
        reconciliation=ReconciliationFilter.INCLUDED,
    )
    category_index = index_categories(categories)

    def group_of(txn: Transaction) -> Optional[DREGroup]:
        category = category_index.get(txn.category or "")
        return category.dre_group if category is not None else None

    revenue = sum_amounts(txn.amount for txn in window if txn.is_income)
    expenses = [txn for txn in window if not txn.is_income]

    ebitda = revenue - sum_amounts(
        txn.amount for txn in window if group_of(txn) in EBITDA_DEDUCTIONS
    )
    contribution = revenue - sum_amounts(
        txn.amount for txn in expenses if group_of(txn) in VARIABLE_COST_GROUPS
    )
    net_profit = revenue - sum_amounts(txn.amount for txn in expenses)

    return DashboardMargins(
        revenue=revenue,
        ebitda=MarginMetric(ebitda, percentage(ebitda, revenue)),
        contribution=MarginMetric(contribution, percentage(contribution, revenue)),
        net_profit=MarginMetric(net_profit, percentage(net_profit, revenue)),
    )


def expense_breakdown(
    transactions: Iterable[Transaction],
    categories: Iterable[CategoryType],
    year: int,
) -> ExpenseBreakdown:
    """Break a year's reconciled expenses down by DRE expense group and month.

    Each cell carries the group's total for the month, its share of that
    month's expenses and the per-category totals and shares inside it.
    """
    expenses = filter_transactions(
        transactions,
        start_date=date(year, 1, 1),
        end_date=date(year, 12, 31),
        date_field=DateField.COMPETENCE_DATE,
        reconciliation=ReconciliationFilter.INCLUDED,
        transaction_type=TransactionType.EXPENSE,
    )
    category_index = index_categories(categories)
    expense_groups = tuple(
        group for group in DREGroup.ordered() if group.type is TransactionType.EXPENSE
    )

    cells: dict[DREGroup, list[dict[str, Decimal]]] = {
        group: [{} for _ in range(MONTHS)] for group in expense_groups
    }
    for txn in expenses:
        category = category_index.get(txn.category or "")
        if category is None or category.dre_group not in cells:
            continue
        cell = cells[category.dre_group][txn.competence_date.month - 1]
        cell[category.name] = cell.get(category.name, ZERO) + txn.amount

    monthly_totals = tuple(
        sum_amounts(
            amount
            for group in expense_groups
            for amount in cells[group][month].values()
        )
        for month in range(MONTHS)
    )

    groups = []
    for group in expense_groups:
        months = []
        for month, cell in enumerate(cells[group]):
            total = sum_amounts(cell.values())
            months.append(
                ExpenseGroupMonth(
                    total=total,
                    share=percentage(total, monthly_totals[month]),
                    categories=tuple(
                        (name, amount, percentage(amount, total))
                        for name, amount in sorted(
                            cell.items(), key=lambda item: (-item[1], item[0])
                        )
                    ),
                )
            )
        groups.append((group, tuple(months)))

    return ExpenseBreakdown(
        year=year, monthly_totals=monthly_totals, groups=tuple(groups)
    )


def financial_indicators(transactions: Iterable[Transaction]) -> FinancialIndicators:
    """Open receivables and payables next to realised income and expense."""
    receivables = payables = income = expense = ZERO
    for txn in transactions:
        if txn.reconciled:
            if txn.is_income:
                income += txn.amount
            else:
                expense += txn.amount
        elif txn.is_income:
            receivables += txn.amount
        else:
            payables += txn.amount
    return FinancialIndicators(
        total_receivables=receivables,
        total_payables=payables,
        total_income=income,
        total_expense=expense,
    )
