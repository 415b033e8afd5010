"""Report commands: cash flow, statements, DRE and delinquency."""

from datetime import date

import click

from caixa.cli.account_resolution import resolve_optional_account
from caixa.cli.date_filters import period_flags_from, period_options, resolve_cli_date_range
from caixa.cli.error_handling import handle_domain_error
from caixa.domain.account import AccountService
from caixa.domain.entities import (
    DelinquencyScope,
    DREGroup,
    DRELine,
    RunningBalanceReport,
    TransactionType,
)
from caixa.domain.money import quantize_money, round_percentage
from caixa.domain.reports import ReportService
from caixa.utils.date_parser import parse_date, year_range

MONTH_LABELS = ["Jan", "Fev", "Mar", "Abr", "Mai", "Jun", "Jul", "Ago", "Set", "Out", "Nov", "Dez"]


def _money(value) -> str:
    return f"{quantize_money(value):,.2f}"


def _percent(value) -> str:
    return f"{round_percentage(value)}%"


def _parse_as_of(ctx, as_of: str | None) -> date:
    if as_of is None:
        return date.today()
    try:
        return parse_date(as_of)
    except ValueError as e:
        click.echo(f"Error: Invalid date: {e}", err=True)
        ctx.exit(1)


def _echo_running_report(report: RunningBalanceReport, show_transactions: bool) -> None:
    """Print period rows with income, expense, balance and running balance."""
    click.echo(f"\nInitial balance: {_money(report.initial_balance)}")
    click.echo("-" * 80)
    click.echo(f"{'Period':<12} {'Income':>16} {'Expense':>16} {'Balance':>16} {'Running':>16}")
    click.echo("-" * 80)
    for period in report.periods:
        click.echo(
            f"{period.key:<12} {_money(period.income):>16} {_money(period.expense):>16} "
            f"{_money(period.balance):>16} {_money(period.running_balance):>16}"
        )
        if show_transactions:
            for day in period.days:
                click.echo(
                    f"  {day.key:<10} {_money(day.income):>16} {_money(day.expense):>16} "
                    f"{_money(day.balance):>16} {_money(day.running_balance):>16}"
                )
            if not period.days:
                for txn in period.transactions:
                    sign = "+" if txn.is_income else "-"
                    click.echo(f"    #{txn.id:<6} {sign}{_money(txn.amount):>15}  {txn.description[:40]}")
    click.echo("-" * 80)
    click.echo(
        f"{'Total':<12} {_money(report.total_income):>16} {_money(report.total_expense):>16} "
        f"{_money(report.balance):>16} {_money(report.final_balance):>16}"
    )


@click.group()
def report_group():
    """Financial reports."""
    pass


@report_group.command("cash-flow")
@click.option("--start-date", help="Start due date (defaults to January 1)")
@click.option("--end-date", help="End due date (defaults to December 31)")
@period_options
@click.option("--account", help="Bank account name or ID")
@click.option("--days", is_flag=True, help="Show the day rows of each month")
@click.pass_context
def cash_flow(ctx, start_date, end_date, account, days, **period):
    """Monthly projection of the transactions not reconciled yet."""
    db = ctx.obj["db"]
    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=period_flags_from(period),
        default_range=year_range(date.today().year),
    )
    if start is None or end is None:
        click.echo("Error: Cash flow needs both --start-date and --end-date.", err=True)
        ctx.exit(1)
    account_id = resolve_optional_account(ctx, AccountService(db), account)

    report = ReportService(db).cash_flow(start, end, account_id)
    click.echo(f"\nCash flow {start} to {end}")
    _echo_running_report(report, show_transactions=days)


@report_group.command("daily")
@click.option("--start-date", help="Start due date")
@click.option("--end-date", help="End due date")
@period_options
@click.option("--transactions", "show_transactions", is_flag=True, help="List each day's transactions")
@click.pass_context
def daily(ctx, start_date, end_date, show_transactions, **period):
    """Every transaction grouped by due day, from a zero balance."""
    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period_flags=period_flags_from(period)
    )
    report = ReportService(ctx.obj["db"]).daily_movements(start, end)
    if not report.periods:
        click.echo("No transactions found.")
        return
    _echo_running_report(report, show_transactions=show_transactions)


@report_group.command("statement")
@click.option("--start-date", help="Start due date")
@click.option("--end-date", help="End due date")
@period_options
@click.option("--account", help="Bank account name or ID (defaults to the primary account)")
@click.option("--all-accounts", is_flag=True, help="Consolidate every account from a zero balance")
@click.option("--search", help="Text to find in description or supplier")
@click.option("--transactions", "show_transactions", is_flag=True, help="List each day's transactions")
@click.pass_context
def statement(ctx, start_date, end_date, account, all_accounts, search, show_transactions, **period):
    """Reconciled transactions by day with the account's running balance."""
    db = ctx.obj["db"]
    account_service = AccountService(db)
    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period_flags=period_flags_from(period)
    )

    account_id = None
    if not all_accounts:
        account_id = resolve_optional_account(ctx, account_service, account)
        if account_id is None:
            primary = account_service.get_primary()
            if primary is not None:
                account_id = primary.id

    report = ReportService(db).bank_statement(start, end, account_id, search)
    if account_id is not None:
        click.echo(f"\nBank statement: {account_service.get_account(account_id).name}")
    else:
        click.echo("\nBank statement: all accounts")
    _echo_running_report(report, show_transactions=show_transactions)


@report_group.command("balances")
@click.pass_context
def balances(ctx):
    """Reconciled balance of every account and the consolidated total."""
    report = ReportService(ctx.obj["db"]).account_balances()
    if not report.accounts:
        click.echo("No bank accounts found.")
        return
    click.echo(f"\n{'Account':<30} {'Balance':>16}")
    click.echo("-" * 47)
    for row in report.accounts:
        click.echo(f"{row.account_name:<30} {_money(row.balance):>16}")
    click.echo("-" * 47)
    click.echo(f"{'Total':<30} {_money(report.total):>16}")


@report_group.command("annual")
@click.option("--year", type=int, default=lambda: date.today().year, help="Year to project")
@click.option("--account", help="Bank account name or ID")
@click.pass_context
def annual(ctx, year: int, account: str | None):
    """Month-by-month projection of the year's open transactions by category."""
    db = ctx.obj["db"]
    account_id = resolve_optional_account(ctx, AccountService(db), account)
    projection = ReportService(db).annual_projection(year, account_id)

    header = "".join(f"{label:>12}" for label in MONTH_LABELS)
    click.echo(f"\nAnnual projection {year} (opening balance {_money(projection.opening_balance)})")
    click.echo(f"{'':<30}{header}")
    for group in projection.groups:
        title = group.dre_group.display_name if group.dre_group else "Sem grupo DRE"
        click.echo(f"\n{title}")
        for row in group.categories:
            values = "".join(f"{_money(v):>12}" for v in row.monthly)
            click.echo(f"  {row.name[:28]:<28}{values}")
    balances_row = "".join(f"{_money(v):>12}" for v in projection.running_balances)
    click.echo(f"\n{'Saldo acumulado':<30}{balances_row}")


def _echo_dre_line(line: DRELine, monthly: bool, indent: str = "") -> None:
    label = f"{indent}{line.label}"[:40]
    if monthly:
        values = "".join(f"{_money(v):>12}" for v in line.monthly)
        click.echo(f"{label:<40}{values}{_money(line.total):>14}")
    else:
        click.echo(f"{label:<40}{_money(line.total):>16}")


@report_group.command("dre")
@click.option("--year", type=int, default=lambda: date.today().year, help="Year of the statement")
@click.option("--monthly", is_flag=True, help="Show a column per month")
@click.option("--categories", "show_categories", is_flag=True, help="Break groups down by category")
@click.pass_context
def dre(ctx, year: int, monthly: bool, show_categories: bool):
    """Income statement (DRE) of a year.

    Only reconciled transactions count, by competence date. Categories
    without a DRE group are left out, or abort the report when the global
    --unmapped-categories option is 'error'.
    """
    try:
        report = ReportService(ctx.obj["db"]).income_statement(year, ctx.obj["unmapped_policy"])
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"\nDRE {year}")
    if monthly:
        header = "".join(f"{label:>12}" for label in MONTH_LABELS)
        click.echo(f"{'':<40}{header}{'Total':>14}")
    click.echo("-" * (40 + (12 * 12 + 14 if monthly else 16)))
    for line in report.groups:
        _echo_dre_line(line, monthly)
        if show_categories:
            for category in line.categories:
                _echo_dre_line(
                    DRELine(key=line.key, label=category.name, monthly=category.monthly),
                    monthly,
                    indent="    ",
                )
    click.echo("-" * (40 + (12 * 12 + 14 if monthly else 16)))
    for line in report.derived:
        _echo_dre_line(line, monthly)

    if report.unmapped_categories:
        click.echo(
            f"\nWarning: left out categories without DRE group: {', '.join(report.unmapped_categories)}",
            err=True,
        )


@report_group.command("categories")
@click.option("--year", type=int, default=lambda: date.today().year)
@click.option("--month", type=click.IntRange(1, 12), default=lambda: date.today().month)
@click.option("--group", "dre_group", type=click.Choice([g.value for g in DREGroup.ordered()]))
@click.option("--type", "txn_type", type=click.Choice([t.value for t in TransactionType]))
@click.option("--search", help="Text to find in the category name")
@click.pass_context
def categories(ctx, year: int, month: int, dre_group, txn_type, search):
    """Totals per category for one month, largest first."""
    items = ReportService(ctx.obj["db"]).category_flow(
        year,
        month,
        dre_group=DREGroup(dre_group) if dre_group else None,
        transaction_type=TransactionType(txn_type) if txn_type else None,
        search=search,
    )
    if not items:
        click.echo("No transactions found.")
        return
    click.echo(f"\nCategories {MONTH_LABELS[month - 1]}/{year}")
    click.echo("-" * 90)
    click.echo(f"{'Category':<30} {'DRE group':<30} {'Total':>16} {'Share':>8}")
    click.echo("-" * 90)
    for item in items:
        group = item.dre_group.display_name if item.dre_group else "-"
        click.echo(
            f"{item.name[:30]:<30} {group[:30]:<30} {_money(item.total):>16} {_percent(item.share):>8}"
        )


@report_group.command("aging")
@click.option("--as-of", help="Reference date (defaults to today)")
@click.option(
    "--scope",
    type=click.Choice([s.value for s in DelinquencyScope]),
    default=DelinquencyScope.PENDING.value,
    show_default=True,
    help="Denominator of the delinquency rate",
)
@click.option("--by-category", is_flag=True, help="Show the delinquency rate of each category")
@click.pass_context
def aging(ctx, as_of: str | None, scope: str, by_category: bool):
    """Overdue receivables by days late, with the delinquency rate."""
    now = _parse_as_of(ctx, as_of)
    service = ReportService(ctx.obj["db"])
    report = service.aging(now, DelinquencyScope(scope))

    click.echo(f"\nAging as of {now}")
    click.echo("-" * 50)
    for bucket in report.buckets:
        click.echo(f"{bucket.label + ' days':<14} {bucket.count:>6} {_money(bucket.amount):>16}")
    click.echo("-" * 50)
    click.echo(f"{'Overdue':<14} {report.overdue_count:>6} {_money(report.overdue_amount):>16}")
    click.echo(f"{'In scope':<14} {'':>6} {_money(report.total_amount):>16}")
    click.echo(f"Delinquency rate: {_percent(report.rate)}")

    if by_category:
        click.echo(f"\n{'Category':<30} {'Overdue':>16} {'Total':>16} {'Rate':>8}")
        click.echo("-" * 73)
        for row in service.delinquency_by_category(now, DelinquencyScope(scope)):
            click.echo(
                f"{(row.category or '(sem categoria)')[:30]:<30} {_money(row.overdue_amount):>16} "
                f"{_money(row.total_amount):>16} {_percent(row.rate):>8}"
            )


@report_group.command("dashboard")
@click.option("--start-date", help="Start competence date (defaults to January 1)")
@click.option("--end-date", help="End competence date (defaults to today)")
@period_options
@click.option("--as-of", help="Reference date for delinquency (defaults to today)")
@click.pass_context
def dashboard(ctx, start_date, end_date, as_of, **period):
    """Indicators, margins, delinquency and monthly expenses."""
    today = date.today()
    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=period_flags_from(period),
        default_range=(date(today.year, 1, 1), today),
    )
    start = start or date(today.year, 1, 1)
    end = end or today
    now = _parse_as_of(ctx, as_of)
    data = ReportService(ctx.obj["db"]).dashboard(start, end, now)

    ind = data.indicators
    click.echo(f"\nDashboard {start} to {end}")
    click.echo("-" * 50)
    click.echo(f"{'Receivables':<28} {_money(ind.total_receivables):>20}")
    click.echo(f"{'Payables':<28} {_money(ind.total_payables):>20}")
    click.echo(f"{'Income received':<28} {_money(ind.total_income):>20}")
    click.echo(f"{'Expenses paid':<28} {_money(ind.total_expense):>20}")

    margins = data.margins
    click.echo("\nMargins")
    click.echo("-" * 50)
    click.echo(f"{'Revenue':<28} {_money(margins.revenue):>20}")
    for label, metric in (
        ("EBITDA", margins.ebitda),
        ("Contribution margin", margins.contribution),
        ("Net profit", margins.net_profit),
    ):
        click.echo(f"{label:<28} {_money(metric.value):>20} {_percent(metric.margin):>8}")

    click.echo("\nDelinquency")
    click.echo("-" * 50)
    click.echo(f"{'Overdue receivables':<28} {_money(data.delinquency.overdue_amount):>20}")
    click.echo(f"{'Rate over all income':<28} {_percent(data.delinquency.rate):>20}")

    expenses = data.expenses
    click.echo(f"\nExpenses by month ({expenses.year})")
    click.echo("-" * 50)
    for index, total in enumerate(expenses.monthly_totals):
        if total:
            click.echo(f"{MONTH_LABELS[index]:<28} {_money(total):>20}")


def register_commands(cli):
    """Register report commands with main CLI."""
    cli.add_command(report_group, name="report")
