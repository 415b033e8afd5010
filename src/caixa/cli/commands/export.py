"""Spreadsheet (CSV) export command."""

import click

from caixa.cli.account_resolution import resolve_optional_account
from caixa.cli.date_filters import period_flags_from, period_options, resolve_cli_date_range
from caixa.domain.account import AccountService
from caixa.domain.entities import TransactionType
from caixa.domain.spreadsheet import SpreadsheetService
from caixa.domain.transaction import TransactionService


@click.command("export")
@click.argument("output", type=click.File("w", encoding="utf-8", lazy=True), default="-")
@click.option("--start-date", help="Start due date")
@click.option("--end-date", help="End due date")
@period_options
@click.option("--account", help="Bank account name or ID")
@click.option("--type", "txn_type", type=click.Choice([t.value for t in TransactionType]))
@click.pass_context
def export_csv(
    ctx,
    output,
    start_date: str | None,
    end_date: str | None,
    account: str | None,
    txn_type: str | None,
    **period,
):
    """Export transactions to OUTPUT (default stdout) in the import layout.

    Examples:
        caixa export transacoes.csv --this-year
        caixa export --type expense --account "Conta Principal"
    """
    db = ctx.obj["db"]
    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period_flags=period_flags_from(period)
    )
    account_id = resolve_optional_account(ctx, AccountService(db), account)
    transactions = TransactionService(db).list_transactions(
        start_date=start,
        end_date=end,
        bank_account_id=account_id,
        transaction_type=TransactionType(txn_type) if txn_type else None,
    )
    count = SpreadsheetService(db).export_csv(output, transactions)
    click.echo(f"Exported {count} transaction(s)", err=True)


def register_commands(cli):
    """Register export command with main CLI."""
    cli.add_command(export_csv)
