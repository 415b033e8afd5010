"""Transfer between bank accounts command."""

import click

from caixa.cli.account_resolution import resolve_account_or_exit
from caixa.cli.error_handling import handle_domain_error
from caixa.domain.account import AccountService
from caixa.domain.transaction import TransactionService
from caixa.utils.amount_parser import parse_amount
from caixa.utils.date_parser import parse_date


@click.command("transfer")
@click.option("--from", "from_account", required=True, help="Source bank account name or ID")
@click.option("--to", "to_account", required=True, help="Destination bank account name or ID")
@click.option("--amount", required=True, help="Amount to move")
@click.option("--date", "transfer_date", default="today", show_default=True, help="Transfer date")
@click.option("--description", default="", help="Transfer description")
@click.pass_context
def transfer(
    ctx, from_account: str, to_account: str, amount: str, transfer_date: str, description: str
):
    """Move money between two bank accounts.

    Records a completed, reconciled expense on the source account and a
    matching income on the destination account.

    Examples:
        caixa transfer --from "Conta Principal" --to "Poupança" --amount 500
    """
    db = ctx.obj["db"]
    account_service = AccountService(db)
    from_id = resolve_account_or_exit(ctx, account_service, from_account)
    to_id = resolve_account_or_exit(ctx, account_service, to_account)

    try:
        value = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)
    try:
        when = parse_date(transfer_date)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    try:
        result = TransactionService(db).transfer(from_id, to_id, value, when, description)
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Transferred R$ {value:,.2f} on {when}")
    click.echo(f"  Withdrawal: transaction {result.withdrawal_id}")
    click.echo(f"  Deposit: transaction {result.deposit_id}")


def register_commands(cli):
    """Register transfer command with main CLI."""
    cli.add_command(transfer)
