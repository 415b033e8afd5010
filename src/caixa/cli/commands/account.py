"""Bank account management commands."""

import click

from caixa.cli.account_resolution import resolve_account_or_exit
from caixa.cli.error_handling import handle_domain_error
from caixa.domain.account import AccountService
from caixa.utils.amount_parser import parse_amount


@click.group()
def account_group():
    """Manage bank accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option("--bank-code", default="", help="Bank code (e.g. 341)")
@click.option("--agency", default="", help="Branch number")
@click.option("--number", "account_number", default="", help="Account number")
@click.option("--initial-balance", default="0", help="Opening balance (e.g. 1.500,00)")
@click.option("--primary", is_flag=True, help="Make this the primary account")
@click.pass_context
def create_account(
    ctx,
    name: str,
    bank_code: str,
    agency: str,
    account_number: str,
    initial_balance: str,
    primary: bool,
):
    """Create a new bank account.

    Examples:
        caixa account create "Conta Principal" --bank-code 341 --initial-balance 1000
        caixa account create "Poupança" --primary
    """
    service = AccountService(ctx.obj["db"])

    try:
        balance = parse_amount(initial_balance)
    except ValueError as e:
        click.echo(f"Error: Invalid initial balance: {e}", err=True)
        ctx.exit(1)

    try:
        account_id = service.create_account(
            name=name,
            bank_code=bank_code,
            agency=agency,
            account_number=account_number,
            initial_balance=balance,
            is_primary=primary,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created bank account '{name}' (ID: {account_id})")
    if primary:
        click.echo("Set as primary account")


@account_group.command("list")
@click.pass_context
def list_accounts(ctx):
    """List all bank accounts."""
    service = AccountService(ctx.obj["db"])

    accounts = service.list_accounts()
    if not accounts:
        click.echo("No bank accounts found.")
        return

    click.echo("\nBank accounts:")
    click.echo("-" * 90)
    for acc in accounts:
        marker = "*" if acc.is_primary else " "
        click.echo(
            f"{marker} ID: {acc.id:3d} | {acc.name:25s} | Bank: {acc.bank_code:5s} "
            f"| {acc.agency}/{acc.account_number:12s} | Balance: {acc.current_balance:>14,.2f}"
        )


@account_group.command("update")
@click.argument("account", metavar="ACCOUNT")
@click.option("--name", help="New account name")
@click.option("--bank-code", help="New bank code")
@click.option("--agency", help="New branch number")
@click.option("--number", "account_number", help="New account number")
@click.option("--initial-balance", help="New opening balance")
@click.pass_context
def update_account(
    ctx,
    account: str,
    name: str | None,
    bank_code: str | None,
    agency: str | None,
    account_number: str | None,
    initial_balance: str | None,
) -> None:
    """Update a bank account.

    ACCOUNT can be an account name or ID.

    Examples:
        caixa account update "Conta Principal" --name "Itaú PJ"
        caixa account update 1 --initial-balance 2500.00
    """
    service = AccountService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, service, account)

    if all(v is None for v in [name, bank_code, agency, account_number, initial_balance]):
        click.echo("Error: Nothing to update. Specify at least one option.", err=True)
        ctx.exit(1)

    balance = None
    if initial_balance is not None:
        try:
            balance = parse_amount(initial_balance)
        except ValueError as e:
            click.echo(f"Error: Invalid initial balance: {e}", err=True)
            ctx.exit(1)

    try:
        service.update_account(
            account_id,
            name=name,
            bank_code=bank_code,
            agency=agency,
            account_number=account_number,
            initial_balance=balance,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated bank account {account_id}")


@account_group.command("delete")
@click.argument("account", metavar="ACCOUNT")
@click.option("--yes", is_flag=True, help="Skip confirmation")
@click.pass_context
def delete_account(ctx, account: str, yes: bool) -> None:
    """Delete a bank account.

    ACCOUNT can be an account name or ID. The account can only be deleted
    if no transactions reference it.
    """
    service = AccountService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, service, account)
    account_obj = service.get_account(account_id)

    if not yes and not click.confirm(
        f"Are you sure you want to delete bank account '{account_obj.name}' (ID: {account_id})?"
    ):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_account(account_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted bank account '{account_obj.name}'")


@account_group.command("set-primary")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def set_primary(ctx, account: str) -> None:
    """Make ACCOUNT the primary bank account."""
    service = AccountService(ctx.obj["db"])
    account_id = resolve_account_or_exit(ctx, service, account)
    try:
        service.set_primary(account_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Primary bank account is now {account_id}")


@account_group.command("balances")
@click.pass_context
def show_balances(ctx) -> None:
    """Show each account's reconciled balance and the consolidated total."""
    service = AccountService(ctx.obj["db"])
    report = service.refresh_balances()
    if not report.accounts:
        click.echo("No bank accounts found.")
        return

    click.echo(f"\n{'Account':<30} {'Initial':>14} {'Income':>14} {'Expense':>14} {'Balance':>14}")
    click.echo("-" * 90)
    for row in report.accounts:
        click.echo(
            f"{row.account_name:<30} {row.initial_balance:>14,.2f} {row.income:>14,.2f} "
            f"{row.expense:>14,.2f} {row.balance:>14,.2f}"
        )
    click.echo("-" * 90)
    click.echo(f"{'Total':<30} {'':>14} {'':>14} {'':>14} {report.total:>14,.2f}")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
