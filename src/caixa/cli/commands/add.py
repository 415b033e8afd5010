"""Add transaction command."""

import click

from caixa.cli.account_resolution import resolve_optional_account
from caixa.cli.error_handling import handle_domain_error
from caixa.domain.account import AccountService
from caixa.domain.entities import TransactionStatus, TransactionType
from caixa.domain.transaction import TransactionService
from caixa.utils.amount_parser import parse_amount
from caixa.utils.date_parser import parse_date


@click.command("add")
@click.option(
    "--type",
    "txn_type",
    type=click.Choice([t.value for t in TransactionType]),
    required=True,
    help="income (receivable) or expense (payable)",
)
@click.option("--amount", required=True, help="Transaction amount (e.g., 1500.00 or 1.500,00)")
@click.option(
    "--due-date",
    help="Cash date (DD/MM/YYYY, YYYY-MM-DD or relative like 'today')",
)
@click.option("--competence-date", help="Accrual date (defaults to the due date)")
@click.option("--description", default="", help="Transaction description")
@click.option("--category", help="Category name")
@click.option("--account", help="Bank account name or ID")
@click.option("--supplier", help="Supplier or customer")
@click.option("--cost-center", help="Cost center name")
@click.option("--invoice", help="Invoice number")
@click.option(
    "--status",
    type=click.Choice([s.value for s in TransactionStatus]),
    default=TransactionStatus.PENDING.value,
    show_default=True,
    help="Payment status",
)
@click.option("--reconciled", is_flag=True, help="Already matched with the bank statement")
@click.pass_context
def add_transaction(
    ctx,
    txn_type: str,
    amount: str,
    due_date: str | None,
    competence_date: str | None,
    description: str,
    category: str | None,
    account: str | None,
    supplier: str | None,
    cost_center: str | None,
    invoice: str | None,
    status: str,
    reconciled: bool,
):
    """Add a receivable or payable.

    At least one of --due-date and --competence-date is required; the
    missing one takes the other's value.

    Examples:
        caixa add --type expense --amount 1500 --due-date 05/03/2024 --category Aluguel
        caixa add --type income --amount 10000 --due-date today --account "Conta Principal"
    """
    db = ctx.obj["db"]
    transaction_service = TransactionService(db)
    account_service = AccountService(db)

    if due_date is None and competence_date is None:
        click.echo("Error: Specify --due-date or --competence-date.", err=True)
        ctx.exit(1)

    account_id = resolve_optional_account(ctx, account_service, account)

    try:
        txn_amount = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    due = None
    competence = None
    try:
        if due_date is not None:
            due = parse_date(due_date)
        if competence_date is not None:
            competence = parse_date(competence_date)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    try:
        transaction_id = transaction_service.create_transaction(
            type=TransactionType(txn_type),
            amount=txn_amount,
            description=description,
            category=category,
            competence_date=competence,
            due_date=due,
            status=TransactionStatus(status),
            bank_account_id=account_id,
            supplier=supplier,
            cost_center=cost_center,
            invoice_number=invoice,
            reconciled=reconciled,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    txn = transaction_service.get_transaction(transaction_id)
    click.echo(f"Created transaction {transaction_id}")
    click.echo(f"  Type: {txn.type.value}")
    click.echo(f"  Amount: R$ {txn.amount:,.2f}")
    click.echo(f"  Due date: {txn.due_date}")
    click.echo(f"  Competence date: {txn.competence_date}")
    if category:
        click.echo(f"  Category: {category}")
    if description:
        click.echo(f"  Description: {description}")


def register_commands(cli):
    """Register add command with main CLI."""
    cli.add_command(add_transaction)
