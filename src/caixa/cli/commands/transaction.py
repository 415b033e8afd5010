"""Transaction management commands."""

import click

from caixa.cli.account_resolution import resolve_optional_account
from caixa.cli.date_filters import period_flags_from, period_options, resolve_cli_date_range
from caixa.cli.error_handling import handle_domain_error
from caixa.domain.account import AccountService
from caixa.domain.entities import TransactionStatus, TransactionType
from caixa.domain.grouping import filter_transactions, group_by_category
from caixa.domain.money import sum_amounts
from caixa.domain.transaction import TransactionService
from caixa.utils.amount_parser import parse_amount
from caixa.utils.date_parser import parse_date


def _optional(value: str | None) -> str | None:
    """An empty option value clears the field."""
    if value is None or value == "":
        return None
    return value


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("update")
@click.argument("transaction_id", type=int)
@click.option("--type", "txn_type", type=click.Choice([t.value for t in TransactionType]))
@click.option("--amount", help="Transaction amount")
@click.option("--description", help="Transaction description")
@click.option("--due-date", help="Cash date")
@click.option("--competence-date", help="Accrual date")
@click.option("--category", help="Category name, or empty string to clear")
@click.option("--account", help="Bank account name or ID")
@click.option("--supplier", help="Supplier or customer, or empty string to clear")
@click.option("--cost-center", help="Cost center name, or empty string to clear")
@click.option("--invoice", help="Invoice number, or empty string to clear")
@click.option("--status", type=click.Choice([s.value for s in TransactionStatus]))
@click.option("--reconciled/--not-reconciled", default=None, help="Reconciliation flag")
@click.pass_context
def update_transaction(
    ctx,
    transaction_id: int,
    txn_type: str | None,
    amount: str | None,
    description: str | None,
    due_date: str | None,
    competence_date: str | None,
    category: str | None,
    account: str | None,
    supplier: str | None,
    cost_center: str | None,
    invoice: str | None,
    status: str | None,
    reconciled: bool | None,
) -> None:
    """Update a transaction.

    Updates only the fields that are provided. Use --category "" to clear the category.

    Examples:
        caixa transaction update 1 --amount 75.00
        caixa transaction update 1 --status completed --reconciled
        caixa transaction update 1 --category ""
    """
    db = ctx.obj["db"]
    transaction_service = TransactionService(db)
    fields = {}

    if txn_type is not None:
        fields["type"] = TransactionType(txn_type)
    if amount is not None:
        try:
            fields["amount"] = parse_amount(amount)
        except ValueError as e:
            click.echo(f"Error: Invalid amount format: {e}", err=True)
            ctx.exit(1)
    if description is not None:
        fields["description"] = description
    try:
        if due_date is not None:
            fields["due_date"] = parse_date(due_date)
        if competence_date is not None:
            fields["competence_date"] = parse_date(competence_date)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)
    if account is not None:
        fields["bank_account_id"] = resolve_optional_account(ctx, AccountService(db), account)
    for name, value in (
        ("category", category),
        ("supplier", supplier),
        ("cost_center", cost_center),
        ("invoice_number", invoice),
    ):
        if value is not None:
            fields[name] = _optional(value)
    if status is not None:
        fields["status"] = TransactionStatus(status)
    if reconciled is not None:
        fields["reconciled"] = reconciled

    if not fields:
        click.echo("Error: Nothing to update. Specify at least one option.", err=True)
        ctx.exit(1)

    try:
        transaction_service.update_transaction(transaction_id, **fields)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated transaction {transaction_id}")


@transaction_group.command("list")
@click.option("--start-date", help="Start due date (DD/MM/YYYY, YYYY-MM-DD or relative)")
@click.option("--end-date", help="End due date")
@period_options
@click.option("--account", help="Bank account name or ID")
@click.option("--type", "txn_type", type=click.Choice([t.value for t in TransactionType]))
@click.option("--status", type=click.Choice([s.value for s in TransactionStatus]))
@click.option("--reconciled/--unreconciled", default=None, help="Reconciliation filter")
@click.option("--category", help="Category name")
@click.option("--search", help="Text to find in description or supplier")
@click.option("--verbose", "-v", is_flag=True, help="Show every field")
@click.option("--by-category", is_flag=True, help="Show subtotals per category")
@click.pass_context
def list_transactions(
    ctx,
    start_date: str | None,
    end_date: str | None,
    account: str | None,
    txn_type: str | None,
    status: str | None,
    reconciled: bool | None,
    category: str | None,
    search: str | None,
    verbose: bool,
    by_category: bool,
    **period,
):
    """View transactions with optional filters, ordered by due date."""
    db = ctx.obj["db"]
    service = TransactionService(db)
    account_service = AccountService(db)

    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period_flags=period_flags_from(period)
    )
    account_id = resolve_optional_account(ctx, account_service, account)

    transactions = service.list_transactions(
        start_date=start,
        end_date=end,
        bank_account_id=account_id,
        transaction_type=TransactionType(txn_type) if txn_type else None,
        status=TransactionStatus(status) if status else None,
        reconciled=reconciled,
        category=category,
    )
    if search:
        transactions = filter_transactions(transactions, search=search)

    if not transactions:
        click.echo("No transactions found.")
        return

    accounts = {acc.id: acc.name for acc in account_service.list_accounts()}
    click.echo(f"\nFound {len(transactions)} transaction(s):")

    if verbose:
        click.echo("=" * 100)
        for txn in transactions:
            click.echo(f"\nTransaction ID: {txn.id}")
            click.echo(f"  Type: {txn.type.value}")
            click.echo(f"  Amount: R$ {txn.amount:,.2f}")
            click.echo(f"  Due date: {txn.due_date}")
            click.echo(f"  Competence date: {txn.competence_date}")
            click.echo(f"  Status: {txn.status.value}")
            click.echo(f"  Reconciled: {'yes' if txn.reconciled else 'no'}")
            click.echo(f"  Account: {accounts.get(txn.bank_account_id, '-')}")
            click.echo(f"  Category: {txn.category or '-'}")
            if txn.description:
                click.echo(f"  Description: {txn.description}")
            if txn.supplier:
                click.echo(f"  Supplier: {txn.supplier}")
            if txn.cost_center:
                click.echo(f"  Cost center: {txn.cost_center}")
            if txn.invoice_number:
                click.echo(f"  Invoice: {txn.invoice_number}")
            if txn.transfer_id:
                click.echo(f"  Transfer: {txn.transfer_id}")
            click.echo("-" * 100)
    else:
        click.echo("-" * 110)
        click.echo(
            f"{'ID':<6} {'Due':<12} {'Type':<8} {'Amount':>14} {'Status':<10} {'Rec':<4} "
            f"{'Category':<25} {'Description':<30}"
        )
        click.echo("-" * 110)
        for txn in transactions:
            click.echo(
                f"{txn.id:<6} {str(txn.due_date):<12} {txn.type.value:<8} {txn.amount:>14,.2f} "
                f"{txn.status.value:<10} {'x' if txn.reconciled else '':<4} "
                f"{(txn.category or '')[:25]:<25} {(txn.description or '')[:30]:<30}"
            )

    total_income = sum_amounts(txn.amount for txn in transactions if txn.is_income)
    total_expense = sum_amounts(txn.amount for txn in transactions if not txn.is_income)
    click.echo("-" * 110)
    click.echo(
        f"{'TOTAL':<6} Income: R$ {total_income:,.2f} | Expenses: R$ {total_expense:,.2f} | "
        f"Net: R$ {total_income - total_expense:,.2f} | Count: {len(transactions)}"
    )

    if by_category:
        click.echo("\nBy category:")
        for name, grouped in group_by_category(transactions):
            net = sum_amounts(txn.signed_amount for txn in grouped)
            click.echo(f"  {name[:35]:<35} {len(grouped):>5} {net:>16,.2f}")


@transaction_group.command("complete")
@click.argument("transaction_id", type=int)
@click.pass_context
def complete_transaction(ctx, transaction_id: int) -> None:
    """Mark a transaction as paid or received."""
    try:
        TransactionService(ctx.obj["db"]).mark_completed(transaction_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Transaction {transaction_id} marked as completed")


@transaction_group.command("reopen")
@click.argument("transaction_id", type=int)
@click.pass_context
def reopen_transaction(ctx, transaction_id: int) -> None:
    """Mark a completed transaction as pending again."""
    try:
        TransactionService(ctx.obj["db"]).mark_pending(transaction_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Transaction {transaction_id} marked as pending")


@transaction_group.command("delete")
@click.argument("transaction_id", type=int)
@click.option("--yes", is_flag=True, help="Skip confirmation")
@click.pass_context
def delete_transaction(ctx, transaction_id: int, yes: bool) -> None:
    """Delete a transaction.

    Deleting one leg of a transfer deletes both legs.

    Examples:
        caixa transaction delete 1
    """
    service = TransactionService(ctx.obj["db"])
    txn = service.get_transaction(transaction_id)
    if txn is None:
        click.echo(f"Error: Transaction {transaction_id} not found", err=True)
        ctx.exit(1)

    if not yes:
        click.echo(f"Transaction {txn.id}: {txn.type.value} R$ {txn.amount:,.2f} {txn.description}")
        if txn.transfer_id:
            click.echo("This is a transfer; both legs will be deleted.")
        if not click.confirm("Are you sure you want to delete this transaction?"):
            click.echo("Deletion cancelled.")
            return

    try:
        count = service.delete_transaction(transaction_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted {count} transaction(s)")


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
