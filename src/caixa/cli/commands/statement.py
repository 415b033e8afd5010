"""Bank statement import and reconciliation commands."""

import click

from caixa.cli.account_resolution import resolve_account_or_exit, resolve_optional_account
from caixa.cli.error_handling import handle_domain_error
from caixa.domain.account import AccountService
from caixa.domain.reconciliation import DEFAULT_TOLERANCE_DAYS
from caixa.domain.statement import StatementService


@click.group()
def statement_group():
    """Import OFX statements and reconcile them."""
    pass


@statement_group.command("import")
@click.argument("ofx_file", type=click.Path(exists=True))
@click.option("--account", required=True, help="Bank account name or ID")
@click.option("--auto-match", is_flag=True, help="Reconcile new lines with pending transactions")
@click.pass_context
def import_statement(ctx, ofx_file: str, account: str, auto_match: bool):
    """Import an OFX bank statement.

    Lines already imported (same FITID) are skipped.

    Examples:
        caixa statement import extrato.ofx --account "Conta Principal" --auto-match
    """
    db = ctx.obj["db"]
    account_id = resolve_account_or_exit(ctx, AccountService(db), account)
    try:
        stats = StatementService(db).import_ofx_file(ofx_file, account_id, auto_match=auto_match)
    except (ValueError, FileNotFoundError) as e:
        handle_domain_error(ctx, e)

    click.echo(f"Imported {stats['imported']} statement line(s)")
    if stats["skipped"]:
        click.echo(f"Skipped {stats['skipped']} duplicate line(s)")
    if auto_match:
        click.echo(f"Reconciled {stats['matched']} line(s) automatically")


@statement_group.command("list")
@click.option("--account", help="Bank account name or ID")
@click.option("--open", "only_open", is_flag=True, help="Show only lines not yet reconciled")
@click.pass_context
def list_lines(ctx, account: str | None, only_open: bool):
    """List statement lines ordered by date."""
    db = ctx.obj["db"]
    account_id = resolve_optional_account(ctx, AccountService(db), account)
    lines = StatementService(db).list_lines(
        bank_account_id=account_id, reconciled=False if only_open else None
    )
    if not lines:
        click.echo("No statement lines found.")
        return

    click.echo("-" * 105)
    click.echo(
        f"{'ID':<6} {'Date':<12} {'Type':<7} {'Amount':>14} {'Balance':>14} {'Txn':<6} {'Description':<40}"
    )
    click.echo("-" * 105)
    for line in lines:
        txn = str(line.transaction_id) if line.reconciled else ""
        click.echo(
            f"{line.id:<6} {str(line.transaction_date):<12} {line.type.value:<7} "
            f"{line.amount:>14,.2f} {line.balance:>14,.2f} {txn:<6} {line.description[:40]:<40}"
        )


@statement_group.command("reconcile")
@click.argument("line_id", type=int)
@click.argument("transaction_id", type=int, required=False)
@click.option(
    "--tolerance",
    type=int,
    default=DEFAULT_TOLERANCE_DAYS,
    show_default=True,
    help="Days between statement date and due date when suggesting a match",
)
@click.pass_context
def reconcile(ctx, line_id: int, transaction_id: int | None, tolerance: int):
    """Reconcile a statement line with a transaction.

    Without TRANSACTION_ID the best matching pending transaction is used.
    """
    service = StatementService(ctx.obj["db"])
    try:
        if transaction_id is None:
            match = service.suggest_match(line_id, tolerance_days=tolerance)
            if match is None:
                click.echo(f"Error: No matching transaction for statement line {line_id}", err=True)
                ctx.exit(1)
            transaction_id = match.id
            click.echo(f"Suggested transaction {match.id}: {match.description} R$ {match.amount:,.2f}")
        service.reconcile(line_id, transaction_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Reconciled statement line {line_id} with transaction {transaction_id}")


@statement_group.command("unreconcile")
@click.argument("line_id", type=int)
@click.pass_context
def unreconcile(ctx, line_id: int):
    """Undo a reconciliation; the transaction becomes pending again."""
    try:
        StatementService(ctx.obj["db"]).unreconcile(line_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Unreconciled statement line {line_id}")


@statement_group.command("match")
@click.option("--account", help="Bank account name or ID")
@click.option("--tolerance", type=int, default=DEFAULT_TOLERANCE_DAYS, show_default=True)
@click.pass_context
def auto_match(ctx, account: str | None, tolerance: int):
    """Reconcile every open line that has a matching pending transaction."""
    db = ctx.obj["db"]
    account_id = resolve_optional_account(ctx, AccountService(db), account)
    matches = StatementService(db).auto_match(account_id, tolerance_days=tolerance)
    for line, txn in matches:
        click.echo(f"Line {line.id} ({line.transaction_date}, R$ {line.amount:,.2f}) -> transaction {txn.id}")
    click.echo(f"Reconciled {len(matches)} statement line(s)")


@statement_group.command("delete")
@click.argument("line_id", type=int)
@click.pass_context
def delete_line(ctx, line_id: int):
    """Delete a statement line, undoing its reconciliation first."""
    try:
        StatementService(ctx.obj["db"]).delete_line(line_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted statement line {line_id}")


def register_commands(cli):
    """Register statement commands with main CLI."""
    cli.add_command(statement_group, name="statement")
