"""Main CLI entry point."""

import logging
import os
import sys

import click

from caixa.database.factories import create_sqlite_database
from caixa.domain.entities import UnmappedCategoryPolicy

# Import and register all commands at module level
from caixa.cli.commands import (
    account,
    category,
    cost_center,
    add,
    transaction,
    transfer,
    statement,
    import_cmd,
    export,
    report,
    init_categories,
)

LOG_LEVEL_ENV = "CAIXA_LOG_LEVEL"


def configure_logging(verbose: bool) -> None:
    """Send log records to stderr so report output on stdout stays clean."""
    level_name = "DEBUG" if verbose else os.environ.get(LOG_LEVEL_ENV, "WARNING")
    level = getattr(logging, level_name.upper(), logging.WARNING)
    logging.basicConfig(
        stream=sys.stderr,
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides CAIXA_DB_PATH environment variable)",
    envvar="CAIXA_DB_PATH",
)
@click.option(
    "--unmapped-categories",
    type=click.Choice([policy.value for policy in UnmappedCategoryPolicy]),
    default=UnmappedCategoryPolicy.EXCLUDE.value,
    show_default=True,
    envvar="CAIXA_UNMAPPED_CATEGORIES",
    help="What the income statement does with categories lacking a DRE group",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr")
@click.pass_context
def cli(ctx, db_path: str | None, unmapped_categories: str, verbose: bool):
    """Caixa - Cash flow and income statement for small businesses.

    Record receivables and payables, reconcile them against OFX bank
    statements and build cash flow, DRE and delinquency reports.
    """
    ctx.ensure_object(dict)
    configure_logging(verbose)
    ctx.obj["unmapped_policy"] = UnmappedCategoryPolicy(unmapped_categories)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
account.register_commands(cli)
category.register_commands(cli)
cost_center.register_commands(cli)
add.register_commands(cli)
transaction.register_commands(cli)
transfer.register_commands(cli)
statement.register_commands(cli)
import_cmd.register_commands(cli)
export.register_commands(cli)
report.register_commands(cli)
init_categories.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
