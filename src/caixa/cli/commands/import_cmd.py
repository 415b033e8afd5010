"""Spreadsheet (CSV) import commands."""

import click

from caixa.domain.spreadsheet import SpreadsheetService


@click.command("import")
@click.argument("csv_file", type=click.Path(exists=True))
@click.pass_context
def import_csv(ctx, csv_file: str):
    """Import receivables and payables from a CSV spreadsheet.

    The file must use the template layout (see 'caixa template'). Every
    imported transaction is pending and not reconciled.
    """
    service = SpreadsheetService(ctx.obj["db"])

    try:
        result = service.import_csv(csv_file)
        click.echo("\nImport complete:")
        click.echo(f"  Imported: {result['imported']} transactions")
        click.echo(f"  Skipped: {result['skipped']} empty rows")
        if result["errors"]:
            click.echo(f"  Errors: {len(result['errors'])}")
            for error in result["errors"]:
                click.echo(f"    {error}", err=True)
    except (ValueError, FileNotFoundError) as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


@click.command("template")
@click.argument("output", type=click.File("w", encoding="utf-8"), default="-")
@click.pass_context
def write_template(ctx, output):
    """Write an import template with two sample rows to OUTPUT (default stdout)."""
    SpreadsheetService(ctx.obj["db"]).write_template(output)


def register_commands(cli):
    """Register import commands with main CLI."""
    cli.add_command(import_csv)
    cli.add_command(write_template)
