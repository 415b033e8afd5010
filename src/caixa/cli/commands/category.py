"""Category management commands."""

import click

from caixa.cli.error_handling import handle_domain_error
from caixa.domain.category import CategoryService
from caixa.domain.entities import CategoryType, DREGroup, TransactionType

TYPE_CHOICE = click.Choice([t.value for t in TransactionType])
GROUP_CHOICE = click.Choice([g.value for g in DREGroup.ordered()])


def _resolve_category(ctx, service: CategoryService, category: str) -> CategoryType:
    """Look up a category by ID or name, or exit with a CLI error."""
    found = None
    if category.strip().isdigit():
        found = service.get_category(int(category))
    if found is None:
        found = service.get_category_by_name(category)
    if found is None:
        click.echo(f"Error: Category '{category}' not found", err=True)
        ctx.exit(1)
    return found


@click.group()
def category_group():
    """Manage categories and their DRE mapping."""
    pass


@category_group.command("create")
@click.argument("name", metavar="NAME")
@click.option("--type", "category_type", type=TYPE_CHOICE, required=True, help="income or expense")
@click.option("--group", "dre_group", type=GROUP_CHOICE, help="DRE line the category rolls into")
@click.pass_context
def create_category(ctx, name: str, category_type: str, dre_group: str | None):
    """Create a category.

    Examples:
        caixa category create "Vendas de Produtos" --type income --group receita_bruta
        caixa category create "Aluguel" --type expense --group despesas_administrativas
    """
    service = CategoryService(ctx.obj["db"])
    try:
        category_id = service.create_category(
            name=name,
            type=TransactionType(category_type),
            dre_group=DREGroup(dre_group) if dre_group else None,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created category '{name}' (ID: {category_id})")
    if dre_group is None:
        click.echo("Warning: category has no DRE group and will be left out of the income statement")


@category_group.command("list")
@click.pass_context
def list_categories(ctx):
    """List categories grouped by DRE line."""
    service = CategoryService(ctx.obj["db"])
    grouped = service.list_by_dre_group()
    if not grouped:
        click.echo("No categories found.")
        return

    for group, categories in grouped:
        title = group.display_name if group is not None else "Sem grupo DRE"
        click.echo(f"\n{title}")
        click.echo("-" * 60)
        for category in categories:
            click.echo(f"  ID: {category.id:3d} | {category.name:35s} | {category.type.value}")


@category_group.command("update")
@click.argument("category", metavar="CATEGORY")
@click.option("--name", help="New name (transactions follow the rename)")
@click.option("--type", "category_type", type=TYPE_CHOICE, help="New type")
@click.option("--group", "dre_group", type=GROUP_CHOICE, help="New DRE group")
@click.pass_context
def update_category(
    ctx, category: str, name: str | None, category_type: str | None, dre_group: str | None
):
    """Rename a category or change its type or DRE group.

    CATEGORY can be a category name or ID.
    """
    service = CategoryService(ctx.obj["db"])
    found = _resolve_category(ctx, service, category)

    if name is None and category_type is None and dre_group is None:
        click.echo("Error: Nothing to update. Specify at least one option.", err=True)
        ctx.exit(1)

    try:
        service.update_category(
            found.id,
            name=name,
            type=TransactionType(category_type) if category_type else None,
            dre_group=DREGroup(dre_group) if dre_group else None,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated category '{name or found.name}'")


@category_group.command("delete")
@click.argument("category", metavar="CATEGORY")
@click.pass_context
def delete_category(ctx, category: str):
    """Delete a category that no transaction uses.

    CATEGORY can be a category name or ID.
    """
    service = CategoryService(ctx.obj["db"])
    found = _resolve_category(ctx, service, category)
    try:
        service.delete_category(found.id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted category '{found.name}'")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
