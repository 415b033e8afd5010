"""Cost center management commands."""

import click

from caixa.cli.error_handling import handle_domain_error
from caixa.domain.cost_center import CostCenterService
from caixa.domain.entities import CostCenter


def _resolve_cost_center(ctx, service: CostCenterService, cost_center: str) -> CostCenter:
    found = None
    if cost_center.strip().isdigit():
        found = service.get_cost_center(int(cost_center))
    if found is None:
        found = service.get_cost_center_by_name(cost_center)
    if found is None:
        click.echo(f"Error: Cost center '{cost_center}' not found", err=True)
        ctx.exit(1)
    return found


@click.group()
def cost_center_group():
    """Manage cost centers."""
    pass


@cost_center_group.command("create")
@click.argument("name", metavar="NAME")
@click.option("--description", help="What the cost center covers")
@click.pass_context
def create_cost_center(ctx, name: str, description: str | None):
    """Create an active cost center."""
    service = CostCenterService(ctx.obj["db"])
    try:
        cost_center_id = service.create_cost_center(name, description)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created cost center '{name}' (ID: {cost_center_id})")


@cost_center_group.command("list")
@click.option("--active-only", is_flag=True, help="Hide inactive cost centers")
@click.pass_context
def list_cost_centers(ctx, active_only: bool):
    """List cost centers."""
    service = CostCenterService(ctx.obj["db"])
    cost_centers = service.list_cost_centers(active_only=active_only)
    if not cost_centers:
        click.echo("No cost centers found.")
        return

    click.echo("\nCost centers:")
    click.echo("-" * 70)
    for cc in cost_centers:
        status = "active" if cc.active else "inactive"
        click.echo(f"ID: {cc.id:3d} | {cc.name:25s} | {status:8s} | {cc.description or ''}")


@cost_center_group.command("update")
@click.argument("cost_center", metavar="COST_CENTER")
@click.option("--name", help="New name (transactions follow the rename)")
@click.option("--description", help="New description")
@click.option("--active/--inactive", default=None, help="Activate or deactivate")
@click.pass_context
def update_cost_center(
    ctx, cost_center: str, name: str | None, description: str | None, active: bool | None
):
    """Update a cost center.

    COST_CENTER can be a cost center name or ID.
    """
    service = CostCenterService(ctx.obj["db"])
    found = _resolve_cost_center(ctx, service, cost_center)

    if name is None and description is None and active is None:
        click.echo("Error: Nothing to update. Specify at least one option.", err=True)
        ctx.exit(1)

    try:
        if name is not None or description is not None:
            service.update_cost_center(found.id, name=name, description=description)
        if active is not None:
            service.set_active(found.id, active)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated cost center '{name or found.name}'")


@cost_center_group.command("delete")
@click.argument("cost_center", metavar="COST_CENTER")
@click.pass_context
def delete_cost_center(ctx, cost_center: str):
    """Delete a cost center that no transaction uses."""
    service = CostCenterService(ctx.obj["db"])
    found = _resolve_cost_center(ctx, service, cost_center)
    try:
        service.delete_cost_center(found.id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted cost center '{found.name}'")


def register_commands(cli):
    """Register cost center commands with main CLI."""
    cli.add_command(cost_center_group, name="cost-center")
