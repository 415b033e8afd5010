"""Initialize default categories."""

import click

from caixa.domain.category import CategoryService
from caixa.domain.entities import DREGroup, TransactionType

INCOME = TransactionType.INCOME
EXPENSE = TransactionType.EXPENSE

# (name, type, DRE group)
INITIAL_CATEGORIES = [
    # Revenue
    ("Consultoria", INCOME, DREGroup.RECEITA_BRUTA),
    ("Projetos", INCOME, DREGroup.RECEITA_BRUTA),
    ("Mensalidades", INCOME, DREGroup.RECEITA_BRUTA),
    ("Treinamentos", INCOME, DREGroup.RECEITA_BRUTA),
    ("Rendimentos", INCOME, DREGroup.RECEITAS_FINANCEIRAS),
    ("Juros Recebidos", INCOME, DREGroup.RECEITAS_FINANCEIRAS),
    ("Descontos Obtidos", INCOME, DREGroup.OUTRAS_RECEITAS),
    # Taxes and deductions
    ("Simples Nacional", EXPENSE, DREGroup.IMPOSTOS),
    ("ISS", EXPENSE, DREGroup.IMPOSTOS),
    ("Devoluções", EXPENSE, DREGroup.DEDUCAO_RECEITA),
    # Costs
    ("Serviços Terceirizados", EXPENSE, DREGroup.CUSTOS_SERVICOS),
    # Administrative
    ("Aluguel", EXPENSE, DREGroup.DESPESAS_ADMINISTRATIVAS),
    ("Utilities", EXPENSE, DREGroup.DESPESAS_ADMINISTRATIVAS),
    ("Material de Escritório", EXPENSE, DREGroup.DESPESAS_ADMINISTRATIVAS),
    ("Manutenção", EXPENSE, DREGroup.DESPESAS_ADMINISTRATIVAS),
    ("Seguros", EXPENSE, DREGroup.DESPESAS_ADMINISTRATIVAS),
    # Personnel
    ("Salários", EXPENSE, DREGroup.DESPESAS_PESSOAL),
    ("Benefícios", EXPENSE, DREGroup.DESPESAS_PESSOAL),
    ("FGTS", EXPENSE, DREGroup.DESPESAS_PESSOAL),
    ("INSS", EXPENSE, DREGroup.DESPESAS_PESSOAL),
    ("Vale Transporte", EXPENSE, DREGroup.DESPESAS_PESSOAL),
    # Variable
    ("Comissões", EXPENSE, DREGroup.DESPESAS_VARIAVEIS),
    ("Marketing", EXPENSE, DREGroup.DESPESAS_VARIAVEIS),
    # Financial
    ("Taxas Bancárias", EXPENSE, DREGroup.DESPESAS_FINANCEIRAS),
    ("Juros", EXPENSE, DREGroup.DESPESAS_FINANCEIRAS),
    ("IOF", EXPENSE, DREGroup.DESPESAS_FINANCEIRAS),
    ("Tarifas", EXPENSE, DREGroup.DESPESAS_FINANCEIRAS),
    # Investments
    ("Equipamentos", EXPENSE, DREGroup.INVESTIMENTOS),
]


@click.command("init-categories")
@click.option("--force", is_flag=True, help="Add defaults even if categories already exist")
@click.pass_context
def init_categories(ctx, force: bool):
    """Initialize database with default categories mapped to DRE groups."""
    service = CategoryService(ctx.obj["db"])

    existing = service.list_categories()
    if existing and not force:
        click.echo("Categories already exist. Use --force to add the missing defaults.")
        return

    click.echo("Creating default categories...")
    existing_names = {category.name for category in existing}
    created = 0
    errors = 0

    for name, category_type, dre_group in INITIAL_CATEGORIES:
        if name in existing_names:
            continue
        try:
            service.create_category(name=name, type=category_type, dre_group=dre_group)
            created += 1
        except ValueError as e:
            click.echo(f"Warning: Could not create category '{name}': {e}", err=True)
            errors += 1

    if errors == 0:
        click.echo(f"Successfully created {created} categories.")
    else:
        click.echo(f"Created {created} categories with {errors} errors.")


def register_commands(cli):
    """Register init-categories command with main CLI."""
    cli.add_command(init_categories)
