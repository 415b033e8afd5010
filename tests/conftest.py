"""Shared pytest fixtures for caixa tests."""

import itertools
import os
import tempfile
from decimal import Decimal
from pathlib import Path

import pytest

from caixa.database.factories import create_sqlite_database
from caixa.domain.account import AccountService
from caixa.domain.category import CategoryService
from caixa.domain.cost_center import CostCenterService
from caixa.domain.entities import (
    BankAccount,
    CategoryType,
    DREGroup,
    Transaction,
    TransactionStatus,
    TransactionType,
)
from caixa.domain.reports import ReportService
from caixa.domain.spreadsheet import SpreadsheetService
from caixa.domain.statement import StatementService
from caixa.domain.transaction import TransactionService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for CLI tests
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def account_service(temp_db):
    return AccountService(temp_db)


@pytest.fixture
def category_service(temp_db):
    return CategoryService(temp_db)


@pytest.fixture
def cost_center_service(temp_db):
    return CostCenterService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    return TransactionService(temp_db)


@pytest.fixture
def statement_service(temp_db):
    return StatementService(temp_db)


@pytest.fixture
def report_service(temp_db):
    return ReportService(temp_db)


@pytest.fixture
def spreadsheet_service(temp_db):
    return SpreadsheetService(temp_db)


@pytest.fixture
def sample_account(account_service):
    """Create a primary account with a 1000.00 opening balance."""
    account_id = account_service.create_account(
        name="Conta Principal",
        bank_code="341",
        agency="0001",
        account_number="12345-6",
        initial_balance=Decimal("1000.00"),
        is_primary=True,
    )
    return account_service.get_account(account_id)


@pytest.fixture
def sample_categories(category_service):
    """Create the default categories and return their IDs by name."""
    from caixa.cli.commands.init_categories import INITIAL_CATEGORIES

    return {
        name: category_service.create_category(name=name, type=category_type, dre_group=group)
        for name, category_type, group in INITIAL_CATEGORIES
    }


@pytest.fixture
def make_txn():
    """Build in-memory Transaction entities with sequential IDs."""
    ids = itertools.count(1)

    def factory(
        type=TransactionType.EXPENSE,
        amount="0",
        due_date=None,
        competence_date=None,
        status=TransactionStatus.PENDING,
        reconciled=False,
        **fields,
    ):
        if reconciled:
            status = TransactionStatus.COMPLETED
        return Transaction(
            id=fields.pop("id", next(ids)),
            type=type,
            amount=Decimal(amount),
            due_date=due_date,
            competence_date=competence_date if competence_date is not None else due_date,
            status=status,
            reconciled=reconciled,
            **fields,
        )

    return factory


@pytest.fixture
def dre_categories():
    """In-memory categories covering the main DRE lines."""
    rows = [
        ("Consultoria", TransactionType.INCOME, DREGroup.RECEITA_BRUTA),
        ("Simples Nacional", TransactionType.EXPENSE, DREGroup.IMPOSTOS),
        ("Serviços Terceirizados", TransactionType.EXPENSE, DREGroup.CUSTOS_SERVICOS),
        ("Aluguel", TransactionType.EXPENSE, DREGroup.DESPESAS_ADMINISTRATIVAS),
        ("Salários", TransactionType.EXPENSE, DREGroup.DESPESAS_PESSOAL),
        ("Comissões", TransactionType.EXPENSE, DREGroup.DESPESAS_VARIAVEIS),
        ("Rendimentos", TransactionType.INCOME, DREGroup.RECEITAS_FINANCEIRAS),
        ("Tarifas", TransactionType.EXPENSE, DREGroup.DESPESAS_FINANCEIRAS),
        ("Equipamentos", TransactionType.EXPENSE, DREGroup.INVESTIMENTOS),
        ("Diversos", TransactionType.EXPENSE, None),
    ]
    return [
        CategoryType(id=index, name=name, type=category_type, dre_group=group)
        for index, (name, category_type, group) in enumerate(rows, start=1)
    ]


@pytest.fixture
def two_accounts():
    return [
        BankAccount(id=1, name="Itaú", bank_code="341", agency="1", account_number="1",
                    initial_balance=Decimal("1000.00")),
        BankAccount(id=2, name="Nubank", bank_code="260", agency="1", account_number="2",
                    initial_balance=Decimal("250.00")),
    ]


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def fixtures_dir():
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"
