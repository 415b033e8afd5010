"""Mapper functions to convert SQLAlchemy models into domain entities.

Enum columns are stored as their string values; the mappers turn them back
into the domain enums so nothing above this layer sees raw strings.
"""

from caixa.domain import entities as domain
from caixa.database.models import (
    BankAccount as ORMBankAccount,
    BankStatementLine as ORMBankStatementLine,
    CategoryType as ORMCategoryType,
    CostCenter as ORMCostCenter,
    Transaction as ORMTransaction,
)


def bank_account_to_domain(orm_account: ORMBankAccount) -> domain.BankAccount:
    """Convert SQLAlchemy BankAccount model to domain BankAccount entity."""
    return domain.BankAccount(
        id=orm_account.id,
        name=orm_account.name,
        bank_code=orm_account.bank_code,
        agency=orm_account.agency,
        account_number=orm_account.account_number,
        initial_balance=orm_account.initial_balance,
        current_balance=orm_account.current_balance,
        is_primary=orm_account.is_primary,
        created_at=orm_account.created_at,
        updated_at=orm_account.updated_at,
    )


def category_type_to_domain(orm_category: ORMCategoryType) -> domain.CategoryType:
    """Convert SQLAlchemy CategoryType model to domain CategoryType entity."""
    dre_group = orm_category.dre_group
    return domain.CategoryType(
        id=orm_category.id,
        name=orm_category.name,
        type=domain.TransactionType(orm_category.type),
        dre_group=domain.DREGroup(dre_group) if dre_group else None,
        created_at=orm_category.created_at,
    )


def cost_center_to_domain(orm_cost_center: ORMCostCenter) -> domain.CostCenter:
    """Convert SQLAlchemy CostCenter model to domain CostCenter entity."""
    return domain.CostCenter(
        id=orm_cost_center.id,
        name=orm_cost_center.name,
        description=orm_cost_center.description,
        active=orm_cost_center.active,
        created_at=orm_cost_center.created_at,
        updated_at=orm_cost_center.updated_at,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        type=domain.TransactionType(orm_transaction.type),
        amount=orm_transaction.amount,
        description=orm_transaction.description or "",
        category=orm_transaction.category,
        competence_date=orm_transaction.competence_date,
        due_date=orm_transaction.due_date,
        status=domain.TransactionStatus(orm_transaction.status),
        bank_account_id=orm_transaction.bank_account_id,
        supplier=orm_transaction.supplier,
        cost_center=orm_transaction.cost_center,
        invoice_number=orm_transaction.invoice_number,
        reconciled=orm_transaction.reconciled,
        transfer_id=orm_transaction.transfer_id,
        created_at=orm_transaction.created_at,
    )


def statement_line_to_domain(orm_line: ORMBankStatementLine) -> domain.BankStatementLine:
    """Convert SQLAlchemy BankStatementLine model to domain entity."""
    return domain.BankStatementLine(
        id=orm_line.id,
        bank_account_id=orm_line.bank_account_id,
        transaction_date=orm_line.transaction_date,
        description=orm_line.description or "",
        amount=orm_line.amount,
        type=domain.StatementLineType(orm_line.type),
        balance=orm_line.balance,
        reconciled=orm_line.reconciled,
        transaction_id=orm_line.transaction_id,
        fit_id=orm_line.fit_id,
        created_at=orm_line.created_at,
    )
