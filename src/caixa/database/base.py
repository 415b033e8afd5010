"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Any, Optional
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from caixa.domain.entities import (
    BankAccount,
    BankStatementLine,
    CategoryType,
    CostCenter,
    DREGroup,
    StatementLineType,
    Transaction,
    TransactionStatus,
    TransactionType,
)


class Database(ABC):
    """Abstract database interface for caixa.

    The store is a plain snapshot source for the aggregation engine; every
    mutation commits before returning.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Bank account operations
    @abstractmethod
    def create_bank_account(
        self,
        name: str,
        bank_code: str = "",
        agency: str = "",
        account_number: str = "",
        initial_balance: Decimal = Decimal("0"),
    ) -> int:
        """Create a new bank account. Returns account ID."""
        pass

    @abstractmethod
    def get_bank_account(self, account_id: int) -> Optional[BankAccount]:
        """Get bank account by ID."""
        pass

    @abstractmethod
    def get_bank_account_by_name(self, name: str) -> Optional[BankAccount]:
        """Get bank account by name."""
        pass

    @abstractmethod
    def list_bank_accounts(self) -> list[BankAccount]:
        """List all bank accounts."""
        pass

    @abstractmethod
    def update_bank_account(
        self,
        account_id: int,
        name: Optional[str] = None,
        bank_code: Optional[str] = None,
        agency: Optional[str] = None,
        account_number: Optional[str] = None,
        initial_balance: Optional[Decimal] = None,
    ) -> None:
        """Update bank account fields that are not None."""
        pass

    @abstractmethod
    def delete_bank_account(self, account_id: int) -> None:
        """Delete a bank account."""
        pass

    @abstractmethod
    def get_bank_account_transaction_count(self, account_id: int) -> int:
        """Get count of transactions associated with a bank account."""
        pass

    @abstractmethod
    def set_primary_bank_account(self, account_id: int) -> None:
        """Mark one account as primary and clear the flag on all others atomically."""
        pass

    @abstractmethod
    def get_primary_bank_account(self) -> Optional[BankAccount]:
        """Get the primary bank account, if any."""
        pass

    @abstractmethod
    def set_current_balances(self, balances: dict[int, Decimal]) -> None:
        """Store the cached current balance of several accounts in one commit."""
        pass

    # Category operations
    @abstractmethod
    def create_category_type(
        self, name: str, type: TransactionType, dre_group: Optional[DREGroup]
    ) -> int:
        """Create a category. Returns category ID."""
        pass

    @abstractmethod
    def get_category_type(self, category_id: int) -> Optional[CategoryType]:
        """Get category by ID."""
        pass

    @abstractmethod
    def get_category_type_by_name(self, name: str) -> Optional[CategoryType]:
        """Get category by name."""
        pass

    @abstractmethod
    def list_category_types(self) -> list[CategoryType]:
        """List all categories."""
        pass

    @abstractmethod
    def update_category_type(
        self,
        category_id: int,
        name: Optional[str] = None,
        type: Optional[TransactionType] = None,
        dre_group: Optional[DREGroup] = None,
    ) -> None:
        """Update category fields; a rename is applied to its transactions too."""
        pass

    @abstractmethod
    def delete_category_type(self, category_id: int) -> None:
        """Delete a category."""
        pass

    @abstractmethod
    def get_category_transaction_count(self, name: str) -> int:
        """Get count of transactions filed under a category name."""
        pass

    # Cost center operations
    @abstractmethod
    def create_cost_center(self, name: str, description: Optional[str] = None) -> int:
        """Create a cost center. Returns cost center ID."""
        pass

    @abstractmethod
    def get_cost_center(self, cost_center_id: int) -> Optional[CostCenter]:
        """Get cost center by ID."""
        pass

    @abstractmethod
    def get_cost_center_by_name(self, name: str) -> Optional[CostCenter]:
        """Get cost center by name."""
        pass

    @abstractmethod
    def list_cost_centers(self, active_only: bool = False) -> list[CostCenter]:
        """List cost centers, optionally only the active ones."""
        pass

    @abstractmethod
    def update_cost_center(
        self,
        cost_center_id: int,
        name: Optional[str] = None,
        description: Optional[str] = None,
        active: Optional[bool] = None,
    ) -> None:
        """Update cost center fields; a rename is applied to its transactions too."""
        pass

    @abstractmethod
    def delete_cost_center(self, cost_center_id: int) -> None:
        """Delete a cost center."""
        pass

    @abstractmethod
    def get_cost_center_transaction_count(self, name: str) -> int:
        """Get count of transactions assigned to a cost center name."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        type: TransactionType,
        amount: Decimal,
        description: str = "",
        category: Optional[str] = None,
        competence_date: Optional[date] = None,
        due_date: Optional[date] = None,
        status: TransactionStatus = TransactionStatus.PENDING,
        bank_account_id: Optional[int] = None,
        supplier: Optional[str] = None,
        cost_center: Optional[str] = None,
        invoice_number: Optional[str] = None,
        reconciled: bool = False,
        transfer_id: Optional[str] = None,
    ) -> int:
        """Create a transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def create_transactions(self, rows: list[dict[str, Any]]) -> list[int]:
        """Create several transactions in a single commit.

        Each row holds keyword arguments accepted by create_transaction.
        Returns the new IDs in row order.
        """
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        bank_account_id: Optional[int] = None,
        transaction_type: Optional[TransactionType] = None,
        status: Optional[TransactionStatus] = None,
        reconciled: Optional[bool] = None,
        category: Optional[str] = None,
        transfer_id: Optional[str] = None,
    ) -> list[Transaction]:
        """List transactions ordered by due date with optional filters.

        Date bounds apply to the due date.
        """
        pass

    @abstractmethod
    def update_transaction(self, transaction_id: int, **fields: Any) -> None:
        """Update the given transaction columns."""
        pass

    @abstractmethod
    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction, releasing any statement line matched to it."""
        pass

    @abstractmethod
    def delete_transfer(self, transfer_id: str) -> int:
        """Delete both legs of a transfer. Returns the number of deleted rows."""
        pass

    # Bank statement operations
    @abstractmethod
    def create_statement_line(
        self,
        bank_account_id: int,
        transaction_date: date,
        description: str,
        amount: Decimal,
        type: StatementLineType,
        balance: Decimal = Decimal("0"),
        fit_id: Optional[str] = None,
    ) -> int:
        """Create a bank statement line. Returns line ID."""
        pass

    @abstractmethod
    def get_statement_line(self, line_id: int) -> Optional[BankStatementLine]:
        """Get statement line by ID."""
        pass

    @abstractmethod
    def statement_line_exists(self, bank_account_id: int, fit_id: str) -> bool:
        """Check if a line with the given FITID was already imported for an account."""
        pass

    @abstractmethod
    def list_statement_lines(
        self,
        bank_account_id: Optional[int] = None,
        reconciled: Optional[bool] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[BankStatementLine]:
        """List statement lines ordered by date with optional filters."""
        pass

    @abstractmethod
    def reconcile_statement_line(self, line_id: int, transaction_id: int) -> None:
        """Link a line to a transaction; the transaction becomes completed and reconciled."""
        pass

    @abstractmethod
    def unreconcile_statement_line(self, line_id: int) -> None:
        """Unlink a line; its transaction reverts to pending and not reconciled."""
        pass

    @abstractmethod
    def delete_statement_line(self, line_id: int) -> None:
        """Delete a statement line."""
        pass
