"""Bank account domain service."""

import logging
from decimal import Decimal
from typing import Optional

from caixa.database.base import Database
from caixa.domain.balances import account_balances
from caixa.domain.entities import AccountBalancesReport, BankAccount
from caixa.domain.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    ValidationError,
    account_not_found,
    dependency_blocked,
)
from caixa.domain.money import ZERO, DecimalLike, to_money

logger = logging.getLogger("caixa.domain.account")


class AccountService:
    """Service for managing bank accounts."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def _check_unique_name(self, name: str, account_id: Optional[int] = None) -> None:
        existing = self.db.get_bank_account_by_name(name)
        if existing is not None and existing.id != account_id:
            raise ConflictError(f"Bank account with name '{name}' already exists")

    def create_account(
        self,
        name: str,
        bank_code: str = "",
        agency: str = "",
        account_number: str = "",
        initial_balance: DecimalLike = ZERO,
        is_primary: bool = False,
    ) -> int:
        """Create a new bank account.

        Args:
            name: Account name
            bank_code: Bank code (e.g. "341")
            agency: Branch number
            account_number: Account number
            initial_balance: Opening balance; may be negative
            is_primary: Make this the primary account

        Returns:
            Account ID

        Raises:
            ValidationError: If the name is empty or the balance is malformed
            ConflictError: If account name already exists
        """
        if not name or not name.strip():
            raise ValidationError("Bank account name must not be empty")
        try:
            balance = to_money(initial_balance)
        except ValueError as e:
            raise ValidationError(str(e))
        self._check_unique_name(name)

        account_id = self.db.create_bank_account(
            name=name,
            bank_code=bank_code,
            agency=agency,
            account_number=account_number,
            initial_balance=balance,
        )
        logger.info("Created bank account %d (%s)", account_id, name)
        if is_primary:
            self.set_primary(account_id)
        return account_id

    def get_account(self, account_id: int) -> Optional[BankAccount]:
        """Get bank account by ID.

        Args:
            account_id: Account ID

        Returns:
            BankAccount entity or None if not found
        """
        return self.db.get_bank_account(account_id)

    def get_account_by_name(self, name: str) -> Optional[BankAccount]:
        """Get bank account by name."""
        return self.db.get_bank_account_by_name(name)

    def list_accounts(self) -> list[BankAccount]:
        """List all bank accounts, ordered by name."""
        return self.db.list_bank_accounts()

    def update_account(
        self,
        account_id: int,
        name: Optional[str] = None,
        bank_code: Optional[str] = None,
        agency: Optional[str] = None,
        account_number: Optional[str] = None,
        initial_balance: Optional[DecimalLike] = None,
    ) -> None:
        """Update the given fields of a bank account.

        Raises:
            NotFoundError: If account not found
            ConflictError: If the new name already exists
        """
        if self.db.get_bank_account(account_id) is None:
            raise NotFoundError(account_not_found(account_id))
        if name is not None:
            if not name.strip():
                raise ValidationError("Bank account name must not be empty")
            self._check_unique_name(name, account_id)

        balance: Optional[Decimal] = None
        if initial_balance is not None:
            try:
                balance = to_money(initial_balance)
            except ValueError as e:
                raise ValidationError(str(e))

        self.db.update_bank_account(
            account_id,
            name=name,
            bank_code=bank_code,
            agency=agency,
            account_number=account_number,
            initial_balance=balance,
        )
        if balance is not None:
            self.refresh_balances()

    def delete_account(self, account_id: int) -> None:
        """Delete a bank account.

        Raises:
            NotFoundError: If account not found
            DependencyError: If transactions still reference the account
        """
        if self.db.get_bank_account(account_id) is None:
            raise NotFoundError(account_not_found(account_id))

        transaction_count = self.db.get_bank_account_transaction_count(account_id)
        if transaction_count > 0:
            raise DependencyError(
                dependency_blocked("bank account", account_id, transaction_count)
            )

        self.db.delete_bank_account(account_id)
        logger.info("Deleted bank account %d", account_id)

    def set_primary(self, account_id: int) -> None:
        """Make an account the single primary account.

        Raises:
            NotFoundError: If account not found
        """
        if self.db.get_bank_account(account_id) is None:
            raise NotFoundError(account_not_found(account_id))
        self.db.set_primary_bank_account(account_id)
        logger.info("Primary bank account switched to %d", account_id)

    def get_primary(self) -> Optional[BankAccount]:
        """Return the primary account, if one is set."""
        return self.db.get_primary_bank_account()

    def get_balances(self) -> AccountBalancesReport:
        """Compute every account's reconciled balance from a fresh snapshot."""
        return account_balances(self.db.list_transactions(), self.db.list_bank_accounts())

    def refresh_balances(self) -> AccountBalancesReport:
        """Recompute balances and store them as each account's current balance."""
        report = self.get_balances()
        self.db.set_current_balances(
            {row.account_id: row.balance for row in report.accounts}
        )
        return report
