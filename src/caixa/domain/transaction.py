"""Transaction domain service."""

import logging
import uuid
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from caixa.database.base import Database
from caixa.domain.account import AccountService
from caixa.domain.category import CategoryService
from caixa.domain.entities import (
    Transaction,
    TransactionStatus,
    TransactionType,
)
from caixa.domain.errors import (
    NotFoundError,
    ValidationError,
    account_not_found,
    category_not_found,
    cost_center_not_found,
    insufficient_balance,
    negative_amount,
    reconciled_requires_completed,
    transaction_not_found,
)
from caixa.domain.money import ZERO, DecimalLike, to_money

logger = logging.getLogger("caixa.domain.transaction")

EDITABLE_FIELDS = frozenset(
    {
        "type",
        "amount",
        "description",
        "category",
        "competence_date",
        "due_date",
        "status",
        "bank_account_id",
        "supplier",
        "cost_center",
        "invoice_number",
        "reconciled",
    }
)


def validate_amount(amount: DecimalLike) -> Decimal:
    """Convert an amount to Decimal and reject negatives and sub-cent values.

    Raises:
        ValidationError: If the amount is malformed or negative
    """
    try:
        value = to_money(amount)
    except ValueError as e:
        raise ValidationError(str(e))
    if value < ZERO:
        raise ValidationError(negative_amount(value))
    return value


def validate_status(status: TransactionStatus, reconciled: bool) -> None:
    """Enforce that a reconciled transaction is completed.

    Raises:
        ValidationError: If reconciled is set on a pending transaction
    """
    if reconciled and status is not TransactionStatus.COMPLETED:
        raise ValidationError(reconciled_requires_completed())


@dataclass(frozen=True)
class TransferResult:
    """IDs created by a transfer between accounts."""

    transfer_id: str
    withdrawal_id: int
    deposit_id: int


class TransactionService:
    """Service for managing transactions."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def _check_references(
        self,
        bank_account_id: Optional[int],
        category: Optional[str],
        cost_center: Optional[str],
    ) -> None:
        if bank_account_id is not None and self.db.get_bank_account(bank_account_id) is None:
            raise NotFoundError(account_not_found(bank_account_id))
        if category is not None and self.db.get_category_type_by_name(category) is None:
            raise NotFoundError(category_not_found(category))
        if cost_center is not None and self.db.get_cost_center_by_name(cost_center) is None:
            raise NotFoundError(cost_center_not_found(cost_center))

    def _refresh_balances(self, *reconciled: bool) -> None:
        # current_balance only counts reconciled transactions
        if any(reconciled):
            AccountService(self.db).refresh_balances()

    def create_transaction(
        self,
        type: TransactionType,
        amount: DecimalLike,
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
    ) -> int:
        """Create a transaction.

        When only one of the two dates is given, the other takes its value.

        Args:
            type: Income or expense
            amount: Non-negative amount; the type carries the direction
            description: Free text
            category: Category name
            competence_date: Accrual date
            due_date: Cash date
            status: Pending or completed
            bank_account_id: Owning bank account
            supplier: Counterparty name
            cost_center: Cost center name
            invoice_number: Invoice reference
            reconciled: Already matched against the bank statement

        Returns:
            Transaction ID

        Raises:
            ValidationError: If the amount is negative or malformed, or the
                transaction is reconciled without being completed
            NotFoundError: If account, category or cost center doesn't exist
        """
        value = validate_amount(amount)
        validate_status(status, reconciled)
        self._check_references(bank_account_id, category, cost_center)

        competence_date = competence_date or due_date
        due_date = due_date or competence_date

        transaction_id = self.db.create_transaction(
            type=type,
            amount=value,
            description=description,
            category=category,
            competence_date=competence_date,
            due_date=due_date,
            status=status,
            bank_account_id=bank_account_id,
            supplier=supplier,
            cost_center=cost_center,
            invoice_number=invoice_number,
            reconciled=reconciled,
        )
        self._refresh_balances(reconciled)
        logger.info("Created %s transaction %d of %s", type.value, transaction_id, value)
        return transaction_id

    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID.

        Args:
            transaction_id: Transaction ID

        Returns:
            Transaction entity or None if not found
        """
        return self.db.get_transaction(transaction_id)

    def _require(self, transaction_id: int) -> Transaction:
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        return txn

    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        bank_account_id: Optional[int] = None,
        transaction_type: Optional[TransactionType] = None,
        status: Optional[TransactionStatus] = None,
        reconciled: Optional[bool] = None,
        category: Optional[str] = None,
    ) -> list[Transaction]:
        """List transactions ordered by due date.

        Args:
            start_date: Optional due date lower bound
            end_date: Optional due date upper bound
            bank_account_id: Optional account filter
            transaction_type: Optional income/expense filter
            status: Optional status filter
            reconciled: Optional reconciliation filter
            category: Optional category name filter

        Returns:
            List of transaction entities
        """
        return self.db.list_transactions(
            start_date=start_date,
            end_date=end_date,
            bank_account_id=bank_account_id,
            transaction_type=transaction_type,
            status=status,
            reconciled=reconciled,
            category=category,
        )

    def update_transaction(self, transaction_id: int, **fields: Any) -> None:
        """Update the given fields of a transaction.

        The merged record is validated as a whole, so a partial update cannot
        leave a reconciled transaction pending or store a negative amount.

        Raises:
            NotFoundError: If the transaction or a referenced entity doesn't exist
            ValidationError: If a field is unknown or the result is invalid
        """
        txn = self._require(transaction_id)
        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")
        if not fields:
            return

        if "amount" in fields:
            fields["amount"] = validate_amount(fields["amount"])
        validate_status(
            fields.get("status", txn.status), fields.get("reconciled", txn.reconciled)
        )
        self._check_references(
            fields.get("bank_account_id"), fields.get("category"), fields.get("cost_center")
        )

        self.db.update_transaction(transaction_id, **fields)
        self._refresh_balances(txn.reconciled, fields.get("reconciled", False))
        logger.info("Updated transaction %d: %s", transaction_id, ", ".join(sorted(fields)))

    def mark_completed(self, transaction_id: int) -> None:
        """Mark a transaction as paid or received."""
        self._require(transaction_id)
        self.db.update_transaction(transaction_id, status=TransactionStatus.COMPLETED)

    def mark_pending(self, transaction_id: int) -> None:
        """Reopen a completed transaction.

        Raises:
            ValidationError: If the transaction is reconciled
        """
        txn = self._require(transaction_id)
        validate_status(TransactionStatus.PENDING, txn.reconciled)
        self.db.update_transaction(transaction_id, status=TransactionStatus.PENDING)

    def delete_transaction(self, transaction_id: int) -> int:
        """Delete a transaction; deleting one transfer leg deletes both.

        Returns:
            Number of deleted transactions
        """
        txn = self._require(transaction_id)
        if txn.transfer_id is not None:
            count = self.db.delete_transfer(txn.transfer_id)
            self._refresh_balances(True)
            logger.info("Deleted transfer %s (%d transactions)", txn.transfer_id, count)
            return count
        self.db.delete_transaction(transaction_id)
        self._refresh_balances(txn.reconciled)
        logger.info("Deleted transaction %d", transaction_id)
        return 1

    def transfer(
        self,
        from_account_id: int,
        to_account_id: int,
        amount: DecimalLike,
        transfer_date: date,
        description: str = "",
    ) -> TransferResult:
        """Move money between two accounts.

        Creates an expense on the source and an income on the destination,
        both completed and reconciled, under the transfer category.

        Raises:
            ValidationError: If the accounts are the same, the amount is not
                positive, or the source balance is insufficient
            NotFoundError: If either account doesn't exist
        """
        value = validate_amount(amount)
        if value == ZERO:
            raise ValidationError("Transfer amount must be greater than zero")
        if from_account_id == to_account_id:
            raise ValidationError("Source and destination accounts must differ")

        source = self.db.get_bank_account(from_account_id)
        if source is None:
            raise NotFoundError(account_not_found(from_account_id))
        if self.db.get_bank_account(to_account_id) is None:
            raise NotFoundError(account_not_found(to_account_id))

        accounts = AccountService(self.db)
        balance = accounts.get_balances().for_account(from_account_id).balance
        if balance < value:
            raise ValidationError(insufficient_balance(source.name, balance, value))

        category = CategoryService(self.db).ensure_transfer_category()
        transfer_id = uuid.uuid4().hex
        leg = {
            "amount": value,
            "description": f"Transferência: {description}",
            "category": category.name,
            "competence_date": transfer_date,
            "due_date": transfer_date,
            "status": TransactionStatus.COMPLETED,
            "reconciled": True,
            "transfer_id": transfer_id,
        }
        withdrawal_id, deposit_id = self.db.create_transactions(
            [
                {**leg, "type": TransactionType.EXPENSE, "bank_account_id": from_account_id},
                {**leg, "type": TransactionType.INCOME, "bank_account_id": to_account_id},
            ]
        )
        accounts.refresh_balances()
        logger.info(
            "Transferred %s from account %d to %d (%s)",
            value,
            from_account_id,
            to_account_id,
            transfer_id,
        )
        return TransferResult(transfer_id, withdrawal_id, deposit_id)
