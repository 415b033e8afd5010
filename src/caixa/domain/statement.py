"""Bank statement import and reconciliation domain service."""

import logging
from pathlib import Path
from typing import Any, Optional

from caixa.database.base import Database
from caixa.domain.account import AccountService
from caixa.domain.entities import BankStatementLine, Transaction
from caixa.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    account_not_found,
    statement_line_not_found,
    transaction_not_found,
)
from caixa.domain.reconciliation import (
    DEFAULT_TOLERANCE_DAYS,
    find_matching_transaction,
    statement_running_balance,
)
from caixa.utils.ofx_parser import parse_ofx

logger = logging.getLogger("caixa.domain.statement")

MAX_OFX_SIZE = 10 * 1024 * 1024


class StatementService:
    """Service for bank statement lines and reconciliation."""

    def __init__(self, db: Database):
        """Initialize statement service.

        Args:
            db: Database instance
        """
        self.db = db
        self.account_service = AccountService(db)

    def import_ofx_file(
        self, ofx_file_path: str, bank_account_id: int, auto_match: bool = False
    ) -> dict[str, Any]:
        """Import an OFX file into a bank account's statement.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValidationError: If the file is not an OFX file or is too large
        """
        path = Path(ofx_file_path)
        if not path.exists():
            raise FileNotFoundError(f"OFX file not found: {ofx_file_path}")
        if path.suffix.lower() != ".ofx":
            raise ValidationError("Invalid file type. Please select an OFX file.")
        if path.stat().st_size > MAX_OFX_SIZE:
            raise ValidationError("File too large. The maximum size is 10MB.")

        # OFX 1.x files are often Latin-1 encoded
        raw = path.read_bytes()
        try:
            content = raw.decode("utf-8")
        except UnicodeDecodeError:
            content = raw.decode("latin-1")
        return self.import_ofx(content, bank_account_id, auto_match=auto_match)

    def import_ofx(
        self, content: str, bank_account_id: int, auto_match: bool = False
    ) -> dict[str, Any]:
        """Import OFX content into a bank account's statement.

        Lines are sorted by date and stamped with a running balance seeded
        from the file's ledger balance. Lines whose FITID was already
        imported for the account are skipped.

        Args:
            content: OFX file content
            bank_account_id: Account the statement belongs to
            auto_match: Reconcile new lines against pending transactions

        Returns:
            Dict with import statistics:
            - imported: number of lines stored
            - skipped: number of duplicate lines
            - matched: number of lines reconciled automatically

        Raises:
            NotFoundError: If the account doesn't exist
            ValidationError: If the content holds no valid transactions
        """
        if self.db.get_bank_account(bank_account_id) is None:
            raise NotFoundError(account_not_found(bank_account_id))
        try:
            statement = parse_ofx(content)
        except ValueError as e:
            raise ValidationError(f"Could not process OFX file: {e}")

        lines = statement_running_balance(
            (
                BankStatementLine(
                    id=0,
                    bank_account_id=bank_account_id,
                    transaction_date=entry.date_posted,
                    description=entry.description,
                    amount=abs(entry.amount),
                    type=entry.line_type,
                    fit_id=entry.fit_id,
                )
                for entry in statement.transactions
            ),
            statement.balance,
        )

        imported = 0
        skipped = 0
        for line in lines:
            if line.fit_id and self.db.statement_line_exists(bank_account_id, line.fit_id):
                skipped += 1
                continue
            self.db.create_statement_line(
                bank_account_id=line.bank_account_id,
                transaction_date=line.transaction_date,
                description=line.description,
                amount=line.amount,
                type=line.type,
                balance=line.balance,
                fit_id=line.fit_id,
            )
            imported += 1

        logger.info(
            "Imported %d statement lines into account %d (%d duplicates)",
            imported,
            bank_account_id,
            skipped,
        )
        matched = len(self.auto_match(bank_account_id)) if auto_match else 0
        return {"imported": imported, "skipped": skipped, "matched": matched}

    def get_line(self, line_id: int) -> Optional[BankStatementLine]:
        return self.db.get_statement_line(line_id)

    def list_lines(
        self, bank_account_id: Optional[int] = None, reconciled: Optional[bool] = None
    ) -> list[BankStatementLine]:
        """List statement lines ordered by date."""
        return self.db.list_statement_lines(bank_account_id=bank_account_id, reconciled=reconciled)

    def suggest_match(
        self, line_id: int, tolerance_days: int = DEFAULT_TOLERANCE_DAYS
    ) -> Optional[Transaction]:
        """Return the transaction a line would be reconciled with, if any."""
        line = self._require_line(line_id)
        candidates = self.db.list_transactions(
            bank_account_id=line.bank_account_id, reconciled=False
        )
        return find_matching_transaction(line, candidates, tolerance_days)

    def _require_line(self, line_id: int) -> BankStatementLine:
        line = self.db.get_statement_line(line_id)
        if line is None:
            raise NotFoundError(statement_line_not_found(line_id))
        return line

    def reconcile(self, line_id: int, transaction_id: int) -> None:
        """Match a statement line with a transaction.

        The transaction becomes completed and reconciled. A transaction
        without an account is moved to the line's account.

        Raises:
            NotFoundError: If the line or transaction doesn't exist
            ConflictError: If either side is already reconciled
            ValidationError: If the transaction belongs to another account
        """
        line = self._require_line(line_id)
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        if line.reconciled:
            raise ConflictError(f"Statement line {line_id} is already reconciled")
        if txn.reconciled:
            raise ConflictError(f"Transaction {transaction_id} is already reconciled")
        if txn.bank_account_id is None:
            self.db.update_transaction(transaction_id, bank_account_id=line.bank_account_id)
        elif txn.bank_account_id != line.bank_account_id:
            raise ValidationError(
                f"Transaction {transaction_id} belongs to bank account {txn.bank_account_id}, "
                f"not {line.bank_account_id}"
            )

        self.db.reconcile_statement_line(line_id, transaction_id)
        self.account_service.refresh_balances()
        logger.info("Reconciled statement line %d with transaction %d", line_id, transaction_id)

    def unreconcile(self, line_id: int) -> None:
        """Undo a reconciliation; the transaction reverts to pending.

        Raises:
            NotFoundError: If the line doesn't exist
            ValidationError: If the line is not reconciled
        """
        line = self._require_line(line_id)
        if not line.reconciled:
            raise ValidationError(f"Statement line {line_id} is not reconciled")
        self.db.unreconcile_statement_line(line_id)
        self.account_service.refresh_balances()
        logger.info("Unreconciled statement line %d", line_id)

    def auto_match(
        self,
        bank_account_id: Optional[int] = None,
        tolerance_days: int = DEFAULT_TOLERANCE_DAYS,
    ) -> list[tuple[BankStatementLine, Transaction]]:
        """Reconcile every open line that has a matching pending transaction.

        A transaction is used for at most one line per run.

        Returns:
            List of (line, transaction) pairs that were reconciled
        """
        lines = self.db.list_statement_lines(bank_account_id=bank_account_id, reconciled=False)
        available = self.db.list_transactions(bank_account_id=bank_account_id, reconciled=False)

        matches = []
        for line in lines:
            txn = find_matching_transaction(line, available, tolerance_days)
            if txn is None:
                continue
            self.db.reconcile_statement_line(line.id, txn.id)
            available = [candidate for candidate in available if candidate.id != txn.id]
            matches.append((line, txn))

        if matches:
            self.account_service.refresh_balances()
        logger.info("Auto-matched %d of %d open statement lines", len(matches), len(lines))
        return matches

    def delete_line(self, line_id: int) -> None:
        """Delete a statement line; a reconciled line is unreconciled first."""
        line = self._require_line(line_id)
        if line.reconciled:
            self.unreconcile(line_id)
        self.db.delete_statement_line(line_id)
