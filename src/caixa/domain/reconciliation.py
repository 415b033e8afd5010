"""Matching bank statement lines against recorded transactions."""

import logging
import re
from dataclasses import replace
from decimal import Decimal
from typing import Iterable, Optional

from caixa.domain.entities import (
    BankStatementLine,
    StatementLineType,
    Transaction,
    TransactionStatus,
    TransactionType,
)
from caixa.domain.money import ZERO

logger = logging.getLogger("caixa.domain.reconciliation")

DEFAULT_TOLERANCE_DAYS = 5

_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]")

_LINE_TYPE_TO_TRANSACTION = {
    StatementLineType.CREDIT: TransactionType.INCOME,
    StatementLineType.DEBIT: TransactionType.EXPENSE,
}


def normalize_description(text: Optional[str]) -> str:
    """Lowercase a description and strip everything but ASCII letters and digits."""
    return _NON_ALPHANUMERIC.sub("", (text or "").lower())


def descriptions_match(first: Optional[str], second: Optional[str]) -> bool:
    """Check whether one normalized description contains the other.

    Empty descriptions never match.
    """
    a = normalize_description(first)
    b = normalize_description(second)
    if not a or not b:
        return False
    return a in b or b in a


def is_candidate(
    line: BankStatementLine,
    txn: Transaction,
    tolerance_days: int = DEFAULT_TOLERANCE_DAYS,
) -> bool:
    """Check the hard matching rules between a statement line and a transaction.

    The transaction must be pending, belong to the line's account, carry the
    same amount and direction, and be due within the tolerance window.
    """
    if txn.status is not TransactionStatus.PENDING or txn.reconciled:
        return False
    if txn.bank_account_id != line.bank_account_id:
        return False
    if txn.amount != line.amount:
        return False
    if txn.type is not _LINE_TYPE_TO_TRANSACTION[line.type]:
        return False
    if txn.due_date is None:
        return False
    return abs((txn.due_date - line.transaction_date).days) <= tolerance_days


def find_matching_transaction(
    line: BankStatementLine,
    transactions: Iterable[Transaction],
    tolerance_days: int = DEFAULT_TOLERANCE_DAYS,
) -> Optional[Transaction]:
    """Pick the best transaction to reconcile a statement line with.

    Among the candidates, one whose description matches the line's wins;
    ties are broken by the closest due date and then by input order.

    Args:
        line: Statement line to match
        transactions: Snapshot to search
        tolerance_days: Maximum distance between due date and line date

    Returns:
        The matching transaction, or None
    """
    candidates = [txn for txn in transactions if is_candidate(line, txn, tolerance_days)]
    if not candidates:
        return None

    def rank(indexed: tuple[int, Transaction]) -> tuple[int, int, int]:
        position, txn = indexed
        described = descriptions_match(line.description, txn.description)
        distance = abs((txn.due_date - line.transaction_date).days)
        return (0 if described else 1, distance, position)

    _, best = min(enumerate(candidates), key=rank)
    logger.debug(
        "Statement line %s matched transaction %s out of %d candidates",
        line.id,
        best.id,
        len(candidates),
    )
    return best


def statement_running_balance(
    lines: Iterable[BankStatementLine], opening_balance: Decimal = ZERO
) -> list[BankStatementLine]:
    """Sort lines by date and stamp each with the cumulative balance.

    Credits add to the balance and debits subtract from it.
    """
    balance = opening_balance
    result = []
    for line in sorted(lines, key=lambda item: item.transaction_date):
        if line.type is StatementLineType.CREDIT:
            balance += line.amount
        else:
            balance -= line.amount
        result.append(replace(line, balance=balance))
    return result
