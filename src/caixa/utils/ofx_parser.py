"""OFX bank statement parsing.

Both SGML (OFX 1.x, unclosed leaf tags) and XML (OFX 2.x) files are read by
scanning for ``<TAG>value`` pairs; the header block is ignored.
"""

import html
import logging
import re
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional

from caixa.domain.entities import StatementLineType

logger = logging.getLogger("caixa.utils.ofx_parser")

_TAG = re.compile(r"<(/?)([A-Za-z0-9_.]+)>([^<\r\n]*)")

_ACCOUNT_TAGS = {
    "BANKID": "bank_id",
    "ACCTID": "account_id",
    "ACCTTYPE": "account_type",
    "DTASOF": "balance_date",
    "BALAMT": "balance",
}

_TRANSACTION_TAGS = {"TRNTYPE", "DTPOSTED", "TRNAMT", "FITID", "CHECKNUM", "MEMO", "NAME"}


@dataclass(frozen=True)
class OFXTransaction:
    """A single STMTTRN entry."""

    date_posted: date
    amount: Decimal
    trn_type: str = ""
    fit_id: Optional[str] = None
    check_num: Optional[str] = None
    memo: Optional[str] = None
    name: Optional[str] = None

    @property
    def description(self) -> str:
        return self.memo or self.name or self.check_num or ""

    @property
    def line_type(self) -> StatementLineType:
        return StatementLineType.DEBIT if self.amount < 0 else StatementLineType.CREDIT


@dataclass(frozen=True)
class OFXStatement:
    """Account information and transactions of an OFX file."""

    bank_id: str = ""
    account_id: str = ""
    account_type: str = ""
    balance: Decimal = Decimal("0")
    balance_date: Optional[date] = None
    transactions: tuple[OFXTransaction, ...] = field(default=())


def parse_ofx_date(value: str) -> date:
    """Parse an OFX date (``YYYYMMDD[HHMMSS[.XXX][TZ]]``) into a date.

    Raises:
        ValueError: If the value does not start with eight digits
    """
    value = value.strip()
    if len(value) < 8 or not value[:8].isdigit():
        raise ValueError(f"Invalid OFX date '{value}'")
    return date(int(value[:4]), int(value[4:6]), int(value[6:8]))


def parse_ofx_amount(value: str) -> Decimal:
    """Parse an OFX amount; ``.`` or ``,`` is the decimal point, never a grouping.

    Raises:
        ValueError: If the value is not a finite number
    """
    try:
        amount = Decimal(value.strip().replace(",", "."))
    except InvalidOperation:
        raise ValueError(f"Invalid OFX amount '{value}'")
    if not amount.is_finite():
        raise ValueError(f"Invalid OFX amount '{value}'")
    return amount


def _build_transaction(fields: dict[str, str]) -> OFXTransaction:
    if "DTPOSTED" not in fields or "TRNAMT" not in fields:
        raise ValueError(
            f"OFX transaction {fields.get('FITID', '?')} is missing DTPOSTED or TRNAMT"
        )
    return OFXTransaction(
        date_posted=parse_ofx_date(fields["DTPOSTED"]),
        amount=parse_ofx_amount(fields["TRNAMT"]),
        trn_type=fields.get("TRNTYPE", ""),
        fit_id=fields.get("FITID") or None,
        check_num=fields.get("CHECKNUM") or None,
        memo=fields.get("MEMO") or None,
        name=fields.get("NAME") or None,
    )


def parse_ofx(content: str) -> OFXStatement:
    """Parse the text of an OFX file.

    Args:
        content: File content

    Returns:
        OFXStatement with transactions in file order

    Raises:
        ValueError: If the file holds no transactions or a malformed one
    """
    account: dict[str, str] = {}
    transactions: list[OFXTransaction] = []
    current: Optional[dict[str, str]] = None

    for match in _TAG.finditer(content):
        closing, tag = match.group(1), match.group(2).upper()
        value = html.unescape(match.group(3).strip())

        if tag == "STMTTRN":
            if closing:
                if current:
                    transactions.append(_build_transaction(current))
                current = None
            else:
                current = {}
            continue

        if closing or not value:
            continue

        if current is not None and tag in _TRANSACTION_TAGS:
            current[tag] = value
        elif tag in _ACCOUNT_TAGS:
            account[_ACCOUNT_TAGS[tag]] = value

    # SGML files may omit the final closing tag
    if current:
        transactions.append(_build_transaction(current))

    if not transactions:
        raise ValueError("No transactions found in OFX file")

    logger.debug("Parsed %d OFX transactions", len(transactions))
    return OFXStatement(
        bank_id=account.get("bank_id", ""),
        account_id=account.get("account_id", ""),
        account_type=account.get("account_type", ""),
        balance=parse_ofx_amount(account["balance"]) if "balance" in account else Decimal("0"),
        balance_date=parse_ofx_date(account["balance_date"]) if "balance_date" in account else None,
        transactions=tuple(transactions),
    )
