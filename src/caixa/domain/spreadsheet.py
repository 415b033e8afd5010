"""Spreadsheet (CSV) import and export domain service.

The column layout is shared by the template, imports and exports.
"""

import csv
import logging
from pathlib import Path
from typing import Any, Iterable, Optional, TextIO

from caixa.database.base import Database
from caixa.domain.entities import Transaction, TransactionType
from caixa.domain.transaction import TransactionService
from caixa.utils.amount_parser import parse_amount
from caixa.utils.date_parser import format_date, parse_date

logger = logging.getLogger("caixa.domain.spreadsheet")

COLUMNS = [
    "Tipo",
    "Descrição",
    "Valor",
    "Categoria",
    "Centro de Custo",
    "Data de Competência",
    "Data de Vencimento",
    "Fornecedor/Cliente",
    "Número da Nota",
    "Conta Bancária",
]

REQUIRED_COLUMNS = {"Tipo", "Valor", "Data de Vencimento"}

TYPE_LABELS = {
    TransactionType.EXPENSE: "despesa",
    TransactionType.INCOME: "receita",
}

_TYPE_ALIASES = {
    "despesa": TransactionType.EXPENSE,
    "expense": TransactionType.EXPENSE,
    "receita": TransactionType.INCOME,
    "income": TransactionType.INCOME,
}

SAMPLE_ROWS = [
    [
        "despesa",
        "Aluguel Comercial",
        "1500.00",
        "Aluguel",
        "Administrativo",
        "01/03/2024",
        "05/03/2024",
        "Imobiliária XYZ",
        "NF-001",
        "Conta Principal",
    ],
    [
        "despesa",
        "Material de Escritório",
        "250.00",
        "Material de Escritório",
        "Administrativo",
        "01/03/2024",
        "10/03/2024",
        "Papelaria ABC",
        "NF-002",
        "Conta Principal",
    ],
]


def parse_type(value: str) -> TransactionType:
    """Map a Tipo cell to a transaction type.

    Raises:
        ValueError: If the value is neither despesa nor receita
    """
    key = value.strip().lower()
    if key not in _TYPE_ALIASES:
        raise ValueError(f"Unknown type '{value}' (expected 'despesa' or 'receita')")
    return _TYPE_ALIASES[key]


class SpreadsheetService:
    """Service for exchanging transactions as CSV spreadsheets."""

    def __init__(self, db: Database):
        """Initialize spreadsheet service.

        Args:
            db: Database instance
        """
        self.db = db
        self.transaction_service = TransactionService(db)

    def write_template(self, output: TextIO) -> None:
        """Write the header row and two sample rows."""
        writer = csv.writer(output)
        writer.writerow(COLUMNS)
        writer.writerows(SAMPLE_ROWS)

    def _resolve_account_id(self, name: Optional[str]) -> Optional[int]:
        if not name:
            return None
        account = self.db.get_bank_account_by_name(name)
        if account is None:
            raise ValueError(f"Bank account '{name}' not found")
        return account.id

    def _create_from_row(self, row: dict[str, Optional[str]]) -> int:
        def cell(column: str) -> Optional[str]:
            value = row.get(column)
            if value is None:
                return None
            value = value.strip()
            return value or None

        for column in REQUIRED_COLUMNS:
            if cell(column) is None:
                raise ValueError(f"Missing {column}")

        competence = cell("Data de Competência")
        return self.transaction_service.create_transaction(
            type=parse_type(cell("Tipo")),
            amount=parse_amount(cell("Valor")),
            description=cell("Descrição") or "",
            category=cell("Categoria"),
            competence_date=parse_date(competence) if competence else None,
            due_date=parse_date(cell("Data de Vencimento")),
            bank_account_id=self._resolve_account_id(cell("Conta Bancária")),
            supplier=cell("Fornecedor/Cliente"),
            cost_center=cell("Centro de Custo"),
            invoice_number=cell("Número da Nota"),
        )

    def import_csv(self, csv_file_path: str) -> dict[str, Any]:
        """Import transactions from a CSV file in the template layout.

        Every imported transaction is pending and not reconciled. Rows that
        fail validation are reported and skipped; the others are kept.

        Args:
            csv_file_path: Path to CSV file

        Returns:
            Dict with import statistics:
            - imported: number of transactions imported
            - skipped: number of empty rows
            - errors: list of error messages

        Raises:
            FileNotFoundError: If CSV file doesn't exist
            ValueError: If the file has no header or lacks required columns
        """
        csv_path = Path(csv_file_path)
        if not csv_path.exists():
            raise FileNotFoundError(f"CSV file not found: {csv_file_path}")

        imported = 0
        skipped = 0
        errors = []

        with open(csv_path, "r", encoding="utf-8-sig", newline="") as f:
            sample = f.read(4096)
            f.seek(0)
            try:
                delimiter = csv.Sniffer().sniff(sample, delimiters=",;\t").delimiter
            except csv.Error:
                delimiter = ","

            reader = csv.DictReader(f, delimiter=delimiter)
            if reader.fieldnames is None:
                raise ValueError("CSV file has no columns")
            missing = REQUIRED_COLUMNS - {name.strip() for name in reader.fieldnames}
            if missing:
                raise ValueError(f"CSV file missing required columns: {', '.join(sorted(missing))}")

            for row_num, raw_row in enumerate(reader, start=2):
                row = {(key or "").strip(): value for key, value in raw_row.items()}
                if not any((value or "").strip() for value in row.values() if isinstance(value, str)):
                    skipped += 1
                    continue
                try:
                    self._create_from_row(row)
                    imported += 1
                except ValueError as e:
                    errors.append(f"Row {row_num}: {e}")

        logger.info("Imported %d transactions from %s (%d errors)", imported, csv_path, len(errors))
        return {"imported": imported, "skipped": skipped, "errors": errors}

    def export_csv(self, output: TextIO, transactions: Iterable[Transaction]) -> int:
        """Write transactions in the template layout.

        Returns:
            Number of rows written
        """
        account_names = {account.id: account.name for account in self.db.list_bank_accounts()}
        writer = csv.writer(output)
        writer.writerow(COLUMNS)
        count = 0
        for txn in transactions:
            writer.writerow(
                [
                    TYPE_LABELS[txn.type],
                    txn.description,
                    str(txn.amount),
                    txn.category or "",
                    txn.cost_center or "",
                    format_date(txn.competence_date) if txn.competence_date else "",
                    format_date(txn.due_date) if txn.due_date else "",
                    txn.supplier or "",
                    txn.invoice_number or "",
                    account_names.get(txn.bank_account_id, ""),
                ]
            )
            count += 1
        return count
