"""Tests for OFX import and statement reconciliation."""

from datetime import date
from decimal import Decimal

import pytest

from caixa.domain.entities import StatementLineType, TransactionStatus, TransactionType
from caixa.domain.errors import ConflictError, NotFoundError, ValidationError


@pytest.fixture
def ofx_path(fixtures_dir):
    return str(fixtures_dir / "extrato.ofx")


@pytest.fixture
def imported(statement_service, sample_account, ofx_path):
    statement_service.import_ofx_file(ofx_path, sample_account.id)
    return statement_service.list_lines(sample_account.id)


def _line(lines, description):
    return next(line for line in lines if line.description == description)


class TestImport:
    def test_import_file(self, statement_service, sample_account, ofx_path):
        stats = statement_service.import_ofx_file(ofx_path, sample_account.id)

        assert stats == {"imported": 3, "skipped": 0, "matched": 0}
        lines = statement_service.list_lines(sample_account.id)
        assert [line.transaction_date for line in lines] == [
            date(2024, 1, 5),
            date(2024, 1, 10),
            date(2024, 1, 15),
        ]
        assert [line.balance for line in lines] == [
            Decimal("10500.00"),
            Decimal("9000.00"),
            Decimal("8987.10"),
        ]
        assert lines[0].type is StatementLineType.CREDIT
        assert lines[1].amount == Decimal("1500.00")
        assert all(not line.reconciled for line in lines)

    def test_reimport_skips_known_lines(self, statement_service, sample_account, ofx_path):
        statement_service.import_ofx_file(ofx_path, sample_account.id)
        stats = statement_service.import_ofx_file(ofx_path, sample_account.id)

        assert stats["imported"] == 0
        assert stats["skipped"] == 3
        assert len(statement_service.list_lines(sample_account.id)) == 3

    def test_rejects_other_extensions(self, statement_service, sample_account, tmp_path):
        path = tmp_path / "extrato.csv"
        path.write_text("Data,Valor\n")
        with pytest.raises(ValidationError):
            statement_service.import_ofx_file(str(path), sample_account.id)

    def test_missing_file(self, statement_service, sample_account, tmp_path):
        with pytest.raises(FileNotFoundError):
            statement_service.import_ofx_file(str(tmp_path / "nada.ofx"), sample_account.id)

    def test_content_without_transactions(self, statement_service, sample_account):
        with pytest.raises(ValidationError):
            statement_service.import_ofx("OFXHEADER:100\n<OFX></OFX>", sample_account.id)

    def test_unknown_account(self, statement_service, ofx_path):
        with pytest.raises(NotFoundError):
            statement_service.import_ofx_file(ofx_path, 42)


class TestReconcile:
    def test_reconcile_and_unreconcile(
        self, statement_service, transaction_service, account_service, sample_account, imported
    ):
        line = _line(imported, "ALUGUEL COMERCIAL")
        txn_id = transaction_service.create_transaction(
            type=TransactionType.EXPENSE, amount="1500.00", due_date=date(2024, 1, 10),
            bank_account_id=sample_account.id,
        )

        statement_service.reconcile(line.id, txn_id)

        txn = transaction_service.get_transaction(txn_id)
        assert txn.status is TransactionStatus.COMPLETED
        assert txn.reconciled is True
        stored = statement_service.get_line(line.id)
        assert stored.reconciled and stored.transaction_id == txn_id
        assert account_service.get_account(sample_account.id).current_balance == Decimal("-500.00")

        statement_service.unreconcile(line.id)

        txn = transaction_service.get_transaction(txn_id)
        assert txn.status is TransactionStatus.PENDING
        assert txn.reconciled is False
        assert statement_service.get_line(line.id).reconciled is False
        assert account_service.get_account(sample_account.id).current_balance == Decimal("1000.00")

    def test_transaction_without_account_adopts_line_account(
        self, statement_service, transaction_service, sample_account, imported
    ):
        line = _line(imported, "TARIFA PACOTE")
        txn_id = transaction_service.create_transaction(
            type=TransactionType.EXPENSE, amount="12.90", due_date=date(2024, 1, 15)
        )

        statement_service.reconcile(line.id, txn_id)

        assert transaction_service.get_transaction(txn_id).bank_account_id == sample_account.id

    def test_double_reconcile_conflicts(
        self, statement_service, transaction_service, sample_account, imported
    ):
        line = _line(imported, "TARIFA PACOTE")
        first = transaction_service.create_transaction(
            type=TransactionType.EXPENSE, amount="12.90", due_date=date(2024, 1, 15),
            bank_account_id=sample_account.id,
        )
        second = transaction_service.create_transaction(
            type=TransactionType.EXPENSE, amount="12.90", due_date=date(2024, 1, 15),
            bank_account_id=sample_account.id,
        )
        statement_service.reconcile(line.id, first)

        with pytest.raises(ConflictError):
            statement_service.reconcile(line.id, second)
        with pytest.raises(ConflictError):
            statement_service.reconcile(_line(imported, "ALUGUEL COMERCIAL").id, first)

    def test_unreconcile_open_line(self, statement_service, imported):
        with pytest.raises(ValidationError):
            statement_service.unreconcile(imported[0].id)

    def test_deleting_transaction_releases_line(
        self, statement_service, transaction_service, sample_account, imported
    ):
        line = _line(imported, "TARIFA PACOTE")
        txn_id = transaction_service.create_transaction(
            type=TransactionType.EXPENSE, amount="12.90", due_date=date(2024, 1, 15),
            bank_account_id=sample_account.id,
        )
        statement_service.reconcile(line.id, txn_id)

        transaction_service.delete_transaction(txn_id)

        stored = statement_service.get_line(line.id)
        assert stored.reconciled is False
        assert stored.transaction_id is None


def test_auto_match(statement_service, transaction_service, sample_account, imported):
    rent = transaction_service.create_transaction(
        type=TransactionType.EXPENSE, amount="1500.00", due_date=date(2024, 1, 12),
        description="Aluguel comercial", bank_account_id=sample_account.id,
    )
    client = transaction_service.create_transaction(
        type=TransactionType.INCOME, amount="10000.00", due_date=date(2024, 1, 8),
        description="Projeto ACME", bank_account_id=sample_account.id,
    )
    # outside the tolerance window
    transaction_service.create_transaction(
        type=TransactionType.EXPENSE, amount="12.90", due_date=date(2024, 1, 25),
        bank_account_id=sample_account.id,
    )

    matches = statement_service.auto_match(sample_account.id)

    assert sorted(txn.id for _, txn in matches) == sorted([rent, client])
    open_lines = statement_service.list_lines(sample_account.id, reconciled=False)
    assert [line.description for line in open_lines] == ["TARIFA PACOTE"]


def test_suggest_match(statement_service, transaction_service, sample_account, imported):
    line = _line(imported, "TARIFA PACOTE")
    assert statement_service.suggest_match(line.id) is None

    txn_id = transaction_service.create_transaction(
        type=TransactionType.EXPENSE, amount="12.90", due_date=date(2024, 1, 17),
        bank_account_id=sample_account.id,
    )
    assert statement_service.suggest_match(line.id).id == txn_id


def test_delete_reconciled_line(statement_service, transaction_service, sample_account, imported):
    line = _line(imported, "TARIFA PACOTE")
    txn_id = transaction_service.create_transaction(
        type=TransactionType.EXPENSE, amount="12.90", due_date=date(2024, 1, 15),
        bank_account_id=sample_account.id,
    )
    statement_service.reconcile(line.id, txn_id)

    statement_service.delete_line(line.id)

    assert statement_service.get_line(line.id) is None
    assert transaction_service.get_transaction(txn_id).reconciled is False
