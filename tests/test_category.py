"""Tests for category and cost center services."""

from datetime import date

import pytest

from caixa.domain.category import TRANSFER_CATEGORY
from caixa.domain.entities import DREGroup, TransactionType
from caixa.domain.errors import ConflictError, DependencyError, NotFoundError, ValidationError

INCOME = TransactionType.INCOME
EXPENSE = TransactionType.EXPENSE


def test_create_category(category_service):
    category_id = category_service.create_category("Consultoria", INCOME, DREGroup.RECEITA_BRUTA)
    category = category_service.get_category(category_id)
    assert category.type is INCOME
    assert category.dre_group is DREGroup.RECEITA_BRUTA


def test_group_type_must_agree(category_service):
    with pytest.raises(ValidationError):
        category_service.create_category("Aluguel", EXPENSE, DREGroup.RECEITA_BRUTA)


def test_duplicate_category(category_service):
    category_service.create_category("Aluguel", EXPENSE, DREGroup.DESPESAS_ADMINISTRATIVAS)
    with pytest.raises(ConflictError):
        category_service.create_category("Aluguel", EXPENSE, None)


def test_list_by_dre_group_in_statement_order(category_service, sample_categories):
    category_service.create_category("Diversos", EXPENSE, None)

    grouped = category_service.list_by_dre_group()

    groups = [group for group, _ in grouped]
    assert groups[0] is DREGroup.RECEITA_BRUTA
    assert groups[-1] is None
    assert groups[:-1] == sorted(groups[:-1], key=lambda g: g.order)


def test_rename_moves_transactions(category_service, transaction_service):
    category_id = category_service.create_category("Luz", EXPENSE, DREGroup.DESPESAS_ADMINISTRATIVAS)
    txn_id = transaction_service.create_transaction(
        type=EXPENSE, amount="90", category="Luz", due_date=date(2024, 1, 1)
    )

    category_service.update_category(category_id, name="Energia")

    assert transaction_service.get_transaction(txn_id).category == "Energia"
    assert category_service.get_category_by_name("Luz") is None


def test_delete_blocked_while_used(category_service, transaction_service):
    category_id = category_service.create_category("Luz", EXPENSE, None)
    transaction_service.create_transaction(
        type=EXPENSE, amount="90", category="Luz", due_date=date(2024, 1, 1)
    )
    with pytest.raises(DependencyError):
        category_service.delete_category(category_id)


def test_require_and_transfer_category(category_service):
    with pytest.raises(NotFoundError):
        category_service.require("Nada")

    first = category_service.ensure_transfer_category()
    second = category_service.ensure_transfer_category()
    assert first.id == second.id
    assert first.name == TRANSFER_CATEGORY
    assert first.dre_group is DREGroup.DESPESAS_FINANCEIRAS


class TestCostCenters:
    def test_lifecycle(self, cost_center_service):
        cc_id = cost_center_service.create_cost_center("Comercial", "Time de vendas")
        cost_center_service.set_active(cc_id, False)

        assert cost_center_service.list_cost_centers(active_only=True) == []
        assert cost_center_service.get_cost_center(cc_id).active is False

        cost_center_service.update_cost_center(cc_id, name="Vendas")
        assert cost_center_service.get_cost_center_by_name("Vendas").description == "Time de vendas"

        cost_center_service.delete_cost_center(cc_id)
        assert cost_center_service.list_cost_centers() == []

    def test_duplicate_name(self, cost_center_service):
        cost_center_service.create_cost_center("Comercial")
        with pytest.raises(ConflictError):
            cost_center_service.create_cost_center("Comercial")

    def test_delete_blocked_while_used(self, cost_center_service, transaction_service):
        cc_id = cost_center_service.create_cost_center("Comercial")
        transaction_service.create_transaction(
            type=EXPENSE, amount="5", cost_center="Comercial", due_date=date(2024, 1, 1)
        )
        with pytest.raises(DependencyError):
            cost_center_service.delete_cost_center(cc_id)
