"""Category domain service."""

import logging
from typing import Optional

from caixa.database.base import Database
from caixa.domain.entities import CategoryType, DREGroup, TransactionType
from caixa.domain.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    ValidationError,
    category_not_found,
    dependency_blocked,
)

logger = logging.getLogger("caixa.domain.category")

TRANSFER_CATEGORY = "Transferência entre Contas"


def check_group_type(type: TransactionType, dre_group: Optional[DREGroup]) -> None:
    """Reject a DRE group whose direction disagrees with the category type.

    Raises:
        ValidationError: If the group is an income line for an expense category
            or vice versa
    """
    if dre_group is not None and dre_group.type is not type:
        raise ValidationError(
            f"DRE group '{dre_group.value}' holds {dre_group.type.value} categories, "
            f"not {type.value}"
        )


class CategoryService:
    """Service for managing categories and their DRE mapping."""

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_category(
        self, name: str, type: TransactionType, dre_group: Optional[DREGroup]
    ) -> int:
        """Create a category.

        Args:
            name: Unique category name
            type: Income or expense
            dre_group: Income statement line the category rolls into

        Returns:
            Category ID

        Raises:
            ValidationError: If the name is empty or the group type disagrees
            ConflictError: If the name already exists
        """
        if not name or not name.strip():
            raise ValidationError("Category name must not be empty")
        check_group_type(type, dre_group)
        if self.db.get_category_type_by_name(name) is not None:
            raise ConflictError(f"Category '{name}' already exists")

        category_id = self.db.create_category_type(name=name, type=type, dre_group=dre_group)
        logger.info("Created category %d (%s)", category_id, name)
        return category_id

    def get_category(self, category_id: int) -> Optional[CategoryType]:
        """Get category by ID."""
        return self.db.get_category_type(category_id)

    def get_category_by_name(self, name: str) -> Optional[CategoryType]:
        """Get category by name."""
        return self.db.get_category_type_by_name(name)

    def list_categories(self) -> list[CategoryType]:
        """List all categories ordered by name."""
        return self.db.list_category_types()

    def list_by_dre_group(self) -> list[tuple[Optional[DREGroup], list[CategoryType]]]:
        """List categories grouped by DRE group in statement order.

        Categories without a group come last.
        """
        grouped: dict[Optional[DREGroup], list[CategoryType]] = {}
        for category in self.db.list_category_types():
            grouped.setdefault(category.dre_group, []).append(category)

        result = [(group, grouped[group]) for group in DREGroup.ordered() if group in grouped]
        if None in grouped:
            result.append((None, grouped[None]))
        return result

    def update_category(
        self,
        category_id: int,
        name: Optional[str] = None,
        type: Optional[TransactionType] = None,
        dre_group: Optional[DREGroup] = None,
    ) -> None:
        """Update a category; renaming moves its transactions to the new name.

        Raises:
            NotFoundError: If category not found
            ConflictError: If the new name already exists
            ValidationError: If the resulting type and group disagree
        """
        category = self.db.get_category_type(category_id)
        if category is None:
            raise NotFoundError(f"Category {category_id} not found")

        if name is not None and name != category.name:
            if not name.strip():
                raise ValidationError("Category name must not be empty")
            if self.db.get_category_type_by_name(name) is not None:
                raise ConflictError(f"Category '{name}' already exists")

        check_group_type(
            type if type is not None else category.type,
            dre_group if dre_group is not None else category.dre_group,
        )
        self.db.update_category_type(category_id, name=name, type=type, dre_group=dre_group)
        if name is not None and name != category.name:
            logger.info("Renamed category '%s' to '%s'", category.name, name)

    def delete_category(self, category_id: int) -> None:
        """Delete a category.

        Raises:
            NotFoundError: If category not found
            DependencyError: If transactions are still filed under it
        """
        category = self.db.get_category_type(category_id)
        if category is None:
            raise NotFoundError(f"Category {category_id} not found")

        transaction_count = self.db.get_category_transaction_count(category.name)
        if transaction_count > 0:
            raise DependencyError(
                dependency_blocked("category", f"'{category.name}'", transaction_count)
            )
        self.db.delete_category_type(category_id)
        logger.info("Deleted category '%s'", category.name)

    def require(self, name: str) -> CategoryType:
        """Get a category by name or raise.

        Raises:
            NotFoundError: If category not found
        """
        category = self.db.get_category_type_by_name(name)
        if category is None:
            raise NotFoundError(category_not_found(name))
        return category

    def ensure_transfer_category(self) -> CategoryType:
        """Return the transfer category, creating it on first use."""
        category = self.db.get_category_type_by_name(TRANSFER_CATEGORY)
        if category is not None:
            return category
        self.create_category(
            TRANSFER_CATEGORY, TransactionType.EXPENSE, DREGroup.DESPESAS_FINANCEIRAS
        )
        return self.require(TRANSFER_CATEGORY)
