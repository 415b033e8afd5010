"""Cost center domain service."""

import logging
from typing import Optional

from caixa.database.base import Database
from caixa.domain.entities import CostCenter
from caixa.domain.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    ValidationError,
    cost_center_not_found,
    dependency_blocked,
)

logger = logging.getLogger("caixa.domain.cost_center")


class CostCenterService:
    """Service for managing cost centers."""

    def __init__(self, db: Database):
        self.db = db

    def create_cost_center(self, name: str, description: Optional[str] = None) -> int:
        """Create an active cost center.

        Raises:
            ValidationError: If the name is empty
            ConflictError: If the name already exists
        """
        if not name or not name.strip():
            raise ValidationError("Cost center name must not be empty")
        if self.db.get_cost_center_by_name(name) is not None:
            raise ConflictError(f"Cost center '{name}' already exists")
        cost_center_id = self.db.create_cost_center(name=name, description=description)
        logger.info("Created cost center %d (%s)", cost_center_id, name)
        return cost_center_id

    def get_cost_center(self, cost_center_id: int) -> Optional[CostCenter]:
        return self.db.get_cost_center(cost_center_id)

    def get_cost_center_by_name(self, name: str) -> Optional[CostCenter]:
        return self.db.get_cost_center_by_name(name)

    def list_cost_centers(self, active_only: bool = False) -> list[CostCenter]:
        return self.db.list_cost_centers(active_only=active_only)

    def _require(self, cost_center_id: int) -> CostCenter:
        cost_center = self.db.get_cost_center(cost_center_id)
        if cost_center is None:
            raise NotFoundError(cost_center_not_found(cost_center_id))
        return cost_center

    def update_cost_center(
        self,
        cost_center_id: int,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> None:
        """Rename or re-describe a cost center; transactions follow a rename.

        Raises:
            NotFoundError: If cost center not found
            ConflictError: If the new name already exists
        """
        current = self._require(cost_center_id)
        if name is not None and name != current.name:
            if not name.strip():
                raise ValidationError("Cost center name must not be empty")
            if self.db.get_cost_center_by_name(name) is not None:
                raise ConflictError(f"Cost center '{name}' already exists")
        self.db.update_cost_center(cost_center_id, name=name, description=description)

    def set_active(self, cost_center_id: int, active: bool) -> None:
        """Activate or deactivate a cost center."""
        self._require(cost_center_id)
        self.db.update_cost_center(cost_center_id, active=active)
        logger.info(
            "Cost center %d %s", cost_center_id, "activated" if active else "deactivated"
        )

    def delete_cost_center(self, cost_center_id: int) -> None:
        """Delete a cost center.

        Raises:
            NotFoundError: If cost center not found
            DependencyError: If transactions still reference it
        """
        cost_center = self._require(cost_center_id)
        transaction_count = self.db.get_cost_center_transaction_count(cost_center.name)
        if transaction_count > 0:
            raise DependencyError(
                dependency_blocked("cost center", f"'{cost_center.name}'", transaction_count)
            )
        self.db.delete_cost_center(cost_center_id)
        logger.info("Deleted cost center '%s'", cost_center.name)
