"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


def account_not_found(account_id: int) -> str:
    """Return message for missing bank account."""
    return f"Bank account {account_id} not found"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def category_not_found(name: str) -> str:
    """Return message for missing category by name."""
    return f"Category '{name}' not found"


def cost_center_not_found(cost_center: int | str) -> str:
    """Return message for missing cost center by ID or name."""
    if isinstance(cost_center, int):
        return f"Cost center {cost_center} not found"
    return f"Cost center '{cost_center}' not found"


def statement_line_not_found(line_id: int) -> str:
    """Return message for missing bank statement line."""
    return f"Statement line {line_id} not found"


def negative_amount(amount) -> str:
    """Return message for a negative transaction amount."""
    return f"Amount must not be negative (got {amount}); use the transaction type for direction"


def reconciled_requires_completed() -> str:
    """Return message for the reconciled/completed invariant."""
    return "A reconciled transaction must have status 'completed'"


def unmapped_categories(names: list[str]) -> str:
    """Return message for categories with no DRE group mapping."""
    joined = ", ".join(f"'{name}'" for name in names)
    return f"Categories without a DRE group mapping: {joined}"


def insufficient_balance(account_name: str, balance, amount) -> str:
    """Return message when a transfer exceeds the source balance."""
    return (
        f"Insufficient balance in '{account_name}': "
        f"available {balance}, requested {amount}"
    )


def dependency_blocked(entity: str, identifier, transaction_count: int) -> str:
    """Return message when an entity is still referenced by transactions."""
    return (
        f"Cannot delete {entity} {identifier}: it has {transaction_count} "
        f"transaction{'s' if transaction_count != 1 else ''}. "
        "Please reassign or delete them first."
    )
