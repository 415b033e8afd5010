"""Utility for resolving bank account names to IDs."""

from caixa.domain.account import AccountService
from caixa.domain.errors import NotFoundError


def resolve_account(account_service: AccountService, account: str | int) -> int:
    """Resolve bank account name or ID to account ID.

    Args:
        account_service: AccountService instance
        account: Account name (str) or ID (int or string representation of int)

    Returns:
        Account ID

    Raises:
        NotFoundError: If account is not found
    """
    if isinstance(account, int):
        if account_service.get_account(account) is None:
            raise NotFoundError(f"Bank account ID {account} not found")
        return account

    # Numeric strings are IDs, anything else is a name
    if account.strip().isdigit():
        account_id = int(account)
        if account_service.get_account(account_id) is None:
            raise NotFoundError(f"Bank account ID {account_id} not found")
        return account_id

    found = account_service.get_account_by_name(account)
    if found is None:
        raise NotFoundError(f"Bank account '{account}' not found")
    return found.id
