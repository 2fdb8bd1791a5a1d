"""Utility for resolving account names to IDs."""

from moneymngr.domain.account import AccountService
from moneymngr.domain.errors import NotFoundError


def resolve_account(account_service: AccountService, account: str) -> str:
    """Resolve account name or ID to account ID.

    Args:
        account_service: AccountService instance
        account: Account ID or name

    Returns:
        Account ID

    Raises:
        NotFoundError: If account is not found
    """
    account = account.strip()

    # Try as ID first
    account_obj = account_service.get_account(account)
    if account_obj is not None:
        return account_obj.id

    # Try to find by name, exact first, then ignoring case
    accounts = account_service.list_accounts()
    for acc in accounts:
        if acc.name == account:
            return acc.id
    for acc in accounts:
        if acc.name.lower() == account.lower():
            return acc.id

    raise NotFoundError(f"Account '{account}' not found")
