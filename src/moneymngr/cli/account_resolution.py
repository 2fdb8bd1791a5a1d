"""CLI helper for account resolution."""

import click

from moneymngr.cli.error_handling import handle_domain_error
from moneymngr.domain.account import AccountService
from moneymngr.domain.errors import NotFoundError
from moneymngr.utils.account_resolver import resolve_account


def resolve_account_or_exit(ctx: click.Context, account_service: AccountService, account: str) -> str:
    """Resolve account name or ID, or exit with a CLI error."""
    try:
        return resolve_account(account_service, account)
    except NotFoundError as exc:
        handle_domain_error(ctx, exc)
