"""Add transaction command."""

from datetime import datetime, time

import click

from moneymngr.cli.account_resolution import resolve_account_or_exit
from moneymngr.cli.error_handling import handle_domain_error
from moneymngr.domain.account import AccountService
from moneymngr.domain.category import CategoryService
from moneymngr.domain.entities import CategoryKind, Transaction, TransactionKind, TransactionStatus
from moneymngr.domain.errors import DomainError
from moneymngr.domain.ledger import LedgerService
from moneymngr.utils.amount_parser import parse_amount
from moneymngr.utils.date_parser import parse_date


@click.command("add")
@click.option(
    "--kind",
    type=click.Choice(["expense", "income", "transfer"], case_sensitive=False),
    default="expense",
    show_default=True,
)
@click.option("--amount", required=True, help="Transaction amount (e.g. 250, 'Rs. 1,250.00')")
@click.option("--account", required=True, help="Account name or ID (source for expenses and transfers)")
@click.option("--to", "to_account", help="Destination account for transfers")
@click.option("--category", help="Category name")
@click.option("--description", default="", help="Transaction description")
@click.option("--date", "date_str", help="Transaction date (YYYY-MM-DD or relative like 'yesterday')")
@click.option("--pending", is_flag=True, help="Record as pending; balances move on confirm")
@click.pass_context
def add_transaction(
    ctx,
    kind: str,
    amount: str,
    account: str,
    to_account: str | None,
    category: str | None,
    description: str,
    date_str: str | None,
    pending: bool,
):
    """Add a transaction manually.

    Examples:
        moneymngr add --amount 200 --account "Main Bank" --category Food
        moneymngr add --kind income --amount 50000 --account "Main Bank" --category Salary
        moneymngr add --kind transfer --amount 1000 --account "Main Bank" --to Wallet
    """
    db = ctx.obj["db"]
    settings = ctx.obj["settings"]
    account_service = AccountService(db, owner_id=settings.owner_id)
    category_service = CategoryService(db, owner_id=settings.owner_id)
    warnings = []
    ledger = LedgerService(db, owner_id=settings.owner_id, currency=settings.currency, notifier=warnings.append)
    txn_kind = TransactionKind(kind.upper())

    account_id = resolve_account_or_exit(ctx, account_service, account)
    destination_id = None
    if txn_kind == TransactionKind.TRANSFER:
        if not to_account:
            click.echo("Error: Transfers need --to", err=True)
            ctx.exit(1)
        destination_id = resolve_account_or_exit(ctx, account_service, to_account)
    elif to_account:
        click.echo("Error: --to is only valid for transfers", err=True)
        ctx.exit(1)

    txn_date = None
    if date_str:
        try:
            txn_date = datetime.combine(parse_date(date_str), time(12, 0))
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)

    try:
        txn_amount = parse_amount(amount)

        category_id = None
        if category:
            if txn_kind == TransactionKind.TRANSFER:
                click.echo("Error: Transfers cannot have a category", err=True)
                ctx.exit(1)
            category_obj = category_service.find_by_name(category, kind=CategoryKind(txn_kind.value))
            if category_obj is None:
                click.echo(f"Error: Category '{category}' not found", err=True)
                ctx.exit(1)
            category_id = category_obj.id

        txn = ledger.commit(
            Transaction(
                amount=txn_amount,
                kind=txn_kind,
                date=txn_date,
                from_account_id=None if txn_kind == TransactionKind.INCOME else account_id,
                to_account_id=account_id if txn_kind == TransactionKind.INCOME else destination_id,
                category_id=category_id,
                description=description,
                status=TransactionStatus.PENDING if pending else TransactionStatus.CONFIRMED,
            )
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created transaction {txn.id}")
    click.echo(f"  Kind: {txn.kind.value}")
    click.echo(f"  Amount: {txn.amount:,.2f} {txn.currency}")
    click.echo(f"  Status: {txn.status.value}")
    if description:
        click.echo(f"  Description: {description}")
    for warning in warnings:
        click.echo(f"Warning: {warning}", err=True)


def register_commands(cli):
    """Register add command with main CLI."""
    cli.add_command(add_transaction)
