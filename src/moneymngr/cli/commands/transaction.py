"""Transaction management commands."""

import click

from moneymngr.cli.account_resolution import resolve_account_or_exit
from moneymngr.cli.date_filters import resolve_cli_date_range
from moneymngr.cli.error_handling import handle_domain_error
from moneymngr.domain.account import AccountService
from moneymngr.domain.category import CategoryService
from moneymngr.domain.entities import TransactionKind, TransactionStatus
from moneymngr.domain.errors import DomainError
from moneymngr.domain.ledger import LedgerService
from moneymngr.utils.amount_parser import parse_amount
from moneymngr.utils.date_parser import PERIODS


def _ledger(ctx, warnings: list | None = None) -> LedgerService:
    settings = ctx.obj["settings"]
    return LedgerService(
        ctx.obj["db"],
        owner_id=settings.owner_id,
        currency=settings.currency,
        notifier=warnings.append if warnings is not None else None,
    )


def _echo_warnings(warnings: list) -> None:
    for warning in warnings:
        click.echo(f"Warning: {warning}", err=True)


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("list")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
@click.option("--period", type=click.Choice(PERIODS, case_sensitive=False), help="Named period")
@click.option("--account", help="Account name or ID")
@click.option("--category", help="Category name")
@click.option("--status", type=click.Choice(["confirmed", "pending", "rejected"], case_sensitive=False))
@click.option("--kind", type=click.Choice(["expense", "income", "transfer"], case_sensitive=False))
@click.pass_context
def list_transactions(
    ctx,
    start_date: str | None,
    end_date: str | None,
    period: str | None,
    account: str | None,
    category: str | None,
    status: str | None,
    kind: str | None,
):
    """View transactions with optional filters, newest first."""
    db = ctx.obj["db"]
    owner_id = ctx.obj["settings"].owner_id
    account_service = AccountService(db, owner_id=owner_id)
    category_service = CategoryService(db, owner_id=owner_id)

    start, end = resolve_cli_date_range(ctx, start_date=start_date, end_date=end_date, period=period)

    account_id = resolve_account_or_exit(ctx, account_service, account) if account else None

    category_id = None
    if category:
        category_obj = category_service.find_by_name(category)
        if category_obj is None:
            click.echo(f"Error: Category '{category}' not found", err=True)
            ctx.exit(1)
        category_id = category_obj.id

    transactions = db.list_transactions(
        owner_id=owner_id,
        start_date=start,
        end_date=end,
        category_id=category_id,
        account_id=account_id,
        status=TransactionStatus(status.upper()) if status else None,
        kind=TransactionKind(kind.upper()) if kind else None,
    )

    if not transactions:
        click.echo("No transactions found.")
        return

    accounts = {acc.id: acc.name for acc in account_service.list_accounts()}
    categories = {cat.id: cat.name for cat in category_service.list_categories()}

    click.echo(f"\nFound {len(transactions)} transaction(s):")
    click.echo("-" * 110)
    click.echo(f"{'ID':<10} {'Date':<12} {'Kind':<9} {'Amount':>12} {'Status':<10} {'Account':<22} {'Category':<14} Description")
    click.echo("-" * 110)
    for txn in transactions:
        legs = [accounts.get(a, "(missing)") for a in (txn.from_account_id, txn.to_account_id) if a]
        click.echo(
            f"{txn.id[:8]:<10} {txn.date:%Y-%m-%d}   {txn.kind.value:<9} {txn.amount:>12,.2f} "
            f"{txn.status.value:<10} {' -> '.join(legs)[:22]:<22} "
            f"{categories.get(txn.category_id, '')[:14]:<14} {txn.description[:30]}"
        )

    confirmed = [t for t in transactions if t.status == TransactionStatus.CONFIRMED]
    total_expenses = sum((t.amount for t in confirmed if t.kind == TransactionKind.EXPENSE), start=0)
    total_income = sum((t.amount for t in confirmed if t.kind == TransactionKind.INCOME), start=0)
    click.echo("-" * 110)
    click.echo(f"Confirmed expenses: {total_expenses:,.2f} | Income: {total_income:,.2f} | Count: {len(transactions)}")


def _resolve_transaction_id(ctx, transaction_id: str) -> str:
    """Accept a full ID or an unambiguous prefix as printed by 'list'."""
    db = ctx.obj["db"]
    if db.get_transaction(transaction_id) is not None:
        return transaction_id
    matches = [
        t.id for t in db.list_transactions(owner_id=ctx.obj["settings"].owner_id) if t.id.startswith(transaction_id)
    ]
    if len(matches) == 1:
        return matches[0]
    if len(matches) > 1:
        click.echo(f"Error: Transaction ID '{transaction_id}' is ambiguous", err=True)
    else:
        click.echo(f"Error: Transaction {transaction_id} not found", err=True)
    ctx.exit(1)


@transaction_group.command("confirm")
@click.argument("transaction_id")
@click.pass_context
def confirm_transaction(ctx, transaction_id: str) -> None:
    """Confirm a pending transaction and move the balances."""
    transaction_id = _resolve_transaction_id(ctx, transaction_id)
    warnings = []
    try:
        txn = _ledger(ctx, warnings).confirm(transaction_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Confirmed transaction {txn.id}")
    _echo_warnings(warnings)


@transaction_group.command("reject")
@click.argument("transaction_id")
@click.pass_context
def reject_transaction(ctx, transaction_id: str) -> None:
    """Reject a pending transaction. Balances are not touched."""
    transaction_id = _resolve_transaction_id(ctx, transaction_id)
    try:
        txn = _ledger(ctx).reject(transaction_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Rejected transaction {txn.id}")


@transaction_group.command("update")
@click.argument("transaction_id")
@click.option("--amount", help="New amount")
@click.option("--category", help="New category name")
@click.option("--description", help="New description")
@click.pass_context
def update_transaction(
    ctx, transaction_id: str, amount: str | None, category: str | None, description: str | None
) -> None:
    """Update amount, category or description of a transaction.

    Balances of confirmed transactions follow the new amount.
    """
    transaction_id = _resolve_transaction_id(ctx, transaction_id)
    warnings = []
    try:
        new_amount = parse_amount(amount) if amount is not None else None
        category_id = None
        if category is not None:
            category_obj = CategoryService(ctx.obj["db"], owner_id=ctx.obj["settings"].owner_id).find_by_name(category)
            if category_obj is None:
                click.echo(f"Error: Category '{category}' not found", err=True)
                ctx.exit(1)
            category_id = category_obj.id
        _ledger(ctx, warnings).revise(
            transaction_id, amount=new_amount, category_id=category_id, description=description
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated transaction {transaction_id}")
    _echo_warnings(warnings)


@transaction_group.command("delete")
@click.argument("transaction_id")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_transaction(ctx, transaction_id: str, yes: bool) -> None:
    """Delete a transaction, undoing its effect on balances."""
    transaction_id = _resolve_transaction_id(ctx, transaction_id)

    if not yes and not click.confirm(f"Are you sure you want to delete transaction {transaction_id}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        _ledger(ctx).delete(transaction_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted transaction {transaction_id}")


def register_commands(cli: click.Group) -> None:
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
