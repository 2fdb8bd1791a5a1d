"""Account management commands."""

import click

from moneymngr.cli.account_resolution import resolve_account_or_exit
from moneymngr.cli.error_handling import handle_domain_error
from moneymngr.domain.account import AccountService
from moneymngr.domain.errors import DomainError
from moneymngr.utils.amount_parser import parse_amount


def _service(ctx) -> AccountService:
    return AccountService(ctx.obj["db"], owner_id=ctx.obj["settings"].owner_id)


@click.group()
def account_group():
    """Manage accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option("--balance", default="0", help="Opening balance (e.g. 5000 or 'Rs. 5,000')")
@click.option("--threshold", default="0", help="Safety threshold; the account is flagged low below it")
@click.option("--type", "type_name", help="Account type name (e.g. Bank, Cash, Credit Card)")
@click.option("--suffix", help="Last digits of the account number, used to match bank messages")
@click.pass_context
def create_account(ctx, name: str, balance: str, threshold: str, type_name: str | None, suffix: str | None):
    """Create a new account.

    Examples:
        moneymngr account create "HDFC Savings" --balance 12000 --suffix 1234
        moneymngr account create "Amex" --type "Credit Card"
    """
    db = ctx.obj["db"]
    service = _service(ctx)

    try:
        opening = parse_amount(balance)
        safety = parse_amount(threshold)
        type_id = None
        if type_name:
            matches = [t for t in db.list_account_types(owner_id=service.owner_id) if t.name.lower() == type_name.lower()]
            if not matches:
                click.echo(f"Error: Account type '{type_name}' not found. Run 'moneymngr init' first.", err=True)
                ctx.exit(1)
            type_id = matches[0].id
        account_id = service.create_account(
            name=name,
            balance=opening,
            threshold=safety,
            type_id=type_id,
            number_suffix=suffix,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created account '{name.strip()}' (ID: {account_id})")


@account_group.command("list")
@click.pass_context
def list_accounts(ctx):
    """List all accounts with balances and net worth."""
    service = _service(ctx)

    accounts = service.list_accounts()
    if not accounts:
        click.echo("No accounts found. Run 'moneymngr init' to create a default account.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 78)
    for acc in accounts:
        flag = "  LOW" if acc.is_low else ""
        suffix = f"XX{acc.number_suffix}" if acc.number_suffix else ""
        click.echo(f"{acc.name:24s} {suffix:8s} Balance: {acc.balance:>12,.2f}  Threshold: {acc.threshold:>10,.2f}{flag}")
    click.echo("-" * 78)
    click.echo(f"Net worth: {service.net_worth():,.2f}")

    low = service.low_balance_accounts()
    if low:
        click.echo(f"{len(low)} account(s) below their safety threshold.")


@account_group.command("show")
@click.argument("account", metavar="ACCOUNT")
@click.option("--limit", default=10, show_default=True, help="Number of recent transactions to show")
@click.pass_context
def show_account(ctx, account: str, limit: int):
    """Show one account and its recent transactions.

    ACCOUNT can be an account name or ID.
    """
    db = ctx.obj["db"]
    service = _service(ctx)
    account_id = resolve_account_or_exit(ctx, service, account)
    acc = service.require_account(account_id)

    click.echo(f"{acc.name} (ID: {acc.id})")
    if acc.number_suffix:
        click.echo(f"  Number: XX{acc.number_suffix}")
    click.echo(f"  Balance: {acc.balance:,.2f}")
    click.echo(f"  Opening balance: {acc.opening_balance:,.2f}")
    click.echo(f"  Threshold: {acc.threshold:,.2f}")
    click.echo(f"  Spendable: {acc.spendable:,.2f}")
    if acc.is_low:
        click.echo("  Status: LOW")

    transactions = db.list_transactions(owner_id=service.owner_id, account_id=account_id)[:limit]
    if transactions:
        click.echo("\nRecent transactions:")
        for txn in transactions:
            sign = "-" if txn.from_account_id == account_id else "+"
            click.echo(
                f"  {txn.date:%Y-%m-%d} {sign}{txn.amount:,.2f} {txn.status.value:<9} {txn.description}"
            )


@account_group.command("delete")
@click.argument("account", metavar="ACCOUNT")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_account(ctx, account: str, yes: bool) -> None:
    """Delete an account.

    Transactions that mention the account are kept. Their legs on this
    account no longer move any balance.
    """
    service = _service(ctx)
    account_id = resolve_account_or_exit(ctx, service, account)
    acc = service.require_account(account_id)

    if not yes and not click.confirm(f"Are you sure you want to delete account '{acc.name}'?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_account(account_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted account '{acc.name}'")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
