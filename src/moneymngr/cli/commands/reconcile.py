"""Balance reconciliation command."""

import click

from moneymngr.domain.account import AccountService
from moneymngr.domain.ledger import LedgerService


@click.command("reconcile")
@click.option("--dry-run", is_flag=True, help="Report drift without correcting it")
@click.pass_context
def reconcile(ctx, dry_run: bool):
    """Recompute balances from the transaction log.

    Each account's balance should equal its opening balance plus every
    confirmed transaction touching it. Accounts that drifted are reported
    and, unless --dry-run is given, corrected.
    """
    db = ctx.obj["db"]
    settings = ctx.obj["settings"]
    ledger = LedgerService(db, owner_id=settings.owner_id, currency=settings.currency)
    names = {acc.id: acc.name for acc in AccountService(db, owner_id=settings.owner_id).list_accounts()}

    drifts = ledger.reconcile_balances(apply=not dry_run)
    if not drifts:
        click.echo("All balances match the transaction log.")
        return

    for drift in drifts:
        click.echo(
            f"{names.get(drift.account_id, drift.account_id)}: recorded {drift.recorded:,.2f}, "
            f"expected {drift.expected:,.2f} ({drift.delta:+,.2f})"
        )
    if dry_run:
        click.echo(f"{len(drifts)} account(s) drifted. Run without --dry-run to correct.")
    else:
        click.echo(f"Corrected {len(drifts)} account(s).")


def register_commands(cli):
    """Register reconcile command with main CLI."""
    cli.add_command(reconcile)
