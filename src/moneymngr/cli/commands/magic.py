"""Magic entry: turn a bank message into a transaction."""

import asyncio
from typing import Optional

import click

from moneymngr.cli.account_resolution import resolve_account_or_exit
from moneymngr.domain.account import AccountService
from moneymngr.domain.category import CategoryService
from moneymngr.domain.commit import CommitState
from moneymngr.domain.entities import (
    CategoryMatch,
    CategorySuggestion,
    DraftProvenance,
    ParsedDraft,
    Transaction,
)
from moneymngr.domain.entry import EntrySession
from moneymngr.domain.ledger import LedgerService
from moneymngr.oracle.factories import create_gemini_oracle


def _echo_notifications(session: EntrySession) -> None:
    for note in session.drain_notifications():
        prefix = {"error": "Error", "warning": "Warning"}.get(note.level, "Note")
        click.echo(f"{prefix}: {note.message}", err=note.level != "info")


def _describe_draft(draft: ParsedDraft, categories: CategoryService) -> None:
    amount = f"{draft.amount:,.2f}" if draft.amount is not None else "?"
    click.echo(f"Parsed ({draft.provenance.value.lower()}, confidence {draft.confidence}):")
    click.echo(f"  {draft.kind.value} {amount} via {draft.institution}")
    if draft.merchant:
        click.echo(f"  Merchant: {draft.merchant}")
    if draft.account_suffix:
        click.echo(f"  Account: XX{draft.account_suffix}")
    if isinstance(draft.resolution, CategoryMatch):
        category = categories.get_category(draft.resolution.category_id)
        click.echo(f"  Category: {category.name if category else draft.resolution.category_id}")
    elif isinstance(draft.resolution, CategorySuggestion):
        click.echo(f"  Category: {draft.resolution.name} (new)")


def _echo_committed(txn: Transaction) -> None:
    click.echo(f"Saved transaction {txn.id} ({txn.status.value.lower()})")
    click.echo(f"  {txn.kind.value} {txn.amount:,.2f} {txn.currency} - {txn.description}")


async def _ask_oracle(session: EntrySession, approve: bool, yes: bool) -> Optional[Transaction]:
    draft = await session.request_oracle()
    if draft is None:
        return None
    _describe_draft(draft, session.categories)
    if yes and isinstance(draft.resolution, CategorySuggestion):
        session.accept_category_suggestion()
    if session.state != CommitState.COUNTDOWN:
        return None
    if approve:
        return session.approve()
    click.echo(f"Saving in {session.machine.ticks}... press Ctrl-C to hold")
    return await session.wait_for_countdown()


@click.command("magic")
@click.argument("text", required=False)
@click.option("--ai", is_flag=True, help="Parse with the Gemini extraction service")
@click.option("--account", help="Account to use when the message names no known account")
@click.option("--approve", is_flag=True, help="Save the parsed draft without waiting or asking")
@click.option("--yes", is_flag=True, help="Answer yes to every question (new category, save)")
@click.pass_context
def magic(ctx, text: str | None, ai: bool, account: str | None, approve: bool, yes: bool):
    """Parse a bank message and record it.

    TEXT is the message; it is read from stdin when omitted. Known bank
    formats are parsed locally. With --ai the message goes to the extraction
    service; a confident answer is saved after a short countdown that Ctrl-C
    holds. Entries saved here are pending until confirmed with
    'moneymngr transaction confirm'.

    Examples:
        moneymngr magic "HDFC Bank: Rs.1,250.00 debited from A/c XX1234"
        moneymngr magic --ai "Paid 450 to Swiggy from ICICI card"
    """
    db = ctx.obj["db"]
    settings = ctx.obj["settings"]
    if text is None:
        with click.open_file("-") as stream:
            text = stream.read()

    account_service = AccountService(db, owner_id=settings.owner_id)
    category_service = CategoryService(db, owner_id=settings.owner_id)

    oracle = None
    if ai:
        oracle = ctx.obj.get("oracle") or create_gemini_oracle(settings)
        if oracle is None:
            click.echo("Error: Set MONEYMNGR_GEMINI_API_KEY to use --ai", err=True)
            ctx.exit(1)

    default_account_id = resolve_account_or_exit(ctx, account_service, account) if account else None

    session = EntrySession(
        ledger=LedgerService(db, owner_id=settings.owner_id, currency=settings.currency),
        accounts=account_service,
        categories=category_service,
        oracle=oracle,
        default_account_id=default_account_id,
        ticks=settings.countdown_ticks,
        tick_seconds=settings.countdown_tick_seconds,
        on_tick=lambda remaining: click.echo(f"  {remaining}..." if remaining else "  saving"),
    )

    session.update_text(text)
    committed = None
    if ai:
        try:
            committed = asyncio.run(_ask_oracle(session, approve, yes))
        except KeyboardInterrupt:
            session.hold()
            click.echo("\nHeld. Nothing was saved.")
    _echo_notifications(session)

    if committed is not None:
        _echo_committed(committed)
        return

    draft = session.draft
    if draft is None:
        click.echo("Error: Could not parse the message. Use 'moneymngr add' to enter it manually.", err=True)
        ctx.exit(1)
    if draft.provenance == DraftProvenance.HEURISTIC:
        _describe_draft(draft, category_service)

    if isinstance(draft.resolution, CategorySuggestion):
        if yes or click.confirm(f"Create category '{draft.resolution.name}'?", default=True):
            session.accept_category_suggestion()

    if not (approve or yes or click.confirm("Save this transaction?", default=True)):
        click.echo("Discarded.")
        session.reset()
        return

    txn = session.approve()
    _echo_notifications(session)
    if txn is None:
        ctx.exit(1)
    _echo_committed(txn)


def register_commands(cli):
    """Register magic command with main CLI."""
    cli.add_command(magic)
