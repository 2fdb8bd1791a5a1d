"""Main CLI entry point."""

import click

from moneymngr.config import get_settings
from moneymngr.database.factories import create_sqlite_database
from moneymngr.utils.log import configure_logging

# Import and register all commands at module level
from moneymngr.cli.commands import (
    account,
    add,
    category,
    init_data,
    magic,
    reconcile,
    transaction,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides MONEYMNGR_DB_PATH environment variable)",
    envvar="MONEYMNGR_DB_PATH",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr")
@click.pass_context
def cli(ctx, db_path: str | None, verbose: bool):
    """moneymngr - Personal ledger with bank message parsing.

    Paste a bank SMS into 'magic' to turn it into a transaction, or record
    entries by hand with 'add'. Balances follow every confirmed transaction.
    """
    ctx.ensure_object(dict)
    settings = get_settings()
    configure_logging("DEBUG" if verbose else settings.log_level, json=settings.log_json)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path or settings.db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.obj["settings"] = settings
        ctx.call_on_close(db.disconnect)


# Register all commands
init_data.register_commands(cli)
account.register_commands(cli)
category.register_commands(cli)
add.register_commands(cli)
magic.register_commands(cli)
transaction.register_commands(cli)
reconcile.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
