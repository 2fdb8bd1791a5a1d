"""Initialize default reference data."""

import click

from moneymngr.domain.seed import seed_defaults


@click.command("init")
@click.pass_context
def init_data(ctx):
    """Create default account types, categories and a main account.

    Collections that already hold data are left untouched.
    """
    result = seed_defaults(ctx.obj["db"], owner_id=ctx.obj["settings"].owner_id)

    if not result.created_anything:
        click.echo("Default data already exists.")
        return

    click.echo(f"Created {len(result.account_types)} account types.")
    click.echo(f"Created {len(result.groups)} account groups.")
    click.echo(f"Created {len(result.categories)} categories.")
    click.echo(f"Created {len(result.accounts)} accounts.")


def register_commands(cli):
    """Register init command with main CLI."""
    cli.add_command(init_data)
