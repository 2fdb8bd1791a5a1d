"""Category management commands."""

import click

from moneymngr.cli.error_handling import handle_domain_error
from moneymngr.domain.category import CategoryService
from moneymngr.domain.entities import CategoryKind
from moneymngr.domain.errors import DomainError


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("list")
@click.option("--type", "kind", type=click.Choice(["expense", "income"], case_sensitive=False), help="Only show one kind")
@click.pass_context
def list_categories(ctx, kind: str | None):
    """List categories in sort order."""
    service = CategoryService(ctx.obj["db"], owner_id=ctx.obj["settings"].owner_id)

    categories = service.list_categories(kind=CategoryKind(kind.upper()) if kind else None)
    if not categories:
        click.echo("No categories found. Run 'moneymngr init' to create default categories.")
        return

    click.echo("\nCategories:")
    for cat in categories:
        click.echo(f"{cat.icon} {cat.name:24s} {cat.kind.value:<8} (ID: {cat.id})")


@category_group.command("create")
@click.argument("name")
@click.option(
    "--type",
    "kind",
    type=click.Choice(["expense", "income"], case_sensitive=False),
    default="expense",
    help="Category type (default: expense)",
)
@click.option("--icon", help="Display icon")
@click.option("--color", help="Display color (e.g. #7c3aed)")
@click.pass_context
def create_category(ctx, name: str, kind: str, icon: str | None, color: str | None):
    """Create a new category."""
    service = CategoryService(ctx.obj["db"], owner_id=ctx.obj["settings"].owner_id)

    options = {}
    if icon:
        options["icon"] = icon
    if color:
        options["color"] = color

    try:
        category_id = service.create_category(name=name, kind=kind.upper(), **options)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created category '{name.strip()}' (ID: {category_id})")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
