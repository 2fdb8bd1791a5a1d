"""CLI helpers for date range resolution."""

from datetime import datetime

import click

from moneymngr.utils.date_parser import day_bounds, get_date_range, parse_date


def resolve_cli_date_range(
    ctx: click.Context,
    *,
    start_date: str | None,
    end_date: str | None,
    period: str | None,
) -> tuple[datetime | None, datetime | None]:
    """Resolve a --period or --start-date/--end-date pair into datetime bounds."""
    if period and (start_date or end_date):
        click.echo("Error: --period cannot be combined with --start-date or --end-date.", err=True)
        ctx.exit(1)

    if period:
        return day_bounds(*get_date_range(period))

    start = end = None
    try:
        if start_date:
            start = parse_date(start_date)
        if end_date:
            end = parse_date(end_date)
    except ValueError as e:
        click.echo(f"Error: Invalid date: {e}", err=True)
        ctx.exit(1)
    return day_bounds(start, end)
