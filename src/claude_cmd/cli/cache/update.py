"""cache update - fetch a fresh manifest and report what changed."""

from __future__ import annotations

import click

from ...errors import CommandError
from ...formatting import format_comparison_details, format_update_summary
from ..shared import fail, get_services, lang_option


@click.command("update")
@lang_option
@click.option("--show-changes", is_flag=True, help="List every added, modified and removed command")
@click.pass_context
def update(ctx: click.Context, lang: str | None, show_changes: bool) -> None:
    """Fetch the latest manifest and replace the cached copy."""
    services = get_services(ctx)
    try:
        result = services.queries.update_cache_with_changes(lang)
    except CommandError as e:
        fail(e)

    click.echo(format_update_summary(result))
    if show_changes and result.comparison_result is not None:
        click.echo()
        click.echo(format_comparison_details(result.comparison_result))
