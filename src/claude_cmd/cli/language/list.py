"""language list - show the current language and what is available."""

from __future__ import annotations

import click

from ...errors import CommandError
from ..shared import fail, get_services, lang_option


@click.command("list")
@lang_option
@click.option("--cached", is_flag=True, help="Only count locally cached manifests (no network)")
@click.pass_context
def list_languages(ctx: click.Context, lang: str | None, cached: bool) -> None:
    """List languages the repository offers plus common ones."""
    services = get_services(ctx)
    try:
        if cached:
            counts = services.queries.get_language_counts()
        else:
            counts = services.queries.get_repository_language_counts()
    except CommandError as e:
        fail(e)
    status = services.resolver.get_language_status(counts, override=lang)

    click.echo(f"Current language: {status.current}")
    click.echo()

    if status.repository:
        click.echo("Available:")
        for info in status.repository:
            click.echo(f"  {info.code:<5} {info.name:<15} {info.command_count} commands")
        click.echo()

    if status.common:
        click.echo("Not yet available:")
        for info in status.common:
            click.echo(f"  {info.code:<5} {info.name}")
