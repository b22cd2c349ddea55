"""cache clear - remove cached manifests."""

from __future__ import annotations

import click

from ...errors import CommandError
from ..shared import fail, get_services, lang_option


@click.command("clear")
@lang_option
@click.option("--all", "clear_all", is_flag=True, help="Clear every cached language")
@click.pass_context
def clear(ctx: click.Context, lang: str | None, clear_all: bool) -> None:
    """Clear the cached manifest for the current language (or all of them)."""
    services = get_services(ctx)
    try:
        if clear_all:
            cleared = services.store.clear_all()
            click.echo(f"Cleared {len(cleared)} cached language(s)")
            return
        code = services.resolver.get_effective_language(lang)
        if services.store.clear(code):
            click.echo(f"Cleared cache for {code}")
        else:
            click.echo(f"No cache for {code}")
    except CommandError as e:
        fail(e)
