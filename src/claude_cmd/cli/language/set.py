"""language set - persist the preferred language."""

from __future__ import annotations

import click

from ...config import ConfigScope
from ...errors import CommandError
from ..shared import fail, get_services


@click.command("set")
@click.argument("code")
@click.option("--project", is_flag=True, help="Write to the project config instead of the user config")
@click.pass_context
def set_language(ctx: click.Context, code: str, project: bool) -> None:
    """Set CODE as the preferred language."""
    services = get_services(ctx)
    scope = ConfigScope.PROJECT if project else ConfigScope.USER
    try:
        saved = services.resolver.set_language(code, scope)
    except CommandError as e:
        fail(e)
    except OSError as e:
        click.echo(f"Error: could not write {scope.value} config: {e}", err=True)
        raise SystemExit(1)

    click.echo(f"Preferred language set to {saved} ({scope.value} config)")
