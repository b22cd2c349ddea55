"""Helpers shared by the CLI commands."""

from __future__ import annotations

import click

from ..errors import CommandError
from ..language import sanitize_language_code
from ..services import Services, build_services


def validate_lang(ctx: click.Context, param: click.Parameter, value: str | None) -> str | None:
    """Click callback: normalize ``--lang`` or reject a malformed code."""
    if value is None:
        return None
    code = sanitize_language_code(value)
    if not code:
        raise click.BadParameter(f"'{value}' is not a 2-3 letter language code")
    return code


lang_option = click.option(
    "--lang",
    callback=validate_lang,
    help="Language code (e.g. en, fr); overrides config and environment",
)

output_option = click.option(
    "--output",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format",
)


def get_services(ctx: click.Context) -> Services:
    """Services for this invocation, built on first use.

    Tests pass a prebuilt Services as ``obj``.
    """
    root = ctx.find_root()
    if not isinstance(root.obj, Services):
        root.obj = build_services()
    return root.obj


def fail(error: CommandError) -> None:
    """Report a core error and exit 1."""
    click.echo(f"Error: {error}", err=True)
    raise SystemExit(1)
