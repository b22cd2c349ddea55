"""claude-cmd CLI - browse and cache slash commands.

Usage:
    claude-cmd --help
    claude-cmd list --lang fr
    claude-cmd search debug
    claude-cmd info frontend:component
    claude-cmd cache update --show-changes
    claude-cmd language set fr --project
"""

from __future__ import annotations

import json
import logging
from importlib.metadata import PackageNotFoundError, version

import click

from .. import namespace
from ..errors import CommandError
from ..formatting import format_status, format_status_compact
from ..models import Command
from .cache import cache
from .language import language
from .shared import fail, get_services, lang_option, output_option


def get_version() -> str:
    try:
        return version("claude-cmd")
    except PackageNotFoundError:
        return "0.0.0"


@click.group()
@click.version_option(get_version(), "--version", "-V", prog_name="claude-cmd")
@click.option("--debug", is_flag=True, help="Enable debug logging")
def cli(debug: bool) -> None:
    """claude-cmd - discover and cache slash commands.

    \b
    COMMANDS:
      list      - List commands for a language
      search    - Search command names and descriptions
      info      - Show details of one command
      cache     - Update or clear the local manifest cache
      language  - Show or set the preferred language
      status    - Show cache state and health
    """
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _print_table(commands: list[Command]) -> None:
    click.echo(f"{'COMMAND':<30} {'DESCRIPTION'}")
    click.echo("-" * 80)
    for cmd in commands:
        desc = cmd.description
        if len(desc) > 48:
            desc = desc[:45] + "..."
        click.echo(f"{cmd.name:<30} {desc}")


def _print_json(commands: list[Command]) -> None:
    click.echo(json.dumps([c.to_dict() for c in commands], indent=2, ensure_ascii=False))


@cli.command("list")
@lang_option
@click.option("--refresh", is_flag=True, help="Bypass the cache and fetch a fresh manifest")
@output_option
@click.pass_context
def list_commands(ctx: click.Context, lang: str | None, refresh: bool, output: str) -> None:
    """List available slash commands."""
    services = get_services(ctx)
    try:
        commands = services.queries.list_commands(lang, force_refresh=refresh)
    except CommandError as e:
        fail(e)

    if output == "json":
        _print_json(commands)
        return
    if not commands:
        click.echo("No commands available", err=True)
        return
    _print_table(commands)


@cli.command()
@click.argument("query")
@lang_option
@output_option
@click.pass_context
def search(ctx: click.Context, query: str, lang: str | None, output: str) -> None:
    """Search commands whose name or description contains QUERY."""
    services = get_services(ctx)
    try:
        commands = services.queries.search_commands(query, lang)
    except CommandError as e:
        fail(e)

    if output == "json":
        _print_json(commands)
        return
    if not commands:
        click.echo(f"No commands match '{query}'")
        return
    _print_table(commands)


@cli.command()
@click.argument("name")
@lang_option
@output_option
@click.pass_context
def info(ctx: click.Context, name: str, lang: str | None, output: str) -> None:
    """Show details of a specific slash command.

    NAME is the command name, optionally namespaced (e.g. frontend:component).
    """
    services = get_services(ctx)
    clean_name = name[1:] if name.startswith("/") else name
    try:
        namespace.validate_strict(clean_name)
        command = services.queries.get_command_info(clean_name, lang)
    except CommandError as e:
        fail(e)

    if output == "json":
        click.echo(json.dumps(command.to_dict(), indent=2, ensure_ascii=False))
        return

    click.echo(f"Command: {command.name}")
    click.echo(f"Description: {command.description or '(none)'}")
    click.echo(f"File: {command.file}")
    if command.namespace:
        click.echo(f"Namespace: {command.namespace}")
    if command.argument_hint:
        click.echo(f"Arguments: {command.argument_hint}")
    if command.allowed_tools:
        click.echo(f"Allowed tools: {', '.join(command.allowed_tools)}")


@cli.command()
@lang_option
@click.option(
    "--output",
    type=click.Choice(["default", "compact", "json"]),
    default="default",
    help="Output format",
)
@click.pass_context
def status(ctx: click.Context, lang: str | None, output: str) -> None:
    """Show cached languages, their age and overall cache health."""
    services = get_services(ctx)
    try:
        report = services.queries.get_status(lang)
    except CommandError as e:
        fail(e)

    if output == "json":
        click.echo(json.dumps(report.to_dict(), indent=2))
    elif output == "compact":
        click.echo(format_status_compact(report))
    else:
        click.echo(format_status(report))


cli.add_command(cache)
cli.add_command(language)


def main() -> None:
    """Main entry point for the claude-cmd CLI."""
    cli()


if __name__ == "__main__":
    main()
