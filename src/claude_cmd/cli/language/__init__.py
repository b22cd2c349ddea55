"""claude-cmd language - show and set the preferred language."""

import click

from .list import list_languages
from .set import set_language


@click.group()
def language() -> None:
    """Show or set the preferred command language.

    \b
    Resolution order:
      --lang flag > project config > user config > CLAUDE_CMD_LANG > locale > en
    """
    pass


language.add_command(list_languages, name="list")
language.add_command(set_language, name="set")
