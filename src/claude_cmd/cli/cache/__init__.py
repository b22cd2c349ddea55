"""claude-cmd cache - manage the local manifest cache."""

import click

from .clear import clear
from .update import update


@click.group()
def cache() -> None:
    """Update or clear cached manifests.

    Manifests are cached per language for 24 hours; commands read from the
    cache until it expires or is refreshed.
    """
    pass


cache.add_command(update)
cache.add_command(clear)
