"""
claude-cmd - discover slash commands from a remote, language-partitioned
repository, cached locally per language.
"""

from .errors import CommandError, ErrorKind
from .models import Command, Manifest
from .query import QueryCoordinator
from .services import Services, build_services


__all__ = [
    "main",
    "Command",
    "CommandError",
    "ErrorKind",
    "Manifest",
    "QueryCoordinator",
    "Services",
    "build_services",
]


def main() -> None:
    """Main entry point for the claude-cmd CLI."""
    from .cli import main as cli_main
    try:
        cli_main()
    except KeyboardInterrupt:
        print()
        raise SystemExit(130)
