"""Shared fixtures for claude-cmd tests."""

import pytest

from claude_cmd.models import Command, Manifest


def make_command(name: str, **fields) -> Command:
    fields.setdefault("description", f"{name} command")
    fields.setdefault("file", f"{name.replace(':', '/')}.md")
    return Command(name=name, **fields)


def make_manifest(*commands: Command, language: str = "en", version: str = "1.0.0") -> Manifest:
    return Manifest(
        language=language,
        version=version,
        updated="2025-01-01T00:00:00Z",
        commands=tuple(commands),
    )


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sample_manifest():
    return make_manifest(
        make_command("debug-help", description="Help debugging errors", **{"allowed-tools": ["Read", "Grep"]}),
        make_command("code-review", description="Review the current diff"),
        make_command("frontend:component", description="Scaffold a UI component", namespace="frontend"),
    )
