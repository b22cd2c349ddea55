"""
Structural comparison of manifest snapshots.

Classifies every command as added, removed or modified between two
manifests. Output order is deterministic: added/modified entries follow the
new manifest's order, removed entries follow the old manifest's order.
"""

import logging
from datetime import datetime, timezone
from typing import Any

from .errors import comparison_error
from .models import (
    ChangeRecord,
    ChangeSummary,
    ChangeType,
    Command,
    ComparisonResult,
    FieldDiff,
    Manifest,
)

logger = logging.getLogger(__name__)

# Fields compared for modifications, in reporting order
COMPARED_FIELDS = ("description", "file", "allowed_tools", "argument_hint", "namespace")


def _index_commands(manifest: Manifest, side: str) -> dict[str, Command]:
    """Map command name -> command, rejecting duplicate names."""
    index: dict[str, Command] = {}
    for command in manifest.commands:
        if command.name in index:
            raise comparison_error(
                f'Duplicate command "{command.name}" in {side} manifest',
                command_name=command.name,
                side=side,
            )
        index[command.name] = command
    return index


def _field_value(command: Command, field_name: str) -> Any:
    value = getattr(command, field_name)
    # Tuples become lists so diffs serialize like the manifest does
    return list(value) if isinstance(value, tuple) else value


def diff_fields(old: Command, new: Command) -> tuple[FieldDiff, ...]:
    """Return every compared field whose value differs.

    Sequence fields compare element by element, so a pure reordering of
    allowed_tools is a difference.
    """
    diffs = []
    for field_name in COMPARED_FIELDS:
        old_value = _field_value(old, field_name)
        new_value = _field_value(new, field_name)
        if old_value != new_value:
            diffs.append(FieldDiff(field_name, old_value, new_value))
    return tuple(diffs)


def summarize(changes: tuple[ChangeRecord, ...]) -> ChangeSummary:
    added = sum(1 for c in changes if c.type is ChangeType.ADDED)
    removed = sum(1 for c in changes if c.type is ChangeType.REMOVED)
    modified = sum(1 for c in changes if c.type is ChangeType.MODIFIED)
    total = len(changes)
    return ChangeSummary(
        total=total,
        added=added,
        removed=removed,
        modified=modified,
        has_changes=total > 0,
    )


def compare_manifests(old: Manifest, new: Manifest) -> ComparisonResult:
    """Compare two manifests and identify all command changes.

    Args:
        old: Previous snapshot
        new: Current snapshot

    Returns:
        ComparisonResult with ordered changes and summary counts

    Raises:
        CommandError: COMPARISON if either manifest repeats a command name
    """
    old_index = _index_commands(old, "old")
    new_index = _index_commands(new, "new")

    changes: list[ChangeRecord] = []

    for command in new.commands:
        previous = old_index.get(command.name)
        if previous is None:
            changes.append(
                ChangeRecord(ChangeType.ADDED, command.name, new_command=command)
            )
        elif previous.to_dict() != command.to_dict():
            changes.append(
                ChangeRecord(
                    ChangeType.MODIFIED,
                    command.name,
                    old_command=previous,
                    new_command=command,
                    field_diffs=diff_fields(previous, command),
                )
            )

    for command in old.commands:
        if command.name not in new_index:
            changes.append(
                ChangeRecord(ChangeType.REMOVED, command.name, old_command=command)
            )

    result_changes = tuple(changes)
    summary = summarize(result_changes)
    logger.debug(
        "Compared manifests: %d added, %d removed, %d modified",
        summary.added,
        summary.removed,
        summary.modified,
    )

    return ComparisonResult(
        old_manifest=old,
        new_manifest=new,
        summary=summary,
        changes=result_changes,
        compared_at=datetime.now(timezone.utc).isoformat(),
    )


def are_manifests_identical(old: Manifest, new: Manifest) -> bool:
    """Return True when compare_manifests() would report no changes."""
    # Different sizes always produce at least one added/removed record
    if len(old.commands) != len(new.commands):
        _index_commands(old, "old")
        _index_commands(new, "new")
        return False
    return not compare_manifests(old, new).summary.has_changes
