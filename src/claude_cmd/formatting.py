"""Plain-text rendering of cache updates, manifest comparisons and cache status."""

from datetime import datetime
from typing import Any

from .cache import SystemStatus
from .models import (
    CacheUpdateResultWithChanges,
    ChangeRecord,
    ChangeSummary,
    ChangeType,
    ComparisonResult,
)

_MAX_VALUE_WIDTH = 50

_INDICATORS = {
    ChangeType.ADDED: "+",
    ChangeType.MODIFIED: "~",
    ChangeType.REMOVED: "-",
}


def format_field_value(value: Any) -> str:
    """Format a changed field value for display."""
    if value is None:
        return "(none)"
    if isinstance(value, (list, tuple)):
        return f"[{', '.join(str(v) for v in value)}]"
    if isinstance(value, str):
        if len(value) > _MAX_VALUE_WIDTH:
            return f'"{value[:46]}..."'
        return f'"{value}"'
    return str(value)


def format_timestamp(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d %H:%M:%S")


def format_update_summary(result: CacheUpdateResultWithChanges) -> str:
    lines = [
        "Command manifest updated successfully!",
        f"Language: {result.language}",
        f"Commands available: {result.command_count}",
        f"Updated at: {format_timestamp(result.timestamp)}",
        "",
    ]

    if result.has_changes:
        total = result.added + result.removed + result.modified
        lines.append(f"Changes detected: {total} total")
        if result.added > 0:
            lines.append(f"  Added: {result.added} commands")
        if result.modified > 0:
            lines.append(f"  Modified: {result.modified} commands")
        if result.removed > 0:
            lines.append(f"  Removed: {result.removed} commands")
    else:
        lines.append("No changes detected")

    return "\n".join(lines)


def format_compact_summary(summary: ChangeSummary) -> str:
    """One-line summary, e.g. "+2, ~1, -3"."""
    if not summary.has_changes:
        return "No changes"
    parts = []
    if summary.added > 0:
        parts.append(f"+{summary.added}")
    if summary.modified > 0:
        parts.append(f"~{summary.modified}")
    if summary.removed > 0:
        parts.append(f"-{summary.removed}")
    return ", ".join(parts)


def format_change(change: ChangeRecord) -> str:
    """Render one change; modified commands list each differing field."""
    indicator = _INDICATORS[change.type]

    if change.type is ChangeType.MODIFIED:
        lines = [f"{indicator} {change.name}"]
        for diff in change.field_diffs or ():
            lines.append(
                f"    {diff.field}: {format_field_value(diff.old_value)} -> "
                f"{format_field_value(diff.new_value)}"
            )
        return "\n".join(lines)

    command = change.new_command if change.type is ChangeType.ADDED else change.old_command
    description = command.description if command and command.description else "No description"
    return f"{indicator} {change.name}: {description}"


def format_comparison_details(comparison: ComparisonResult) -> str:
    """Full report grouped by change type."""
    summary = comparison.summary
    lines = [
        "Manifest Comparison Results",
        f"Compared at: {comparison.compared_at}",
        "",
    ]

    if not summary.has_changes:
        lines.append("No changes detected")
        return "\n".join(lines)

    lines.append(f"Summary: {summary.total} changes ({format_compact_summary(summary)})")
    lines.append("")

    sections = (
        (ChangeType.ADDED, "Added Commands:"),
        (ChangeType.MODIFIED, "Modified Commands:"),
        (ChangeType.REMOVED, "Removed Commands:"),
    )
    for change_type, title in sections:
        group = [c for c in comparison.changes if c.type is change_type]
        if not group:
            continue
        lines.append(title)
        for change in group:
            lines.append(f"  {format_change(change)}")
        lines.append("")

    return "\n".join(lines).rstrip("\n")


def format_age(seconds: float | None) -> str:
    if seconds is None:
        return "unknown"
    if seconds < 60:
        return f"{int(seconds)}s"
    if seconds < 3600:
        return f"{int(seconds // 60)}m"
    if seconds < 86400:
        return f"{int(seconds // 3600)}h {int(seconds % 3600 // 60)}m"
    return f"{int(seconds // 86400)}d {int(seconds % 86400 // 3600)}h"


def format_status(status: SystemStatus) -> str:
    """Human-readable status report."""
    lines = [
        "claude-cmd status",
        "=================",
        f"Collected at: {format_timestamp(status.timestamp)}",
        f"Language: {status.language}",
        f"Cache directory: {status.cache_dir}",
        "",
    ]

    if not status.caches:
        lines.append("Cache: no cached languages")
    else:
        lines.append("Cache:")
        for cache in status.caches:
            state = "expired" if cache.is_expired else "fresh"
            count = "unreadable" if cache.command_count is None else f"{cache.command_count} commands"
            lines.append(
                f"  {cache.language:<5} {state:<8} age {format_age(cache.age_seconds):<8} "
                f"{count}"
            )
            lines.append(f"        {cache.path}")

    lines.append("")
    lines.append(f"Health: {status.health.upper()}")
    for message in status.messages:
        lines.append(f"  - {message}")

    return "\n".join(lines)


def format_status_compact(status: SystemStatus) -> str:
    """One-line status, e.g. "Status: HEALTHY | Cache: 2/3 fresh"."""
    fresh = sum(1 for c in status.caches if c.exists and not c.is_expired)
    parts = [
        f"Status: {status.health.upper()}",
        f"Cache: {fresh}/{len(status.caches)} fresh",
    ]
    if status.messages:
        parts.append(f"Warnings: {len(status.messages)}")
    return " | ".join(parts)
