"""
Manifest data model and comparison result types.

Manifests and commands arrive as JSON from the repository and are validated
with Pydantic; everything derived from them (diffs, update results) is a
plain dataclass.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ---------------------------------------------------------------------------
# Pydantic Schema Models
# ---------------------------------------------------------------------------


class Command(BaseModel):
    """A slash command entry from a language manifest."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    name: str
    description: str = ""
    file: str
    allowed_tools: tuple[str, ...] = Field(default=(), alias="allowed-tools")
    argument_hint: str | None = Field(default=None, alias="argument-hint")
    namespace: str | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate name is non-empty."""
        if not v.strip():
            raise ValueError("Command name cannot be empty")
        return v

    @field_validator("allowed_tools", mode="before")
    @classmethod
    def normalize_allowed_tools(cls, v: Any) -> Any:
        """Accept the comma-separated string form used by older manifests."""
        if v is None:
            return ()
        if isinstance(v, str):
            return tuple(tool.strip() for tool in v.split(",") if tool.strip())
        return v

    def to_dict(self) -> dict:
        """Serialize using the manifest's wire keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Manifest(BaseModel):
    """Versioned collection of commands for one language.

    Unknown keys are ignored for forward compatibility.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    language: str = ""
    version: str = ""
    updated: str = ""
    commands: tuple[Command, ...] = ()

    def find(self, name: str) -> Command | None:
        """Return the command called ``name``, if present."""
        for command in self.commands:
            if command.name == name:
                return command
        return None

    def to_dict(self) -> dict:
        return {
            "language": self.language,
            "version": self.version,
            "updated": self.updated,
            "commands": [c.to_dict() for c in self.commands],
        }

    @classmethod
    def from_dict(cls, data: dict, language: str | None = None) -> "Manifest":
        """Validate a raw manifest mapping.

        Args:
            data: Parsed manifest JSON
            language: Language to stamp on the manifest when the payload
                doesn't carry one (the repository's files don't)

        Raises:
            pydantic.ValidationError: If the payload doesn't match the schema
        """
        manifest = cls.model_validate(data)
        if language and not manifest.language:
            manifest = manifest.model_copy(update={"language": language})
        return manifest


# ---------------------------------------------------------------------------
# Comparison Results
# ---------------------------------------------------------------------------


class ChangeType(str, Enum):
    """Kind of change detected for a command."""
    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"


@dataclass(frozen=True)
class FieldDiff:
    """A single field whose value differs between two versions of a command."""
    field: str
    old_value: Any
    new_value: Any


@dataclass(frozen=True)
class ChangeRecord:
    """One command-level change between two manifests.

    Attributes:
        type: added, removed or modified
        name: Command name
        old_command: Command before the change (None for added)
        new_command: Command after the change (None for removed)
        field_diffs: Differing fields, only set for modified commands
    """
    type: ChangeType
    name: str
    old_command: Command | None = None
    new_command: Command | None = None
    field_diffs: tuple[FieldDiff, ...] | None = None


@dataclass(frozen=True)
class ChangeSummary:
    total: int
    added: int
    removed: int
    modified: int
    has_changes: bool


@dataclass(frozen=True)
class ComparisonResult:
    """Full structural comparison between two manifest snapshots."""
    old_manifest: Manifest
    new_manifest: Manifest
    summary: ChangeSummary
    changes: tuple[ChangeRecord, ...]
    compared_at: str


# ---------------------------------------------------------------------------
# Cache Update Results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CacheUpdateResult:
    language: str
    timestamp: float
    command_count: int


@dataclass(frozen=True)
class CacheUpdateResultWithChanges:
    """Cache update outcome plus the changes detected against the previous entry."""
    language: str
    timestamp: float
    command_count: int
    has_changes: bool
    added: int
    removed: int
    modified: int
    comparison_result: ComparisonResult | None = None
