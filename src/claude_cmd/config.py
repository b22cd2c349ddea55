"""
User- and project-level configuration files.

Configs are small YAML mappings validated with Pydantic. Keys the tool
knows about become typed fields; anything else is kept in ``extensions`` so
newer config files still load with older versions of the tool.
"""

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Any, ClassVar

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

USER_CONFIG_PATH = Path.home() / ".config" / "claude-cmd" / "config.yaml"
PROJECT_CONFIG_RELATIVE_PATH = Path(".claude") / "claude-cmd.yaml"


class ConfigScope(str, Enum):
    USER = "user"
    PROJECT = "project"


class Config(BaseModel):
    """Effective configuration: known fields plus an open extension mapping."""

    model_config = ConfigDict(frozen=True)

    KNOWN_KEYS: ClassVar[tuple[str, ...]] = ("preferred_language", "repository_url")

    preferred_language: str | None = None
    repository_url: str | None = None
    extensions: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "Config":
        """Split a raw mapping into known fields and extensions.

        Raises:
            ValueError: If a known field has the wrong type
        """
        known = {k: data[k] for k in cls.KNOWN_KEYS if k in data}
        extensions = {k: v for k, v in data.items() if k not in cls.KNOWN_KEYS}
        try:
            return cls(**known, extensions=extensions)
        except ValidationError as e:
            raise ValueError(f"Config validation failed: {e}") from e

    def to_mapping(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        for key in self.KNOWN_KEYS:
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        data.update(self.extensions)
        return data

    def merged_with(self, override: "Config | None") -> "Config":
        """Shallow per-key merge; values set in ``override`` win."""
        if override is None:
            return self
        known = {
            key: getattr(override, key) if getattr(override, key) is not None else getattr(self, key)
            for key in self.KNOWN_KEYS
        }
        return Config(**known, extensions={**self.extensions, **override.extensions})


class ConfigStore:
    """Reads and writes the config file for one scope.

    Args:
        path: Location of the YAML config file
        scope: Which level this store represents
    """

    def __init__(self, path: Path, scope: ConfigScope):
        self.path = Path(path)
        self.scope = scope

    def get_config(self) -> Config | None:
        """Load the config.

        Returns None when the file is missing, unreadable, not valid YAML,
        or not a mapping. Never raises.
        """
        if not self.path.is_file():
            logger.debug("No %s config at %s", self.scope.value, self.path)
            return None

        try:
            data = yaml.safe_load(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
            logger.warning("Ignoring unreadable %s config %s: %s", self.scope.value, self.path, e)
            return None

        if data is None:
            return Config()
        if not isinstance(data, dict):
            logger.warning("Ignoring %s config %s: not a mapping", self.scope.value, self.path)
            return None

        try:
            return Config.from_mapping(data)
        except ValueError as e:
            logger.warning("Ignoring invalid %s config %s: %s", self.scope.value, self.path, e)
            return None

    def set_config(self, config: Config) -> None:
        """Write the config, replacing the file atomically.

        Raises:
            OSError: If the directory or file can't be written
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(f"{self.path.name}.{os.getpid()}.tmp")
        try:
            tmp_path.write_text(
                yaml.safe_dump(config.to_mapping(), sort_keys=False),
                encoding="utf-8",
            )
            tmp_path.replace(self.path)
        except Exception:
            tmp_path.unlink(missing_ok=True)
            raise
        logger.info("Wrote %s config to %s", self.scope.value, self.path)

    def update(self, **values: Any) -> Config:
        """Set known fields on the stored config, keeping everything else."""
        current = self.get_config() or Config()
        updated = current.model_copy(update=values)
        self.set_config(updated)
        return updated
