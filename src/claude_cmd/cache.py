"""
Per-language manifest cache.

Each language gets one JSON record at ``<cache_dir>/<lang>/manifest.json``.
Records are replaced wholesale (temp file + rename) so a concurrent reader
never sees a half-written file. Unreadable or corrupt records are treated as
cache misses and get overwritten on the next fetch.
"""

import json
import logging
import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from pydantic import ValidationError

from .errors import cache_error, validation
from .language import sanitize_language_code
from .models import Manifest

logger = logging.getLogger(__name__)

DEFAULT_CACHE_DIR = Path.home() / ".cache" / "claude-cmd" / "pages"
DEFAULT_TTL_SECONDS = 24 * 60 * 60
CACHE_FILE_NAME = "manifest.json"
CACHE_FORMAT_VERSION = 1


@dataclass(frozen=True)
class CacheEntry:
    """A stored manifest snapshot with its freshness metadata."""
    language: str
    manifest: Manifest
    stored_at: float
    ttl: float

    def is_expired(self, now: float) -> bool:
        return now - self.stored_at > self.ttl

    def to_dict(self) -> dict:
        """Serialize for persistence."""
        return {
            "format_version": CACHE_FORMAT_VERSION,
            "language": self.language,
            "stored_at": self.stored_at,
            "ttl": self.ttl,
            "manifest": self.manifest.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict, default_ttl: float) -> "CacheEntry":
        """Restore an entry from a persisted dict.

        Unknown keys are ignored for forward compatibility.

        Raises:
            ValueError: If required keys are missing or malformed
        """
        if not isinstance(data, dict):
            raise ValueError("cache record must be a JSON object")
        stored_at = data.get("stored_at")
        if not isinstance(stored_at, (int, float)) or isinstance(stored_at, bool):
            raise ValueError("cache record has no numeric stored_at")
        ttl = data.get("ttl", default_ttl)
        if not isinstance(ttl, (int, float)) or isinstance(ttl, bool):
            raise ValueError("cache record has a non-numeric ttl")
        manifest_data = data.get("manifest")
        if not isinstance(manifest_data, dict):
            raise ValueError("cache record has no manifest")
        return cls(
            language=str(data.get("language", "")),
            manifest=Manifest.from_dict(manifest_data),
            stored_at=float(stored_at),
            ttl=float(ttl),
        )


@dataclass(frozen=True)
class CacheStatus:
    """What is on disk for one language.

    Age, size and command count are only set when the record exists;
    command_count stays None for a record that can't be parsed.
    """
    language: str
    path: Path
    exists: bool
    is_expired: bool
    age_seconds: float | None = None
    size_bytes: int | None = None
    command_count: int | None = None

    def to_dict(self) -> dict:
        return {
            "language": self.language,
            "path": str(self.path),
            "exists": self.exists,
            "is_expired": self.is_expired,
            "age_seconds": self.age_seconds,
            "size_bytes": self.size_bytes,
            "command_count": self.command_count,
        }


@dataclass(frozen=True)
class SystemStatus:
    """Cache state across languages.

    Attributes:
        timestamp: When the status was collected
        language: Effective language for this invocation
        cache_dir: Root of the manifest cache
        cache_accessible: Whether the cache directory can be written
        caches: One entry per cached language, sorted by code
        health: "healthy" or "degraded"
        messages: Reasons for a degraded status
    """
    timestamp: float
    language: str
    cache_dir: Path
    cache_accessible: bool
    caches: list[CacheStatus] = field(default_factory=list)
    health: str = "healthy"
    messages: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "language": self.language,
            "cache_dir": str(self.cache_dir),
            "cache_accessible": self.cache_accessible,
            "caches": [c.to_dict() for c in self.caches],
            "health": self.health,
            "messages": list(self.messages),
        }


class ManifestStore:
    """File-backed cache of language manifests.

    Args:
        cache_dir: Root directory for cache records
        ttl: Seconds a stored manifest stays fresh
        clock: Returns the current time in epoch seconds (injectable for tests)
    """

    def __init__(
        self,
        cache_dir: Path | None = None,
        ttl: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.cache_dir = Path(cache_dir) if cache_dir else DEFAULT_CACHE_DIR
        self.ttl = ttl
        self.clock = clock

    def get_cache_path(self, language: str) -> Path:
        """Path of the cache record for ``language``."""
        return self.cache_dir / self._language(language) / CACHE_FILE_NAME

    def get_entry(self, language: str) -> CacheEntry | None:
        """Load the stored entry regardless of expiry.

        Returns None when there is no entry or it can't be read or parsed.
        """
        path = self.get_cache_path(language)

        if not path.is_file():
            logger.debug("Cache miss for %s (no file at %s)", language, path)
            return None

        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Cannot read cache file %s: %s", path, e)
            return None

        if not content.strip():
            return None

        try:
            return CacheEntry.from_dict(json.loads(content), default_ttl=self.ttl)
        except (json.JSONDecodeError, ValueError, ValidationError) as e:
            logger.warning("Ignoring corrupt cache file %s: %s", path, e)
            return None

    def get(self, language: str) -> Manifest | None:
        """Return the cached manifest if present and fresh, else None."""
        entry = self.get_entry(language)
        if entry is None:
            return None
        if entry.is_expired(self.clock()):
            logger.debug("Cache expired for %s (stored at %.0f)", language, entry.stored_at)
            return None
        logger.debug("Cache hit for %s", language)
        return entry.manifest

    def is_expired(self, language: str) -> bool:
        """True when there is no valid entry or its TTL has elapsed."""
        entry = self.get_entry(language)
        if entry is None:
            return True
        return entry.is_expired(self.clock())

    def set(self, language: str, manifest: Manifest) -> CacheEntry:
        """Store ``manifest`` as the entry for ``language``, replacing any previous one.

        Raises:
            CommandError: CACHE if the record can't be written
        """
        code = self._language(language)
        path = self.get_cache_path(code)
        entry = CacheEntry(
            language=code,
            manifest=manifest,
            stored_at=self.clock(),
            ttl=self.ttl,
        )

        tmp_path = path.with_name(f"{path.name}.{os.getpid()}.tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(entry.to_dict(), indent=2), encoding="utf-8")
            tmp_path.replace(path)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise cache_error(
                f'Failed to store cache for language "{code}": {e}', language=code
            ) from e

        logger.info("Cached %d commands for %s", len(manifest.commands), code)
        return entry

    def clear(self, language: str) -> bool:
        """Delete the entry for ``language``. Returns True if one existed."""
        path = self.get_cache_path(language)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise cache_error(
                f'Failed to clear cache for language "{language}": {e}', language=language
            ) from e
        logger.info("Cleared cache for %s", language)
        return True

    def cached_languages(self) -> list[str]:
        """Languages that have a record on disk, sorted."""
        if not self.cache_dir.is_dir():
            return []
        return sorted(
            child.name
            for child in self.cache_dir.iterdir()
            if child.is_dir()
            and sanitize_language_code(child.name) == child.name
            and (child / CACHE_FILE_NAME).is_file()
        )

    def status(self, language: str) -> CacheStatus:
        """Describe the record for ``language`` without modifying it."""
        language = self._language(language)
        path = self.get_cache_path(language)
        try:
            size = path.stat().st_size
        except OSError:
            return CacheStatus(language=language, path=path, exists=False, is_expired=True)

        entry = self.get_entry(language)
        if entry is None:
            return CacheStatus(
                language=language, path=path, exists=True, is_expired=True, size_bytes=size
            )

        now = self.clock()
        return CacheStatus(
            language=language,
            path=path,
            exists=True,
            is_expired=entry.is_expired(now),
            age_seconds=max(0.0, now - entry.stored_at),
            size_bytes=size,
            command_count=len(entry.manifest.commands),
        )

    def is_accessible(self) -> bool:
        """True if the cache directory exists and is writable, or could be created."""
        directory = self.cache_dir
        while not directory.exists():
            if directory.parent == directory:
                return False
            directory = directory.parent
        return directory.is_dir() and os.access(directory, os.W_OK)

    def clear_all(self) -> list[str]:
        """Delete every cached language. Returns the cleared codes."""
        return [code for code in self.cached_languages() if self.clear(code)]

    def _language(self, language: str) -> str:
        code = sanitize_language_code(language)
        if not code:
            raise validation(
                f'Invalid language code: "{language}". Expected 2-3 letters, e.g. "en"',
                language=language,
            )
        return code
