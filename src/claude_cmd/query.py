"""
Cache-first command queries.

QueryCoordinator answers list/search/info/update requests. Reads go to the
local manifest cache first and fall back to the fetcher on a miss or expiry;
updates always fetch and report what changed against the previous snapshot.
"""

import logging
import time
from typing import Callable, Iterable

from .cache import ManifestStore, SystemStatus
from .diff import compare_manifests
from .errors import CommandError, ErrorKind, not_found, operation_context, validation
from .language import COMMON_LANGUAGES, LanguageResolver
from .models import (
    CacheUpdateResult,
    CacheUpdateResultWithChanges,
    Command,
    Manifest,
)
from .repository import ManifestFetcher

logger = logging.getLogger(__name__)


class QueryCoordinator:
    """Coordinates the manifest cache, the fetcher and the diff engine.

    Args:
        store: Local manifest cache
        fetcher: Remote manifest source
        resolver: Resolves the language when a call doesn't pass one
        clock: Timestamp source for update results
    """

    def __init__(
        self,
        store: ManifestStore,
        fetcher: ManifestFetcher,
        resolver: LanguageResolver,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.fetcher = fetcher
        self.resolver = resolver
        self.clock = clock

    def list_commands(
        self,
        language: str | None = None,
        force_refresh: bool = False,
    ) -> list[Command]:
        """All commands for the resolved language, in manifest order."""
        lang = self.resolver.get_effective_language(language)
        with operation_context("list_commands", lang):
            return list(self._load_manifest(lang, force_refresh).commands)

    def search_commands(
        self,
        query: str,
        language: str | None = None,
        force_refresh: bool = False,
    ) -> list[Command]:
        """Commands whose name or description contains ``query`` (case-insensitive).

        Raises:
            CommandError: VALIDATION for a blank query
        """
        lang = self.resolver.get_effective_language(language)
        with operation_context("search_commands", lang):
            if not query or not query.strip():
                raise validation("Search query cannot be empty or whitespace")
            needle = query.strip().lower()
            commands = self._load_manifest(lang, force_refresh).commands
            return [
                c for c in commands
                if needle in c.name.lower() or needle in c.description.lower()
            ]

    def get_command_info(
        self,
        name: str,
        language: str | None = None,
        force_refresh: bool = False,
    ) -> Command:
        """Look up one command by exact name.

        Raises:
            CommandError: VALIDATION for a blank name, NOT_FOUND if the
                resolved manifest has no such command
        """
        lang = self.resolver.get_effective_language(language)
        with operation_context("get_command_info", lang):
            if not name or not name.strip():
                raise validation("Command name cannot be empty or whitespace")
            command = self._load_manifest(lang, force_refresh).find(name)
            if command is None:
                raise not_found(name, lang)
            return command

    def update_cache(self, language: str | None = None) -> CacheUpdateResult:
        """Force-fetch the manifest and replace the cache entry."""
        lang = self.resolver.get_effective_language(language)
        with operation_context("update_cache", lang):
            manifest = self.fetcher.fetch_manifest(lang, force_refresh=True)
            self._store(lang, manifest)
            return CacheUpdateResult(
                language=lang,
                timestamp=self.clock(),
                command_count=len(manifest.commands),
            )

    def update_cache_with_changes(
        self,
        language: str | None = None,
    ) -> CacheUpdateResultWithChanges:
        """Force-fetch the manifest and report changes against the previous entry.

        The previous entry is used even if it has expired. Without one,
        every fetched command counts as added.
        """
        lang = self.resolver.get_effective_language(language)
        with operation_context("update_cache_with_changes", lang):
            previous = self.store.get_entry(lang)
            manifest = self.fetcher.fetch_manifest(lang, force_refresh=True)

            if previous is not None:
                comparison = compare_manifests(previous.manifest, manifest)
                summary = comparison.summary
                added, removed, modified = summary.added, summary.removed, summary.modified
                has_changes = summary.has_changes
            else:
                comparison = None
                added, removed, modified = len(manifest.commands), 0, 0
                has_changes = added > 0

            self._store(lang, manifest)

            return CacheUpdateResultWithChanges(
                language=lang,
                timestamp=self.clock(),
                command_count=len(manifest.commands),
                has_changes=has_changes,
                added=added,
                removed=removed,
                modified=modified,
                comparison_result=comparison,
            )

    def get_language_counts(self) -> dict[str, int]:
        """Command counts for every language with a readable cache entry."""
        counts = {}
        for code in self.store.cached_languages():
            entry = self.store.get_entry(code)
            if entry is not None:
                counts[code] = len(entry.manifest.commands)
        return counts

    def get_repository_language_counts(
        self,
        languages: Iterable[str] | None = None,
    ) -> dict[str, int]:
        """Command counts per language as the repository reports them.

        Each language is loaded cache-first, so a fresh cache entry answers
        without a request. A language the repository can't serve counts as 0.

        Args:
            languages: Codes to check (default: common languages plus any
                cached ones)
        """
        if languages is None:
            cached = self.store.cached_languages()
            languages = list(COMMON_LANGUAGES) + [c for c in cached if c not in COMMON_LANGUAGES]

        counts = {}
        for code in languages:
            with operation_context("get_repository_language_counts", code):
                try:
                    manifest = self._load_manifest(code, force_refresh=False)
                except CommandError as e:
                    if e.kind is not ErrorKind.FETCH:
                        raise
                    logger.debug("Language %s unavailable: %s", code, e)
                    counts[code] = 0
                else:
                    counts[code] = len(manifest.commands)
        return counts

    def get_status(self, language: str | None = None) -> SystemStatus:
        """Snapshot of every cached language plus overall cache health."""
        lang = self.resolver.get_effective_language(language)
        with operation_context("get_status", lang):
            caches = [self.store.status(code) for code in self.store.cached_languages()]

            messages = []
            accessible = self.store.is_accessible()
            if not accessible:
                messages.append(f"Cache directory not accessible: {self.store.cache_dir}")
            for cache in caches:
                if cache.command_count is None:
                    messages.append(f"Cache for {cache.language} is unreadable")

            return SystemStatus(
                timestamp=self.clock(),
                language=lang,
                cache_dir=self.store.cache_dir,
                cache_accessible=accessible,
                caches=caches,
                health="healthy" if not messages else "degraded",
                messages=messages,
            )

    def _load_manifest(self, language: str, force_refresh: bool) -> Manifest:
        if not force_refresh:
            cached = self.store.get(language)
            if cached is not None:
                return cached

        manifest = self.fetcher.fetch_manifest(language, force_refresh=force_refresh)
        self._store(language, manifest)
        return manifest

    def _store(self, language: str, manifest: Manifest) -> None:
        """Write to the cache; a failed write doesn't fail the operation."""
        try:
            self.store.set(language, manifest)
        except CommandError as e:
            if e.kind is not ErrorKind.CACHE:
                raise
            logger.warning("Could not update cache for %s: %s", language, e)
