"""Tests for the cache-first query coordinator."""

from unittest.mock import patch

import pytest

from claude_cmd.cache import DEFAULT_TTL_SECONDS, ManifestStore
from claude_cmd.config import ConfigScope, ConfigStore
from claude_cmd.errors import CommandError, ErrorKind, cache_error, fetch_error
from claude_cmd.language import COMMON_LANGUAGES, LanguageResolver
from claude_cmd.query import QueryCoordinator
from claude_cmd.repository import ManifestFetcher

from conftest import make_command, make_manifest


class FakeFetcher(ManifestFetcher):
    """Serves manifests from a dict and records each call."""

    def __init__(self, manifests=None, error=None):
        self.manifests = manifests or {}
        self.error = error
        self.calls = []

    def fetch_manifest(self, language, force_refresh=False):
        self.calls.append((language, force_refresh))
        if self.error is not None:
            raise self.error
        if language not in self.manifests:
            raise fetch_error("Server returned 404", language, reason="status", status_code=404)
        return self.manifests[language]


@pytest.fixture
def store(tmp_path, clock):
    return ManifestStore(tmp_path / "cache", clock=clock)


@pytest.fixture
def resolver(tmp_path):
    return LanguageResolver(
        ConfigStore(tmp_path / "user.yaml", ConfigScope.USER),
        ConfigStore(tmp_path / "project.yaml", ConfigScope.PROJECT),
        environ={},
    )


@pytest.fixture
def fetcher(sample_manifest):
    french = make_manifest(make_command("aide", description="Aide"), language="fr")
    return FakeFetcher({"en": sample_manifest, "fr": french})


@pytest.fixture
def queries(store, fetcher, resolver, clock):
    return QueryCoordinator(store, fetcher, resolver, clock=clock)


class TestListCommands:
    """Tests for list_commands()."""

    def test_miss_fetches_and_caches(self, queries, fetcher, store, sample_manifest):
        """Happy: a cache miss fetches once and stores the result."""
        commands = queries.list_commands()

        assert [c.name for c in commands] == ["debug-help", "code-review", "frontend:component"]
        assert fetcher.calls == [("en", False)]
        assert store.get("en") == sample_manifest

    def test_hit_skips_fetch(self, queries, fetcher):
        """Happy: a fresh cache entry answers without fetching."""
        queries.list_commands()
        queries.list_commands()

        assert len(fetcher.calls) == 1

    def test_expired_entry_refetches(self, queries, fetcher, clock):
        """Happy: an expired entry triggers a new fetch."""
        queries.list_commands()
        clock.advance(DEFAULT_TTL_SECONDS + 1)
        queries.list_commands()

        assert len(fetcher.calls) == 2

    def test_force_refresh(self, queries, fetcher):
        """Happy: force_refresh bypasses a fresh cache."""
        queries.list_commands()
        queries.list_commands(force_refresh=True)

        assert fetcher.calls == [("en", False), ("en", True)]

    def test_explicit_language(self, queries):
        """Happy: the language argument selects the manifest."""
        assert [c.name for c in queries.list_commands("FR")] == ["aide"]

    def test_fetch_error_is_tagged(self, store, resolver):
        """Failure: fetch errors carry the operation and language."""
        fetcher = FakeFetcher(error=fetch_error("down", "en", reason="network"))
        queries = QueryCoordinator(store, fetcher, resolver)

        with pytest.raises(CommandError) as exc_info:
            queries.list_commands()

        assert exc_info.value.kind is ErrorKind.FETCH
        assert exc_info.value.operation == "list_commands"
        assert exc_info.value.language == "en"

    def test_cache_write_failure_is_not_fatal(self, queries, store, sample_manifest):
        """Happy: a failed cache write still returns the fetched commands."""
        with patch.object(store, "set", side_effect=cache_error("disk full", "en")):
            commands = queries.list_commands()

        assert len(commands) == len(sample_manifest.commands)


class TestSearchCommands:
    """Tests for search_commands()."""

    def test_matches_name_and_description(self, queries):
        """Happy: case-insensitive substring over name and description."""
        assert [c.name for c in queries.search_commands("DEBUG")] == ["debug-help"]
        assert [c.name for c in queries.search_commands("component")] == ["frontend:component"]
        assert [c.name for c in queries.search_commands("diff")] == ["code-review"]

    def test_no_matches(self, queries):
        assert queries.search_commands("nothing-like-this") == []

    @pytest.mark.parametrize("query", ["", "   "])
    def test_blank_query(self, queries, fetcher, query):
        """Failure: blank queries are rejected before any fetch."""
        with pytest.raises(CommandError) as exc_info:
            queries.search_commands(query)

        assert exc_info.value.kind is ErrorKind.VALIDATION
        assert exc_info.value.operation == "search_commands"
        assert exc_info.value.language == "en"
        assert fetcher.calls == []


class TestGetCommandInfo:
    """Tests for get_command_info()."""

    def test_found(self, queries):
        """Happy: exact name lookup."""
        assert queries.get_command_info("frontend:component").namespace == "frontend"

    def test_not_found(self, queries):
        """Failure: an unknown name is NOT_FOUND with context."""
        with pytest.raises(CommandError) as exc_info:
            queries.get_command_info("missing", language="fr")

        error = exc_info.value
        assert error.kind is ErrorKind.NOT_FOUND
        assert error.details["command_name"] == "missing"
        assert error.language == "fr"
        assert error.operation == "get_command_info"

    def test_blank_name(self, queries):
        """Failure: a blank name is a validation error."""
        with pytest.raises(CommandError) as exc_info:
            queries.get_command_info(" ")
        assert exc_info.value.kind is ErrorKind.VALIDATION
        assert exc_info.value.language == "en"
        assert exc_info.value.operation == "get_command_info"


class TestUpdateCache:
    """Tests for update_cache() and update_cache_with_changes()."""

    def test_update_cache_always_fetches(self, queries, fetcher, clock):
        """Happy: update ignores a fresh cache and reports the count."""
        queries.list_commands()
        result = queries.update_cache()

        assert fetcher.calls[-1] == ("en", True)
        assert result.language == "en"
        assert result.command_count == 3
        assert result.timestamp == clock.now

    def test_first_update_counts_everything_added(self, queries, sample_manifest):
        """Happy: with no previous entry every command is added."""
        result = queries.update_cache_with_changes()

        assert result.added == len(sample_manifest.commands)
        assert result.removed == 0
        assert result.modified == 0
        assert result.has_changes == (result.command_count > 0)
        assert result.comparison_result is None

    def test_first_update_of_empty_manifest(self, store, resolver):
        """Happy: an empty first manifest reports no changes."""
        queries = QueryCoordinator(store, FakeFetcher({"en": make_manifest()}), resolver)
        result = queries.update_cache_with_changes()

        assert result.has_changes is False
        assert result.added == 0

    def test_changes_against_previous_entry(self, queries, fetcher, store, clock):
        """Happy: changes are computed against the expired previous snapshot."""
        store.set("en", make_manifest(make_command("code-review", description="Old"), make_command("retired")))
        clock.advance(DEFAULT_TTL_SECONDS * 3)

        result = queries.update_cache_with_changes()

        assert (result.added, result.modified, result.removed) == (2, 1, 1)
        assert result.has_changes is True
        assert result.comparison_result.summary.total == 4
        assert store.get("en") == fetcher.manifests["en"]

    def test_no_changes(self, queries):
        """Happy: updating twice in a row reports no changes."""
        queries.update_cache_with_changes()
        result = queries.update_cache_with_changes()

        assert result.has_changes is False
        assert result.comparison_result.changes == ()


class TestLanguageCounts:
    """Tests for get_language_counts()."""

    def test_counts_cached_languages(self, queries):
        queries.list_commands("en")
        queries.list_commands("fr")

        assert queries.get_language_counts() == {"en": 3, "fr": 1}

    def test_empty_cache(self, queries):
        assert queries.get_language_counts() == {}


class TestRepositoryLanguageCounts:
    """Tests for get_repository_language_counts()."""

    def test_counts_languages_the_repository_serves(self, store, resolver):
        """Happy: served languages report their size, missing ones count 0."""
        fetcher = FakeFetcher({
            "en": make_manifest(make_command("a"), make_command("b")),
            "fr": make_manifest(make_command("c"), language="fr"),
        })
        queries = QueryCoordinator(store, fetcher, resolver)

        counts = queries.get_repository_language_counts()

        assert counts["en"] == 2
        assert counts["fr"] == 1
        assert counts["de"] == 0
        assert set(counts) == set(COMMON_LANGUAGES)

    def test_never_fetched_language_is_available(self, store, resolver):
        """Happy: availability doesn't depend on a prior cache entry."""
        fetcher = FakeFetcher({"ja": make_manifest(make_command("x"), language="ja")})
        queries = QueryCoordinator(store, fetcher, resolver)

        counts = queries.get_repository_language_counts(["ja"])
        infos = {info.code: info for info in resolver.get_available_languages(counts)}

        assert infos["ja"].available is True
        assert infos["ja"].command_count == 1

    def test_fresh_cache_answers_without_fetching(self, queries, fetcher):
        """Happy: a fresh cache entry is used instead of a request."""
        queries.list_commands("en")

        assert queries.get_repository_language_counts(["en"]) == {"en": 3}
        assert fetcher.calls == [("en", False)]

    def test_english_available_when_unreachable(self, store, resolver):
        """Failure: everything unreachable still leaves en available."""
        fetcher = FakeFetcher(error=fetch_error("down", "en", reason="network"))
        queries = QueryCoordinator(store, fetcher, resolver)

        counts = queries.get_repository_language_counts()
        infos = {info.code: info for info in resolver.get_available_languages(counts)}

        assert all(count == 0 for count in counts.values())
        assert infos["en"].available is True
        assert infos["fr"].available is False

    def test_non_fetch_errors_propagate(self, queries):
        """Failure: an invalid code is not swallowed as unavailable."""
        with pytest.raises(CommandError) as exc_info:
            queries.get_repository_language_counts(["???"])
        assert exc_info.value.kind is ErrorKind.VALIDATION


class TestGetStatus:
    """Tests for get_status()."""

    def test_empty_cache(self, queries, store):
        """Happy: no cached languages is healthy with no entries."""
        status = queries.get_status()

        assert status.language == "en"
        assert status.caches == []
        assert status.cache_dir == store.cache_dir
        assert status.health == "healthy"

    def test_reports_each_cached_language(self, queries, clock):
        """Happy: one entry per cached language with age and freshness."""
        queries.list_commands("fr")
        clock.advance(DEFAULT_TTL_SECONDS + 10)
        queries.list_commands("en")

        status = queries.get_status()

        assert [c.language for c in status.caches] == ["en", "fr"]
        en, fr = status.caches
        assert en.is_expired is False and en.age_seconds == 0
        assert fr.is_expired is True and fr.age_seconds == DEFAULT_TTL_SECONDS + 10
        assert fr.command_count == 1
        assert status.timestamp == clock.now

    def test_unreadable_entry_degrades_health(self, queries, store):
        """Failure: a corrupt record is reported and marks health degraded."""
        path = store.get_cache_path("de")
        path.parent.mkdir(parents=True)
        path.write_text("garbage")

        status = queries.get_status()

        assert status.caches[0].exists is True
        assert status.caches[0].command_count is None
        assert status.health == "degraded"
        assert "de" in status.messages[0]
