"""
Composition root.

Builds every component once per invocation and wires them together. Paths
and the fetcher can be overridden, which is how the CLI tests isolate
themselves from the real home directory and network.
"""

from dataclasses import dataclass
from pathlib import Path

from .cache import ManifestStore
from .config import (
    PROJECT_CONFIG_RELATIVE_PATH,
    USER_CONFIG_PATH,
    ConfigScope,
    ConfigStore,
)
from .language import LanguageResolver
from .query import QueryCoordinator
from .repository import DEFAULT_REPOSITORY_URL, HTTPManifestFetcher, ManifestFetcher


@dataclass
class Services:
    store: ManifestStore
    user_config: ConfigStore
    project_config: ConfigStore
    resolver: LanguageResolver
    fetcher: ManifestFetcher
    queries: QueryCoordinator


def build_services(
    cache_dir: Path | None = None,
    user_config_path: Path | None = None,
    project_config_path: Path | None = None,
    fetcher: ManifestFetcher | None = None,
) -> Services:
    """Construct and wire all components.

    Args:
        cache_dir: Manifest cache root (default ~/.cache/claude-cmd/pages)
        user_config_path: User config file (default ~/.config/claude-cmd/config.yaml)
        project_config_path: Project config file (default ./.claude/claude-cmd.yaml)
        fetcher: Manifest source; defaults to HTTP against the configured repository
    """
    user_config = ConfigStore(user_config_path or USER_CONFIG_PATH, ConfigScope.USER)
    project_config = ConfigStore(
        project_config_path or Path.cwd() / PROJECT_CONFIG_RELATIVE_PATH,
        ConfigScope.PROJECT,
    )
    resolver = LanguageResolver(user_config, project_config)

    if fetcher is None:
        config = resolver.get_effective_config()
        fetcher = HTTPManifestFetcher(base_url=config.repository_url or DEFAULT_REPOSITORY_URL)

    store = ManifestStore(cache_dir)
    queries = QueryCoordinator(store, fetcher, resolver)

    return Services(
        store=store,
        user_config=user_config,
        project_config=project_config,
        resolver=resolver,
        fetcher=fetcher,
        queries=queries,
    )
