"""
Remote manifest fetching.

Provides a strategy interface for retrieving language manifests, with an
HTTP implementation that reads ``commands/<lang>/manifest.json`` from the
command repository. Failures surface as FETCH errors; nothing is retried.
"""

import logging
from abc import ABC, abstractmethod

import httpx
from pydantic import ValidationError

from .errors import fetch_error
from .models import Manifest

logger = logging.getLogger(__name__)

DEFAULT_REPOSITORY_URL = (
    "https://raw.githubusercontent.com/claude-code-commands/commands/refs/heads/main"
)
DEFAULT_TIMEOUT_SECONDS = 10.0


class ManifestFetcher(ABC):
    """Base class for manifest sources."""

    @abstractmethod
    def fetch_manifest(self, language: str, force_refresh: bool = False) -> Manifest:
        """Retrieve the current manifest for ``language``.

        Args:
            language: Sanitized language code
            force_refresh: Ask the source to bypass any cache of its own

        Raises:
            CommandError: FETCH on timeout, network failure, non-2xx status
                or an unusable payload
        """


class HTTPManifestFetcher(ManifestFetcher):
    """Fetches manifests over HTTP.

    Args:
        base_url: Repository root; manifests live under ``commands/<lang>/``
        timeout_seconds: Per-request timeout
        transport: Optional httpx transport (used by tests)
    """

    def __init__(
        self,
        base_url: str = DEFAULT_REPOSITORY_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    def manifest_url(self, language: str) -> str:
        return f"{self.base_url}/commands/{language}/manifest.json"

    def fetch_manifest(self, language: str, force_refresh: bool = False) -> Manifest:
        url = self.manifest_url(language)
        headers = {"Cache-Control": "no-cache"} if force_refresh else {}
        logger.info("Fetching manifest for %s from %s", language, url)

        try:
            with httpx.Client(timeout=self.timeout_seconds, transport=self._transport) as client:
                response = client.get(url, headers=headers)
                response.raise_for_status()
        except httpx.TimeoutException as e:
            raise fetch_error(
                f"Request timed out after {self.timeout_seconds:g}s while fetching manifest",
                language,
                reason="timeout",
                url=url,
            ) from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise fetch_error(
                f"Server returned {status} {e.response.reason_phrase} for manifest request",
                language,
                reason="status",
                status_code=status,
                url=url,
            ) from e
        except httpx.HTTPError as e:
            raise fetch_error(
                f"Network connection failed: {e}",
                language,
                reason="network",
                url=url,
            ) from e

        return self._parse(response, language)

    def _parse(self, response: httpx.Response, language: str) -> Manifest:
        if not response.content.strip():
            raise fetch_error(
                "Empty response received from server", language, reason="invalid"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise fetch_error(
                f"Invalid JSON format received from server: {e}",
                language,
                reason="invalid",
            ) from e

        if not isinstance(data, dict) or not isinstance(data.get("commands"), list):
            raise fetch_error(
                "Manifest does not contain valid commands array",
                language,
                reason="invalid",
            )

        try:
            manifest = Manifest.from_dict(data, language=language)
        except ValidationError as e:
            raise fetch_error(
                f"Manifest validation failed: {e}", language, reason="invalid"
            ) from e

        logger.debug("Fetched %d commands for %s", len(manifest.commands), language)
        return manifest
