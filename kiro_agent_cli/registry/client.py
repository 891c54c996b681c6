"""Registry client for fetching the remote bundle catalog."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from collections.abc import Sequence
from pathlib import Path
from typing import TypeVar

import httpx
from pydantic import ValidationError

from .. import __version__
from ..bundles.schema import BundleManifest
from ..bundles.schema import RegistryCatalog
from ..settings import DEFAULT_REQUEST_TIMEOUT
from ..settings import get_registry_url

logger = logging.getLogger(__name__)

T = TypeVar("T")

USER_AGENT = f"kiro-agent-cli/{__version__}"
MAX_ATTEMPTS = 3
RETRY_DELAYS: tuple[float, ...] = (1.0, 2.0, 4.0)

# Failures worth another attempt: network, HTTP status, undecodable body
RETRYABLE_ERRORS = (httpx.HTTPError, ValueError)


class RegistryError(Exception):
    """Raised when the registry returns something unusable."""


class RegistryUnavailable(RegistryError):
    """Raised when the registry cannot be reached after all retry attempts."""


class BundleNotFound(RegistryError):
    """Raised when a bundle id is not present in the registry catalog."""

    def __init__(self, bundle_id: str):
        self.bundle_id = bundle_id
        super().__init__(f"Bundle '{bundle_id}' not found in registry")


class RegistryClient:
    """Client for listing, resolving and searching bundles in the remote registry.

    The catalog is always fetched whole; there is no per-bundle endpoint and no
    local cache. Transient failures are retried sequentially with a fixed
    backoff table.
    """

    def __init__(
        self,
        registry_url: str | None = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        max_attempts: int = MAX_ATTEMPTS,
        retry_delays: Sequence[float] = RETRY_DELAYS,
        sleep: Callable[[float], None] = time.sleep,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize registry client.

        Args:
            registry_url: URL of the catalog JSON. If None, resolved from env/settings/default.
            timeout: Per-request timeout in seconds
            max_attempts: Total attempts per request, including the first
            retry_delays: Delay before attempt ``i + 1``, indexed by attempt ``i``
            sleep: Sleep function (injectable for tests)
            transport: httpx transport override (injectable for tests)
        """
        self.registry_url = registry_url or get_registry_url()
        self.max_attempts = max_attempts
        self.retry_delays = tuple(retry_delays)
        self._sleep = sleep
        self._client = httpx.Client(
            timeout=timeout,
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> RegistryClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _with_retries(self, description: str, operation: Callable[[], T]) -> T:
        """Run ``operation`` up to max_attempts times, sleeping between attempts.

        Raises:
            RegistryUnavailable: Every attempt failed; chained to the last error
        """
        last_error: Exception | None = None

        for attempt in range(self.max_attempts):
            try:
                return operation()
            except RETRYABLE_ERRORS as e:
                last_error = e
                logger.warning(f"{description} failed (attempt {attempt + 1}/{self.max_attempts}): {e}")

                if attempt < self.max_attempts - 1:
                    delay = self.retry_delays[min(attempt, len(self.retry_delays) - 1)]
                    self._sleep(delay)

        raise RegistryUnavailable(
            f"Unable to connect to registry. Please check your internet connection.\nError: {last_error}"
        ) from last_error

    def _get_json(self) -> object:
        response = self._client.get(self.registry_url)
        response.raise_for_status()
        return response.json()

    def fetch_catalog(self) -> RegistryCatalog:
        """Fetch and parse the whole registry document.

        Raises:
            RegistryUnavailable: Network failure after all retries
            RegistryError: The document does not match the catalog schema
        """
        logger.info(f"Fetching registry catalog from {self.registry_url}")
        data = self._with_retries("Registry fetch", self._get_json)

        try:
            catalog = RegistryCatalog.model_validate(data)
        except ValidationError as e:
            raise RegistryError(f"Registry catalog at {self.registry_url} is malformed: {e}") from e

        logger.debug(f"Registry catalog v{catalog.version} with {len(catalog.bundles)} bundles")
        return catalog

    def list_bundles(self) -> list[BundleManifest]:
        """Get all bundles in catalog order."""
        return list(self.fetch_catalog().bundles)

    def fetch_bundle(self, bundle_id: str) -> BundleManifest:
        """Resolve a bundle by exact id.

        Raises:
            BundleNotFound: No bundle with that id in the catalog
        """
        for bundle in self.list_bundles():
            if bundle.id == bundle_id:
                return bundle
        raise BundleNotFound(bundle_id)

    def search_bundles(self, query: str) -> list[BundleManifest]:
        """Search bundles by name, description, tags, and categories.

        Matching is a case-insensitive substring test; results keep catalog order.
        """
        query_lower = query.lower()
        results = []

        for bundle in self.list_bundles():
            if (
                query_lower in bundle.name.lower()
                or query_lower in bundle.description.lower()
                or any(query_lower in tag.lower() for tag in bundle.tags)
                or any(query_lower in category.lower() for category in bundle.categories)
            ):
                results.append(bundle)

        return results

    def download_bundle(self, bundle_id: str, destination: Path) -> Path:
        """Download a bundle's archive to ``destination``.

        Args:
            bundle_id: Bundle to download
            destination: File path for the archive (parent dirs are created)

        Returns:
            The destination path

        Raises:
            BundleNotFound: Unknown bundle
            RegistryError: The bundle has no download URL
            RegistryUnavailable: Download failed after all retries
        """
        bundle = self.fetch_bundle(bundle_id)
        if not bundle.download_url:
            raise RegistryError(f"Bundle '{bundle_id}' does not have a download URL")

        return self.download_archive(bundle.download_url, destination)

    def download_archive(self, url: str, destination: Path) -> Path:
        """Stream ``url`` to ``destination`` with the registry retry policy."""
        destination.parent.mkdir(parents=True, exist_ok=True)

        def _download() -> Path:
            with self._client.stream("GET", url) as response:
                response.raise_for_status()
                with open(destination, "wb") as f:
                    for chunk in response.iter_bytes():
                        f.write(chunk)
            return destination

        logger.info(f"Downloading bundle archive from {url}")
        return self._with_retries("Bundle download", _download)
