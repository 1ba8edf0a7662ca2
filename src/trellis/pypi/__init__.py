"""
PyPI package metadata database.

``PackageDb`` bundles what is needed to query Simple-API indexes: an HTTP
client, the index URLs (in priority order) and a local cache directory.
Constructing one sets up the cache directory only; nothing is fetched until
a query is made.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Sequence, Union

import httpx
from packaging.utils import canonicalize_name

from trellis.errors import PackageDbError

logger = logging.getLogger(__name__)


def normalize_index_url(url: str) -> str:
    """Ensure an index URL ends with a slash so project paths join under it."""
    url = url.strip()
    if not url:
        raise ValueError("index URL cannot be empty")
    return url if url.endswith("/") else f"{url}/"


class PackageDb:
    """Access to PyPI metadata through an HTTP client and a cache directory."""

    def __init__(
        self,
        client: httpx.Client,
        index_urls: Sequence[str],
        cache_dir: Union[str, Path],
    ):
        """
        Args:
            client: HTTP client used for all requests
            index_urls: Simple-API index URLs, highest priority first
            cache_dir: Directory for cached metadata (created if missing)

        Raises:
            PackageDbError: No index URLs, a blank index URL, or the cache
                directory cannot be created
        """
        if not index_urls:
            raise PackageDbError("at least one index URL is required")

        try:
            self.index_urls: List[str] = [normalize_index_url(url) for url in index_urls]
        except ValueError as e:
            raise PackageDbError(str(e)) from e
        self.client = client
        self.cache_dir = Path(cache_dir)
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PackageDbError(f"failed to create cache directory {self.cache_dir}: {e}") from e

        logger.debug("PackageDb initialized: indexes=%s cache=%s", self.index_urls, self.cache_dir)

    def project_page_url(self, name: str) -> str:
        """Simple-API project page on the primary index."""
        return f"{self.index_urls[0]}{canonicalize_name(name)}/"

    def fetch_project_page(self, name: str) -> str:
        """
        Fetch the Simple-API project page for ``name``.

        Raises:
            httpx.HTTPStatusError: Non-2xx response
            httpx.RequestError: Transport failure
        """
        response = self.client.get(self.project_page_url(name))
        response.raise_for_status()
        return response.text

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "PackageDb":
        return self

    def __exit__(self, *args) -> None:
        self.close()
