"""
Default HTTP client for package metadata requests.
"""

from __future__ import annotations

from typing import Optional

import httpx

from trellis import __version__
from trellis.config import get_config

USER_AGENT = f"trellis/{__version__}"


def default_client(timeout: Optional[float] = None) -> httpx.Client:
    """Build the shared ``httpx.Client`` (user agent, timeout, redirects)."""
    return httpx.Client(
        headers={"User-Agent": USER_AGENT},
        timeout=timeout if timeout is not None else get_config().http_timeout,
        follow_redirects=True,
    )
