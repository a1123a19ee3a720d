"""HTTP retrieval of listing pages."""

from __future__ import annotations

import logging
from typing import Optional

import requests

logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (compatible; RSS-Generator/1.0; "
    "+https://github.com/MarchMD03/rss-generator)"
)
DEFAULT_TIMEOUT = 30.0


class FetchError(RuntimeError):
    """Raised when a listing page cannot be retrieved."""


def fetch_page(
    url: str,
    timeout: float = DEFAULT_TIMEOUT,
    user_agent: str = USER_AGENT,
    session: Optional[requests.Session] = None,
) -> str:
    """Issue a single GET for ``url`` and return the decoded body."""
    logger.debug("Fetching %s (timeout=%ss)", url, timeout)
    client = session if session is not None else requests
    try:
        response = client.get(
            url, headers={"User-Agent": user_agent}, timeout=timeout
        )
        response.raise_for_status()
    except requests.RequestException as exc:
        raise FetchError(f"Failed to fetch {url}: {exc}") from exc
    return response.text
