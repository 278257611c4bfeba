"""
Wiki client for fetching item and spell pages.

Pages are addressed as <wiki_base_url>/<Page_Name> and returned as raw
HTML. Successful fetches are cached indefinitely when a cache is given;
failures are never cached.
"""

import logging

import httpx

from eq_items.cache import CacheClient
from eq_items.config import get_settings
from eq_items.exceptions import WikiError

log = logging.getLogger(__name__)


def page_url(page_name: str) -> str:
    base_url = get_settings().wiki_base_url.rstrip("/")
    return f"{base_url}/{page_name}"


def _fetch_wiki_page(page_name: str) -> str:
    settings = get_settings()
    try:
        response = httpx.get(
            page_url(page_name),
            timeout=settings.wiki_timeout,
            follow_redirects=True,
        )
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise WikiError(
            f"Failed to fetch wiki page '{page_name}': HTTP {e.response.status_code}"
        ) from e
    except httpx.RequestError as e:
        raise WikiError(f"Network error fetching wiki page '{page_name}': {e}") from e

    return response.text


def get_page_html(page_name: str, cache: CacheClient | None = None) -> str:
    if not page_name or not page_name.strip():
        raise WikiError("Page name cannot be empty")

    if cache is not None:
        cached = cache.get_wiki_page(page_name)
        if cached is not None:
            log.info("Wiki page '%s': using cached HTML", page_name)
            return cached

    log.info("Wiki page '%s': fetching from %s", page_name, page_url(page_name))
    html_content = _fetch_wiki_page(page_name)

    if cache is not None:
        cache.set_wiki_page(page_name, html_content)
    return html_content
