"""
Cache layer for wiki pages using diskcache.

Keeps fetched item and spell pages across script invocations so that a
re-run after a store failure does not hit the wiki again. Entries are
tagged so the page cache can be cleared on its own.
"""

from pathlib import Path

from diskcache import Cache as DiskCache


class CacheClient:
    def __init__(self, cache_dir: Path):
        self._cache_dir = cache_dir
        self._cache_dir.mkdir(parents=True, exist_ok=True)
        self._cache = DiskCache(str(self._cache_dir))

    def get_wiki_page(self, page_name: str) -> str | None:
        return self._cache.get(f"wiki:{page_name}")

    def set_wiki_page(self, page_name: str, content: str) -> None:
        self._cache.set(f"wiki:{page_name}", content, expire=None, tag="wiki")

    def clear_cache(self, tags: list[str] | None = None) -> None:
        if tags:
            for tag in tags:
                self._cache.evict(tag)
        else:
            self._cache.clear()

    def close(self) -> None:
        self._cache.close()
