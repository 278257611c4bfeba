"""
Item resolution.

Resolves an item name to a populated Item: the store is checked first and
an item that already has a statistic is returned as stored. Otherwise the
wiki page is fetched, segmented and classified line by line (or read as a
spell page when it is not an item page) and the result persisted, either
synchronously or on a background thread.

Fetch failures and pages with nothing to extract end the resolution with
an empty item. A failed store lookup falls back to fetching the page.
These are logged and never raised.
"""

import logging
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from functools import partial

from eq_items import classifier, persistence, segmenter, spell, wiki
from eq_items.cache import CacheClient
from eq_items.config import get_settings
from eq_items.exceptions import StoreError, WikiError
from eq_items.models import Item
from eq_items.naming import clean_name, has_spell_prefix, strip_spell_prefix, title_case
from eq_items.store import Store
from eq_items.types import Resolution, ResolutionState

log = logging.getLogger(__name__)

Fetcher = Callable[[str], str]


def new_item(raw_name: str) -> Item:
    name = clean_name(raw_name.replace("_", " "))
    if not name:
        raise ValueError("Item name cannot be empty")
    return Item(name=name, display_name=title_case(name))


def page_name_for(item: Item) -> str:
    return title_case(strip_spell_prefix(item.name), url_safe=True)


def extract(item: Item, html: str) -> bool:
    """
    Populate an item from a fetched page; returns False when the page holds nothing usable.

    Names carrying the spell prefix, pages without an item segment and item
    segments that turn out to list classes and levels are all read as spell
    pages. Everything else goes through the line classifier.
    """
    if has_spell_prefix(item.name):
        return _extract_spell(item, html)

    segment = segmenter.segment(html)
    if segment is None:
        log.info("Item '%s': no item segment on page, trying spell data", item.name)
        return _extract_spell(item, html)
    if spell.looks_like_spell(segment.markup):
        log.info("Item '%s': item segment lists classes and levels, reading as spell", item.name)
        return _extract_spell(item, html)

    statistics, effects = classifier.classify_lines(segment.lines)
    item.image_src = segment.image_src
    item.statistics = statistics
    item.effects = effects
    log.info(
        "Item '%s': extracted %d statistic(s), %d effect(s)",
        item.name,
        len(statistics),
        len(effects),
    )
    return True


def _extract_spell(item: Item, html: str) -> bool:
    match = spell.detect_spell(html)
    if match is None:
        log.info("Item '%s': page holds neither item nor spell data", item.name)
        return False
    spell.apply_spell(item, match)
    log.info("Item '%s': read as spell with %d class(es)", item.name, len(match.classes))
    return True


class ItemResolver:
    def __init__(
        self,
        store: Store,
        fetch: Fetcher | None = None,
        cache: CacheClient | None = None,
        identity: persistence.IdentityRule = persistence.match_name_or_display_name,
        persist_workers: int | None = None,
    ):
        self._store = store
        self._fetch = fetch or partial(wiki.get_page_html, cache=cache)
        self._identity = identity
        self._executor = ThreadPoolExecutor(
            max_workers=persist_workers or get_settings().persist_workers,
            thread_name_prefix="persist",
        )

    def _load_enriched(self, item: Item) -> Item | None:
        item_id, enriched = persistence.check_store(self._store, item)
        if not enriched:
            return None
        log.info("Item '%s': already enriched (id %d)", item.name, item_id)
        return persistence.load_item(self._store, item_id)

    def resolve(self, name: str, wait: bool = True) -> Item:
        return self.resolve_detailed(name, wait=wait).item

    def resolve_detailed(self, name: str, wait: bool = True) -> Resolution:
        """
        Run one resolution and report how it ended.

        With wait=False the item is returned as soon as it is extracted and
        Resolution.pending holds the future of its background save. A
        PERSISTED item whose id is still None after saving was not written.
        """
        item = new_item(name)

        try:
            stored = self._load_enriched(item)
        except StoreError as e:
            log.error("Item '%s': store lookup failed, fetching instead: %s", item.name, e)
            stored = None
        if stored is not None:
            return Resolution(stored, ResolutionState.FOUND)

        page_name = page_name_for(item)
        try:
            html = self._fetch(page_name)
        except WikiError as e:
            log.error("Item '%s': wiki page unavailable: %s", item.name, e)
            return Resolution(item, ResolutionState.DISCARDED)

        if not extract(item, html):
            return Resolution(item, ResolutionState.DISCARDED)

        if not wait:
            future = persistence.persist_in_background(
                item, self._store, self._executor, self._identity
            )
            return Resolution(item, ResolutionState.PERSISTED, pending=future)

        try:
            persistence.persist(item, self._store, self._identity)
        except StoreError as e:
            log.error("Item '%s': could not be saved: %s", item.name, e)
        return Resolution(item, ResolutionState.PERSISTED)

    def resolve_many(self, names: Iterable[str], workers: int = 4) -> list[Item]:
        """Resolve a batch of names concurrently, returning items in input order."""
        cleaned = [clean_name(name) for name in names]
        cleaned = [name for name in cleaned if name]
        if not cleaned:
            return []
        with ThreadPoolExecutor(max_workers=workers) as pool:
            return list(pool.map(self.resolve, cleaned))

    def close(self) -> None:
        self._executor.shutdown(wait=True)

    def __enter__(self) -> "ItemResolver":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
