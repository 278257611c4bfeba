"""
Persistence of resolved items.

Writes an item row, its statistics and its effect links to the store.
Effects are shared between items: the first effect stored under a name is
canonical and later items link to it, each link carrying its own
restriction text. Item and effect rows are keyed by unique names and
inserted with insert-or-ignore semantics, so two writers racing on the same
name end up sharing one row. Writers of the same item also take a per-name
lock, and only the first of them stores statistics and effect links.

Nothing here runs in a transaction. A failure while saving statistics or
effects is logged and leaves the item row in place.
"""

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Executor, Future
from functools import partial

from eq_items.exceptions import StoreError
from eq_items.models import Effect, Item, Statistic
from eq_items.store import Store

log = logging.getLogger(__name__)

IdentityRule = Callable[[Store, Item], int | None]

_name_locks: dict[str, threading.Lock] = {}
_name_locks_guard = threading.Lock()


def _identity_keys(item: Item) -> list[str]:
    keys = [item.name]
    if item.display_name and item.display_name != item.name:
        keys.append(item.display_name)
    return keys


def match_name_or_display_name(store: Store, item: Item) -> int | None:
    """Loose identity: any stored name or display name equal to either of the item's."""
    keys = _identity_keys(item)
    placeholders = ", ".join("?" for _ in keys)
    rows = store.query(
        f"SELECT id FROM items WHERE name IN ({placeholders}) "
        f"OR display_name IN ({placeholders}) ORDER BY id LIMIT 1",
        *keys,
        *keys,
    )
    return rows[0]["id"] if rows else None


def match_name(store: Store, item: Item) -> int | None:
    rows = store.query("SELECT id FROM items WHERE name = ?", item.name)
    return rows[0]["id"] if rows else None


def check_store(store: Store, item: Item) -> tuple[int | None, bool]:
    """
    Look up an item and report whether it is already enriched.

    Returns the matching item id (None when no row matches) and whether any
    matching row has at least one statistic. A bare item row without
    statistics does not count as enriched.
    """
    keys = _identity_keys(item)
    placeholders = ", ".join("?" for _ in keys)
    rows = store.query(
        "SELECT items.id AS id, statistics.code AS code, statistics.value AS value "
        "FROM items LEFT JOIN statistics ON items.id = statistics.item_id "
        f"WHERE items.name IN ({placeholders}) OR items.display_name IN ({placeholders}) "
        "ORDER BY items.id",
        *keys,
        *keys,
    )

    first_id = None
    for row in rows:
        if first_id is None:
            first_id = row["id"]
        if row["code"] is not None or row["value"] is not None:
            return row["id"], True

    if first_id is not None:
        log.info("Item '%s' is stored (id %d) but has no statistics", item.name, first_id)
    return first_id, False


def load_item(store: Store, item_id: int) -> Item | None:
    rows = store.query(
        "SELECT id, name, display_name, image_src, price FROM items WHERE id = ?", item_id
    )
    if not rows:
        return None
    row = rows[0]

    statistics = [
        Statistic(code=stat["code"], value=stat["value"], effect=stat["effect"] or "")
        for stat in store.query(
            "SELECT code, value, effect FROM statistics WHERE item_id = ? ORDER BY id", item_id
        )
    ]
    effects = [
        Effect(name=link["name"], uri=link["uri"], restriction=link["restriction"] or "")
        for link in store.query(
            "SELECT effects.name AS name, effects.uri AS uri, "
            "item_effects.restriction AS restriction "
            "FROM item_effects JOIN effects ON effects.id = item_effects.effect_id "
            "WHERE item_effects.item_id = ? ORDER BY item_effects.id",
            item_id,
        )
    ]

    return Item(
        id=row["id"],
        name=row["name"],
        display_name=row["display_name"],
        image_src=row["image_src"] or "",
        price=row["price"],
        statistics=statistics,
        effects=effects,
    )


def _name_lock(item: Item) -> threading.Lock:
    # Keyed like the identity lookup, which ignores case
    key = (item.display_name or item.name).casefold()
    with _name_locks_guard:
        return _name_locks.setdefault(key, threading.Lock())


def _has_statistics(store: Store, item_id: int) -> bool:
    rows = store.query("SELECT 1 FROM statistics WHERE item_id = ? LIMIT 1", item_id)
    return bool(rows)


def _upsert_item(store: Store, item: Item, identity: IdentityRule) -> tuple[int, bool]:
    """Write the item row; returns its id and whether this call created it."""
    item_id = identity(store, item)
    if item_id is not None:
        store.execute(
            "UPDATE items SET image_src = ?, name = ?, display_name = ? WHERE id = ?",
            item.image_src,
            item.name,
            item.display_name,
            item_id,
        )
        log.debug("Item '%s': updated existing row %d", item.name, item_id)
        return item_id, False

    new_id = store.insert(
        "INSERT INTO items (name, display_name, image_src, price) VALUES (?, ?, ?, ?) "
        "ON CONFLICT(name) DO NOTHING",
        item.name,
        item.display_name,
        item.image_src,
        item.price,
    )
    if new_id is not None:
        log.debug("Item '%s': inserted row %d", item.name, new_id)
        return new_id, True

    # Another writer inserted the same name between the lookup and the insert
    item_id = identity(store, item)
    if item_id is None:
        raise StoreError(f"Item '{item.name}' was neither inserted nor found")
    log.info("Item '%s': row %d was created concurrently, reusing it", item.name, item_id)
    return item_id, False


def _save_statistics(store: Store, item_id: int, item: Item) -> int:
    statistics = [stat for stat in item.statistics if stat.code]
    if not statistics:
        log.debug("Item '%s': no statistics to save", item.name)
        return 0

    placeholders = ", ".join("(?, ?, ?, ?)" for _ in statistics)
    params = []
    for stat in statistics:
        params.extend((item_id, stat.code, stat.value, stat.effect))

    try:
        store.insert(
            f"INSERT INTO statistics (item_id, code, value, effect) VALUES {placeholders}",
            *params,
        )
    except StoreError as e:
        log.error("Item '%s': could not save statistics: %s", item.name, e)
        return 0
    return len(statistics)


def _effect_id(store: Store, effect: Effect) -> int:
    rows = store.query("SELECT id FROM effects WHERE name = ?", effect.name)
    if rows:
        return rows[0]["id"]

    new_id = store.insert(
        "INSERT OR IGNORE INTO effects (name, uri) VALUES (?, ?)", effect.name, effect.uri
    )
    if new_id is not None:
        return new_id

    rows = store.query("SELECT id FROM effects WHERE name = ?", effect.name)
    if not rows:
        raise StoreError(f"Effect '{effect.name}' was neither inserted nor found")
    return rows[0]["id"]


def _save_effects(store: Store, item_id: int, item: Item) -> int:
    saved = 0
    for effect in item.effects:
        if not effect.is_valid:
            log.warning(
                "Item '%s': skipping effect without name or uri (name=%r, uri=%r)",
                item.name,
                effect.name,
                effect.uri,
            )
            continue

        try:
            effect_id = _effect_id(store, effect)
            store.insert(
                "INSERT INTO item_effects (item_id, effect_id, restriction) VALUES (?, ?, ?)",
                item_id,
                effect_id,
                effect.restriction,
            )
        except StoreError as e:
            log.error("Item '%s': could not save effect '%s': %s", item.name, effect.name, e)
            continue
        saved += 1
    return saved


def persist(item: Item, store: Store, identity: IdentityRule = match_name_or_display_name) -> int:
    """
    Write an item with its statistics and effects, returning the item id.

    Raises StoreError when the item row itself cannot be written. Failures
    on statistics or individual effects are logged and skipped.

    Writers of the same item are serialized, and a row that already carries
    statistics keeps them: only the first writer stores statistics and
    effect links.
    """
    with _name_lock(item):
        item_id, created = _upsert_item(store, item, identity)
        item.id = item_id

        if not created and _has_statistics(store, item_id):
            log.info(
                "Item '%s' (id %d) is already enriched, keeping stored data", item.name, item_id
            )
            return item_id

        stat_count = _save_statistics(store, item_id, item)
        effect_count = _save_effects(store, item_id, item)
    log.info(
        "Saved '%s' (id %d): %d statistic(s), %d effect(s)",
        item.name,
        item_id,
        stat_count,
        effect_count,
    )
    return item_id


def _log_outcome(name: str, future: Future) -> None:
    if future.cancelled():
        log.warning("Background save of '%s' was cancelled", name)
        return
    error = future.exception()
    if error is not None:
        log.error("Background save of '%s' failed: %s", name, error)


def persist_in_background(
    item: Item,
    store: Store,
    executor: Executor,
    identity: IdentityRule = match_name_or_display_name,
) -> Future:
    """Submit persist() to an executor; the returned future can be awaited or ignored."""
    future = executor.submit(persist, item, store, identity)
    future.add_done_callback(partial(_log_outcome, item.name))
    return future
