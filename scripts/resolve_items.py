"""
CLI script for resolving EverQuest items.

For each item name:
1. Check the store; items that already have statistics are reported as stored
2. Fetch the wiki page for the title-cased name
3. Extract statistics and effects (or class/level data for spell pages)
4. Save the result to the SQLite store

Names come from the command line or from a YAML file holding a list of
names (or a mapping with an "items" list).
"""

import argparse
import logging
import sys
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path

import yaml

from eq_items import terminal
from eq_items.cache import CacheClient
from eq_items.config import get_settings
from eq_items.exceptions import StoreError
from eq_items.resolver import ItemResolver
from eq_items.store import Store
from eq_items.types import Resolution


def load_names(path: Path) -> list[str]:
    with path.open() as f:
        data = yaml.safe_load(f) or []

    if isinstance(data, dict):
        data = data.get("items", [])
    if not isinstance(data, list):
        raise ValueError(f"{path} must hold a list of item names or an 'items' list")
    return [str(name).strip() for name in data if str(name).strip()]


def resolve_items(
    names: list[str],
    resolver: ItemResolver,
    detach: bool = False,
    workers: int = 1,
) -> list[Resolution]:
    results: list[Resolution] = []
    total = len(names)

    if workers <= 1:
        for index, name in enumerate(names, start=1):
            terminal.progress(index, total, name)
            resolution = resolver.resolve_detailed(name, wait=not detach)
            terminal.resolution_summary(resolution)
            results.append(resolution)
        return results

    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {
            executor.submit(resolver.resolve_detailed, name, not detach): name for name in names
        }
        for index, future in enumerate(as_completed(futures), start=1):
            terminal.progress(index, total, futures[future])
            resolution = future.result()
            terminal.resolution_summary(resolution)
            results.append(resolution)
    return results


def main() -> None:
    parser = argparse.ArgumentParser(description="Resolve EverQuest items from the wiki")
    parser.add_argument("names", nargs="*", help="Item names (use quotes for multi-word names)")
    parser.add_argument(
        "--from-file",
        type=Path,
        default=None,
        help="YAML file with a list of item names",
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="SQLite database path (default: EQ_ITEMS_DATABASE_PATH or data/items.db)",
    )
    parser.add_argument(
        "--detach",
        action="store_true",
        help="Save in the background instead of waiting for each write",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Number of items to resolve concurrently (default: 1)",
    )
    parser.add_argument("--no-cache", action="store_true", help="Always fetch pages from the wiki")
    parser.add_argument(
        "--clear-cache",
        nargs="*",
        metavar="TAG",
        help="Clear the page cache and exit (optionally specify tags: wiki)",
    )

    args = parser.parse_args()

    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(message)s",
    )
    cache = CacheClient(settings.cache_dir)
    try:
        if args.clear_cache is not None:
            cache.clear_cache(args.clear_cache or None)
            terminal.success("✓ Cache cleared")
            return
        _resolve_from_args(parser, args, cache)
    finally:
        cache.close()


def _resolve_from_args(
    parser: argparse.ArgumentParser, args: argparse.Namespace, cache: CacheClient
) -> None:
    names = list(args.names)
    if args.from_file is not None:
        try:
            names.extend(load_names(args.from_file))
        except (OSError, ValueError, yaml.YAMLError) as e:
            terminal.error(f"Cannot read names from {args.from_file}: {e}")
            sys.exit(1)
    if not names:
        parser.error("no item names given")

    db_path = args.db or get_settings().database_path
    try:
        store = Store(db_path)
    except StoreError as e:
        terminal.error_with_context(
            str(e),
            context={"Database": str(db_path)},
            suggestions=["Check the path is writable", "Set EQ_ITEMS_DATABASE_PATH"],
        )
        sys.exit(1)

    try:
        with store, ItemResolver(store, cache=None if args.no_cache else cache) as resolver:
            results = resolve_items(names, resolver, detach=args.detach, workers=args.workers)
    except KeyboardInterrupt:
        terminal.warning("\nAborted.")
        sys.exit(130)

    missing = [r.item.name for r in results if r.item.is_empty]
    if missing:
        terminal.warning(f"{len(missing)} of {len(results)} item(s) not found")
        sys.exit(1)
    terminal.success(f"✓ Resolved {len(results)} item(s)")


if __name__ == "__main__":
    main()
